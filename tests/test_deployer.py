from types import SimpleNamespace

import pytest
from ape.exceptions import ApeException, ContractLogicError
from ethpm_types.abi import ABIType, ConstructorABI, MethodABI

from deployment.params import (
    Deployer,
    ExternalCallError,
    Transactor,
    _constructor_params,
    _validate_method_args,
)
from deployment.utils import check_plugins
from tests.conftest import DEPLOYER_ADDRESS, WAVAX

CHEF = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
TREASURY = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"

RECIPIENTS = ABIType(
    name="newRecipients",
    type="tuple[]",
    components=[
        ABIType(name="account", type="address"),
        ABIType(name="allocation", type="uint256"),
    ],
)


def _container(name, *inputs):
    return SimpleNamespace(
        contract_type=SimpleNamespace(name=name),
        constructor=SimpleNamespace(abi=ConstructorABI(type="constructor", inputs=list(inputs))),
    )


VESTER = _container("TreasuryVester", ABIType(name="newVestedToken", type="address"), RECIPIENTS)


class FakeAccount:
    def __init__(self, error=None):
        self.address = DEPLOYER_ADDRESS
        self.error = error
        self.deployed = list()

    def deploy(self, container, *args, publish=False):
        if self.error:
            raise self.error
        self.deployed.append((container.contract_type.name, args, publish))
        return SimpleNamespace(address=WAVAX, contract_type=container.contract_type)


class FakeTransaction:
    def __init__(self, abi, error=None):
        self.abis = [abi]
        self.contract = SimpleNamespace(
            contract_type=SimpleNamespace(name="TreasuryVester"), address=WAVAX
        )
        self.error = error
        self.calls = list()

    def __str__(self):
        return self.abis[0].name

    def __call__(self, *args, sender):
        if self.error:
            raise self.error
        self.calls.append((args, sender))
        return "receipt"


SET_ADMIN = MethodABI(
    type="function", name="setAdmin", inputs=[ABIType(name="newAdmin", type="address")]
)
SET_RECIPIENTS = MethodABI(type="function", name="setRecipients", inputs=[RECIPIENTS])


def _deployer(account, verify=False):
    # skips the network checks done on construction
    deployer = Deployer.__new__(Deployer)
    deployer._account = account
    deployer._autosign = True
    deployer.verify = verify
    return deployer


def _transactor(account):
    transactor = Transactor.__new__(Transactor)
    transactor._account = account
    transactor._autosign = True
    return transactor


def test_struct_array_constructor_params():
    params = _constructor_params(VESTER, (WAVAX, [(CHEF, 6000), (TREASURY, 1500)]))
    assert ["newVestedToken", "newRecipients"] == list(params)
    assert [(CHEF, 6000), (TREASURY, 1500)] == params["newRecipients"]


def test_struct_array_constructor_params_type_mismatch():
    with pytest.raises(Deployer.Invalid, match=r"\(address,uint256\)\[\]"):
        _constructor_params(VESTER, (WAVAX, [(CHEF, "all of it")]))


def test_constructor_params_length_mismatch():
    with pytest.raises(Deployer.Invalid, match="requires 2, Got 1"):
        _constructor_params(VESTER, (WAVAX,))


def test_constructor_params_unnamed_input():
    container = _container("Timelock", ABIType(type="address"), ABIType(type="uint256"))
    assert {"arg0": CHEF, "arg1": 1209600} == dict(_constructor_params(container, (CHEF, 1209600)))


def test_validate_method_args():
    assert {"newAdmin": CHEF} == _validate_method_args([SET_ADMIN], (CHEF,))
    assert {"newRecipients": [(CHEF, 1)]} == _validate_method_args(
        [SET_RECIPIENTS], ([(CHEF, 1)],)
    )
    with pytest.raises(ValueError, match="'setAdmin' with 2 arg"):
        _validate_method_args([SET_ADMIN], (CHEF, CHEF))
    with pytest.raises(ValueError):
        _validate_method_args([SET_ADMIN], (12,))


def test_deploy_struct_array_constructor():
    account = FakeAccount()
    _deployer(account, verify=True).deploy(VESTER, WAVAX, [(CHEF, 6000)])
    assert [("TreasuryVester", (WAVAX, [(CHEF, 6000)]), True)] == account.deployed


def test_deploy_failure_is_wrapped():
    error = ContractLogicError("Transaction failed.")
    with pytest.raises(ExternalCallError, match="Deployment of TreasuryVester failed") as e:
        _deployer(FakeAccount(error=error)).deploy(VESTER, WAVAX, [(CHEF, 6000)])
    assert error is e.value.__cause__


def test_deploy_rejects_invalid_args_before_sending():
    account = FakeAccount()
    with pytest.raises(Deployer.Invalid):
        _deployer(account).deploy(VESTER, "not an address", [])
    assert [] == account.deployed


def test_transact():
    account = FakeAccount()
    method = FakeTransaction(SET_ADMIN)
    assert "receipt" == _transactor(account).transact(method, CHEF)
    assert [((CHEF,), account)] == method.calls


@pytest.mark.parametrize(
    "error", [ContractLogicError("Transaction failed."), ApeException("insufficient funds")]
)
def test_transact_failure_is_wrapped(error):
    method = FakeTransaction(SET_ADMIN, error=error)
    with pytest.raises(ExternalCallError, match="TreasuryVester.setAdmin failed") as e:
        _transactor(FakeAccount()).transact(method, CHEF)
    assert error is e.value.__cause__


def test_explorer_plugin_is_only_needed_to_publish(monkeypatch):
    def fail():
        raise AssertionError("explorer plugin checked")

    monkeypatch.setattr("deployment.utils.check_etherscan_plugin", fail)
    check_plugins(verify=False)
