import typing
from types import SimpleNamespace

import pytest
from eth_utils import to_checksum_address

from deployment.constants import CONSTRUCTOR_PARAMS_DIR, LOCAL
from deployment.params import DeploymentConstants, ExternalCallError
from deployment.utils import _load_yaml

DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

# Avalanche C-Chain mainnet
WAVAX = "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7"
USDC_E = "0xA7D7079b0FEaD91F3e65f86E8915Cb59c1a4C664"
WETH_E = "0x49D5c2BdFfac6CE2BFdB6640F4F80f226bc10bAB"


class Call(typing.NamedTuple):
    kind: str  # "deploy" or "transact"
    target: str  # deployed address, or address of the contract being called
    name: str  # contract type, or method name
    args: tuple


class FakeMethod:
    def __init__(self, contract: "FakeContract", name: str):
        self.contract = contract
        self.name = name

    def __str__(self):
        return self.name


class FakeContract:
    def __init__(self, name: str, address: str):
        self.contract_type = SimpleNamespace(name=name)
        self.address = address

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        return FakeMethod(self, name)


class FakeContainer:
    def __init__(self, name: str):
        self.contract_type = SimpleNamespace(name=name)


class FakeDeployer:
    """Records deployments and transactions, handing out incrementing addresses."""

    def __init__(self, fail_on: typing.Optional[str] = None):
        self.calls: typing.List[Call] = list()
        self.fail_on = fail_on
        self._account = SimpleNamespace(address=DEPLOYER_ADDRESS)
        self._nonce = 0

    def get_account(self):
        return self._account

    def deploy(self, container, *args):
        contract_name = container.contract_type.name
        if contract_name == self.fail_on:
            raise ExternalCallError(f"Deployment of {contract_name} failed: reverted")
        self._nonce += 1
        address = to_checksum_address(f"0x{self._nonce:040x}")
        self.calls.append(Call("deploy", address, contract_name, args))
        return FakeContract(contract_name, address)

    def transact(self, method, *args):
        if method.name == self.fail_on:
            raise ExternalCallError(f"{method.name} failed: reverted")
        self.calls.append(Call("transact", method.contract.address, method.name, args))

    @property
    def deployments(self) -> typing.List[Call]:
        return [call for call in self.calls if call.kind == "deploy"]

    @property
    def transactions(self) -> typing.List[Call]:
        return [call for call in self.calls if call.kind == "transact"]


@pytest.fixture
def constants_dict():
    return {
        "PNG_SYMBOL": "PNG",
        "PNG_NAME": "Pangolin",
        "TOTAL_SUPPLY": "538000000",
        "AIRDROP_AMOUNT": "26900000",
        "PROPOSAL_THRESHOLD": 2_000_000 * 10**18,
        "WRAPPED_NATIVE_TOKEN": WAVAX,
        "MULTISIG_OWNERS": [
            "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
            "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
        ],
        "FOUNDATION_MULTISIG_THRESHOLD": 2,
        "FOUNDATION_MULTISIG_OWNERS": [
            "0x90F79bf6EB2c4f870365E785982E1f101E93b906",
            "0x15d34AAf54267DB7D7c367839AAf71A00a2C6A65",
            "0x9965507D1a55bcC2695C58ba16FB37d819B0A4dc",
        ],
        "VESTER_ALLOCATIONS": [
            {"recipient": "chef", "allocation": 6000},
            {"recipient": "treasury", "allocation": 1500},
            {"recipient": "multisig", "allocation": 1500},
            {"recipient": "foundation", "allocation": 1000},
        ],
        "INITIAL_FARMS": [
            {"tokenA": WAVAX, "tokenB": USDC_E, "weight": 1000},
            {"tokenA": WETH_E, "tokenB": WAVAX, "weight": 500},
        ],
    }


@pytest.fixture
def constants(constants_dict):
    return DeploymentConstants.from_dict(constants_dict)


@pytest.fixture
def local_config():
    return _load_yaml(CONSTRUCTOR_PARAMS_DIR / f"{LOCAL}.yml")


@pytest.fixture
def fake_deployer():
    return FakeDeployer()


@pytest.fixture
def get_container():
    return FakeContainer
