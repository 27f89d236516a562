import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, List

from ape import networks
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.exceptions import ApeException
from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address
from ethpm_types import MethodABI
from web3 import Web3
from web3.auto import w3

from deployment.confirm import _confirm_resolution, _continue
from deployment.constants import (
    DEFAULT_FOUNDATION_MULTISIG_THRESHOLD,
    PANGOLIN_PAIR_INIT_CODE_HASH,
    VESTER_RECIPIENTS,
)
from deployment.pairs import InvalidPairError, PairKey
from deployment.registry import registry_from_ape_deployments
from deployment.utils import _load_yaml, check_plugins, validate_config


class ExternalCallError(Exception):
    """Raised when a deployment or transaction fails on the network."""


class Farm(typing.NamedTuple):
    token_a: ChecksumAddress
    token_b: ChecksumAddress
    weight: int


class VesterAllocation(typing.NamedTuple):
    recipient: str
    allocation: int


def _to_units(amount: typing.Union[int, str]) -> int:
    """Converts a whole-token amount to 18-decimal base units."""
    return Web3.to_wei(amount, "ether")


class DeploymentConstants(typing.NamedTuple):
    """Network-specific inputs of a protocol deployment, read from the params file."""

    png_symbol: str
    png_name: str
    total_supply: int
    multisig_owners: List[ChecksumAddress]
    foundation_multisig_owners: List[ChecksumAddress]
    foundation_multisig_threshold: int
    proposal_threshold: int
    wrapped_native_token: typing.Optional[ChecksumAddress]
    initial_farms: List[Farm]
    airdrop_amount: int
    vester_allocations: List[VesterAllocation]
    pair_init_code_hash: str

    class Invalid(ValueError):
        """Raised when the deployment constants are invalid"""

    @property
    def total_supply_units(self) -> int:
        return _to_units(self.total_supply)

    @property
    def airdrop_units(self) -> int:
        return _to_units(self.airdrop_amount)

    @property
    def vester_units(self) -> int:
        """Everything that is not airdropped goes to the treasury vester."""
        return self.total_supply_units - self.airdrop_units

    @classmethod
    def from_config(cls, config: typing.Dict) -> "DeploymentConstants":
        constants = config.get("constants")
        if not constants:
            raise cls.Invalid("Params file missing 'constants' field.")
        return cls.from_dict(constants)

    @classmethod
    def from_dict(cls, constants: typing.Dict[str, Any]) -> "DeploymentConstants":
        print("Processing deployment constants...")

        def required(name: str) -> Any:
            try:
                return constants[name]
            except KeyError:
                raise cls.Invalid(f"Constant '{name}' not found in params file.")

        multisig_owners = _addresses(required("MULTISIG_OWNERS"), "MULTISIG_OWNERS")
        foundation_owners = _addresses(
            required("FOUNDATION_MULTISIG_OWNERS"), "FOUNDATION_MULTISIG_OWNERS"
        )
        foundation_threshold = int(
            constants.get("FOUNDATION_MULTISIG_THRESHOLD", DEFAULT_FOUNDATION_MULTISIG_THRESHOLD)
        )
        if not 0 < foundation_threshold <= len(foundation_owners):
            raise cls.Invalid(
                f"Foundation multisig threshold {foundation_threshold} is not satisfiable "
                f"by {len(foundation_owners)} owner(s)."
            )

        total_supply = _positive_int(required("TOTAL_SUPPLY"), "TOTAL_SUPPLY")
        airdrop_amount = _positive_int(required("AIRDROP_AMOUNT"), "AIRDROP_AMOUNT")
        if airdrop_amount > total_supply:
            raise cls.Invalid(
                f"AIRDROP_AMOUNT ({airdrop_amount}) exceeds TOTAL_SUPPLY ({total_supply})."
            )

        wrapped_native_token = constants.get("WRAPPED_NATIVE_TOKEN")
        if wrapped_native_token is not None:
            wrapped_native_token = _address(wrapped_native_token, "WRAPPED_NATIVE_TOKEN")

        return cls(
            png_symbol=str(required("PNG_SYMBOL")),
            png_name=str(required("PNG_NAME")),
            total_supply=total_supply,
            multisig_owners=multisig_owners,
            foundation_multisig_owners=foundation_owners,
            foundation_multisig_threshold=foundation_threshold,
            proposal_threshold=_positive_int(required("PROPOSAL_THRESHOLD"), "PROPOSAL_THRESHOLD"),
            wrapped_native_token=wrapped_native_token,
            initial_farms=_farms(constants.get("INITIAL_FARMS") or []),
            airdrop_amount=airdrop_amount,
            vester_allocations=_vester_allocations(required("VESTER_ALLOCATIONS")),
            pair_init_code_hash=constants.get("PAIR_INIT_CODE_HASH", PANGOLIN_PAIR_INIT_CODE_HASH),
        )


def _address(value: Any, name: str) -> ChecksumAddress:
    if not isinstance(value, str) or not is_address(value):
        raise DeploymentConstants.Invalid(f"{name} value '{value}' is not a valid address.")
    return to_checksum_address(value)


def _addresses(values: Any, name: str) -> List[ChecksumAddress]:
    if not isinstance(values, list) or not values:
        raise DeploymentConstants.Invalid(f"{name} must be a non-empty list of addresses.")
    addresses = [_address(value, name) for value in values]
    if len(set(addresses)) != len(addresses):
        raise DeploymentConstants.Invalid(f"{name} contains duplicate addresses.")
    return addresses


def _positive_int(value: Any, name: str) -> int:
    # YAML yields bools and floats that int() would silently coerce
    fractional = isinstance(value, float) and not value.is_integer()
    if isinstance(value, bool) or fractional:
        raise DeploymentConstants.Invalid(f"{name} value '{value}' is not an integer.")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise DeploymentConstants.Invalid(f"{name} value '{value}' is not an integer.")
    if result <= 0:
        raise DeploymentConstants.Invalid(f"{name} must be positive, got {result}.")
    return result


def _farms(values: List[typing.Dict]) -> List[Farm]:
    farms = list()
    for index, farm in enumerate(values):
        name = f"INITIAL_FARMS[{index}]"
        try:
            token_a, token_b, weight = farm["tokenA"], farm["tokenB"], farm["weight"]
        except (KeyError, TypeError):
            raise DeploymentConstants.Invalid(f"{name} must define tokenA, tokenB and weight.")
        try:
            PairKey.from_tokens(token_a, token_b)
        except InvalidPairError as e:
            raise DeploymentConstants.Invalid(f"{name}: {e}") from e
        farms.append(
            Farm(
                token_a=to_checksum_address(token_a),
                token_b=to_checksum_address(token_b),
                weight=_positive_int(weight, f"{name}.weight"),
            )
        )
    return farms


def _vester_allocations(values: Any) -> List[VesterAllocation]:
    if not isinstance(values, list) or not values:
        raise DeploymentConstants.Invalid("VESTER_ALLOCATIONS must be a non-empty list.")
    allocations = list()
    for index, entry in enumerate(values):
        name = f"VESTER_ALLOCATIONS[{index}]"
        try:
            recipient, allocation = entry["recipient"], entry["allocation"]
        except (KeyError, TypeError):
            raise DeploymentConstants.Invalid(f"{name} must define recipient and allocation.")
        if recipient not in VESTER_RECIPIENTS:
            raise DeploymentConstants.Invalid(
                f"{name} recipient '{recipient}' is not one of {', '.join(VESTER_RECIPIENTS)}."
            )
        allocations.append(
            VesterAllocation(
                recipient=recipient, allocation=_positive_int(allocation, f"{name}.allocation")
            )
        )
    return allocations


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.canonical_type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _constructor_params(container: ContractContainer, args: typing.Sequence[Any]) -> OrderedDict:
    """Names the constructor arguments after the constructor ABI, validating their types."""
    contract_name = container.contract_type.name
    abi_inputs = container.constructor.abi.inputs
    if len(args) != len(abi_inputs):
        raise Deployer.Invalid(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(args)}."
        )

    params = OrderedDict()
    for position, (abi_input, value) in enumerate(zip(abi_inputs, args)):
        # struct inputs only encode against their expanded form, e.g. (address,uint256)[]
        if not w3.is_encodable(abi_input.canonical_type, value):
            raise Deployer.Invalid(
                f"Constructor param name '{abi_input.name}' at position {position} has a value "
                f"'{value}' whose type does not match expected ABI type "
                f"'{abi_input.canonical_type}'"
            )
        params[abi_input.name or f"arg{position}"] = value
    return params


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        try:
            return method(*args, sender=self._account)
        except ApeException as e:
            raise ExternalCallError(
                f"{method.contract.contract_type.name}.{method} failed: {e}"
            ) from e


class Deployer(Transactor):
    """
    Represents an ape account plus
    deployment constants for a protocol deployment, plus validated/annotated execution.
    """

    class Invalid(ValueError):
        """Raised when constructor arguments do not match the contract ABI"""

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        verify: bool,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
    ):
        super().__init__(account, autosign)

        check_plugins(verify=verify)
        self.path = path
        self.config = config
        self.registry_filepath = validate_config(config=self.config)
        self.constants = DeploymentConstants.from_config(self.config)
        self.verify = verify
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config=config, path=filepath, *args, **kwargs)

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        """Sources are published to the explorer as each contract deploys."""
        return {"publish": self.verify}

    def balance(self) -> int:
        """Native balance of the deployer account, in wei."""
        return self.get_account().balance

    def deploy(self, container: ContractContainer, *args) -> ContractInstance:
        contract_name = container.contract_type.name
        resolved_params = _constructor_params(container, args)
        if not self._autosign:
            _confirm_resolution(resolved_params, contract_name)
        else:
            print(f"\nDeploying {contract_name}...")

        try:
            return self.get_account().deploy(container, *args, **self._get_kwargs())
        except ApeException as e:
            raise ExternalCallError(f"Deployment of {contract_name} failed: {e}") from e

    def finalize(self, deployments: typing.Dict[str, ContractInstance]) -> None:
        """Records the deployments in the registry."""
        registry_from_ape_deployments(
            deployments=deployments,
            output_filepath=self.registry_filepath,
        )

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Balance: {self.balance()}",
            f"Config: {self.path}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Chain ID: {networks.provider.network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )
