"""
Deployment and wiring of the Pangolin protocol.

The steps run strictly in order: each contract is constructed from the
addresses of contracts deployed before it, so a failure at any step aborts
the rest of the run. Already deployed contracts stay on chain.
"""

import typing
from collections import OrderedDict

from ape.contracts.base import ContractContainer, ContractInstance
from ape.utils import ZERO_ADDRESS
from eth_typing import ChecksumAddress

from deployment.constants import (
    DUMMY_FARM_PID,
    DUMMY_FARM_WEIGHT,
    DUMMY_LP_NAME,
    DUMMY_LP_SUPPLY,
    DUMMY_LP_SYMBOL,
    FOUNDATION_REVENUE_SHARE,
    JOINT_MULTISIG_THRESHOLD,
    MULTISIG_REVENUE_SHARE,
    PNG_NATIVE_FARM_WEIGHT,
    SUMMARY_LABELS,
    TIMELOCK_DELAY,
)
from deployment.pairs import PairAddressResolver
from deployment.params import Deployer, DeploymentConstants, VesterAllocation
from deployment.utils import get_contract_container

ContainerLookup = typing.Callable[[str], ContractContainer]


class FarmPool(typing.NamedTuple):
    """A MiniChefV2 pool; pool ids follow the order pools were added."""

    pid: int
    lp_token: ChecksumAddress
    weight: int


class ProtocolDeployment(typing.NamedTuple):
    native_token: ChecksumAddress
    contracts: typing.Dict[str, ContractInstance]  # registry name -> instance, in deployment order
    farms: typing.List[FarmPool]


def resolve_vester_allocations(
    allocations: typing.List[VesterAllocation],
    recipients: typing.Dict[str, ContractInstance],
) -> typing.List[typing.Tuple[ChecksumAddress, int]]:
    """Maps each allocation's symbolic recipient to the address of an already deployed contract."""
    resolved = list()
    for allocation in allocations:
        try:
            recipient = recipients[allocation.recipient]
        except KeyError:
            raise DeploymentConstants.Invalid(
                f"Unknown vester recipient '{allocation.recipient}'; "
                f"expected one of {', '.join(recipients)}."
            )
        resolved.append((recipient.address, allocation.allocation))
    return resolved


def deploy_protocol(
    deployer: Deployer,
    constants: DeploymentConstants,
    get_container: ContainerLookup = get_contract_container,
) -> ProtocolDeployment:
    """Deploys and wires every Pangolin contract, returning them by registry name."""
    deployer_address = deployer.get_account().address
    resolver = PairAddressResolver(init_code_hash=constants.pair_init_code_hash)
    contracts = OrderedDict()

    # Wrapped native token
    if constants.wrapped_native_token is None:
        contracts["WAVAX"] = deployer.deploy(get_container("WAVAX"))
        native_token = contracts["WAVAX"].address
    else:
        native_token = constants.wrapped_native_token

    #
    # Governance
    #

    png = deployer.deploy(
        get_container("Png"),
        constants.total_supply_units,
        deployer_address,  # PNG receiver
        constants.png_symbol,
        constants.png_name,
    )
    contracts["Png"] = png

    multisig_container = get_container("MultiSigWalletWithDailyLimit")
    multisig = deployer.deploy(
        multisig_container, constants.multisig_owners, len(constants.multisig_owners), 0
    )
    contracts["Multisig"] = multisig

    foundation = deployer.deploy(
        multisig_container,
        constants.foundation_multisig_owners,
        constants.foundation_multisig_threshold,
        0,
    )
    contracts["FoundationMultisig"] = foundation

    timelock = deployer.deploy(get_container("Timelock"), multisig.address, TIMELOCK_DELAY)
    contracts["Timelock"] = timelock

    governor = deployer.deploy(
        get_container("GovernorAlpha"),
        timelock.address,
        png.address,
        multisig.address,
        constants.proposal_threshold,
    )
    contracts["GovernorAlpha"] = governor

    #
    # AMM
    #

    # ownership of the fee setter is handed to the multisig below
    factory = deployer.deploy(get_container("PangolinFactory"), deployer_address)
    contracts["PangolinFactory"] = factory

    router = deployer.deploy(get_container("PangolinRouter"), factory.address, native_token)
    contracts["PangolinRouter"] = router

    #
    # Token distribution
    #

    chef = deployer.deploy(get_container("MiniChefV2"), png.address, deployer_address)
    contracts["MiniChefV2"] = chef

    treasury = deployer.deploy(get_container("CommunityTreasury"), png.address)
    contracts["CommunityTreasury"] = treasury

    airdrop = deployer.deploy(
        get_container("Airdrop"),
        constants.airdrop_units,
        png.address,
        multisig.address,
        treasury.address,
    )
    contracts["Airdrop"] = airdrop

    vester_recipients = {
        "multisig": multisig,
        "foundation": foundation,
        "timelock": timelock,
        "governor": governor,
        "factory": factory,
        "router": router,
        "chef": chef,
        "treasury": treasury,
        "airdrop": airdrop,
    }
    vester = deployer.deploy(
        get_container("TreasuryVester"),
        png.address,  # vested token
        resolve_vester_allocations(constants.vester_allocations, vester_recipients),
    )
    contracts["TreasuryVester"] = vester

    deployer.transact(png.transfer, airdrop.address, constants.airdrop_units)
    deployer.transact(png.transfer, vester.address, constants.vester_units)

    deployer.transact(vester.startVesting)
    deployer.transact(vester.setAdmin, timelock.address)

    #
    # PNG staking & fee collector
    #

    staking = deployer.deploy(get_container("StakingRewards"), png.address, png.address)
    contracts["StakingRewards"] = staking

    joint_multisig = deployer.deploy(
        multisig_container,
        [multisig.address, foundation.address],
        JOINT_MULTISIG_THRESHOLD,
        0,
    )
    contracts["JointMultisig"] = joint_multisig

    revenue_distributor = deployer.deploy(
        get_container("RevenueDistributor"),
        joint_multisig.address,
        [
            (multisig.address, MULTISIG_REVENUE_SHARE),
            (foundation.address, FOUNDATION_REVENUE_SHARE),
        ],
    )
    contracts["RevenueDistributor"] = revenue_distributor

    fee_collector = deployer.deploy(
        get_container("PangolinFeeCollector"),
        staking.address,
        router.address,
        chef.address,
        DUMMY_FARM_PID,
        governor.address,
        native_token,
        revenue_distributor.address,
    )
    contracts["PangolinFeeCollector"] = fee_collector
    deployer.transact(fee_collector.transferOwnership, multisig.address)

    # Dummy LP token diverting part of the PNG emissions to PNG staking
    dummy_lp = deployer.deploy(
        get_container("DummyERC20"),
        DUMMY_LP_NAME,
        DUMMY_LP_SYMBOL,
        deployer_address,
        DUMMY_LP_SUPPLY,
    )
    contracts["DummyERC20"] = dummy_lp
    deployer.transact(dummy_lp.renounceOwnership)

    farms = list()
    deployer.transact(chef.addPool, DUMMY_FARM_WEIGHT, dummy_lp.address, ZERO_ADDRESS)
    farms.append(FarmPool(pid=DUMMY_FARM_PID, lp_token=dummy_lp.address, weight=DUMMY_FARM_WEIGHT))

    deployer.transact(dummy_lp.approve, chef.address, DUMMY_LP_SUPPLY)
    deployer.transact(chef.deposit, DUMMY_FARM_PID, DUMMY_LP_SUPPLY, fee_collector.address)

    # Swap fees go to the fee collector
    deployer.transact(factory.setFeeTo, fee_collector.address)
    deployer.transact(factory.setFeeToSetter, multisig.address)

    #
    # MiniChefV2 farms
    #

    deployer.transact(factory.createPair, png.address, native_token)
    png_pair = resolver.resolve(factory.address, png.address, native_token)
    deployer.transact(chef.addPool, PNG_NATIVE_FARM_WEIGHT, png_pair, ZERO_ADDRESS)
    farms.append(FarmPool(pid=len(farms), lp_token=png_pair, weight=PNG_NATIVE_FARM_WEIGHT))

    for farm in constants.initial_farms:
        pair = resolver.resolve(factory.address, farm.token_a, farm.token_b)
        deployer.transact(factory.createPair, farm.token_a, farm.token_b)
        deployer.transact(chef.addPool, farm.weight, pair, ZERO_ADDRESS)
        farms.append(FarmPool(pid=len(farms), lp_token=pair, weight=farm.weight))

    deployer.transact(chef.transferOwnership, multisig.address)

    return ProtocolDeployment(native_token=native_token, contracts=contracts, farms=farms)


def print_summary(deployment: ProtocolDeployment, deploy_cost: typing.Optional[int] = None) -> None:
    """Prints the address of every deployed contract, followed by the native balance spent."""
    labels = [(label, deployment.contracts[name]) for name, label in SUMMARY_LABELS.items()]
    width = max(len(label) for label, _ in labels) + len(" address:")
    print()
    for label, instance in labels:
        print(f"{label + ' address:':<{width}} {instance.address}")
    for farm in deployment.farms:
        print(f"{'Farm ' + str(farm.pid) + ':':<{width}} {farm.lp_token} (weight {farm.weight})")
    if deploy_cost is not None:
        print(f"{'Deploy cost:':<{width}} {deploy_cost}")
