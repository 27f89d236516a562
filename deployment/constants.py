from pathlib import Path

import deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Networks
#

AVALANCHE = "avalanche"
FUJI = "fuji"
LOCAL = "local"

SUPPORTED_NETWORKS = [AVALANCHE, FUJI, LOCAL]

LOCAL_BLOCKCHAIN_ENVIRONMENTS = [LOCAL]

#
# Governance
#

TIMELOCK_DELAY = 14 * 24 * 60 * 60  # 14 days

DEFAULT_FOUNDATION_MULTISIG_THRESHOLD = 5

# Joint multisig of the chain multisig and the foundation multisig (2/2)
JOINT_MULTISIG_THRESHOLD = 2

# Revenue split in basis points
MULTISIG_REVENUE_SHARE = 8000
FOUNDATION_REVENUE_SHARE = 2000

# Contracts a TreasuryVester allocation may name as its recipient
VESTER_RECIPIENTS = [
    "multisig",
    "foundation",
    "timelock",
    "governor",
    "factory",
    "router",
    "chef",
    "treasury",
    "airdrop",
]

#
# Farming
#

# Dummy PGL deposited on behalf of the fee collector, diverting emissions to PNG staking
DUMMY_LP_NAME = "Dummy ERC20"
DUMMY_LP_SYMBOL = "PGL"
DUMMY_LP_SUPPLY = 100
DUMMY_FARM_WEIGHT = 500  # 5x
DUMMY_FARM_PID = 0

PNG_NATIVE_FARM_WEIGHT = 3000  # 30x

#
# AMM
#

# keccak256 of the PangolinPair creation code
PANGOLIN_PAIR_INIT_CODE_HASH = "0x40231f6b438bce0797c9ada29b718a87ea0a5cea3fe9a771abdd76bd41a3e545"

#
# Registry
#

# registry name -> label printed after a successful deployment, in printing order
SUMMARY_LABELS = {
    "Png": "PNG",
    "PangolinFactory": "PangolinFactory",
    "PangolinRouter": "PangolinRouter",
    "FoundationMultisig": "Foundation Multisig",
    "Multisig": "Multisig",
    "MiniChefV2": "MiniChefV2",
    "TreasuryVester": "TreasuryVester",
    "CommunityTreasury": "CommunityTreasury",
    "Airdrop": "Airdrop",
    "StakingRewards": "StakingRewards",
    "Timelock": "Timelock",
    "GovernorAlpha": "GovernorAlpha",
    "JointMultisig": "Joint Multisig",
    "RevenueDistributor": "RevenueDistributor",
    "PangolinFeeCollector": "PangolinFeeCollector",
}
