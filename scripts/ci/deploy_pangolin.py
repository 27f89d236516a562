#!/usr/bin/python3

from ape import accounts, networks

from deployment.constants import CONSTRUCTOR_PARAMS_DIR, LOCAL
from deployment.params import Deployer
from deployment.protocol import deploy_protocol, print_summary

VERIFY = False
CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / f"{LOCAL}.yml"


def main():
    with networks.ethereum.local.use_provider("test"):
        test_account = accounts.test_accounts[0]

        deployer = Deployer.from_yaml(
            filepath=CONSTRUCTOR_PARAMS_FILEPATH,
            verify=VERIFY,
            account=test_account,
            autosign=True,
        )
        initial_balance = deployer.balance()

        deployment = deploy_protocol(deployer=deployer, constants=deployer.constants)

        deployer.finalize(deployments=deployment.contracts)
        print_summary(deployment, deploy_cost=initial_balance - deployer.balance())
