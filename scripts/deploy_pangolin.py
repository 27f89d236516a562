#!/usr/bin/python3

from pathlib import Path

import click
from ape.api import AccountAPI
from ape.cli import ConnectedProviderCommand, account_option, network_option

from deployment.options import autosign_option, params_network_option, verify_option
from deployment.params import Deployer, ExternalCallError
from deployment.protocol import ProtocolDeployment, deploy_protocol, print_summary
from deployment.utils import params_filepath_from_network


def _deploy(
    params_filepath: Path, account: AccountAPI, autosign: bool, verify: bool
) -> ProtocolDeployment:
    # invalid params, a published chain or a failed call all end the run with "Error: ..."
    try:
        deployer = Deployer.from_yaml(
            filepath=params_filepath,
            verify=verify,
            account=account,
            autosign=autosign,
        )
        initial_balance = deployer.balance()
        deployment = deploy_protocol(deployer=deployer, constants=deployer.constants)
    except (ExternalCallError, ValueError) as e:
        raise click.ClickException(str(e))

    deployer.finalize(deployments=deployment.contracts)
    print_summary(deployment, deploy_cost=initial_balance - deployer.balance())
    return deployment


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@params_network_option
@autosign_option
@verify_option
def cli(network, account, params_network, autosign, verify):
    """
    Deploys the Pangolin protocol: governance, AMM, token distribution,
    PNG staking, fee collection and the initial MiniChefV2 farms.

    ape run deploy_pangolin --network avalanche:fuji --params-network fuji
    """
    try:
        params_filepath = params_filepath_from_network(params_network)
    except ValueError as e:
        raise click.ClickException(str(e))
    _deploy(params_filepath, account=account, autosign=autosign, verify=verify)


if __name__ == "__main__":
    cli()
