import click

from deployment.constants import SUPPORTED_NETWORKS
from deployment.types import ChecksumAddress

params_network_option = click.option(
    "--params-network",
    "-p",
    help="Network whose params file and registry are used",
    type=click.Choice(SUPPORTED_NETWORKS),
    required=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without prompting for confirmation",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Publish contract sources to the network explorer",
    default=False,
)

factory_option = click.option(
    "--factory",
    "-f",
    help="Address of the pair factory",
    type=ChecksumAddress(),
    required=True,
)

token_option = click.option(
    "--token",
    "-t",
    "tokens",
    help="Pair token address; pass exactly two",
    type=ChecksumAddress(),
    multiple=True,
    required=True,
)
