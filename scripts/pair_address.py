#!/usr/bin/python3

import click

from deployment.constants import PANGOLIN_PAIR_INIT_CODE_HASH
from deployment.options import factory_option, token_option
from deployment.pairs import InvalidPairError, PairKey, pair_for
from deployment.types import Bytes32


@click.command()
@factory_option
@token_option
@click.option(
    "--init-code-hash",
    "-i",
    help="keccak256 of the pair creation code",
    type=Bytes32(),
    default=PANGOLIN_PAIR_INIT_CODE_HASH,
    show_default=True,
)
def cli(factory, tokens, init_code_hash):
    """Computes a pair address offline, without querying the factory."""
    if len(tokens) != 2:
        raise click.BadOptionUsage(
            option_name="--token", message=f"Expected exactly two tokens, got {len(tokens)}"
        )
    try:
        pair_key = PairKey.from_tokens(*tokens)
        pair = pair_for(factory, *pair_key, init_code_hash=init_code_hash)
    except InvalidPairError as e:
        raise click.ClickException(str(e))

    click.secho(f"token0: {pair_key.token0}", fg="yellow")
    click.secho(f"token1: {pair_key.token1}", fg="yellow")
    click.secho(f"pair:   {pair}", fg="green")


if __name__ == "__main__":
    cli()
