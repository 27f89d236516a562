#!/usr/bin/python3

from itertools import groupby

import click

from deployment.constants import SUMMARY_LABELS
from deployment.options import params_network_option
from deployment.registry import read_registry
from deployment.utils import registry_filepath_from_network


@click.command(name="list-contracts")
@params_network_option
def cli(params_network):
    """Lists the Pangolin contracts recorded in the registry of a network."""
    try:
        registry_filepath = registry_filepath_from_network(network=params_network)
    except ValueError as e:
        raise click.ClickException(str(e))

    entries = read_registry(filepath=registry_filepath)
    for chain_id, chain_entries in groupby(entries, key=lambda e: e.chain_id):
        click.secho(f"\n{params_network.capitalize()} registry (chain id {chain_id})", fg="green")
        for entry in chain_entries:
            label = SUMMARY_LABELS.get(entry.name, entry.name)
            # the multisig contract backs several registry names
            contract_type = f" [{entry.contract_type}]" if entry.contract_type != entry.name else ""
            click.secho(f"    {label}: {entry.address}{contract_type}", fg="cyan")


if __name__ == "__main__":
    cli()
