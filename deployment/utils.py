import json
import os
from pathlib import Path
from typing import Dict

import yaml
from ape import networks, project
from ape.contracts import ContractContainer

from deployment.constants import ARTIFACTS_DIR, CONSTRUCTOR_PARAMS_DIR
from deployment.networks import is_local_network


def _load_yaml(filepath: Path) -> dict:
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    with open(filepath, "r") as file:
        return json.load(file)


def get_artifact_filepath(config: Dict) -> Path:
    """Registry file named by the ``artifacts`` section of a params file."""
    artifacts = config.get("artifacts") or {}
    try:
        filename = artifacts["filename"]
    except KeyError:
        raise ValueError("artifacts.filename is not set in params file.")
    return Path(artifacts.get("dir", ARTIFACTS_DIR)) / filename


def validate_config(config: Dict) -> Path:
    """
    Checks that the params file targets the connected network and that
    the deployment has not already been published for its chain_id.
    Returns the registry filepath the deployment will be written to.
    """
    print("Validating parameters YAML...")

    chain_id = (config.get("deployment") or {}).get("chain_id")
    if not chain_id:
        raise ValueError("deployment.chain_id is not set in params file.")
    if not config.get("constants"):
        raise ValueError("Params file missing 'constants' field.")

    chain_id = int(chain_id)
    connected_chain_id = networks.provider.network.chain_id
    if chain_id != connected_chain_id and not is_local_network():
        raise ValueError(
            f"chain_id in params file ({chain_id}) does not match "
            f"chain_id of current network ({connected_chain_id})."
        )

    registry_filepath = get_artifact_filepath(config=config)
    # runs are not resumable; a second protocol on the same chain needs a fresh registry
    if registry_filepath.exists() and str(chain_id) in _load_json(registry_filepath):
        raise ValueError(f"Deployment is already published for chain_id {chain_id}.")

    return registry_filepath


def params_filepath_from_network(network: str) -> Path:
    filepath = CONSTRUCTOR_PARAMS_DIR / f"{network}.yml"
    if not filepath.exists():
        raise ValueError(f"No params file found for network '{network}'")
    return filepath


def registry_filepath_from_network(network: str) -> Path:
    filepath = ARTIFACTS_DIR / f"{network}.json"
    if not filepath.exists():
        raise ValueError(f"No registry found for network '{network}'")
    return filepath


def check_etherscan_plugin() -> None:
    """
    Source publishing goes through ape-etherscan (Snowtrace on Avalanche),
    which needs the explorer API key of the connected ecosystem.
    """
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to publish sources.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name)
    if not explorer_envvar or not os.environ.get(explorer_envvar):
        raise ValueError(f"No explorer API key set for {ecosystem_name} ({explorer_envvar}).")


def check_plugins(verify: bool) -> None:
    print("Checking plugins...")
    if verify and not is_local_network():
        check_etherscan_plugin()


def get_contract_container(contract_name: str) -> ContractContainer:
    """Finds a compiled contract in the project first, then in its dependencies."""
    try:
        return getattr(project, contract_name)
    except AttributeError:
        pass

    for dependency_name, versions in project.dependencies.items():
        if len(versions) > 1:
            raise ValueError(f"Ambiguous {dependency_name} dependency for {contract_name}")
        (dependency,) = versions.values()
        if hasattr(dependency, contract_name):
            return getattr(dependency, contract_name)

    raise ValueError(f"No contract found with name '{contract_name}'.")
