import sys
from collections import OrderedDict

from ape.utils import ZERO_ADDRESS


def _abort_unless_confirmed(question: str) -> None:
    """Exits the deployment if the user answers 'n'."""
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        sys.exit(-1)


def _continue() -> None:
    """Asks the user to continue."""
    _abort_unless_confirmed("Continue")


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    _abort_unless_confirmed(f"Deploy {contract_name}")


def _contains_zero_address(value) -> bool:
    if isinstance(value, (list, tuple)):
        return any(_contains_zero_address(v) for v in value)
    return value == ZERO_ADDRESS


def _confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Asks the user to confirm the constructor arguments for a single contract."""
    if len(resolved_params) == 0:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\nConstructor parameters for {contract_name}")
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
    _confirm_deployment(contract_name)
    if any(_contains_zero_address(value) for value in resolved_params.values()):
        _abort_unless_confirmed("Zero Address detected for deployment parameter; Continue?")
