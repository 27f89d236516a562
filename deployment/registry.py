import json
from collections import OrderedDict, defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, NamedTuple

from ape.contracts import ContractInstance
from eth_typing import ABI, ChecksumAddress
from eth_utils import to_checksum_address

from deployment.utils import _load_json

ChainId = int
ContractName = str
ChainEntries = Dict[ChainId, Dict[ContractName, "RegistryEntry"]]


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """
    A deployed contract as recorded in the registry.

    ``name`` is the registry name (e.g. ``FoundationMultisig``); ``contract_type``
    is the compiled contract it is an instance of (e.g. ``MultiSigWalletWithDailyLimit``).
    """

    chain_id: ChainId
    name: ContractName
    contract_type: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str
    block_number: int
    deployer: str

    @classmethod
    def from_instance(cls, name: ContractName, instance: ContractInstance) -> "RegistryEntry":
        receipt = instance.receipt
        return cls(
            chain_id=receipt.chain_id,
            name=name,
            contract_type=instance.contract_type.name,
            address=to_checksum_address(instance.address),
            abi=[item.model_dump(mode="json", by_alias=True) for item in instance.contract_type.abi],
            tx_hash=receipt.txn_hash,
            block_number=receipt.block_number,
            deployer=receipt.transaction.sender,
        )

    def to_json(self) -> Dict:
        return {
            "address": self.address,
            "contract_type": self.contract_type,
            "abi": sorted(self.abi, key=lambda d: (d["type"], d.get("name", ""))),
            "tx_hash": self.tx_hash,
            "block_number": int(self.block_number),
            "deployer": self.deployer,
        }


def read_registry(filepath: Path) -> List[RegistryEntry]:
    entries = list()
    for chain_id, contracts in _load_json(filepath).items():
        for name, record in contracts.items():
            entries.append(
                RegistryEntry(
                    chain_id=int(chain_id),
                    name=name,
                    # registries written before contract_type was recorded
                    contract_type=record.get("contract_type", name),
                    address=record["address"],
                    abi=record["abi"],
                    tx_hash=record["tx_hash"],
                    block_number=record["block_number"],
                    deployer=record["deployer"],
                )
            )
    return entries


def _index_by_chain(entries: Iterable[RegistryEntry]) -> ChainEntries:
    index = defaultdict(OrderedDict)
    for entry in entries:
        index[entry.chain_id][entry.name] = entry
    return index


def write_registry(entries: List[RegistryEntry], filepath: Path, silent: bool = False) -> Path:
    """
    Writes registry entries as JSON, grouped by chain id and sorted by name.

    An existing registry is extended with chains it does not know yet. Entries for a
    chain id already present are written next to it as ``<name>.unmerged.json``
    instead, leaving the existing registry untouched.
    """
    if not entries:
        print("No entries provided.")
        return filepath

    data = {
        str(chain_id): {name: chain[name].to_json() for name in sorted(chain)}
        for chain_id, chain in sorted(_index_by_chain(entries).items())
    }

    filepath.parent.mkdir(parents=True, exist_ok=True)
    if filepath.exists():
        if not silent:
            print(f"Updating existing registry at {filepath}.")
        existing_data = _load_json(filepath)
        if existing_data.keys() & data.keys():
            filepath = filepath.with_suffix(".unmerged.json")
            if not silent:
                print(
                    "Cannot merge registries with overlapping chain IDs.\n"
                    f"Writing to {filepath} to avoid overwriting existing data."
                )
        else:
            data = {**existing_data, **data}
    elif not silent:
        print(f"Creating new registry at {filepath}.")

    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath


def registry_from_ape_deployments(
    deployments: Dict[ContractName, ContractInstance],
    output_filepath: Path,
) -> Path:
    """Records named ape deployments in the registry at ``output_filepath``."""
    entries = [RegistryEntry.from_instance(name, instance) for name, instance in deployments.items()]
    output_filepath = write_registry(entries=entries, filepath=output_filepath)
    print(f"(i) Registry written to {output_filepath}!")
    return output_filepath

