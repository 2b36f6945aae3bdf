import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from zapdeploy.addresses import ChainId, normalize_chain_id
from zapdeploy.utils import _load_json

ContractName = str
ABI = List[Dict]


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class DeploymentRecord(NamedTuple):
    """Persisted result of a single confirmed contract deployment."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str = ""
    block_number: int = 0
    deployer: str = ""


def read_registry(filepath: Path) -> List[DeploymentRecord]:
    data = _load_json(filepath)
    records = list()
    for chain_id, entries in data.items():
        for contract_name, artifacts in entries.items():
            record = DeploymentRecord(
                chain_id=normalize_chain_id(chain_id),
                name=contract_name,
                address=artifacts["address"],
                abi=artifacts["abi"],
                tx_hash=artifacts.get("tx_hash", ""),
                block_number=int(artifacts.get("block_number", 0)),
                deployer=artifacts.get("deployer", ""),
            )
            records.append(record)
    return records


def write_registry(records: List[DeploymentRecord], filepath: Path) -> Path:
    """Writes a deployment registry, replacing the file contents."""

    # Sort records to enforce common order
    records = sorted(records, key=lambda record: (str(record.chain_id), record.name))

    data = defaultdict(dict)
    for record in records:
        record_abi = list(record.abi)
        record_abi.sort(key=lambda d: (d["type"], d.get("name", "")))

        data[str(record.chain_id)][record.name] = {
            "address": record.address,
            "abi": record_abi,
            "tx_hash": record.tx_hash,
            "block_number": int(record.block_number),
            "deployer": record.deployer,
        }

    # Create the parent directory if it does not exist
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath


class DeploymentRegistry:
    """
    Deployment records keyed by chain ID and name.

    Each saved record is written to disk straight away, so records produced
    before a failed run are still there when the run is repeated. Without a
    filepath the registry only lives in memory.
    """

    def __init__(self, filepath: Optional[Path] = None):
        self.filepath = filepath
        self._records: Dict[ChainId, Dict[ContractName, DeploymentRecord]] = defaultdict(dict)
        if filepath is not None and filepath.exists():
            for record in read_registry(filepath):
                self._records[record.chain_id][record.name] = record

    def get(self, chain_id: ChainId, name: ContractName) -> Optional[DeploymentRecord]:
        return self._records.get(normalize_chain_id(chain_id), {}).get(name)

    def records(self, chain_id: ChainId) -> List[DeploymentRecord]:
        return list(self._records.get(normalize_chain_id(chain_id), {}).values())

    def chain_ids(self) -> List[ChainId]:
        return sorted(self._records)

    def save(self, record: DeploymentRecord) -> DeploymentRecord:
        record = record._replace(
            chain_id=normalize_chain_id(record.chain_id),
            address=to_checksum_address(record.address),
        )
        self._records[record.chain_id][record.name] = record
        if self.filepath is not None:
            all_records = [r for entries in self._records.values() for r in entries.values()]
            write_registry(records=all_records, filepath=self.filepath)
        return record

    def __contains__(self, key) -> bool:
        chain_id, name = key
        return self.get(chain_id, name) is not None
