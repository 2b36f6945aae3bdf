from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from zapdeploy.addresses import ChainId, normalize_chain_id
from zapdeploy.constants import DEPLOYER
from zapdeploy.exceptions import DeploymentConfigError
from zapdeploy.utils import _load_yaml, get_artifact_filepath


class DeploymentConfig(NamedTuple):
    """Validated contents of a deployment params file."""

    path: Optional[Path]
    chain_id: ChainId
    registry_filepath: Path
    accounts: Dict[str, ChecksumAddress]
    constants: Dict[str, Any]
    tags: Optional[List[str]]


def _validate_accounts(accounts: Dict) -> Dict[str, ChecksumAddress]:
    validated = dict()
    for name, address in accounts.items():
        if name == DEPLOYER:
            raise DeploymentConfigError(
                "The deployer account is selected at runtime and cannot be set in params file."
            )
        try:
            validated[name] = to_checksum_address(address)
        except (ValueError, TypeError):
            raise DeploymentConfigError(f"Account '{name}' has an invalid address: {address}")
    return validated


def _validate_constants(constants: Dict) -> Dict[str, Any]:
    for name in constants:
        if not str(name).isupper():
            raise DeploymentConfigError(f"Constant '{name}' must be upper case.")
    return dict(constants)


def validate_config(config: Dict, path: Optional[Path] = None) -> DeploymentConfig:
    print("Validating parameters YAML...")
    if not isinstance(config, dict):
        raise DeploymentConfigError("Malformed deployment params YAML.")

    deployment = config.get("deployment")
    if not deployment:
        raise DeploymentConfigError("deployment is not set in params file.")

    config_chain_id = deployment.get("chain_id")
    if config_chain_id is None:
        raise DeploymentConfigError("chain_id is not set in params file.")

    tags = config.get("tags")
    if tags is not None and not isinstance(tags, list):
        raise DeploymentConfigError("tags must be a list in params file.")

    return DeploymentConfig(
        path=path,
        chain_id=normalize_chain_id(config_chain_id),
        registry_filepath=get_artifact_filepath(config=config),
        accounts=_validate_accounts(config.get("accounts") or {}),
        constants=_validate_constants(config.get("constants") or {}),
        tags=tags,
    )


def load_config(filepath: Path) -> DeploymentConfig:
    config = _load_yaml(filepath)
    return validate_config(config, path=filepath)
