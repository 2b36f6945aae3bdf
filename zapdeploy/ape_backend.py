import os
import typing
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from ape import Contract, accounts, networks, project
from ape.api import AccountAPI
from ape.cli.choices import select_account
from ape.contracts import ContractContainer, ContractInstance
from ape.exceptions import TransactionError, VirtualMachineError
from eth_abi import is_encodable
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from zapdeploy.addresses import ChainId, normalize_chain_id
from zapdeploy.backend import ChainBackend
from zapdeploy.config import DeploymentConfig
from zapdeploy.confirm import _confirm_resolution, _continue
from zapdeploy.constants import DEPLOYER, DEV, LOCAL_CHAIN_IDS, LOCAL_NETWORKS
from zapdeploy.exceptions import DeploymentConfigError, TransactionFailure
from zapdeploy.registry import ABI, DeploymentRecord

TRANSACTION_ERRORS = (TransactionError, VirtualMachineError)


def is_local_network() -> bool:
    network = networks.provider.network
    return network.name in LOCAL_NETWORKS or str(network.chain_id) in LOCAL_CHAIN_IDS


def validate_network(config: DeploymentConfig) -> None:
    """Checks that the params file targets the connected network."""
    network_chain_id = normalize_chain_id(networks.provider.network.chain_id)
    if config.chain_id != network_chain_id and not is_local_network():
        raise DeploymentConfigError(
            f"chain_id in params file ({config.chain_id}) does not match "
            f"chain_id of current network ({network_chain_id})."
        )


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to verify contracts.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name)
    api_key = os.environ.get(explorer_envvar)
    if not api_key:
        raise ValueError(f"{explorer_envvar} is not set.")


def _get_dependency_contract_container(contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in project.dependencies.items():
        if len(dependency_versions) > 1:
            raise ValueError(f"Ambiguous {dependency_name} dependency for {contract}")
        try:
            dependency_api = list(dependency_versions.values())[0]
            contract_container = getattr(dependency_api, contract)
            return contract_container
        except AttributeError:
            continue
    raise ValueError(f"No contract found with name '{contract}'.")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies
        contract_container = _get_dependency_contract_container(contract)

    return contract_container


def _get_abi(contract_instance: ContractInstance) -> ABI:
    """Returns the ABI of a contract instance."""
    contract_abi = list()
    for entry in contract_instance.contract_type.abi:
        contract_abi.append(entry.model_dump(mode="json", by_alias=True, exclude_none=True))
    return contract_abi


def _validate_constructor_args(
    contract_name: str, abi_inputs: List[Any], args: List[Any]
) -> "OrderedDict[str, Any]":
    """Validates constructor arguments against the constructor ABI, returning them by name."""
    if len(args) != len(abi_inputs):
        raise DeploymentConfigError(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(args)}."
        )

    named_args = OrderedDict()
    for position, (abi_input, value) in enumerate(zip(abi_inputs, args)):
        if not is_encodable(abi_input.type, value):
            raise DeploymentConfigError(
                f"Constructor param '{abi_input.name}' at position {position} has a value "
                f"'{value}' whose type does not match expected ABI type '{abi_input.type}'"
            )
        named_args[abi_input.name or f"arg{position}"] = value
    return named_args


class ApeBackend(ChainBackend):
    """
    Deploys and transacts through an ape account on the connected network.
    """

    def __init__(
        self,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
        verify: bool = False,
    ):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)
        self.verify = verify
        if verify:
            check_etherscan_plugin()

    @property
    def chain_id(self) -> ChainId:
        return normalize_chain_id(networks.provider.network.chain_id)

    def _check_sender(self, sender: ChecksumAddress) -> None:
        if to_checksum_address(sender) != self._account.address:
            raise ValueError(f"Cannot send transactions from {sender} with {self._account.address}")

    def deploy(
        self, name: str, contract: str, args: List[Any], sender: ChecksumAddress
    ) -> DeploymentRecord:
        self._check_sender(sender)
        container = get_contract_container(contract)
        named_args = _validate_constructor_args(
            contract_name=contract,
            abi_inputs=container.constructor.abi.inputs,
            args=args,
        )
        if not self._autosign:
            _confirm_resolution(named_args, name)

        try:
            instance = self._account.deploy(container, *args, publish=self.verify)
        except TRANSACTION_ERRORS as e:
            raise TransactionFailure(f"Deployment of {name} failed: {e}") from e

        receipt = instance.receipt
        return DeploymentRecord(
            chain_id=self.chain_id,
            name=name,
            address=to_checksum_address(instance.address),
            abi=_get_abi(instance),
            tx_hash=receipt.txn_hash,
            block_number=receipt.block_number,
            deployer=receipt.transaction.sender,
        )

    def owner(self, record: DeploymentRecord) -> ChecksumAddress:
        contract = Contract(record.address, abi=record.abi)
        return to_checksum_address(contract.owner())

    def transfer_ownership(
        self, record: DeploymentRecord, new_owner: ChecksumAddress, *args, sender: ChecksumAddress
    ) -> None:
        self._check_sender(sender)
        contract = Contract(record.address, abi=record.abi)
        print(f"\nTransacting {record.name}[{record.address[:10]}].transferOwnership")
        print(f"\tnewOwner={new_owner}")
        for position, value in enumerate(args):
            print(f"\targ{position + 1}={value}")
        if not self._autosign:
            _continue()

        try:
            receipt = contract.transferOwnership(new_owner, *args, sender=self._account)
            receipt.await_confirmations()
        except TRANSACTION_ERRORS as e:
            raise TransactionFailure(f"Ownership transfer of {record.name} failed: {e}") from e
        if receipt.failed:
            raise TransactionFailure(f"Ownership transfer of {record.name} reverted.")

    def named_accounts(
        self, config: DeploymentConfig, dev: Optional[ChecksumAddress] = None
    ) -> Dict[str, ChecksumAddress]:
        """Named accounts: the signing deployer plus the accounts of the params file."""
        named = {DEPLOYER: self._account.address}
        named.update(config.accounts)
        if dev is not None:
            named[DEV] = dev
        if DEV not in named:
            if not is_local_network():
                raise DeploymentConfigError("A dev account must be set for live networks.")
            named[DEV] = accounts.test_accounts[1].address
        return named
