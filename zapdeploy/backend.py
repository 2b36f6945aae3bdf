from abc import ABC, abstractmethod
from typing import Any, List

from eth_typing import ChecksumAddress

from zapdeploy.addresses import ChainId
from zapdeploy.registry import DeploymentRecord


class ChainBackend(ABC):
    """
    Transport to a chain: deploys contracts and manages their ownership.

    Every method returns only once the underlying transaction is confirmed.
    Failures raise TransactionFailure and are never retried.
    """

    @property
    @abstractmethod
    def chain_id(self) -> ChainId:
        raise NotImplementedError

    @abstractmethod
    def deploy(
        self, name: str, contract: str, args: List[Any], sender: ChecksumAddress
    ) -> DeploymentRecord:
        raise NotImplementedError

    @abstractmethod
    def owner(self, record: DeploymentRecord) -> ChecksumAddress:
        raise NotImplementedError

    @abstractmethod
    def transfer_ownership(
        self, record: DeploymentRecord, new_owner: ChecksumAddress, *args, sender: ChecksumAddress
    ) -> None:
        raise NotImplementedError
