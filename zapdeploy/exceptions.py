from typing import Iterable, Optional


class DeploymentError(Exception):
    """Base class for all deployment failures."""


class DeploymentConfigError(DeploymentError, ValueError):
    pass


class UnknownNetwork(DeploymentError):
    """Raised when a chain ID has no entry in a required address table."""

    def __init__(self, chain_id, table: Optional[str] = None):
        self.chain_id = str(chain_id)
        self.table = table
        if table:
            message = f"No {table} address for chain ID {self.chain_id}"
        else:
            message = f"Unknown network with chain ID {self.chain_id}"
        super().__init__(message)


class MissingDependency(DeploymentError):
    """Raised when a deployment record or dependency tag is not available."""

    def __init__(self, name: str, step: Optional[str] = None):
        self.name = name
        self.step = step
        if step:
            message = f"{step} requires '{name}', which is not one of its deployed dependencies"
        else:
            message = f"No deployment found for '{name}'"
        super().__init__(message)


class CyclicDependency(DeploymentError):
    def __init__(self, cycle: Iterable[str]):
        self.cycle = list(cycle)
        super().__init__(f"Dependency cycle detected: {' -> '.join(self.cycle)}")


class TransactionFailure(DeploymentError):
    """Raised when a deployment or ownership transaction fails or reverts."""
