import pytest
from eth_utils import to_checksum_address

from zapdeploy.backend import ChainBackend
from zapdeploy.exceptions import TransactionFailure
from zapdeploy.orchestrator import Orchestrator
from zapdeploy.registry import DeploymentRecord, DeploymentRegistry

OWNABLE_ABI = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {"type": "function", "name": "owner", "inputs": [], "outputs": [], "stateMutability": "view"},
]


def make_address(n: int) -> str:
    return to_checksum_address("0x" + f"{n:040x}")


class FakeBackend(ChainBackend):
    """In-memory chain: every deployment gets a fresh address and is owned by its sender."""

    def __init__(self, chain_id="31337"):
        self._chain_id = str(chain_id)
        self.deploy_calls = list()
        self.transfer_calls = list()
        self.owners = dict()
        self.fail_deploy = set()
        self.fail_transfer = set()
        self._nonce = 0

    @property
    def chain_id(self):
        return self._chain_id

    def deploy(self, name, contract, args, sender):
        if name in self.fail_deploy:
            raise TransactionFailure(f"Deployment of {name} failed")
        self._nonce += 1
        address = make_address(0xC0DE0000 + self._nonce)
        self.deploy_calls.append((name, contract, list(args)))
        self.owners[address] = sender
        return DeploymentRecord(
            chain_id=self._chain_id,
            name=name,
            address=address,
            abi=OWNABLE_ABI,
            tx_hash=f"0x{self._nonce:064x}",
            block_number=self._nonce,
            deployer=sender,
        )

    def owner(self, record):
        return self.owners[record.address]

    def transfer_ownership(self, record, new_owner, *args, sender):
        if record.name in self.fail_transfer:
            raise TransactionFailure(f"Ownership transfer of {record.name} failed")
        self.transfer_calls.append((record.name, new_owner, args))
        self.owners[record.address] = new_owner

    def deployed_names(self):
        return [name for name, _, _ in self.deploy_calls]


@pytest.fixture
def deployer():
    return make_address(0xDE9109E5)


@pytest.fixture
def dev():
    return make_address(0xDE5)


@pytest.fixture
def named_accounts(deployer, dev):
    return {"deployer": deployer, "dev": dev}


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def registry():
    return DeploymentRegistry()


@pytest.fixture
def get_orchestrator(backend, registry, named_accounts):
    def _get_orchestrator(steps, **kwargs):
        kwargs.setdefault("backend", backend)
        kwargs.setdefault("registry", registry)
        kwargs.setdefault("named_accounts", named_accounts)
        return Orchestrator(steps=steps, **kwargs)

    return _get_orchestrator


@pytest.fixture
def fake_backend():
    return FakeBackend
