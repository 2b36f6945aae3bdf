from enum import Enum
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from eth_utils import to_checksum_address

from zapdeploy.addresses import ChainId, normalize_chain_id
from zapdeploy.constants import DEPLOYER
from zapdeploy.exceptions import MissingDependency
from zapdeploy.params import (
    ConstructorParameters,
    VariableContext,
    process_raw_value,
    resolve_param,
)
from zapdeploy.registry import DeploymentRecord


class StepStatus(Enum):
    UNDEPLOYED = "Undeployed"
    DEPLOYED = "Deployed"
    OWNERSHIP_PENDING = "OwnershipPending"
    OWNERSHIP_TRANSFERRED = "OwnershipTransferred"
    SKIPPED = "Skipped"


class OwnershipHandoff(NamedTuple):
    """
    Hands ownership of a deployed contract to new_owner, once.

    new_owner is a raw parameter (e.g. "$dev" or "$ZapDirector"). contract
    names the deployment to hand over and defaults to the step's own
    deployment. args are appended to the transferOwnership call.
    """

    new_owner: str
    contract: Optional[str] = None
    args: Tuple[Any, ...] = ()


def _same_address(a: str, b: str) -> bool:
    return to_checksum_address(a) == to_checksum_address(b)


class Step:
    """
    A named, idempotent deployment of a single contract.

    Running a step deploys its contract (unless a record already exists)
    and performs its ownership handoffs, skipping those that already hold.
    A step only reads the records of its own deployment and of the steps
    providing the tags in its dependencies, which the orchestrator deploys
    first. chain_dependencies adds dependency tags on specific chains only.
    """

    def __init__(
        self,
        name: str,
        contract: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        dependencies: Optional[Iterable[str]] = None,
        constructor: Optional[Sequence[Any]] = None,
        handoffs: Optional[Sequence[OwnershipHandoff]] = None,
        constants: Optional[Dict[str, Any]] = None,
        chains: Optional[Iterable[ChainId]] = None,
        chain_dependencies: Optional[Dict[ChainId, Iterable[str]]] = None,
    ):
        self.name = name
        self.contract = contract or name
        self.tags = list(tags) if tags is not None else [name]
        self.dependencies = list(dependencies or ())
        self.constructor = list(constructor or ())
        self.handoffs = list(handoffs or ())
        self.constants = dict(constants or {})
        self.chains = None if chains is None else {normalize_chain_id(c) for c in chains}
        self.chain_dependencies = {
            normalize_chain_id(chain_id): list(tags)
            for chain_id, tags in (chain_dependencies or {}).items()
        }

    def __repr__(self) -> str:
        return f"Step({self.name})"

    def runs_on(self, chain_id: ChainId) -> bool:
        return self.chains is None or normalize_chain_id(chain_id) in self.chains

    def dependencies_on(self, chain_id: ChainId) -> List[str]:
        """Returns the dependency tags of this step on the given chain."""
        extra = self.chain_dependencies.get(normalize_chain_id(chain_id), ())
        return self.dependencies + [tag for tag in extra if tag not in self.dependencies]

    def _variable_context(
        self,
        constants: Optional[Dict[str, Any]] = None,
        account_names: Iterable[str] = None,
        readable: Optional[Iterable[str]] = None,
        chain_id: Optional[ChainId] = None,
    ) -> VariableContext:
        if readable is None:
            readable = self.dependencies if chain_id is None else self.dependencies_on(chain_id)
        return VariableContext(
            step_name=self.name,
            dependencies=readable,
            constants={**self.constants, **(constants or {})},
            account_names=account_names,
            chain_id=chain_id,
        )

    def _context_variables(self, context) -> VariableContext:
        return self._variable_context(
            constants=context.constants,
            account_names=context.named_accounts,
            readable=context.readable,
            chain_id=context.chain_id,
        )

    def _process(
        self, variable_context: VariableContext
    ) -> Tuple[ConstructorParameters, List[Tuple[str, Any, Tuple]]]:
        constructor_parameters = ConstructorParameters(self.constructor, variable_context)
        handoffs = list()
        for handoff in self.handoffs:
            contract_name = handoff.contract or self.name
            if not variable_context.is_readable(contract_name):
                raise MissingDependency(contract_name, step=self.name)
            new_owner = process_raw_value(handoff.new_owner, variable_context)
            handoffs.append((contract_name, new_owner, tuple(handoff.args)))
        return constructor_parameters, handoffs

    def validate(
        self,
        constants: Optional[Dict[str, Any]] = None,
        account_names: Iterable[str] = None,
        readable: Optional[Iterable[str]] = None,
        chain_id: Optional[ChainId] = None,
    ) -> None:
        """
        Processes all parameters eagerly so misconfigurations fail before deploying.

        readable names the deployments this step may reference; it defaults
        to the step's dependency tags.
        """
        self._process(self._variable_context(constants, account_names, readable, chain_id))

    def run(self, context) -> Optional[DeploymentRecord]:
        if not self.runs_on(context.chain_id):
            print(f"(i) Skipping {self.name} on chain ID {context.chain_id}")
            return None

        variable_context = self._context_variables(context)
        constructor_parameters, handoffs = self._process(variable_context)

        # resolution failures must happen before anything is sent
        args = constructor_parameters.resolve(context)
        deployer = context.named_accounts[DEPLOYER]
        record = context.deployments.deploy(
            self.name, contract=self.contract, args=args, sender=deployer
        )

        for contract_name, new_owner, extra_args in handoffs:
            target = resolve_param(new_owner, context)
            target_record = context.deployments.get(contract_name)
            if _same_address(context.backend.owner(target_record), target):
                continue
            print(f"Transfer ownership of {contract_name} to {target}")
            context.backend.transfer_ownership(target_record, target, *extra_args, sender=deployer)

        return record

    def status(self, context) -> StepStatus:
        """Reports how far this step got on the context's chain, without side effects."""
        if not self.runs_on(context.chain_id):
            return StepStatus.SKIPPED
        record = context.deployments.find(self.name)
        if record is None:
            return StepStatus.UNDEPLOYED
        if not self.handoffs:
            return StepStatus.DEPLOYED

        variable_context = self._context_variables(context)
        _, handoffs = self._process(variable_context)
        for contract_name, new_owner, _ in handoffs:
            target_record = context.deployments.find(contract_name)
            if target_record is None:
                return StepStatus.OWNERSHIP_PENDING
            target = resolve_param(new_owner, context)
            if not _same_address(context.backend.owner(target_record), target):
                return StepStatus.OWNERSHIP_PENDING
        return StepStatus.OWNERSHIP_TRANSFERRED
