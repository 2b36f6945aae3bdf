from collections import OrderedDict, defaultdict
from graphlib import CycleError, TopologicalSorter
from typing import Any, Dict, Iterable, List, Optional, Set

from eth_typing import ChecksumAddress

from zapdeploy.addresses import ChainId, normalize_chain_id
from zapdeploy.backend import ChainBackend
from zapdeploy.constants import DEPLOYER
from zapdeploy.exceptions import CyclicDependency, MissingDependency
from zapdeploy.registry import DeploymentRecord, DeploymentRegistry
from zapdeploy.step import Step


class Deployments:
    """
    Deployment records of the backend's chain, with idempotent deployment.

    deploy() returns the existing record for a name instead of deploying
    again. With force=True each name is redeployed, but at most once per
    session.
    """

    def __init__(self, registry: DeploymentRegistry, backend: ChainBackend, force: bool = False):
        self.registry = registry
        self.backend = backend
        self.force = force
        self._deployed: Set[str] = set()

    @property
    def chain_id(self) -> ChainId:
        return normalize_chain_id(self.backend.chain_id)

    def find(self, name: str) -> Optional[DeploymentRecord]:
        return self.registry.get(self.chain_id, name)

    def get(self, name: str) -> DeploymentRecord:
        record = self.find(name)
        if record is None:
            raise MissingDependency(name)
        return record

    def deploy(
        self, name: str, contract: str, args: List[Any], sender: ChecksumAddress
    ) -> DeploymentRecord:
        existing = self.find(name)
        if existing is not None and (not self.force or name in self._deployed):
            print(f"(i) Reusing {name} at {existing.address}")
            return existing

        print(f"\nDeploying {name} ({contract})")
        record = self.backend.deploy(name=name, contract=contract, args=args, sender=sender)
        record = self.registry.save(record)
        self._deployed.add(name)
        print(f"(i) {name} deployed to {record.address}")
        return record


class DeploymentsView:
    """Restricts a step to its own deployment and those of its dependencies."""

    def __init__(self, deployments: Deployments, step_name: str, readable: Iterable[str]):
        self._deployments = deployments
        self.step_name = step_name
        self.readable = set(readable) | {step_name}

    def _check(self, name: str) -> None:
        if name not in self.readable:
            raise MissingDependency(name, step=self.step_name)

    def find(self, name: str) -> Optional[DeploymentRecord]:
        self._check(name)
        return self._deployments.find(name)

    def get(self, name: str) -> DeploymentRecord:
        self._check(name)
        return self._deployments.get(name)

    def deploy(
        self, name: str, contract: str, args: List[Any], sender: ChecksumAddress
    ) -> DeploymentRecord:
        if name != self.step_name:
            raise ValueError(f"{self.step_name} cannot deploy '{name}'")
        return self._deployments.deploy(name, contract=contract, args=args, sender=sender)


class DeploymentContext:
    def __init__(
        self,
        chain_id: ChainId,
        named_accounts: Dict[str, ChecksumAddress],
        deployments,
        backend: ChainBackend,
        constants: Optional[Dict[str, Any]] = None,
        readable: Optional[Iterable[str]] = None,
    ):
        self.chain_id = normalize_chain_id(chain_id)
        self.named_accounts = dict(named_accounts)
        self.deployments = deployments
        self.backend = backend
        self.constants = constants or dict()
        self.readable = None if readable is None else set(readable)

    def get_named_accounts(self) -> Dict[str, ChecksumAddress]:
        return dict(self.named_accounts)

    def get_chain_id(self) -> ChainId:
        return self.chain_id


class Orchestrator:
    """
    Runs deployment steps in dependency order, one at a time.

    A step's dependencies are tags; every step providing one of those tags
    is deployed before it.
    """

    def __init__(
        self,
        steps: Iterable[Step],
        backend: ChainBackend,
        named_accounts: Dict[str, ChecksumAddress],
        registry: Optional[DeploymentRegistry] = None,
        constants: Optional[Dict[str, Any]] = None,
        force: bool = False,
    ):
        self.steps: Dict[str, Step] = OrderedDict()
        for step in steps:
            if step.name in self.steps:
                raise ValueError(f"Duplicate deployment step '{step.name}'")
            self.steps[step.name] = step

        if DEPLOYER not in named_accounts:
            raise ValueError("A deployer account is required.")
        self.named_accounts = dict(named_accounts)
        self.backend = backend
        self.constants = constants or dict()
        self.deployments = Deployments(
            registry=registry if registry is not None else DeploymentRegistry(),
            backend=backend,
            force=force,
        )

    @property
    def chain_id(self) -> ChainId:
        return normalize_chain_id(self.backend.chain_id)

    def _providers(self) -> Dict[str, List[str]]:
        providers = defaultdict(list)
        for step in self.steps.values():
            for tag in step.tags:
                providers[tag].append(step.name)
        return providers

    def _graph(self) -> Dict[str, Set[str]]:
        """Maps each step name to the names of the steps it depends on."""
        providers = self._providers()
        graph = OrderedDict()
        for step in self.steps.values():
            requirements = set()
            for tag in step.dependencies_on(self.chain_id):
                if tag not in providers:
                    raise MissingDependency(tag, step=step.name)
                requirements.update(providers[tag])
            graph[step.name] = requirements
        return graph

    def _select(self, graph: Dict[str, Set[str]], tags: Optional[Iterable[str]]) -> Set[str]:
        if tags is None:
            return set(graph)
        providers = self._providers()
        pending = list()
        for tag in tags:
            if tag not in providers:
                raise MissingDependency(tag)
            pending.extend(providers[tag])
        selected = set()
        while pending:
            name = pending.pop()
            if name in selected:
                continue
            selected.add(name)
            pending.extend(graph[name])
        return selected

    def plan(self, tags: Optional[Iterable[str]] = None) -> List[Step]:
        """Returns the steps to run for the given tags (all by default), in run order."""
        graph = self._graph()
        selected = self._select(graph, tags)
        position = {name: index for index, name in enumerate(self.steps)}

        sorter = TopologicalSorter({name: graph[name] for name in graph if name in selected})
        try:
            sorter.prepare()
        except CycleError as e:
            raise CyclicDependency(e.args[1])

        order = list()
        while sorter.is_active():
            ready = sorted(sorter.get_ready(), key=position.get)
            for name in ready:
                order.append(self.steps[name])
                sorter.done(name)

        for step in order:
            step.validate(
                constants=self.constants,
                account_names=self.named_accounts,
                readable=self.readable_names(step),
                chain_id=self.chain_id,
            )
        return order

    def readable_names(self, step: Step) -> Set[str]:
        """Names of the deployments a step may read on this chain."""
        providers = self._providers()
        dependencies = step.dependencies_on(self.chain_id)
        names = set(dependencies)
        for tag in dependencies:
            names.update(providers.get(tag, ()))
        return names

    def context_for(self, step: Step) -> DeploymentContext:
        readable = self.readable_names(step)
        view = DeploymentsView(self.deployments, step_name=step.name, readable=readable)
        return DeploymentContext(
            chain_id=self.chain_id,
            named_accounts=self.named_accounts,
            deployments=view,
            backend=self.backend,
            constants=self.constants,
            readable=readable,
        )

    def run(self, tags: Optional[Iterable[str]] = None) -> Dict[str, DeploymentRecord]:
        steps = self.plan(tags)
        print(
            f"Chain ID: {self.chain_id}",
            f"Deployer: {self.named_accounts[DEPLOYER]}",
            f"Steps: {', '.join(step.name for step in steps)}",
            sep="\n",
        )

        records = OrderedDict()
        for step in steps:
            record = step.run(self.context_for(step))
            if record is not None:
                records[step.name] = record
        return records

    def status(self, tags: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        return OrderedDict(
            (step.name, step.status(self.context_for(step))) for step in self.plan(tags)
        )
