import typing
from abc import ABC, abstractmethod
from typing import Any, Iterable, List

from zapdeploy.addresses import get_address_book
from zapdeploy.constants import NAMED_ACCOUNTS
from zapdeploy.exceptions import MissingDependency


class VariableContext:
    def __init__(
        self,
        step_name: str,
        dependencies: Iterable[str] = None,
        constants: typing.Dict[str, Any] = None,
        account_names: Iterable[str] = None,
        chain_id: typing.Optional[str] = None,
    ):
        self.step_name = step_name
        self.dependencies = set(dependencies or ())
        self.constants = constants or dict()
        self.account_names = set(account_names or NAMED_ACCOUNTS)
        self.chain_id = chain_id

    def is_readable(self, deployment_name: str) -> bool:
        return deployment_name == self.step_name or deployment_name in self.dependencies


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self, context) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        result = isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)
        return result


class NamedAccount(Variable):
    def __init__(self, account_name: str, context: VariableContext):
        if account_name not in context.account_names:
            raise ValueError(f"Named account '{account_name}' not found.")
        self.account_name = account_name

    @classmethod
    def is_account(cls, value: str, context: VariableContext) -> bool:
        """Returns True if the variable names an account (e.g. $deployer, $dev)."""
        return value in context.account_names

    def resolve(self, context) -> Any:
        try:
            return context.named_accounts[self.account_name]
        except KeyError:
            raise ValueError(f"Named account '{self.account_name}' is not configured.")


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ValueError(
                f"Constant '{constant_name}' not found for {context.step_name} deployment."
            )

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self, context) -> Any:
        return self.constant_value


class NetworkAddress(Variable):
    NETWORK_PREFIX = "network:"

    def __init__(self, variable: str, context: VariableContext):
        self.book = get_address_book(variable[len(self.NETWORK_PREFIX) :])
        if context.chain_id is None:
            overrides = self.book.deployment_overrides.values()
        else:
            overrides = filter(None, [self.book.override_for(context.chain_id)])
        for deployment_name in overrides:
            if not context.is_readable(deployment_name):
                raise MissingDependency(deployment_name, step=context.step_name)

    @classmethod
    def is_network_address(cls, value: str) -> bool:
        """Returns True if the variable is a chain-specific well-known address."""
        return value.startswith(cls.NETWORK_PREFIX)

    def resolve(self, context) -> Any:
        return self.book.resolve(context.chain_id, deployments=context.deployments)


class ContractName(Variable):
    def __init__(self, contract_name: str, context: VariableContext):
        if not context.is_readable(contract_name):
            raise MissingDependency(contract_name, step=context.step_name)
        self.contract_name = contract_name

    def resolve(self, context) -> Any:
        """Resolves a contract address from its deployment record."""
        return context.deployments.get(self.contract_name).address


def _variable_from_value(variable: str, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if NamedAccount.is_account(variable, context):
        return NamedAccount(variable, context)
    elif NetworkAddress.is_network_address(variable):
        return NetworkAddress(variable, context)
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ContractName(variable, context)


def process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, (list, tuple)):
        return [process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def resolve_param(value: Any, context) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [resolve_param(v, context) for v in value]

    if isinstance(value, Variable):
        return value.resolve(context)

    return value  # literally a value


class ConstructorParameters:
    """Processed constructor parameters of a single deployment step."""

    def __init__(self, raw_parameters: Iterable[Any], variable_context: VariableContext):
        self.step_name = variable_context.step_name
        self.parameters = [process_raw_value(p, variable_context) for p in raw_parameters]

    def resolve(self, context) -> List[Any]:
        """Resolves the constructor arguments, in constructor order."""
        return [resolve_param(p, context) for p in self.parameters]

    def __len__(self) -> int:
        return len(self.parameters)
