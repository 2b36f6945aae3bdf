from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Union

from eth_typing import ChecksumAddress

from zapdeploy.constants import (
    HARDHAT,
    ROPSTEN,
    SUSHI_ADDRESS,
    UNISWAP_ROUTER,
    WETH_ADDRESS,
)
from zapdeploy.exceptions import UnknownNetwork

ChainId = str
AddressTable = Mapping[ChainId, ChecksumAddress]


def normalize_chain_id(chain_id: Union[int, str]) -> ChainId:
    return str(chain_id).strip()


def resolve(
    table: AddressTable, chain_id: Union[int, str], name: Optional[str] = None
) -> ChecksumAddress:
    """Returns the address registered for chain_id, or raises UnknownNetwork."""
    chain_id = normalize_chain_id(chain_id)
    try:
        return table[chain_id]
    except KeyError:
        raise UnknownNetwork(chain_id, table=name)


class AddressBook(NamedTuple):
    """
    A named address table. On chains listed in deployment_overrides the
    address is taken from a prior deployment record instead of the table.
    """

    name: str
    table: AddressTable
    deployment_overrides: Mapping[ChainId, str] = MappingProxyType({})

    def override_for(self, chain_id: Union[int, str]) -> Optional[str]:
        """Returns the name of the deployment standing in for this chain, if any."""
        return self.deployment_overrides.get(normalize_chain_id(chain_id))

    def resolve(self, chain_id: Union[int, str], deployments=None) -> ChecksumAddress:
        deployment_name = self.override_for(chain_id)
        if deployment_name is not None:
            if deployments is None:
                raise UnknownNetwork(chain_id, table=self.name)
            return deployments.get(deployment_name).address
        return resolve(self.table, chain_id, name=self.name)


ADDRESS_BOOKS = MappingProxyType(
    {
        "UNISWAP_ROUTER": AddressBook(name="UNISWAP_ROUTER", table=UNISWAP_ROUTER),
        "WETH": AddressBook(
            name="WETH",
            table=WETH_ADDRESS,
            deployment_overrides=MappingProxyType({ROPSTEN: "WETH9Mock", HARDHAT: "WETH9Mock"}),
        ),
        "SUSHI": AddressBook(
            name="SUSHI",
            table=SUSHI_ADDRESS,
            deployment_overrides=MappingProxyType({ROPSTEN: "ZapDirector", HARDHAT: "GZapToken"}),
        ),
    }
)


def get_address_book(name: str) -> AddressBook:
    try:
        return ADDRESS_BOOKS[name]
    except KeyError:
        raise ValueError(f"Address book '{name}' not found.")
