"""Prerequisites of the protocol: the reward token, a WETH mock and the AMM."""

from zapdeploy.constants import HARDHAT, ROPSTEN
from zapdeploy.step import Step

GZAP_TOKEN = Step(name="GZapToken")

# only test networks without a canonical WETH deployment get the mock
WETH9_MOCK = Step(name="WETH9Mock", chains=[ROPSTEN, HARDHAT])

UNISWAP_V2_FACTORY = Step(name="UniswapV2Factory", constructor=["$dev"])

UNISWAP_V2_ROUTER = Step(
    name="UniswapV2Router02",
    dependencies=["UniswapV2Factory", "WETH9Mock"],
    constructor=["$UniswapV2Factory", "$network:WETH"],
)

STEPS = [GZAP_TOKEN, WETH9_MOCK, UNISWAP_V2_FACTORY, UNISWAP_V2_ROUTER]
