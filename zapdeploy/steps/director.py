from zapdeploy.constants import HARDHAT, ROPSTEN
from zapdeploy.step import OwnershipHandoff, Step

ZAP_DIRECTOR = Step(
    name="ZapDirector",
    dependencies=["UniswapV2Factory", "UniswapV2Router02", "GZapToken"],
    constructor=["$GZapToken", "$dev", "$GZAP_PER_BLOCK", "$START_BLOCK", "$BONUS_END_BLOCK"],
    constants={
        "GZAP_PER_BLOCK": 1000 * 10**18,
        "START_BLOCK": 0,
        "BONUS_END_BLOCK": 1000 * 10**18,
    },
    handoffs=[
        # the director mints rewards, so it must own the token
        OwnershipHandoff(contract="GZapToken", new_owner="$ZapDirector"),
        OwnershipHandoff(new_owner="$dev"),
    ],
)

# BoringOwnable: transferOwnership(newOwner, direct, renounce)
MINI_ZAP_DIRECTOR_V2 = Step(
    name="MiniZapDirectorV2",
    dependencies=["UniswapV2Factory", "UniswapV2Router02"],
    constructor=["$network:SUSHI"],
    handoffs=[OwnershipHandoff(new_owner="$dev", args=(True, False))],
    # reward token overrides of the SUSHI book
    chain_dependencies={ROPSTEN: ["ZapDirector"], HARDHAT: ["GZapToken"]},
)

STEPS = [ZAP_DIRECTOR, MINI_ZAP_DIRECTOR_V2]
