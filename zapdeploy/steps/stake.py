from zapdeploy.step import OwnershipHandoff, Step

ZAP_STAKE = Step(
    name="ZapStake",
    dependencies=["UniswapV2Factory", "UniswapV2Router02", "GZapToken"],
    constructor=["$GZapToken"],
)

ZAP_WIZARD = Step(
    name="ZapWizard",
    dependencies=["UniswapV2Factory", "UniswapV2Router02", "ZapStake", "GZapToken", "WETH9Mock"],
    constructor=["$UniswapV2Factory", "$ZapStake", "$GZapToken", "$network:WETH"],
    handoffs=[OwnershipHandoff(new_owner="$dev", args=(True, False))],
)

STEPS = [ZAP_STAKE, ZAP_WIZARD]
