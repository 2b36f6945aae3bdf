from zapdeploy.step import Step

ZAP_MIGRATE = Step(
    name="ZapMigrate",
    dependencies=["UniswapV2Factory", "UniswapV2Router02"],
    constructor=["$network:UNISWAP_ROUTER", "$UniswapV2Router02"],
)

STEPS = [ZAP_MIGRATE]
