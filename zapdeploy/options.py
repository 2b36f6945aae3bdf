from pathlib import Path

import click

from zapdeploy.types import ChecksumAddress

config_option = click.option(
    "--config",
    "-c",
    "config_filepath",
    help="Filepath of the deployment params YAML",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)

tags_option = click.option(
    "--tags",
    "-t",
    help="Deploy only the steps providing these tags, plus their dependencies.",
    multiple=True,
)

force_option = click.option(
    "--force",
    help="Redeploy contracts that already have a deployment record.",
    is_flag=True,
    default=False,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)

verify_option = click.option(
    "--verify",
    help="Publish deployed contracts on the block explorer.",
    is_flag=True,
    default=False,
)

account_option = click.option(
    "--account",
    "-a",
    "account_alias",
    help="Alias of the ape account deploying the contracts.",
    default=None,
)

dev_option = click.option(
    "--dev",
    help="Address receiving ownership of the deployed contracts.",
    type=ChecksumAddress(),
    default=None,
)
