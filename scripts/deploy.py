#!/usr/bin/python3

import click
from ape import accounts
from ape.cli import ConnectedProviderCommand

from zapdeploy.ape_backend import ApeBackend, validate_network
from zapdeploy.config import load_config
from zapdeploy.options import (
    account_option,
    autosign_option,
    config_option,
    dev_option,
    force_option,
    tags_option,
    verify_option,
)
from zapdeploy.orchestrator import Orchestrator
from zapdeploy.registry import DeploymentRegistry
from zapdeploy.steps import discover_steps


@click.command(cls=ConnectedProviderCommand)
@config_option
@tags_option
@force_option
@autosign_option
@verify_option
@account_option
@dev_option
def cli(config_filepath, tags, force, autosign, verify, account_alias, dev):
    """
    Deploys the protocol contracts described by the params file.

    ape run deploy --network ethereum:local:test -c zapdeploy/constructor_params/local.yml
    """
    config = load_config(config_filepath)
    validate_network(config)

    account = accounts.load(account_alias) if account_alias else None
    backend = ApeBackend(account=account, autosign=autosign, verify=verify)
    orchestrator = Orchestrator(
        steps=discover_steps(),
        backend=backend,
        named_accounts=backend.named_accounts(config, dev=dev),
        registry=DeploymentRegistry(config.registry_filepath),
        constants=config.constants,
        force=force,
    )

    records = orchestrator.run(tags=list(tags) or config.tags)
    click.secho(f"\n(i) Registry written to {config.registry_filepath}", fg="green")
    for name, record in records.items():
        click.secho(f"    {name} {record.address}", fg="cyan")


if __name__ == "__main__":
    cli()
