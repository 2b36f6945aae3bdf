#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand

from zapdeploy.ape_backend import ApeBackend, validate_network
from zapdeploy.config import load_config
from zapdeploy.options import config_option, dev_option, tags_option
from zapdeploy.orchestrator import Orchestrator
from zapdeploy.registry import DeploymentRegistry
from zapdeploy.step import StepStatus
from zapdeploy.steps import discover_steps

STATUS_COLORS = {
    StepStatus.UNDEPLOYED: "red",
    StepStatus.DEPLOYED: "green",
    StepStatus.OWNERSHIP_PENDING: "yellow",
    StepStatus.OWNERSHIP_TRANSFERRED: "green",
    StepStatus.SKIPPED: "blue",
}


@click.command(cls=ConnectedProviderCommand, name="deployment-status")
@config_option
@tags_option
@dev_option
def cli(config_filepath, tags, dev):
    """Shows how far each deployment step got on the connected network."""
    config = load_config(config_filepath)
    validate_network(config)

    backend = ApeBackend(autosign=True)
    orchestrator = Orchestrator(
        steps=discover_steps(),
        backend=backend,
        named_accounts=backend.named_accounts(config, dev=dev),
        registry=DeploymentRegistry(config.registry_filepath),
        constants=config.constants,
    )
    for name, status in orchestrator.status(tags=list(tags) or config.tags).items():
        click.secho(f"{name:<20} {status.value}", fg=STATUS_COLORS[status])


if __name__ == "__main__":
    cli()
