#!/usr/bin/python3

from pathlib import Path
from typing import List, Optional, Tuple

import click

from zapdeploy.constants import ARTIFACTS_DIR
from zapdeploy.registry import DeploymentRegistry


def _get_registries(filepath: Optional[Path] = None) -> List[Tuple[str, DeploymentRegistry]]:
    """Loads the given registry, or every registry in the artifacts directory."""
    filepaths = [filepath] if filepath else sorted(ARTIFACTS_DIR.glob("*.json"))
    return [(p.stem, DeploymentRegistry(p)) for p in filepaths]


def _display_registries(registries: List[Tuple[str, DeploymentRegistry]]) -> None:
    """Display deployment records grouped by chain ID."""
    for registry_name, registry in registries:
        click.secho(f"\n{registry_name}", fg="green")

        for chain_id in registry.chain_ids():
            click.secho(f"    Chain ID {chain_id}", fg="yellow")

            records = sorted(registry.records(chain_id), key=lambda r: r.name)
            for index, record in enumerate(records, start=1):
                click.secho(f"        {index}. {record.name} {record.address}", fg="cyan")


@click.command(name="list-deployments")
@click.option(
    "--registry",
    "-r",
    "registry_filepath",
    help="Filepath of a deployment registry",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
)
def cli(registry_filepath):
    """List all deployment records. Optionally for a single registry."""
    _display_registries(_get_registries(registry_filepath))


if __name__ == "__main__":
    cli()
