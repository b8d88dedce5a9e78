"""Config CLI command — show the effective options."""

from pathlib import Path

import click
import yaml

from operation_hooks.config import OperationHooksConfig


def load_config(config_path: Path | None) -> OperationHooksConfig:
    """Config from a YAML file if given, otherwise from the environment."""
    if config_path is not None:
        return OperationHooksConfig.from_yaml(config_path)
    return OperationHooksConfig.from_env()


@click.command()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with operationMessages, operationMessagesPreflight, databaseUrl, schemas.",
)
@click.option(
    "--operation-messages/--no-operation-messages",
    default=None,
    help="Expose messages generated during hooks via mutation payloads and error objects.",
)
@click.option(
    "--operation-messages-preflight/--no-operation-messages-preflight",
    default=None,
    help=(
        "Add a `preflight` argument to mutations; when true the before hooks run "
        "but the mutation exits early, reporting validation messages without "
        "making changes."
    ),
)
def config(
    config_path: Path | None,
    operation_messages: bool | None,
    operation_messages_preflight: bool | None,
):
    """Show the effective operation hooks options."""
    effective = load_config(config_path).merged(
        operation_messages=operation_messages,
        operation_messages_preflight=operation_messages_preflight,
    )
    click.echo(yaml.safe_dump(effective.to_dict(), sort_keys=False).rstrip())
