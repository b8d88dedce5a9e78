"""operation-hooks CLI entry point."""

import click


@click.group()
def cli():
    """operation-hooks — resolver hooks and PostgreSQL hook procedures."""
    pass


# Register subcommands
from operation_hooks.cli.config_cmd import config  # noqa: E402
from operation_hooks.cli.procedures_cmd import procedures  # noqa: E402

cli.add_command(config)
cli.add_command(procedures)
