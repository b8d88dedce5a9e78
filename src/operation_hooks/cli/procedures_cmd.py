"""Procedures CLI command — list table hook procedures in a database."""

import asyncio
from pathlib import Path

import click

from operation_hooks.cli.config_cmd import load_config
from operation_hooks.config import OperationHooksConfig
from operation_hooks.pg.introspection import PgCatalog, introspect
from operation_hooks.pg.plugin import HookProcedure, PgOperationHooks


async def load_catalog(config: OperationHooksConfig) -> PgCatalog:
    import psycopg

    async with await psycopg.AsyncConnection.connect(config.database_url) as conn:
        return await introspect(conn, config.schemas)


def describe(entry: HookProcedure) -> str:
    target = f"{entry.table.namespace_name}.{entry.table.name}"
    shape = entry.shape.name if entry.shape is not None else "INVALID"
    return (
        f"{entry.proc.qualified_name}: {entry.operation.value} {entry.phase.value} "
        f"on {target} [{shape}]"
    )


@click.command()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file (defaults to environment variables).",
)
@click.option("--database-url", default=None, help="PostgreSQL URL (overrides DATABASE_URL).")
@click.option(
    "--schema",
    "schemas",
    multiple=True,
    help="Schema to introspect; repeat for several (default: public).",
)
def procedures(config_path: Path | None, database_url: str | None, schemas: tuple[str, ...]):
    """List <table>_<operation>_<before|after> procedures and their call shapes."""
    config = load_config(config_path).merged(
        database_url=database_url,
        schemas=list(schemas) or None,
    )
    if not config.database_url:
        click.echo("Error: no database URL; pass --database-url or set DATABASE_URL", err=True)
        raise SystemExit(1)

    catalog = asyncio.run(load_catalog(config))
    found = PgOperationHooks(catalog).hook_procedures()

    if not found:
        click.echo("No operation hook procedures found.")
        return

    errors = [entry for entry in found if entry.error]
    for entry in found:
        if entry.error:
            click.echo(click.style(f"  ✗ {describe(entry)}: {entry.error}", fg="red"))
        else:
            click.echo(f"  ✓ {describe(entry)}")

    if errors:
        click.echo(
            click.style(f"\n{len(errors)} invalid procedure(s) found", fg="red", bold=True)
        )
        raise SystemExit(1)

    click.echo(click.style(f"\n{len(found)} procedure(s) found.", fg="green", bold=True))
