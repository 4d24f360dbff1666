# SPDX-License-Identifier: MIT
"""CLI entry point for the mod-index server."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import click

from .config import APIConfig
from .logging import configure_logging


def _load_config(config_path: Optional[Path]) -> APIConfig:
    """Load a JSON config file if one is given, else the environment."""
    if config_path is None:
        return APIConfig.from_env()
    try:
        return APIConfig.from_file(config_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Could not load {config_path}: {e}") from e


config_argument = click.argument(
    "config_path",
    metavar="CONFIG",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


@click.group()
@click.version_option(package_name="mod-index")
def cli() -> None:
    """Versioned mod registry.

    CONFIG is a JSON file with port, database_url, downloads_path, log_level
    and admin_keys. Without it, MODINDEX_* environment variables are used.

    \b
    Examples:
        mod-index serve config.json
        mod-index reconcile config.json
    """


@cli.command()
@config_argument
@click.option("--host", default=None, help="Override the listening host.")
@click.option("--port", type=int, default=None, help="Override the listening port.")
def serve(config_path: Optional[Path], host: Optional[str], port: Optional[int]) -> None:
    """Run the HTTP server."""
    import uvicorn

    from .app import create_app

    config = _load_config(config_path)
    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = port

    try:
        configure_logging(config.logging.level, json_log=config.logging.json)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )


@cli.command()
@config_argument
def reconcile(config_path: Optional[Path]) -> None:
    """Remove catalog entries whose artifact file is missing.

    Run while the server is stopped; in-flight publishes look orphaned.
    """
    from .db import Database
    from .registry import Registry

    config = _load_config(config_path)

    async def sweep():
        database = Database(config.database)
        try:
            await database.create_all()
            registry = Registry.from_config(config, database)
            return await registry.reconcile()
        finally:
            await database.dispose()

    report = asyncio.run(sweep())

    for entry in report.removed:
        click.echo(f"removed {entry.id} {entry.version}")
    click.secho(
        f"Checked {report.checked} entries, removed {len(report.removed)}",
        fg="green",
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
