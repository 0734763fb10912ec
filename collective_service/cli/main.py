"""Main CLI entry point for collective-service management commands."""

import sys

import click

from collective_service.cli.commands import cache
from collective_service.cli.utils import error
from collective_service.core.exceptions import ConfigurationError
from collective_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="collective-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Collective Service CLI - cache management commands.

    \b
    Command Groups:
      cache      Inspect, write and purge the cache backend

    \b
    Quick Start:
      collective-service cache info                 # Which backend is configured
      collective-service cache set greeting '"hi"'  # Store a JSON value
      collective-service cache purge-account acme   # Purge an account's caches
    """
    ctx.ensure_object(dict)


cli.add_command(cache.cache)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    try:
        cli(obj={})
    except ConfigurationError as e:
        error(e.detail)
        sys.exit(2)


if __name__ == "__main__":
    main()
