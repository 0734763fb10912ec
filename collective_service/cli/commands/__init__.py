"""CLI command modules."""

from collective_service.cli.commands import cache

__all__ = ["cache"]
