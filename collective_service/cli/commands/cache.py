"""Cache management commands."""

import json
import sys
from typing import Any

import click

from collective_service.app.context import app_context
from collective_service.cli.utils import coro, error, info, success, value, warning
from collective_service.features.accounts import AccountRef
from collective_service.infra.cache import Degraded, ProviderSettings, resolve_provider_type
from collective_service.infra.logging import set_log_context

PROVIDER_CHOICES = click.Choice(["memory", "redis", "memcache"], case_sensitive=False)


def _parse_value(raw: str) -> Any:
    """Interpret CLI input as JSON, falling back to the plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


async def _contributors_not_loadable(account_id: int) -> list[dict[str, Any]]:
    # The CLI only invalidates contributors; it never has a database to load them from.
    msg = f"Contributors for account {account_id} cannot be loaded from the CLI"
    raise RuntimeError(msg)


def _exit_degraded(result: Degraded) -> None:
    error(f"Cache unavailable during {result.reason.operation}: {result.reason.message}")
    sys.exit(1)


@click.group(name="cache")
@click.option(
    "--provider",
    "provider_type",
    type=PROVIDER_CHOICES,
    default=None,
    help="Force a cache backend instead of the configured precedence",
)
@click.pass_context
def cache(ctx: click.Context, provider_type: str | None) -> None:
    """Cache management commands."""
    ctx.ensure_object(dict)
    ctx.obj["provider_type"] = provider_type
    set_log_context(command=f"cache {ctx.invoked_subcommand}")


@cache.command(name="info")
@click.pass_context
def info_cmd(ctx: click.Context) -> None:
    """Show which cache backend this configuration resolves to."""
    settings = ProviderSettings.from_env()
    forced = ctx.obj.get("provider_type")
    resolved = forced.upper() if forced else resolve_provider_type(settings).value

    click.echo(f"Provider: {resolved}{' (forced)' if forced else ''}")
    click.echo(f"Redis URL configured: {settings.redis.is_configured}")
    click.echo(f"Memcache servers: {', '.join(settings.memcache.servers) or '-'}")
    click.echo(f"Memory capacity: {settings.cache.memory_max_entries} entries")


@cache.command()
@click.argument("key")
@click.pass_context
@coro
async def get(ctx: click.Context, key: str) -> None:
    """Print the value cached under KEY."""
    async with app_context(provider_type=ctx.obj.get("provider_type"), configure_logging=False) as app:
        result = await app.cache.get_result(key)

    if isinstance(result, Degraded):
        _exit_degraded(result)
    elif result.value is None:
        warning(f"No cached value for {key}")
        sys.exit(1)
    else:
        value(result.value)


@cache.command(name="set")
@click.argument("key")
@click.argument("raw_value", metavar="VALUE")
@click.option("--ttl", type=click.IntRange(min=0), default=0, help="Seconds to keep (0 = no expiry)")
@click.pass_context
@coro
async def set_cmd(ctx: click.Context, key: str, raw_value: str, ttl: int) -> None:
    """Store VALUE (JSON, or a plain string) under KEY."""
    async with app_context(provider_type=ctx.obj.get("provider_type"), configure_logging=False) as app:
        result = await app.cache.set_result(key, _parse_value(raw_value), ttl)

    if isinstance(result, Degraded):
        _exit_degraded(result)
    success(f"Stored {key}" + (f" for {ttl}s" if ttl else ""))


@cache.command()
@click.argument("key")
@click.pass_context
@coro
async def delete(ctx: click.Context, key: str) -> None:
    """Delete KEY from the cache."""
    async with app_context(provider_type=ctx.obj.get("provider_type"), configure_logging=False) as app:
        result = await app.cache.delete_result(key)

    if isinstance(result, Degraded):
        _exit_degraded(result)
    success(f"Deleted {key}")


@cache.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
@coro
async def clear(ctx: click.Context, force: bool) -> None:
    """Remove every entry from the cache backend."""
    warning("This will DELETE ALL KEYS from the cache backend (shared by every process using it)!")
    if not force and not click.confirm("Are you sure you want to continue?"):
        info("Clear cancelled")
        return

    async with app_context(provider_type=ctx.obj.get("provider_type"), configure_logging=False) as app:
        result = await app.cache.clear_result()

    if isinstance(result, Degraded):
        _exit_degraded(result)
    success("Cache cleared")


@cache.command(name="purge-account")
@click.argument("slug")
@click.option("--id", "account_id", type=click.IntRange(min=1), default=None, help="Account id (also invalidates contributors)")
@click.pass_context
@coro
async def purge_account(ctx: click.Context, slug: str, account_id: int | None) -> None:
    """Purge the CDN page and GraphQL cache of account SLUG."""
    async with app_context(
        provider_type=ctx.obj.get("provider_type"),
        contributors_loader=_contributors_not_loadable,
        configure_logging=False,
    ) as app:
        if account_id is None:
            report = await app.invalidator.purge_cache_for_account(slug)
        else:
            report = await app.invalidator.purge_all_caches_for_account(AccountRef(id=account_id, slug=slug))

    if not report.ok:
        error(f"Purge of {slug} failed for: {', '.join(report.failed_steps)}")
        sys.exit(1)
    success(f"Purged caches for {slug} ({report.purged_keys} GraphQL keys)")
