# src/tokenfolio/tasks/cli.py
# Copyright (c) TokenFolio.
# SPDX-License-Identifier: MIT
"""TokenFolio CLI: browse market data, manage history and display currency.

Commands:
    top                 Top assets by market cap.
    detail ID           One asset's detail (recorded in recently viewed).
    search QUERY        Remote search.
    filter QUERY        Local filter over the top list.
    recent list         Recently viewed assets.
    recent remove ID    Drop one entry from the history.
    recent clear        Drop the whole history.
    currency show       Current display currency.
    currency set CODE   Change display currency and re-price the history.

Environment:
    TOKENFOLIO_STATE_PATH       JSON file for persisted state.
    TOKENFOLIO_CACHE_TTL_S      Cache freshness window in seconds.
    TOKENFOLIO_LOG_LEVEL        Log level when --log-level is not given.
    COINGECKO_BASE_URL          e.g., https://api.coingecko.com/api/v3
    COINGECKO_TIMEOUT_S         Per-attempt timeout.
    COINGECKO_MAX_RETRIES       Retries for transient failures.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer

from tokenfolio.config.settings import get_settings
from tokenfolio.dependencies.container import Container, build_container
from tokenfolio.domain.entities.asset import AssetSummary
from tokenfolio.domain.enums.currency import AVAILABLE_CURRENCIES, is_supported_currency
from tokenfolio.domain.exceptions.base import DomainError
from tokenfolio.domain.services.asset_filter import filter_assets
from tokenfolio.domain.services.currency_conversion import summary_from_detail
from tokenfolio.domain.services.formatting import (
    format_compact,
    format_currency,
    format_percentage,
)
from tokenfolio.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
    set_correlation_id,
)

T = TypeVar("T")

log = get_json_logger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True)
recent_app = typer.Typer(no_args_is_help=True, help="Recently viewed assets.")
currency_app = typer.Typer(no_args_is_help=True, help="Display currency.")
app.add_typer(recent_app, name="recent")
app.add_typer(currency_app, name="currency")

#: Builds the object graph for one command; tests replace it.
container_factory: Callable[[], Container] = build_container

_HINTS: dict[str, str] = {
    "retry_later": "Please try again later.",
    "check_identifier": "Check the asset identifier and try again.",
    "generic": "Something went wrong. Please try again.",
}


def _run(fn: Callable[[Container], Awaitable[T]]) -> T:
    """Run ``fn`` against a fresh container, turning domain errors into exit code 1."""

    async def _main() -> T:
        set_correlation_id(uuid.uuid4().hex)
        container = container_factory()
        try:
            return await fn(container)
        finally:
            await container.aclose()

    try:
        return asyncio.run(_main())
    except DomainError as exc:
        log.warning("cli.failed", extra={"code": exc.code})
        typer.echo(f"Error: {exc} {_HINTS.get(exc.user_hint, _HINTS['generic'])}", err=True)
        raise typer.Exit(code=1) from exc


def _resolve_currency(
    container: Container,
    option: str | None,
    param_hint: str = "--currency",
) -> str:
    currency = (option or container.preference.get()).strip().lower()
    if not is_supported_currency(currency):
        raise typer.BadParameter(
            f"unsupported currency {currency!r}; choose one of {', '.join(AVAILABLE_CURRENCIES)}",
            param_hint=param_hint,
        )
    return currency


def _summary_line(asset: AssetSummary, currency: str) -> str:
    rank = asset.get("market_cap_rank")
    prefix = f"{rank:>4}. " if rank else "    - "
    return (
        f"{prefix}{asset.get('name', '')} ({asset.get('symbol', '').upper()})  "
        f"{format_currency(asset.get('current_price'), currency)}  "
        f"{format_percentage(asset.get('price_change_percentage_24h'))}  "
        f"mcap {format_compact(asset.get('market_cap'), currency)}"
    )


@app.callback()
def main(
    log_level: str | None = typer.Option(  # noqa: B008
        None, help="Log level (default: TOKENFOLIO_LOG_LEVEL, LOG_LEVEL or INFO)."
    ),
) -> None:
    """Browse cryptocurrency market data from the terminal."""
    configure_root_logging(log_level or get_settings().log_level)


@app.command("top")
def top(
    currency: str | None = typer.Option(None, help="Display currency."),  # noqa: B008
    limit: int | None = typer.Option(None, min=1, max=250, help="Number of assets."),  # noqa: B008
) -> None:
    """List the top assets by market capitalization."""

    async def _cmd(c: Container) -> None:
        code = _resolve_currency(c, currency)
        assets = await c.gateway.list_top_assets(code, limit or c.settings.top_assets_limit)
        for asset in assets:
            typer.echo(_summary_line(asset, code))

    _run(_cmd)


@app.command("detail")
def detail(
    asset_id: str = typer.Argument(..., help="Asset id (e.g. bitcoin)."),  # noqa: B008
    currency: str | None = typer.Option(None, help="Display currency."),  # noqa: B008
) -> None:
    """Show one asset and record it in the recently viewed history."""

    async def _cmd(c: Container) -> None:
        code = _resolve_currency(c, currency)
        record = await c.gateway.get_asset_detail(asset_id, code)
        market = record.get("market_data") or {}
        typer.echo(f"{record.get('name', asset_id)} ({record.get('symbol', '').upper()})")
        for label, field in (
            ("Price", "current_price"),
            ("Market cap", "market_cap"),
            ("Volume 24h", "total_volume"),
            ("All-time high", "ath"),
            ("All-time low", "atl"),
        ):
            per_currency = market.get(field)
            amount = per_currency.get(code) if per_currency else None
            typer.echo(f"  {label:<14}{format_currency(amount, code)}")
        for label, field in (
            ("Change 24h", "price_change_percentage_24h"),
            ("Change 7d", "price_change_percentage_7d"),
            ("Change 30d", "price_change_percentage_30d"),
        ):
            typer.echo(f"  {label:<14}{format_percentage(market.get(field))}")
        # History is always priced in the display currency, whatever --currency says.
        c.history.add(summary_from_detail(record, c.preference.get()))

    _run(_cmd)


@app.command("search")
def search(query: str = typer.Argument(..., help="Free-text query.")) -> None:  # noqa: B008
    """Search assets on the remote service."""

    async def _cmd(c: Container) -> None:
        result = await c.gateway.search_assets(query)
        if not result["coins"]:
            typer.echo("No matches.")
            return
        for hit in result["coins"]:
            rank = hit.get("market_cap_rank")
            typer.echo(
                f"{rank if rank else '-':>5}  {hit['id']}  "
                f"{hit.get('name', '')} ({hit.get('symbol', '').upper()})"
            )

    _run(_cmd)


@app.command("filter")
def filter_(
    query: str = typer.Argument(..., help="Name or symbol fragment."),  # noqa: B008
    currency: str | None = typer.Option(None, help="Display currency."),  # noqa: B008
) -> None:
    """Filter the top list locally by name or symbol."""

    async def _cmd(c: Container) -> None:
        code = _resolve_currency(c, currency)
        assets = await c.gateway.list_top_assets(code, c.settings.top_assets_limit)
        matches = filter_assets(assets, query)
        if not matches:
            typer.echo("No matches.")
        for asset in matches:
            typer.echo(_summary_line(asset, code))

    _run(_cmd)


@recent_app.command("list")
def recent_list() -> None:
    """Show the recently viewed history, most recent first."""

    async def _cmd(c: Container) -> None:
        items = c.history.list()
        if not items:
            typer.echo("Nothing viewed yet.")
        code = c.preference.get()
        for item in items:
            typer.echo(_summary_line(item, code))

    _run(_cmd)


@recent_app.command("remove")
def recent_remove(asset_id: str = typer.Argument(...)) -> None:  # noqa: B008
    """Remove one asset from the history."""

    async def _cmd(c: Container) -> None:
        c.history.remove(asset_id)
        typer.echo(f"Removed {asset_id}.")

    _run(_cmd)


@recent_app.command("clear")
def recent_clear() -> None:
    """Remove every asset from the history."""

    async def _cmd(c: Container) -> None:
        c.history.clear()
        typer.echo("History cleared.")

    _run(_cmd)


@currency_app.command("show")
def currency_show() -> None:
    """Print the current display currency."""

    async def _cmd(c: Container) -> None:
        typer.echo(c.preference.get())

    _run(_cmd)


@currency_app.command("set")
def currency_set(code: str = typer.Argument(..., help="One of usd, eur, gbp, chf, inr.")) -> None:  # noqa: B008
    """Change the display currency and re-price the recently viewed history."""

    async def _cmd(c: Container) -> None:
        new = _resolve_currency(c, code, param_hint="CODE")
        previous = c.preference.set(new)
        typer.echo(f"Display currency: {new}")
        if new == previous:
            return
        stale, task = c.refresher.start(new)
        if not stale:
            await task
            return
        typer.echo(f"Refreshing {len(stale)} recently viewed asset(s)...")
        outcome = await task
        for item in outcome.items:
            typer.echo(_summary_line(item, new))
        if outcome.failed:
            typer.echo(f"{outcome.failed} asset(s) kept their previous prices.")

    _run(_cmd)


if __name__ == "__main__":  # pragma: no cover
    app()
