"""CLI commands for option quote ingestion.

yfinance option chains → Black-Scholes enrichment → SQLite.

Commands:
    - run: Full ingestion run for the configured (or given) tickers
    - rate: Resolve the risk-free rate and show its source
    - init-db: Create the database schema
    - health: Check the last ingestion window (exit 1 when unhealthy)
    - info: Show configured tickers and their expiration windows

Rules Applied:
    - #18 Typer CLI: Annotated syntax, Rich UI, async handling
"""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from option_quoter.config.settings import QuoterSettings, get_settings
from option_quoter.core.exceptions import ConfigurationError, StorageError
from option_quoter.core.logger import setup_logger
from option_quoter.data.client import AsyncTreasuryClient, YFinanceOptionsClient
from option_quoter.data.provider import TreasuryYieldSource, YFinanceMarketData, YFinanceYieldSource
from option_quoter.data.rates import RiskFreeRateResolver
from option_quoter.ingestion.orchestrator import IngestionOrchestrator
from option_quoter.ingestion.window import ExpirationWindowPolicy
from option_quoter.models.ingestion import IngestionSummary
from option_quoter.models.rates import RiskFreeRateObservation
from option_quoter.storage.database import Database
from option_quoter.storage.health import DEFAULT_LOOKBACK_HOURS, HealthReport, check_health
from option_quoter.storage.writer import QuoteBatchWriter

console = Console()

app = typer.Typer(
    name="quotes",
    help="Option quote ingestion (yfinance chains + Black-Scholes Greeks)",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def build_resolver(
    settings: QuoterSettings,
    yf_client: YFinanceOptionsClient,
    treasury_client: AsyncTreasuryClient,
) -> RiskFreeRateResolver:
    """설정 기반 RiskFreeRateResolver 생성."""
    return RiskFreeRateResolver(
        YFinanceYieldSource(yf_client),
        TreasuryYieldSource(treasury_client),
        fallback_rate=settings.fallback_risk_free_rate,
        yield_symbol=settings.risk_free_rate_symbol,
        security_desc=settings.treasury_security_desc,
    )


def _treasury_client(settings: QuoterSettings) -> AsyncTreasuryClient:
    return AsyncTreasuryClient(
        max_retries=settings.max_retries,
        backoff_base=settings.backoff_base,
        timeout=settings.request_timeout,
    )


def _setup_logging(settings: QuoterSettings, *, verbose: bool) -> None:
    setup_logger(
        log_dir=settings.log_dir,
        console_level="DEBUG" if verbose else "INFO",
        json_logs=settings.log_json,
    )


def resolve_tickers(settings: QuoterSettings, tickers: list[str] | None) -> list[str]:
    """CLI 인자 우선, 없으면 설정의 TICKERS.

    Raises:
        ConfigurationError: 수집 대상 티커가 없음
    """
    selected = [t.strip().upper() for t in tickers or [] if t.strip()]
    if selected:
        return selected
    if not settings.has_tickers():
        raise ConfigurationError("No tickers configured (set TICKERS or pass --ticker)")
    return settings.tickers


async def _run_ingestion(settings: QuoterSettings, tickers: list[str]) -> IngestionSummary:
    """DB/클라이언트 수명 관리 + 오케스트레이터 실행."""
    settings.ensure_directories()
    yf_client = YFinanceOptionsClient()

    async with Database(settings.db_path) as db, _treasury_client(settings) as treasury:
        orchestrator = IngestionOrchestrator(
            YFinanceMarketData(yf_client),
            QuoteBatchWriter(db, settings.batch_size),
            build_resolver(settings, yf_client, treasury),
            ExpirationWindowPolicy.from_settings(settings),
        )
        return await orchestrator.run(tickers)


async def _resolve_rate(settings: QuoterSettings) -> RiskFreeRateObservation:
    async with _treasury_client(settings) as treasury:
        resolver = build_resolver(settings, YFinanceOptionsClient(), treasury)
        return await resolver.resolve()


async def _init_db(settings: QuoterSettings) -> None:
    settings.ensure_directories()
    async with Database(settings.db_path):
        pass


async def _health(settings: QuoterSettings, hours: int) -> HealthReport:
    async with Database(settings.db_path) as db:
        return await check_health(db, settings.tickers, hours=hours)


def _display_summary(summary: IngestionSummary) -> None:
    """티커별 저장 결과 table 출력."""
    table = Table(title="Ingestion Summary", show_header=True)
    table.add_column("Ticker", style="cyan")
    table.add_column("Quotes", justify="right")
    table.add_column("Status")

    for ticker, count in summary.per_ticker.items():
        if ticker in summary.failed_tickers:
            status = "[red]provider error[/red]"
        elif count == 0:
            status = "[yellow]empty[/yellow]"
        else:
            status = "[green]saved[/green]"
        table.add_row(ticker, f"{count:,}", status)

    table.add_row("[bold]Total[/bold]", f"{summary.total_quotes_saved:,}", "", style="bold")
    console.print(table)
    console.print(
        f"Risk-free rate: {summary.rate.percent:.3f}% ({summary.rate.source.value}), "
        f"captured at {summary.captured_at.isoformat()}"
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def run(
    ticker: Annotated[
        list[str] | None,
        typer.Option("--ticker", "-t", help="Ticker to ingest (repeatable, overrides TICKERS)"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose logging")
    ] = False,
) -> None:
    """Run full ingestion: Fetch -> Normalize -> Save for every ticker.

    Example:
        python main.py quotes run
        python main.py quotes run -t AAPL -t SPY
    """
    settings = get_settings()
    _setup_logging(settings, verbose=verbose)

    try:
        tickers = resolve_tickers(settings, ticker)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    console.print(
        Panel.fit(
            f"[bold]Option Quote Ingestion[/bold]\nTickers: {', '.join(tickers)}",
            border_style="magenta",
        )
    )

    try:
        summary = asyncio.run(_run_ingestion(settings, tickers))
    except StorageError as e:
        console.print(f"\n[bold red]Storage failure:[/bold red] {escape(str(e))}")
        for note in getattr(e, "__notes__", []):
            console.print(f"  {escape(note)}")
        raise typer.Exit(code=1) from e

    _display_summary(summary)
    console.print("\n[bold green]Ingestion completed![/bold green]")


@app.command()
def rate(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose logging")
    ] = False,
) -> None:
    """Resolve the current risk-free rate through the fallback chain."""
    settings = get_settings()
    _setup_logging(settings, verbose=verbose)

    observation = asyncio.run(_resolve_rate(settings))
    style = "green" if observation.source.value == "primary-provider" else "yellow"
    console.print(
        f"Risk-free rate: [bold]{observation.percent:.3f}%[/bold] "
        f"([{style}]{observation.source.value}[/{style}])"
    )


@app.command("init-db")
def init_db() -> None:
    """Create the SQLite schema (idempotent)."""
    settings = get_settings()
    asyncio.run(_init_db(settings))
    console.print(f"[green]Schema ready:[/green] {settings.db_path}")


@app.command()
def health(
    hours: Annotated[
        int, typer.Option("--hours", help="Lookback window in hours", min=1)
    ] = DEFAULT_LOOKBACK_HOURS,
) -> None:
    """Check the latest ingestion window. Exits 1 when unhealthy."""
    settings = get_settings()
    report = asyncio.run(_health(settings, hours))

    status = "[green]HEALTHY[/green]" if report.success else "[red]UNHEALTHY[/red]"
    table = Table(title="Option Quoter Health Check", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("Status", status)
    table.add_row("Message", escape(report.message))
    table.add_row(f"Quotes count ({hours}h)", str(report.quotes_count))
    table.add_row("Tickers found", ", ".join(report.tickers_found) or "none")
    table.add_row("Tickers missing", ", ".join(report.tickers_missing) or "none")
    table.add_row("Risk-free rate source", report.risk_free_rate_source or "none")
    table.add_row("Last quote time", report.last_quote_time or "none")
    console.print(table)

    if not report.success:
        raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """Show configured tickers and their expiration windows."""
    settings = get_settings()
    policy = ExpirationWindowPolicy.from_settings(settings)

    table = Table(title="Configured Tickers")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Ticker", style="cyan")
    table.add_column("Window (days)", justify="right")

    for i, ticker in enumerate(settings.tickers, 1):
        table.add_row(str(i), ticker, str(policy.window_days(ticker)))

    console.print(table)
    console.print(
        f"DB: {settings.db_path} | batch size: {settings.batch_size} | "
        f"fallback rate: {settings.fallback_risk_free_rate:.2%}"
    )
