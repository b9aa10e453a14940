"""CLI interface using Typer.

Available subcommands:
    - quotes: Option quote ingestion, risk-free rate, health check

Usage:
    python main.py quotes run
    python main.py quotes health --hours 24
"""

import typer


def create_app() -> typer.Typer:
    """Create the main CLI application with all sub-commands."""
    from option_quoter.cli.quotes import app as quotes_app

    main_app = typer.Typer(
        name="option-quoter",
        help="Option Quoter - option chain collection with Black-Scholes risk metrics",
        no_args_is_help=True,
    )
    main_app.add_typer(quotes_app, name="quotes", help="Option quote ingestion")
    return main_app


def main() -> None:
    """Entry point for the ``option-quoter`` console script."""
    app = create_app()
    app()
