"""Option Quoter - option chain snapshots enriched with Black-Scholes risk metrics."""

__version__ = "0.1.0"
