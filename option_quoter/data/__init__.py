"""Market-data and risk-free-rate ingestion module.

Exports:
    - AsyncTreasuryClient: Rate-limited HTTP client for Treasury fiscal data
    - YFinanceOptionsClient: yfinance wrapper (options, last price)
    - YFinanceMarketData: MarketDataProvider implementation
    - YFinanceYieldSource / TreasuryYieldSource: risk-free rate sources
    - RiskFreeRateResolver: ordered fallback chain
"""

from option_quoter.data.client import AsyncTreasuryClient, YFinanceOptionsClient
from option_quoter.data.provider import (
    GovernmentYieldSource,
    MarketDataProvider,
    TreasuryYieldSource,
    YFinanceMarketData,
    YFinanceYieldSource,
    YieldQuoteSource,
)
from option_quoter.data.rates import RiskFreeRateResolver, percent_to_rate

__all__ = [
    "AsyncTreasuryClient",
    "GovernmentYieldSource",
    "MarketDataProvider",
    "RiskFreeRateResolver",
    "TreasuryYieldSource",
    "YFinanceMarketData",
    "YFinanceOptionsClient",
    "YFinanceYieldSource",
    "YieldQuoteSource",
    "percent_to_rate",
]
