"""Pydantic data models and schemas."""

from option_quoter.models.ingestion import IngestionSummary
from option_quoter.models.quote import (
    QUOTE_COLUMNS,
    QUOTE_KEY_COLUMNS,
    ExpirationListing,
    OptionChain,
    OptionQuote,
    RawContract,
)
from option_quoter.models.rates import RateLookup, RiskFreeRateObservation, TreasuryRateRecord
from option_quoter.models.types import OptionType, RateSource

__all__ = [
    "QUOTE_COLUMNS",
    "QUOTE_KEY_COLUMNS",
    "ExpirationListing",
    "IngestionSummary",
    "OptionChain",
    "OptionQuote",
    "OptionType",
    "RateLookup",
    "RateSource",
    "RawContract",
    "RiskFreeRateObservation",
    "TreasuryRateRecord",
]
