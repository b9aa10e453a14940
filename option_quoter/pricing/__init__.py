"""Option pricing model (Black-Scholes delta / probability OTM)."""

from option_quoter.pricing.greeks import (
    MIN_TIME_TO_EXPIRATION,
    Greeks,
    compute_greeks,
    norm_cdf,
    time_to_expiration,
)

__all__ = [
    "MIN_TIME_TO_EXPIRATION",
    "Greeks",
    "compute_greeks",
    "norm_cdf",
    "time_to_expiration",
]
