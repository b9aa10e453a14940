"""Quote ingestion pipeline (window policy, normalizer, orchestrator)."""

from option_quoter.ingestion.normalizer import normalize, normalize_chain, parse_expiration
from option_quoter.ingestion.orchestrator import IngestionOrchestrator
from option_quoter.ingestion.window import ExpirationWindowPolicy, filter_expirations

__all__ = [
    "ExpirationWindowPolicy",
    "IngestionOrchestrator",
    "filter_expirations",
    "normalize",
    "normalize_chain",
    "parse_expiration",
]
