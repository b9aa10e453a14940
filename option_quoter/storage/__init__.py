"""SQLite persistence (aiosqlite)."""

from option_quoter.storage.database import Database
from option_quoter.storage.health import HealthReport, check_health
from option_quoter.storage.writer import MAX_BATCH_SIZE, QuoteBatchWriter, SaveResult

__all__ = [
    "MAX_BATCH_SIZE",
    "Database",
    "HealthReport",
    "QuoteBatchWriter",
    "SaveResult",
    "check_health",
]
