"""QuoteBatchWriter: bounded multi-row upserts into option_quotes.

각 배치는 단일 multi-row INSERT + ON CONFLICT DO NOTHING으로 기록됩니다.
이미 존재하는 natural key 행은 오류 없이 건너뛰며 덮어쓰지 않습니다.
배치 간 트랜잭션은 없으므로, 실패 이전에 커밋된 배치는 유지됩니다.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import aiosqlite
from loguru import logger

from option_quoter.config.settings import SQLITE_MAX_PARAMETERS
from option_quoter.core.exceptions import StorageError
from option_quoter.models.quote import QUOTE_COLUMNS, QUOTE_KEY_COLUMNS

if TYPE_CHECKING:
    from option_quoter.models.quote import OptionQuote
    from option_quoter.models.rates import RiskFreeRateObservation
    from option_quoter.storage.database import Database

MAX_BATCH_SIZE = 1000
FIELDS_PER_ROW = len(QUOTE_COLUMNS)

_ROW_PLACEHOLDER = "(" + ", ".join("?" * FIELDS_PER_ROW) + ")"

_INSERT_PREFIX = f"INSERT INTO option_quotes ({', '.join(QUOTE_COLUMNS)}) VALUES "
_CONFLICT_SUFFIX = f" ON CONFLICT ({', '.join(QUOTE_KEY_COLUMNS)}) DO NOTHING"

_INSERT_RATE_SQL = (
    "INSERT INTO risk_free_rate (timestamp, rate, source) VALUES (?, ?, ?) "
    "ON CONFLICT (timestamp) DO NOTHING"
)


@dataclass(frozen=True)
class SaveResult:
    """save() 결과.

    Attributes:
        batches: 실행한 INSERT 문 수
        rows_inserted: 실제 삽입된 행 수 (충돌로 건너뛴 행 제외)
    """

    batches: int = 0
    rows_inserted: int = 0


def _chunks(items: Sequence[OptionQuote], size: int) -> Iterator[Sequence[OptionQuote]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def build_insert_sql(rows: int) -> str:
    """rows개 행에 대한 multi-row INSERT ... ON CONFLICT DO NOTHING 문."""
    return _INSERT_PREFIX + ", ".join([_ROW_PLACEHOLDER] * rows) + _CONFLICT_SUFFIX


class QuoteBatchWriter:
    """옵션 호가 배치 저장소.

    Args:
        database: 연결된 Database
        batch_size: 배치당 최대 행 수 (batch_size × 14 < SQLite 파라미터 상한)

    Example:
        >>> writer = QuoteBatchWriter(db)
        >>> result = await writer.save(quotes)
        >>> result.batches
        3
    """

    def __init__(self, database: Database, batch_size: int = MAX_BATCH_SIZE) -> None:
        if batch_size <= 0 or batch_size * FIELDS_PER_ROW > SQLITE_MAX_PARAMETERS:
            msg = (
                f"batch_size must be in [1, {SQLITE_MAX_PARAMETERS // FIELDS_PER_ROW}], "
                f"got {batch_size}"
            )
            raise ValueError(msg)
        self._db = database
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def save(self, quotes: Sequence[OptionQuote]) -> SaveResult:
        """호가 저장. 빈 입력은 no-op.

        Raises:
            StorageError: 배치 쓰기 실패 (이전 배치는 커밋 상태 유지)
        """
        if not quotes:
            return SaveResult()

        logger.info("Saving {} quotes to database (batch size {})", len(quotes), self._batch_size)

        batches = 0
        inserted = 0
        for index, chunk in enumerate(_chunks(quotes, self._batch_size)):
            inserted += await self._save_batch(index, chunk)
            batches += 1

        skipped = len(quotes) - inserted
        logger.info(
            "Saved {} quotes in {} batches ({} duplicates skipped)",
            inserted,
            batches,
            skipped,
        )
        return SaveResult(batches=batches, rows_inserted=inserted)

    async def _save_batch(self, index: int, chunk: Sequence[OptionQuote]) -> int:
        params: list[object] = []
        for quote in chunk:
            params.extend(quote.to_row())

        conn = self._db.connection
        try:
            cursor = await conn.execute(build_insert_sql(len(chunk)), params)
            rowcount = cursor.rowcount
            await cursor.close()
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            raise StorageError(
                "Batch insert into option_quotes failed",
                context={"batch": index, "rows": len(chunk), "error": str(e)},
            ) from e

        logger.debug("Batch {} committed: {} rows", index, rowcount)
        return max(rowcount, 0)

    async def save_risk_free_rate(self, observation: RiskFreeRateObservation) -> bool:
        """무위험 이자율 관측 저장. 실패는 로그만 남기고 False 반환."""
        try:
            conn = self._db.connection
            await conn.execute(
                _INSERT_RATE_SQL,
                (
                    observation.timestamp.isoformat(timespec="microseconds"),
                    observation.rate,
                    observation.source.value,
                ),
            )
            await conn.commit()
        except Exception as e:  # 메인 수집 흐름을 중단시키지 않음
            logger.error("Error saving risk-free rate: {}", e)
            return False

        logger.info(
            "Saved risk-free rate: {:.2f}% (source: {})",
            observation.percent,
            observation.source.value,
        )
        return True
