"""Ingestion health check: 최근 수집 결과 점검.

판정 기준 (모두 충족 시 healthy):
    - 최근 N시간 내 저장된 호가가 1건 이상
    - 설정된 모든 티커의 호가가 존재
    - 최근 무위험 이자율 출처가 1차 제공자
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from option_quoter.models.types import RateSource

if TYPE_CHECKING:
    from option_quoter.storage.database import Database

DEFAULT_LOOKBACK_HOURS = 24


class HealthReport(BaseModel):
    """헬스체크 결과.

    Attributes:
        success: healthy 여부
        message: CRITICAL / WARNING / OK 메시지
        quotes_count: 윈도우 내 호가 수
        tickers_found: 윈도우 내 발견된 티커
        tickers_missing: 설정됐지만 발견되지 않은 티커
        risk_free_rate_source: 윈도우 내 최신 이자율 출처
        last_quote_time: 윈도우 내 최신 호가 시각 (ISO)
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    quotes_count: int = 0
    tickers_found: list[str] = Field(default_factory=list)
    tickers_missing: list[str] = Field(default_factory=list)
    risk_free_rate_source: str | None = None
    last_quote_time: str | None = None


def _message(
    quotes_count: int, missing: list[str], rate_source: str | None, found: list[str]
) -> str:
    if quotes_count == 0:
        return "CRITICAL: No quotes saved in the lookback window!"
    if missing:
        return f"WARNING: Missing data for tickers: {', '.join(missing)}"
    if rate_source != RateSource.PRIMARY_PROVIDER.value:
        return f"WARNING: Risk-free rate using fallback ({rate_source or 'none'})"
    return f"OK: {quotes_count} quotes saved for {len(found)} tickers"


async def check_health(
    database: Database,
    expected_tickers: Iterable[str],
    *,
    now: datetime | None = None,
    hours: int = DEFAULT_LOOKBACK_HOURS,
) -> HealthReport:
    """최근 hours 시간의 수집 상태 점검.

    DB 조회 실패는 unhealthy 리포트로 변환합니다 (예외 전파 없음).
    """
    expected = [t.strip().upper() for t in expected_tickers if t.strip()]
    if not expected:
        return HealthReport(success=False, message="No tickers configured")

    now = now or datetime.now(UTC)
    since = (now - timedelta(hours=hours)).astimezone(UTC).isoformat(timespec="microseconds")

    try:
        conn = database.connection
        async with conn.execute(
            "SELECT COUNT(*), MAX(time) FROM option_quotes WHERE time >= ?", (since,)
        ) as cursor:
            count_row = await cursor.fetchone()
        async with conn.execute(
            "SELECT DISTINCT ticker FROM option_quotes WHERE time >= ? ORDER BY ticker",
            (since,),
        ) as cursor:
            found = [row[0] for row in await cursor.fetchall()]
        async with conn.execute(
            "SELECT source FROM risk_free_rate WHERE timestamp >= ? "
            "ORDER BY timestamp DESC LIMIT 1",
            (since,),
        ) as cursor:
            rate_row = await cursor.fetchone()
    except Exception as e:
        return HealthReport(
            success=False,
            message=f"Database error: {e}",
            tickers_missing=expected,
        )

    quotes_count = int(count_row[0]) if count_row else 0
    last_quote_time = count_row[1] if count_row else None
    rate_source = rate_row[0] if rate_row else None
    found_upper = {t.upper() for t in found}
    missing = [t for t in expected if t not in found_upper]

    success = (
        quotes_count > 0 and not missing and rate_source == RateSource.PRIMARY_PROVIDER.value
    )
    return HealthReport(
        success=success,
        message=_message(quotes_count, missing, rate_source, found),
        quotes_count=quotes_count,
        tickers_found=found,
        tickers_missing=missing,
        risk_free_rate_source=rate_source,
        last_quote_time=last_quote_time,
    )
