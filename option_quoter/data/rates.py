"""Risk-free rate resolver: ordered fallback chain, never fails.

1. Primary provider (yfinance ^TNX, percent) → source=primary-provider
2. Government feed (Treasury avg_interest_rates, most recent record)
   → source=secondary-provider
3. Hardcoded constant → source=fallback-constant

Each step returns a RateLookup (success/failure). Failures are logged and
the chain moves on; no exception reaches the caller.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from loguru import logger

from option_quoter.models.rates import RateLookup, RiskFreeRateObservation
from option_quoter.models.types import RateSource

if TYPE_CHECKING:
    from option_quoter.data.provider import GovernmentYieldSource, YieldQuoteSource

DEFAULT_FALLBACK_RATE = 0.045
DEFAULT_YIELD_SYMBOL = "^TNX"
DEFAULT_SECURITY_DESC = "Treasury 10-Year"


def percent_to_rate(value: object) -> float | None:
    """퍼센트 값 → 소수 이자율. 유한 양수가 아니면 None."""
    try:
        percent = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(percent) or percent <= 0:
        return None
    return percent / 100


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RiskFreeRateResolver:
    """무위험 이자율 fallback 체인.

    실행(invocation)마다 한 번 호출되며, 프로세스 내 캐싱은 하지 않습니다.

    Args:
        primary: 1차 수익률 제공자
        secondary: 2차 정부 데이터 피드
        fallback_rate: 최종 fallback 이자율 (소수)
        yield_symbol: 1차 제공자 심볼
        security_desc: 2차 제공자 security_desc 필터
        clock: 현재 시각 함수 (테스트 주입용)

    Example:
        >>> resolver = RiskFreeRateResolver(YFinanceYieldSource(yf), TreasuryYieldSource(tc))
        >>> obs = await resolver.resolve()
        >>> obs.source
        <RateSource.PRIMARY_PROVIDER: 'primary-provider'>
    """

    def __init__(
        self,
        primary: YieldQuoteSource,
        secondary: GovernmentYieldSource,
        *,
        fallback_rate: float = DEFAULT_FALLBACK_RATE,
        yield_symbol: str = DEFAULT_YIELD_SYMBOL,
        security_desc: str = DEFAULT_SECURITY_DESC,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._fallback_rate = fallback_rate
        self._yield_symbol = yield_symbol
        self._security_desc = security_desc
        self._clock = clock

    async def resolve(self) -> RiskFreeRateObservation:
        """fallback 체인 실행. 절대 실패하지 않습니다."""
        primary = await self.lookup_primary()
        if primary.ok and primary.rate is not None:
            return self._observe(primary.rate, RateSource.PRIMARY_PROVIDER)
        logger.warning("Primary risk-free rate lookup failed: {}", primary.error)

        secondary = await self.lookup_secondary()
        if secondary.ok and secondary.rate is not None:
            return self._observe(secondary.rate, RateSource.SECONDARY_PROVIDER)
        logger.warning(
            "Secondary risk-free rate lookup failed: {}, using fallback rate {:.2f}%",
            secondary.error,
            self._fallback_rate * 100,
        )

        return self._observe(self._fallback_rate, RateSource.FALLBACK_CONSTANT)

    async def lookup_primary(self) -> RateLookup:
        """1차 제공자 조회 (퍼센트 → 소수)."""
        try:
            value = await self._primary.quote(self._yield_symbol)
        except Exception as e:
            return RateLookup.failure(f"{type(e).__name__}: {e}")
        if value is None:
            return RateLookup.failure(f"No quote returned for {self._yield_symbol}")
        rate = percent_to_rate(value)
        if rate is None:
            return RateLookup.failure(f"Invalid rate value: {value}")
        return RateLookup.success(rate)

    async def lookup_secondary(self) -> RateLookup:
        """2차 제공자 조회: record_date 기준 최신 레코드가 양수일 때만 채택."""
        try:
            records = await self._secondary.latest_rate(self._security_desc)
        except Exception as e:
            return RateLookup.failure(f"{type(e).__name__}: {e}")
        if not records:
            return RateLookup.failure(f"No records found for {self._security_desc!r}")
        latest = max(records, key=lambda r: r.record_date)
        rate = percent_to_rate(latest.avg_interest_rate_amt)
        if rate is None:
            return RateLookup.failure(
                f"Invalid rate value {latest.avg_interest_rate_amt} on {latest.record_date}"
            )
        return RateLookup.success(rate)

    def _observe(self, rate: float, source: RateSource) -> RiskFreeRateObservation:
        observation = RiskFreeRateObservation(rate=rate, source=source, timestamp=self._clock())
        logger.info(
            "Risk-free rate: {:.3f}% (source: {})",
            observation.percent,
            source.value,
        )
        return observation
