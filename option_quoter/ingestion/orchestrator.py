"""Ingestion orchestrator: tickers → chains → normalized quotes → store.

Tickers are processed strictly sequentially (provider rate limits, one
consistent risk-free rate per run). One capture timestamp is fixed per run
so that the natural key deduplicates reruns of the same logical snapshot.

Error policy:
    - Any error while fetching or normalizing a ticker: logged, ticker counts as 0
    - StorageError: propagates (annotated with the ticker)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from loguru import logger

from option_quoter.core.exceptions import StorageError, add_context_note
from option_quoter.core.logger import get_ticker_logger
from option_quoter.ingestion.normalizer import normalize_chain
from option_quoter.ingestion.window import filter_expirations
from option_quoter.models.ingestion import IngestionSummary

if TYPE_CHECKING:
    from option_quoter.data.provider import MarketDataProvider
    from option_quoter.data.rates import RiskFreeRateResolver
    from option_quoter.ingestion.window import ExpirationWindowPolicy
    from option_quoter.models.quote import OptionQuote
    from option_quoter.models.rates import RiskFreeRateObservation
    from option_quoter.storage.writer import QuoteBatchWriter


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _unique_tickers(tickers: Iterable[str]) -> list[str]:
    """대문자 변환 + 순서 유지 중복 제거."""
    result: list[str] = []
    for ticker in tickers:
        symbol = ticker.strip().upper()
        if symbol and symbol not in result:
            result.append(symbol)
    return result


class IngestionOrchestrator:
    """티커 단위 수집 실행기.

    Args:
        provider: 옵션 체인 제공자
        writer: 호가 배치 저장소
        resolver: 무위험 이자율 resolver
        window_policy: 만기 윈도우 정책
        clock: 현재 시각 함수 (테스트 주입용)

    Example:
        >>> orchestrator = IngestionOrchestrator(provider, writer, resolver, policy)
        >>> summary = await orchestrator.run(["AAPL", "SPY"])
        >>> summary.total_quotes_saved
        1840
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        writer: QuoteBatchWriter,
        resolver: RiskFreeRateResolver,
        window_policy: ExpirationWindowPolicy,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._provider = provider
        self._writer = writer
        self._resolver = resolver
        self._window_policy = window_policy
        self._clock = clock

    async def run(self, tickers: Iterable[str]) -> IngestionSummary:
        """전체 티커 수집.

        Raises:
            StorageError: 저장 실패 (이전 티커 데이터는 커밋 상태 유지)
        """
        symbols = _unique_tickers(tickers)
        logger.info("Tickers to process: {}", ", ".join(symbols) or "none")

        rate = await self._resolver.resolve()
        await self._writer.save_risk_free_rate(rate)

        captured_at = self._clock()
        per_ticker: dict[str, int] = {}
        failed: list[str] = []

        for ticker in symbols:
            log = get_ticker_logger(ticker)
            try:
                quotes = await self.collect(ticker, rate, captured_at)
            except Exception as e:
                log.exception("Error fetching options for {}: {}", ticker, e)
                per_ticker[ticker] = 0
                failed.append(ticker)
                continue

            if not quotes:
                log.info("No quotes found for {}", ticker)
                per_ticker[ticker] = 0
                continue

            try:
                await self._writer.save(quotes)
            except StorageError as e:
                add_context_note(e, f"While saving {len(quotes)} quotes for {ticker}")
                raise

            per_ticker[ticker] = len(quotes)
            log.info("Saved {} quotes for {}", len(quotes), ticker)

        summary = IngestionSummary(
            total_quotes_saved=sum(per_ticker.values()),
            per_ticker=per_ticker,
            failed_tickers=failed,
            rate=rate,
            captured_at=captured_at,
        )
        logger.info(
            "Ingestion finished: {} quotes for {} tickers ({} failed)",
            summary.total_quotes_saved,
            len(per_ticker),
            len(failed),
        )
        return summary

    async def collect(
        self,
        ticker: str,
        rate: RiskFreeRateObservation,
        captured_at: datetime,
    ) -> list[OptionQuote]:
        """단일 티커의 윈도우 내 모든 만기 chain을 정규화.

        Raises:
            ProviderError: 제공자 호출 실패 (run에서는 티커 단위로 복구)
        """
        window_days = self._window_policy.window_days(ticker)
        log = get_ticker_logger(ticker)
        log.info("Fetching options for {} (expirations up to {} days out)", ticker, window_days)

        listing = await self._provider.list_expirations(ticker)
        if not listing.expirations:
            log.info("No expiration dates found for {}", ticker)
            return []

        # 윈도우 기준일은 UTC 날짜 (만기 시각도 만기일 00:00 UTC)
        today = captured_at.astimezone(UTC).date()
        targets = filter_expirations(listing.expirations, today, window_days)
        log.info(
            "Found {} expirations for {} within {} days",
            len(targets),
            ticker,
            window_days,
        )

        quotes: list[OptionQuote] = []
        for expiration in targets:
            chain = await self._provider.get_chain(ticker, expiration)
            log.debug("Fetched {} contracts for {} {}", chain.size, ticker, expiration)
            quotes.extend(
                normalize_chain(
                    ticker,
                    chain,
                    listing.current_price,
                    rate.rate,
                    captured_at,
                )
            )
        return quotes
