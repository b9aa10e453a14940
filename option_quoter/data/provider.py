"""Provider capabilities consumed by the pipeline + yfinance/Treasury adapters.

Raw provider payloads are validated here, once, into RawContract /
ExpirationListing / TreasuryRateRecord models. Everything downstream works
with typed models only.

Rules Applied:
    - Repository Pattern: 데이터 접근 추상화 (Protocol)
    - #23 Exception Handling: provider 오류 → ProviderError
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Protocol

from loguru import logger
from pydantic import ValidationError

from option_quoter.core.exceptions import DataValidationError, ProviderError
from option_quoter.data.client import TREASURY_AVG_RATES_ENDPOINT
from option_quoter.models.quote import ExpirationListing, OptionChain, RawContract
from option_quoter.models.rates import TreasuryRateRecord

if TYPE_CHECKING:
    import pandas as pd

    from option_quoter.data.client import AsyncTreasuryClient, YFinanceOptionsClient

# Treasury 조회 시 가져올 최근 레코드 수
_TREASURY_PAGE_SIZE = 5


class MarketDataProvider(Protocol):
    """옵션 체인 제공자."""

    async def list_expirations(self, ticker: str) -> ExpirationListing: ...

    async def get_chain(self, ticker: str, expiration: date) -> OptionChain: ...


class YieldQuoteSource(Protocol):
    """1차 수익률 제공자 (퍼센트 값 반환)."""

    async def quote(self, symbol: str) -> float | None: ...


class GovernmentYieldSource(Protocol):
    """2차 정부 데이터 피드."""

    async def latest_rate(self, security_desc: str) -> list[TreasuryRateRecord]: ...


def _frame_to_contracts(frame: pd.DataFrame, expiration: date) -> list[RawContract]:
    """yfinance chain DataFrame → RawContract 리스트.

    yfinance chain에는 만기 컬럼이 없으므로 요청한 만기를 주입합니다.
    """
    if frame is None or frame.empty:
        return []
    contracts: list[RawContract] = []
    for record in frame.to_dict("records"):
        record.setdefault("expiration", expiration)
        try:
            contracts.append(RawContract.model_validate(record))
        except ValidationError as e:
            logger.debug("Skipping malformed contract {}: {}", record.get("contractSymbol"), e)
    return contracts


class YFinanceMarketData:
    """yfinance 기반 MarketDataProvider.

    Example:
        >>> provider = YFinanceMarketData(YFinanceOptionsClient())
        >>> listing = await provider.list_expirations("AAPL")
    """

    def __init__(self, client: YFinanceOptionsClient) -> None:
        self._client = client

    async def list_expirations(self, ticker: str) -> ExpirationListing:
        """만기 목록 + 현재가.

        Raises:
            ProviderError: yfinance 호출 실패 또는 만기 형식 오류
        """
        try:
            raw_expirations = await self._client.fetch_expirations(ticker)
        except Exception as e:
            raise ProviderError(
                f"Failed to list expirations for {ticker}",
                context={"ticker": ticker, "error": str(e)},
            ) from e

        try:
            expirations = sorted(date.fromisoformat(str(v)[:10]) for v in raw_expirations)
        except ValueError as e:
            raise DataValidationError(
                f"Malformed expiration list for {ticker}",
                context={"ticker": ticker, "raw": list(raw_expirations)[:5]},
            ) from e

        price: float | None = None
        try:
            price = await self._client.fetch_last_price(ticker)
        except Exception as e:  # 가격 없이도 기본 필드는 저장
            logger.warning("Could not get stock price for {}: {}", ticker, e)
        if price is None:
            logger.warning("No stock price for {}, Greeks will not be calculated", ticker)

        return ExpirationListing(ticker=ticker, expirations=expirations, current_price=price)

    async def get_chain(self, ticker: str, expiration: date) -> OptionChain:
        """단일 만기 option chain.

        Raises:
            ProviderError: yfinance 호출 실패
        """
        try:
            calls, puts = await self._client.fetch_option_chain(ticker, expiration.isoformat())
        except Exception as e:
            raise ProviderError(
                f"Failed to fetch option chain for {ticker}",
                context={"ticker": ticker, "expiration": expiration.isoformat(), "error": str(e)},
            ) from e

        return OptionChain(
            calls=_frame_to_contracts(calls, expiration),
            puts=_frame_to_contracts(puts, expiration),
        )


class YFinanceYieldSource:
    """yfinance 기반 1차 수익률 제공자 (^TNX 등, 퍼센트 단위)."""

    def __init__(self, client: YFinanceOptionsClient) -> None:
        self._client = client

    async def quote(self, symbol: str) -> float | None:
        return await self._client.fetch_last_price(symbol)


class TreasuryYieldSource:
    """fiscaldata.treasury.gov avg_interest_rates 기반 2차 제공자."""

    def __init__(self, client: AsyncTreasuryClient) -> None:
        self._client = client

    async def latest_rate(self, security_desc: str) -> list[TreasuryRateRecord]:
        """security_desc에 해당하는 최근 레코드 (record_date 내림차순).

        Raises:
            NetworkError: HTTP 실패 (client에서 발생)
            DataValidationError: 응답 구조 오류
        """
        params = {
            "filter": f"security_desc:eq:{security_desc}",
            "sort": "-record_date",
            "page[size]": str(_TREASURY_PAGE_SIZE),
        }
        response = await self._client.get(TREASURY_AVG_RATES_ENDPOINT, params=params)
        payload = response.json()
        rows = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise DataValidationError(
                "Treasury response has no data array",
                context={"security_desc": security_desc},
            )

        records: list[TreasuryRateRecord] = []
        for row in rows:
            try:
                records.append(TreasuryRateRecord.model_validate(row))
            except ValidationError as e:
                logger.debug("Skipping malformed Treasury row {}: {}", row, e)
        records.sort(key=lambda r: r.record_date, reverse=True)
        return records
