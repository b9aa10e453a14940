"""Market-data transport clients.

AsyncTreasuryClient: fiscaldata.treasury.gov avg_interest_rates (httpx + retry)
YFinanceOptionsClient: yfinance wrapper (asyncio.to_thread)

Rules Applied:
    - #23 Exception Handling: Domain-driven hierarchy
    - #19 Git Security: No secrets in code (both sources are public)
"""

from __future__ import annotations

import asyncio
import math
from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger

from option_quoter.core.exceptions import NetworkError, RateLimitError

if TYPE_CHECKING:
    import pandas as pd

TREASURY_BASE_URL = "https://api.fiscaldata.treasury.gov/services/api/fiscal_service/"
TREASURY_AVG_RATES_ENDPOINT = "v2/accounting/od/avg_interest_rates"

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 2.0
DEFAULT_TIMEOUT = 30.0

HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500


def _retry_after(response: httpx.Response) -> float | None:
    """Retry-After 헤더 (초). 없거나 숫자가 아니면 None."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if math.isfinite(seconds) and seconds >= 0 else None


class AsyncTreasuryClient:
    """Async HTTP client for the Treasury fiscal data API.

    실행당 fallback 조회 1회만 발생하므로 rate limiter 없이 재시도만 수행합니다.

    Retry policy:
        - 429: Retry-After (없으면 지수 백오프) 후 재시도, 소진 시 RateLimitError
        - 5xx / 연결 오류 / 타임아웃: 지수 백오프 후 재시도, 소진 시 NetworkError
        - 그 외 4xx: 재시도 없이 NetworkError

    Example:
        >>> async with AsyncTreasuryClient() as client:
        ...     resp = await client.get(TREASURY_AVG_RATES_ENDPOINT, params=...)
    """

    def __init__(
        self,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AsyncTreasuryClient:
        self._client = httpx.AsyncClient(
            base_url=TREASURY_BASE_URL,
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _backoff(self, attempt: int) -> float:
        return self._backoff_base ** (attempt + 1)

    async def get(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        """GET with retry on throttling and transient failures.

        Raises:
            RuntimeError: Client not initialized.
            RateLimitError: 429 on every attempt (retry_after from the last response).
            NetworkError: Non-retryable status, or transient failures on every attempt.
        """
        if self._client is None:
            msg = "Client not initialized. Use 'async with AsyncTreasuryClient()' context manager."
            raise RuntimeError(msg)

        retry_after: float | None = None
        last_error = ""
        throttled = False

        for attempt in range(self._max_retries):
            try:
                response = await self._client.get(endpoint, **kwargs)
            except httpx.TransportError as e:
                throttled = False
                last_error = f"{type(e).__name__}: {e}"
                wait = self._backoff(attempt)
            else:
                status = response.status_code
                if status == HTTP_TOO_MANY_REQUESTS:
                    throttled = True
                    retry_after = _retry_after(response)
                    last_error = "HTTP 429"
                    wait = retry_after if retry_after is not None else self._backoff(attempt)
                elif status >= HTTP_SERVER_ERROR:
                    throttled = False
                    last_error = f"HTTP {status}"
                    wait = self._backoff(attempt)
                elif response.is_error:
                    raise NetworkError(
                        f"HTTP {status} from Treasury: {endpoint}",
                        context={"endpoint": endpoint, "status": status},
                    )
                else:
                    return response

            if attempt + 1 < self._max_retries:
                logger.warning(
                    "Treasury request failed ({}), retry {}/{} in {:.1f}s",
                    last_error,
                    attempt + 1,
                    self._max_retries,
                    wait,
                )
                await asyncio.sleep(wait)

        if throttled:
            raise RateLimitError(
                f"Treasury rate limit exceeded after {self._max_retries} attempts",
                retry_after=retry_after,
                context={"endpoint": endpoint},
            )
        raise NetworkError(
            f"Treasury request failed after {self._max_retries} attempts: {endpoint}",
            context={"endpoint": endpoint, "last_error": last_error},
        )




class YFinanceOptionsClient:
    """Async wrapper for yfinance option endpoints.

    yfinance는 인증 불필요, sync 라이브러리이므로 asyncio.to_thread로 래핑.

    Example:
        >>> client = YFinanceOptionsClient()
        >>> expirations = await client.fetch_expirations("AAPL")
        >>> calls, puts = await client.fetch_option_chain("AAPL", "2024-06-21")
    """

    async def fetch_expirations(self, ticker: str) -> list[str]:
        """조회 가능한 만기 목록 ("YYYY-MM-DD" 문자열)."""
        return await asyncio.to_thread(self._expirations_sync, ticker)

    async def fetch_last_price(self, ticker: str) -> float | None:
        """최근 가격 (티커 또는 ^TNX 같은 지수). 알 수 없으면 None."""
        return await asyncio.to_thread(self._last_price_sync, ticker)

    async def fetch_option_chain(
        self, ticker: str, expiration: str
    ) -> tuple[pd.DataFrame, pd.DataFrame]:
        """단일 만기 option chain (calls, puts) DataFrame."""
        return await asyncio.to_thread(self._option_chain_sync, ticker, expiration)

    @staticmethod
    def _expirations_sync(ticker: str) -> list[str]:
        """Sync yfinance expirations (to_thread에서 호출)."""
        import yfinance as yf

        return list(yf.Ticker(ticker).options)

    @staticmethod
    def _last_price_sync(ticker: str) -> float | None:
        """Sync yfinance last price: fast_info → 최근 종가 순으로 시도."""
        import yfinance as yf

        yf_ticker = yf.Ticker(ticker)
        price = yf_ticker.fast_info.get("lastPrice")
        if price is None or not math.isfinite(float(price)):
            history = yf_ticker.history(period="5d")
            if history.empty:
                return None
            price = history["Close"].iloc[-1]
        value = float(price)
        return value if math.isfinite(value) else None

    @staticmethod
    def _option_chain_sync(ticker: str, expiration: str) -> tuple[pd.DataFrame, pd.DataFrame]:
        """Sync yfinance option chain (to_thread에서 호출)."""
        import yfinance as yf

        chain = yf.Ticker(ticker).option_chain(expiration)
        return chain.calls, chain.puts
