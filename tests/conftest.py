"""Shared fixtures for tests.

이 모듈은 테스트에서 공통으로 사용되는 픽스처를 제공합니다.

Rules Applied:
    - #17 Testing Standards: Pytest fixtures
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterator
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from option_quoter.config.settings import clear_settings_cache
from option_quoter.models.quote import OptionQuote
from option_quoter.models.rates import RiskFreeRateObservation
from option_quoter.models.types import OptionType, RateSource
from option_quoter.storage.database import Database

# ---------------------------------------------------------------------------
# 디렉토리 경로 → pytest 마커 자동 매핑
# ---------------------------------------------------------------------------
_DIR_MARKER_MAP: dict[str, str] = {
    "/data/": "data",
    "/cli/": "integration",
    "/ingestion/": "integration",
    "/storage/": "integration",
    "/core/": "unit",
    "/models/": "unit",
    "/config/": "unit",
    "/pricing/": "unit",
}


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """디렉토리 경로 기반 자동 마커 부여."""
    for item in items:
        fspath = str(item.fspath)
        for dir_pattern, marker_name in _DIR_MARKER_MAP.items():
            if dir_pattern in fspath:
                item.add_marker(getattr(pytest.mark, marker_name))
                break


CAPTURED_AT = datetime(2024, 6, 3, 15, 30, tzinfo=UTC)


def _make_quote(
    *,
    ticker: str = "AAPL",
    expiration_date: date = date(2024, 6, 21),
    strike: str = "150",
    option_type: OptionType = OptionType.CALL,
    timestamp: datetime = CAPTURED_AT,
) -> OptionQuote:
    """테스트용 OptionQuote 생성."""
    return OptionQuote(
        ticker=ticker,
        expiration_date=expiration_date,
        strike=Decimal(strike),
        type=option_type,
        bid=Decimal("5.10"),
        ask=Decimal("5.30"),
        last=Decimal("5.20"),
        volume=120,
        open_interest=3400,
        implied_volatility=Decimal("0.25"),
        timestamp=timestamp,
        delta=0.62,
        prob_otm=0.41,
        underlying_last=Decimal("155"),
    )


@pytest.fixture
def make_quote() -> Callable[..., OptionQuote]:
    """OptionQuote 팩토리."""
    return _make_quote


@pytest.fixture
def captured_at() -> datetime:
    """실행 단위 고정 수집 시각."""
    return CAPTURED_AT


@pytest.fixture
def primary_rate() -> RiskFreeRateObservation:
    """1차 제공자 출처의 무위험 이자율."""
    return RiskFreeRateObservation(
        rate=0.045, source=RateSource.PRIMARY_PROVIDER, timestamp=CAPTURED_AT
    )


@pytest.fixture
async def db() -> AsyncIterator[Database]:
    """인메모리 DB fixture."""
    database = Database(":memory:")
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """설정 관련 환경 변수 제거 + 설정 캐시 초기화."""
    for name in (
        "TICKERS",
        "EXTENDED_EXPIRATION_TICKERS",
        "DEFAULT_WINDOW_DAYS",
        "EXTENDED_WINDOW_DAYS",
        "FALLBACK_RISK_FREE_RATE",
        "DB_PATH",
        "LOG_DIR",
        "LOG_JSON",
        "BATCH_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()
