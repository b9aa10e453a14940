"""Option chain data models (raw provider contract, normalized quote).

Pydantic V2 frozen models with Decimal for market prices.

Rules Applied:
    - #11 Pydantic Modeling: frozen=True, Decimal for financial values
    - #10 Python Standards: Modern typing (X | None)
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from option_quoter.models.types import OptionType

# option_quotes 테이블 컬럼 순서 (to_row()와 동일)
QUOTE_COLUMNS: tuple[str, ...] = (
    "time",
    "ticker",
    "expiration_date",
    "strike",
    "type",
    "bid",
    "ask",
    "last",
    "volume",
    "open_interest",
    "implied_volatility",
    "delta",
    "prob_otm",
    "underlying_last",
)

# Natural key (ON CONFLICT 대상)
QUOTE_KEY_COLUMNS: tuple[str, ...] = ("time", "ticker", "expiration_date", "strike", "type")


def _missing_to_none(v: Any) -> Any:
    """None / NaN / numpy scalar 정규화 (NaN → None, numpy → Python native)."""
    if v is None:
        return None
    if hasattr(v, "item") and not isinstance(v, Decimal | str):
        v = v.item()
    if isinstance(v, float) and math.isnan(v):
        return None
    return v


def _ensure_utc(v: datetime) -> datetime:
    if v.tzinfo is None:
        return v.replace(tzinfo=UTC)
    return v.astimezone(UTC)


class RawContract(BaseModel):
    """제공자 경계에서 한 번 검증되는 raw option contract.

    모든 필드는 optional이며, 누락/NaN은 None으로 정규화됩니다.
    yfinance 컬럼 이름(lastPrice, openInterest, impliedVolatility)을
    alias로 받습니다.

    Attributes:
        strike: 행사가
        expiration: 만기 (date, datetime, epoch seconds, ISO 문자열 중 하나)
        bid: 매수 호가
        ask: 매도 호가
        last_price: 최종 체결가
        volume: 거래량
        open_interest: 미결제약정
        implied_volatility: 내재변동성 (소수, 0.25 = 25%)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    strike: Decimal | None = None
    expiration: Any = None
    bid: Decimal | None = None
    ask: Decimal | None = None
    last_price: Decimal | None = Field(default=None, alias="lastPrice")
    volume: int | None = None
    open_interest: int | None = Field(default=None, alias="openInterest")
    implied_volatility: Decimal | None = Field(default=None, alias="impliedVolatility")

    @field_validator(
        "strike",
        "expiration",
        "bid",
        "ask",
        "last_price",
        "implied_volatility",
        mode="before",
    )
    @classmethod
    def normalize_missing(cls, v: Any) -> Any:
        """NaN → None."""
        return _missing_to_none(v)

    @field_validator("volume", "open_interest", mode="before")
    @classmethod
    def normalize_count(cls, v: Any) -> int | None:
        """NaN → None, float 카운트 → int."""
        v = _missing_to_none(v)
        if v is None:
            return None
        return int(v)


class OptionChain(BaseModel):
    """단일 만기의 option chain (calls + puts)."""

    model_config = ConfigDict(frozen=True)

    calls: list[RawContract] = Field(default_factory=list)
    puts: list[RawContract] = Field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.calls) + len(self.puts)


class ExpirationListing(BaseModel):
    """티커의 조회 가능 만기 목록 + 현재 기초자산 가격.

    Attributes:
        ticker: 티커 심볼
        expirations: 만기일 목록
        current_price: 기초자산 현재가 (알 수 없으면 None)
    """

    model_config = ConfigDict(frozen=True)

    ticker: str
    expirations: list[date] = Field(default_factory=list)
    current_price: Decimal | None = None

    @field_validator("current_price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> Any:
        """NaN/비양수 가격 → None."""
        v = _missing_to_none(v)
        if v is None:
            return None
        return v if Decimal(str(v)) > 0 else None


class OptionQuote(BaseModel):
    """정규화된 옵션 호가 (option_quotes 테이블 한 행).

    Attributes:
        ticker: 대문자 티커 심볼
        expiration_date: 만기일
        strike: 행사가 (> 0)
        type: CALL / PUT
        bid: 매수 호가
        ask: 매도 호가
        last: 최종 체결가
        volume: 거래량
        open_interest: 미결제약정
        implied_volatility: 내재변동성 (0 = unknown)
        timestamp: 수집 시각 (UTC, 실행 단위로 고정)
        delta: Black-Scholes delta (가격 입력이 유효할 때만)
        prob_otm: 만기 OTM 확률 (가격 입력이 유효할 때만)
        underlying_last: 수집 시점 기초자산 가격
    """

    model_config = ConfigDict(frozen=True)

    ticker: str
    expiration_date: date
    strike: Decimal = Field(..., gt=0)
    type: OptionType
    bid: Decimal = Field(default=Decimal(0), ge=0)
    ask: Decimal = Field(default=Decimal(0), ge=0)
    last: Decimal = Field(default=Decimal(0), ge=0)
    volume: int = Field(default=0, ge=0)
    open_interest: int = Field(default=0, ge=0)
    implied_volatility: Decimal = Field(default=Decimal(0), ge=0)
    timestamp: datetime
    delta: float | None = Field(default=None, ge=-1, le=1)
    prob_otm: float | None = Field(default=None, ge=0, le=1)
    underlying_last: Decimal | None = Field(default=None, gt=0)

    @field_validator("ticker", mode="before")
    @classmethod
    def upper_ticker(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("timestamp")
    @classmethod
    def utc_timestamp(cls, v: datetime) -> datetime:
        """Naive datetime → UTC."""
        return _ensure_utc(v)

    @property
    def natural_key(self) -> tuple[datetime, str, date, Decimal, OptionType]:
        """(timestamp, ticker, expiration_date, strike, type)."""
        return (self.timestamp, self.ticker, self.expiration_date, self.strike, self.type)

    def to_row(self) -> tuple[object, ...]:
        """QUOTE_COLUMNS 순서의 DB 파라미터 튜플."""
        return (
            self.timestamp.isoformat(timespec="microseconds"),
            self.ticker,
            self.expiration_date.isoformat(),
            float(self.strike),
            self.type.value,
            float(self.bid),
            float(self.ask),
            float(self.last),
            self.volume,
            self.open_interest,
            float(self.implied_volatility),
            self.delta,
            self.prob_otm,
            float(self.underlying_last) if self.underlying_last is not None else None,
        )
