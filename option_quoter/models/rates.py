"""Risk-free rate models (fallback step result, observation, Treasury record).

Rules Applied:
    - #11 Pydantic Modeling: frozen=True
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from option_quoter.models.types import RateSource


class RateLookup(BaseModel):
    """fallback 체인 한 단계의 결과 (success / failure 태그).

    예외 억제 대신 명시적 결과 타입으로 체인의 동작을 감사 가능하게 합니다.

    Attributes:
        ok: 성공 여부
        rate: 소수 이자율 (성공 시)
        error: 실패 사유 (실패 시)
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    rate: float | None = None
    error: str | None = None

    @classmethod
    def success(cls, rate: float) -> RateLookup:
        return cls(ok=True, rate=rate)

    @classmethod
    def failure(cls, error: str) -> RateLookup:
        return cls(ok=False, error=error)


class RiskFreeRateObservation(BaseModel):
    """해석된 무위험 이자율 + 출처.

    Attributes:
        rate: 연율 소수 이자율 (0.045 = 4.5%)
        source: 출처 태그
        timestamp: 수집 시각 (UTC)
    """

    model_config = ConfigDict(frozen=True)

    rate: float = Field(..., gt=0)
    source: RateSource
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def utc_timestamp(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    @property
    def percent(self) -> float:
        return self.rate * 100


class TreasuryRateRecord(BaseModel):
    """fiscaldata.treasury.gov avg_interest_rates 레코드.

    Attributes:
        record_date: 기준일
        security_desc: 증권 설명 (e.g., "Treasury 10-Year")
        avg_interest_rate_amt: 평균 이자율 (%): 파싱 불가 시 None
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    record_date: date
    security_desc: str = ""
    avg_interest_rate_amt: Decimal | None = None

    @field_validator("avg_interest_rate_amt", mode="before")
    @classmethod
    def parse_rate(cls, v: Any) -> Decimal | None:
        """Treasury API 문자열 → Decimal ("null", "", 숫자 아님 → None)."""
        if v is None:
            return None
        try:
            return Decimal(str(v).strip())
        except InvalidOperation:
            return None
