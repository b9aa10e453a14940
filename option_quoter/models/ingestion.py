"""Ingestion run summary model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from option_quoter.models.rates import RiskFreeRateObservation


class IngestionSummary(BaseModel):
    """수집 실행 결과 요약.

    Attributes:
        total_quotes_saved: 전체 저장 호가 수
        per_ticker: 티커별 저장 호가 수 (업스트림 실패 티커는 0)
        failed_tickers: 제공자 오류로 0건 처리된 티커
        rate: 이번 실행에 사용된 무위험 이자율
        captured_at: 실행 단위 수집 시각
    """

    model_config = ConfigDict(frozen=True)

    total_quotes_saved: int = 0
    per_ticker: dict[str, int] = Field(default_factory=dict)
    failed_tickers: list[str] = Field(default_factory=list)
    rate: RiskFreeRateObservation
    captured_at: datetime
