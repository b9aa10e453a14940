"""Quote normalizer: RawContract → OptionQuote (+ delta / probOTM).

Rules:
    - strike 또는 expiration이 없는 계약은 건너뜀 (None 반환)
    - 만기는 date / datetime / epoch seconds / ISO 문자열 → date
    - 누락된 숫자 필드는 0
    - Greeks는 기초자산 가격이 있고 IV > 0일 때만 계산
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from loguru import logger

from option_quoter.models.quote import OptionQuote
from option_quoter.models.types import OptionType
from option_quoter.pricing.greeks import compute_greeks, time_to_expiration

if TYPE_CHECKING:
    from option_quoter.models.quote import OptionChain, RawContract

_ZERO = Decimal(0)


def parse_expiration(value: Any) -> date | None:
    """만기 표현 → date. 해석 불가 시 None.

    - date: 그대로
    - datetime (pandas Timestamp 포함): tz-aware면 UTC 변환 후 날짜
    - int/float: Unix seconds (UTC)
    - str: ISO 8601 날짜/일시 또는 숫자 문자열 (Unix seconds)
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int | float):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=UTC).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return parse_expiration(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            pass
        try:
            return parse_expiration(float(text))
        except ValueError:
            return None
    return None


def _or_zero(value: Decimal | None) -> Decimal:
    return value if value is not None else _ZERO


def normalize(
    ticker: str,
    raw: RawContract,
    contract_type: OptionType,
    underlying_price: Decimal | float | None,
    risk_free_rate: float,
    captured_at: datetime,
) -> OptionQuote | None:
    """단일 계약 정규화.

    Args:
        ticker: 티커 심볼
        raw: 제공자 계약 레코드
        contract_type: CALL / PUT
        underlying_price: 기초자산 가격 (없으면 None → Greeks 생략)
        risk_free_rate: 이번 실행의 무위험 이자율 (소수)
        captured_at: 실행 단위 수집 시각

    Returns:
        OptionQuote, 또는 strike/만기 누락 시 None
    """
    if raw.strike is None or raw.strike <= 0:
        logger.debug("Skipping {} {} contract without strike", ticker, contract_type.value)
        return None
    expiration = parse_expiration(raw.expiration)
    if expiration is None:
        logger.debug(
            "Skipping {} {} {} contract without expiration (raw={!r})",
            ticker,
            contract_type.value,
            raw.strike,
            raw.expiration,
        )
        return None

    iv = _or_zero(raw.implied_volatility)
    underlying = Decimal(str(underlying_price)) if underlying_price is not None else None
    if underlying is not None and underlying <= 0:
        underlying = None

    delta: float | None = None
    prob_otm: float | None = None
    if underlying is not None and iv > 0:
        greeks = compute_greeks(
            stock_price=float(underlying),
            strike_price=float(raw.strike),
            time_to_expiration=time_to_expiration(expiration, captured_at),
            volatility=float(iv),
            risk_free_rate=risk_free_rate,
            option_type=contract_type,
        )
        if greeks is not None:
            delta = greeks.delta
            prob_otm = greeks.prob_otm

    return OptionQuote(
        ticker=ticker,
        expiration_date=expiration,
        strike=raw.strike,
        type=contract_type,
        bid=max(_or_zero(raw.bid), _ZERO),
        ask=max(_or_zero(raw.ask), _ZERO),
        last=max(_or_zero(raw.last_price), _ZERO),
        volume=max(raw.volume or 0, 0),
        open_interest=max(raw.open_interest or 0, 0),
        implied_volatility=max(iv, _ZERO),
        timestamp=captured_at,
        delta=delta,
        prob_otm=prob_otm,
        underlying_last=underlying,
    )


def normalize_chain(
    ticker: str,
    chain: OptionChain,
    underlying_price: Decimal | float | None,
    risk_free_rate: float,
    captured_at: datetime,
) -> list[OptionQuote]:
    """Chain 전체 정규화 (calls → puts 순). 건너뛴 계약은 제외."""
    quotes: list[OptionQuote] = []
    skipped = 0
    for contract_type, contracts in (
        (OptionType.CALL, chain.calls),
        (OptionType.PUT, chain.puts),
    ):
        for raw in contracts:
            quote = normalize(
                ticker, raw, contract_type, underlying_price, risk_free_rate, captured_at
            )
            if quote is None:
                skipped += 1
                continue
            quotes.append(quote)

    if skipped:
        logger.debug("{}: skipped {} contracts missing strike/expiration", ticker, skipped)
    return quotes
