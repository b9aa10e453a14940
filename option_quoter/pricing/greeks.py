"""Black-Scholes delta and probability-OTM.

Closed-form European option model. Pure functions, no I/O.

    d1 = (ln(S/K) + (r + v²/2)·T) / (v·√T)
    d2 = d1 - v·√T

    delta   = N(d1)      (call)    N(d1) - 1  (put)
    probOTM = 1 - N(d2)  (call)    N(d2)      (put)

Reference:
    Black, F. & Scholes, M. (1973).
    "The Pricing of Options and Corporate Liabilities"
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time

from scipy import stats

from option_quoter.models.types import OptionType

# 최소 만기 (년). 당일/과거 만기에서 0 나눗셈 방지
MIN_TIME_TO_EXPIRATION = 0.001

_DAYS_PER_YEAR = 365.0
_SECONDS_PER_DAY = 86_400.0


@dataclass(frozen=True)
class Greeks:
    """가격 모델 출력."""

    delta: float
    prob_otm: float


def norm_cdf(x: float) -> float:
    """표준정규 누적분포함수 Φ(x).

    큰 |x|에서 0 또는 1로 포화하며 NaN을 반환하지 않습니다.
    """
    return float(stats.norm.cdf(x))


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def compute_greeks(
    stock_price: float,
    strike_price: float,
    time_to_expiration: float,
    volatility: float,
    risk_free_rate: float,
    option_type: OptionType,
) -> Greeks | None:
    """Delta와 만기 OTM 확률 계산.

    Args:
        stock_price: 기초자산 가격 S
        strike_price: 행사가 K
        time_to_expiration: 잔존 만기 T (년)
        volatility: 내재변동성 v (소수, 0.3 = 30%)
        risk_free_rate: 무위험 이자율 r (소수)
        option_type: CALL / PUT

    Returns:
        Greeks (delta ∈ [-1, 1], prob_otm ∈ [0, 1]), 또는 S/K/T/v 중 하나라도
        유효 양수가 아니거나 d1/d2가 유한하지 않으면 None (예외 없음)
    """
    if not all(
        _is_positive(v) for v in (stock_price, strike_price, time_to_expiration, volatility)
    ):
        return None
    if not math.isfinite(risk_free_rate):
        return None

    vol_sqrt_t = volatility * math.sqrt(time_to_expiration)
    if vol_sqrt_t == 0:
        return None
    # log 차분: S/K 비율의 underflow 방지
    d1 = (
        math.log(stock_price) - math.log(strike_price)
        + (risk_free_rate + volatility * volatility / 2) * time_to_expiration
    ) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t
    if not (math.isfinite(d1) and math.isfinite(d2)):
        return None

    nd1 = norm_cdf(d1)
    nd2 = norm_cdf(d2)

    if option_type is OptionType.CALL:
        return Greeks(delta=_clamp(nd1, 0.0, 1.0), prob_otm=_clamp(1.0 - nd2, 0.0, 1.0))
    return Greeks(delta=_clamp(nd1 - 1.0, -1.0, 0.0), prob_otm=_clamp(nd2, 0.0, 1.0))


def time_to_expiration(expiration_date: date, now: datetime) -> float:
    """잔존 만기 (년) = (만기 - now) / 365일, 최소 MIN_TIME_TO_EXPIRATION.

    만기 시각은 만기일 00:00 UTC로 간주합니다.
    """
    expiry = datetime.combine(expiration_date, time.min, tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    diff_days = (expiry - now).total_seconds() / _SECONDS_PER_DAY
    return max(diff_days / _DAYS_PER_YEAR, MIN_TIME_TO_EXPIRATION)
