"""Tests for Black-Scholes delta / probability OTM."""

from datetime import UTC, date, datetime

import pytest

from option_quoter.models.types import OptionType
from option_quoter.pricing.greeks import (
    MIN_TIME_TO_EXPIRATION,
    compute_greeks,
    norm_cdf,
    time_to_expiration,
)


class TestNormCdf:
    """norm_cdf 테스트."""

    def test_center(self) -> None:
        """Φ(0) = 0.5."""
        assert norm_cdf(0.0) == pytest.approx(0.5)

    def test_symmetry(self) -> None:
        """Φ(x) + Φ(-x) = 1."""
        assert norm_cdf(1.3) + norm_cdf(-1.3) == pytest.approx(1.0)

    def test_saturates_without_nan(self) -> None:
        """큰 |x|에서 0/1로 포화."""
        assert norm_cdf(40.0) == pytest.approx(1.0)
        assert norm_cdf(-40.0) == pytest.approx(0.0)


class TestComputeGreeks:
    """compute_greeks 테스트."""

    def test_itm_call_scenario(self) -> None:
        """S=155, K=150, 약 18일, iv=25%, r=4.5% → ITM call."""
        greeks = compute_greeks(155.0, 150.0, 18 / 365, 0.25, 0.045, OptionType.CALL)
        assert greeks is not None
        assert 0.5 < greeks.delta <= 1.0
        assert 0.0 <= greeks.prob_otm < 0.5

    def test_put_bounds(self) -> None:
        """put delta ∈ [-1, 0], probOTM ∈ [0, 1]."""
        greeks = compute_greeks(155.0, 150.0, 18 / 365, 0.25, 0.045, OptionType.PUT)
        assert greeks is not None
        assert -1.0 <= greeks.delta <= 0.0
        assert 0.0 <= greeks.prob_otm <= 1.0

    @pytest.mark.parametrize(
        ("stock", "strike", "t", "vol"),
        [(100.0, 80.0, 0.1, 0.2), (100.0, 100.0, 0.5, 0.4), (50.0, 90.0, 2.0, 0.9)],
    )
    def test_put_call_identities(self, stock: float, strike: float, t: float, vol: float) -> None:
        """call delta - put delta = 1, call probOTM + put probOTM = 1."""
        call = compute_greeks(stock, strike, t, vol, 0.03, OptionType.CALL)
        put = compute_greeks(stock, strike, t, vol, 0.03, OptionType.PUT)
        assert call is not None
        assert put is not None
        assert call.delta - put.delta == pytest.approx(1.0)
        assert call.prob_otm + put.prob_otm == pytest.approx(1.0)

    @pytest.mark.parametrize(
        ("stock", "strike", "t", "vol"),
        [
            (0.0, 150.0, 0.1, 0.25),
            (155.0, 0.0, 0.1, 0.25),
            (155.0, 150.0, 0.0, 0.25),
            (155.0, 150.0, 0.1, 0.0),
            (-1.0, 150.0, 0.1, 0.25),
            (float("nan"), 150.0, 0.1, 0.25),
            (155.0, 150.0, 0.1, float("inf")),
        ],
    )
    def test_invalid_inputs_return_none(
        self, stock: float, strike: float, t: float, vol: float
    ) -> None:
        """S/K/T/v 중 하나라도 유효 양수가 아니면 None."""
        assert compute_greeks(stock, strike, t, vol, 0.045, OptionType.CALL) is None

    def test_non_finite_rate_returns_none(self) -> None:
        """r이 유한하지 않으면 None."""
        assert compute_greeks(155.0, 150.0, 0.1, 0.25, float("nan"), OptionType.CALL) is None

    def test_extreme_price_ratio_does_not_raise(self) -> None:
        """S/K 비율이 underflow 되어도 예외 없이 범위 내 결과."""
        greeks = compute_greeks(1e-200, 1e200, 0.1, 0.25, 0.045, OptionType.CALL)
        assert greeks is not None
        assert greeks.delta == pytest.approx(0.0)
        assert greeks.prob_otm == pytest.approx(1.0)

    @pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
    def test_overflowing_inputs_return_none(self, option_type: OptionType) -> None:
        """v²·T overflow로 d1이 NaN이면 None."""
        assert compute_greeks(100.0, 100.0, 1e300, 1e200, 0.045, option_type) is None

    @pytest.mark.parametrize(
        ("stock", "strike", "t", "vol"),
        [(1e-300, 1e300, 1e-3, 1e-3), (1e300, 1e-300, 50.0, 5.0), (1.0, 1.0, 1e-300, 1e-300)],
    )
    @pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
    def test_extreme_inputs_stay_in_range(
        self, stock: float, strike: float, t: float, vol: float, option_type: OptionType
    ) -> None:
        """극단 입력에서도 None 또는 유효 범위."""
        greeks = compute_greeks(stock, strike, t, vol, 0.045, option_type)
        if greeks is not None:
            assert -1.0 <= greeks.delta <= 1.0
            assert 0.0 <= greeks.prob_otm <= 1.0

    def test_deep_itm_call_saturates(self) -> None:
        """극단적 ITM call: delta ≈ 1, probOTM ≈ 0 (NaN 없음)."""
        greeks = compute_greeks(1000.0, 1.0, 0.01, 0.1, 0.045, OptionType.CALL)
        assert greeks is not None
        assert greeks.delta == pytest.approx(1.0)
        assert greeks.prob_otm == pytest.approx(0.0)


class TestTimeToExpiration:
    """time_to_expiration 테스트."""

    def test_one_year(self) -> None:
        """365일 후 자정 → 1.0년."""
        now = datetime(2024, 1, 1, tzinfo=UTC)
        assert time_to_expiration(date(2024, 12, 31), now) == pytest.approx(1.0)

    def test_past_expiration_floors(self) -> None:
        """지난 만기 → 최소값."""
        now = datetime(2024, 6, 3, 15, 30, tzinfo=UTC)
        assert time_to_expiration(date(2024, 6, 1), now) == MIN_TIME_TO_EXPIRATION

    def test_same_day_floors(self) -> None:
        """당일 만기 (자정 이후) → 최소값."""
        now = datetime(2024, 6, 21, 14, 0, tzinfo=UTC)
        assert time_to_expiration(date(2024, 6, 21), now) == MIN_TIME_TO_EXPIRATION

    def test_naive_now_treated_as_utc(self) -> None:
        """naive datetime은 UTC로 간주."""
        aware = time_to_expiration(date(2024, 7, 1), datetime(2024, 6, 1, tzinfo=UTC))
        naive = time_to_expiration(date(2024, 7, 1), datetime(2024, 6, 1))
        assert aware == pytest.approx(naive)
