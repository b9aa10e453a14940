"""Tests for the quote normalizer."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pandas as pd
import pytest

from option_quoter.ingestion.normalizer import normalize, normalize_chain, parse_expiration
from option_quoter.models.quote import OptionChain, RawContract
from option_quoter.models.types import OptionType

CAPTURED_AT = datetime(2024, 6, 3, 15, 30, tzinfo=UTC)


def _raw(**kwargs: object) -> RawContract:
    payload: dict[str, object] = {
        "strike": 150.0,
        "expiration": date(2024, 6, 21),
        "bid": 5.1,
        "ask": 5.3,
        "lastPrice": 5.2,
        "volume": 120,
        "openInterest": 3400,
        "impliedVolatility": 0.25,
    }
    payload.update(kwargs)
    return RawContract.model_validate(payload)


class TestParseExpiration:
    """parse_expiration 테스트."""

    def test_date_passthrough(self) -> None:
        """date 그대로."""
        assert parse_expiration(date(2024, 6, 21)) == date(2024, 6, 21)

    def test_epoch_seconds_matches_date(self) -> None:
        """epoch seconds와 date 표현이 같은 만기로 정규화."""
        epoch = int(datetime(2024, 6, 21, tzinfo=UTC).timestamp())
        assert parse_expiration(epoch) == parse_expiration(date(2024, 6, 21))

    def test_iso_string(self) -> None:
        """ISO 문자열."""
        assert parse_expiration("2024-06-21") == date(2024, 6, 21)
        assert parse_expiration("2024-06-21T00:00:00Z") == date(2024, 6, 21)

    def test_numeric_string(self) -> None:
        """숫자 문자열 → epoch seconds."""
        epoch = int(datetime(2024, 6, 21, tzinfo=UTC).timestamp())
        assert parse_expiration(str(epoch)) == date(2024, 6, 21)

    def test_aware_datetime_converted_to_utc(self) -> None:
        """tz-aware datetime → UTC 날짜."""
        ts = pd.Timestamp("2024-06-20 22:00", tz="America/New_York")
        assert parse_expiration(ts) == date(2024, 6, 21)

    @pytest.mark.parametrize("value", [None, "", "not-a-date", True, float("nan")])
    def test_unparseable(self, value: object) -> None:
        """해석 불가 → None."""
        assert parse_expiration(value) is None


class TestNormalize:
    """normalize 테스트."""

    def test_full_contract(self) -> None:
        """정상 계약 → Greeks 포함 OptionQuote."""
        quote = normalize("aapl", _raw(), OptionType.CALL, 155.0, 0.045, CAPTURED_AT)
        assert quote is not None
        assert quote.ticker == "AAPL"
        assert quote.expiration_date == date(2024, 6, 21)
        assert quote.strike == Decimal("150.0")
        assert quote.last == Decimal("5.2")
        assert quote.timestamp == CAPTURED_AT
        assert quote.underlying_last == Decimal("155.0")
        assert quote.delta is not None
        assert quote.delta > 0.5
        assert quote.prob_otm is not None
        assert quote.prob_otm < 0.5

    def test_missing_numeric_fields_default_to_zero(self) -> None:
        """누락된 숫자 필드 → 0."""
        raw = _raw(
            bid=None,
            ask=float("nan"),
            lastPrice=None,
            volume=float("nan"),
            openInterest=None,
            impliedVolatility=None,
        )
        quote = normalize("AAPL", raw, OptionType.PUT, 155.0, 0.045, CAPTURED_AT)
        assert quote is not None
        assert quote.bid == 0
        assert quote.ask == 0
        assert quote.last == 0
        assert quote.volume == 0
        assert quote.open_interest == 0
        assert quote.implied_volatility == 0

    def test_no_greeks_without_underlying(self) -> None:
        """기초자산 가격 없음 → delta/probOTM 없음, 나머지는 저장."""
        quote = normalize("AAPL", _raw(), OptionType.CALL, None, 0.045, CAPTURED_AT)
        assert quote is not None
        assert quote.delta is None
        assert quote.prob_otm is None
        assert quote.underlying_last is None
        assert quote.bid == Decimal("5.1")

    def test_no_greeks_with_zero_iv(self) -> None:
        """IV = 0 → Greeks 없음."""
        quote = normalize(
            "AAPL", _raw(impliedVolatility=0.0), OptionType.CALL, 155.0, 0.045, CAPTURED_AT
        )
        assert quote is not None
        assert quote.delta is None
        assert quote.prob_otm is None
        assert quote.underlying_last == Decimal("155.0")

    def test_skips_missing_strike(self) -> None:
        """strike 없음 → None."""
        raw = _raw(strike=None)
        assert normalize("AAPL", raw, OptionType.CALL, 155.0, 0.045, CAPTURED_AT) is None

    def test_skips_missing_expiration(self) -> None:
        """만기 없음 → None."""
        raw = _raw(expiration=None)
        assert normalize("AAPL", raw, OptionType.CALL, 155.0, 0.045, CAPTURED_AT) is None

    def test_epoch_and_date_produce_same_quote(self) -> None:
        """만기 표현 방식과 무관하게 동일한 호가."""
        epoch = int(datetime(2024, 6, 21, tzinfo=UTC).timestamp())
        a = normalize("AAPL", _raw(), OptionType.CALL, 155.0, 0.045, CAPTURED_AT)
        b = normalize("AAPL", _raw(expiration=epoch), OptionType.CALL, 155.0, 0.045, CAPTURED_AT)
        assert a == b


class TestNormalizeChain:
    """normalize_chain 테스트."""

    def test_calls_then_puts_skipping_invalid(self) -> None:
        """calls → puts 순서, 무효 계약 제외."""
        chain = OptionChain(
            calls=[_raw(strike=145.0), _raw(strike=None), _raw(strike=150.0)],
            puts=[_raw(strike=140.0)],
        )
        quotes = normalize_chain("AAPL", chain, 155.0, 0.045, CAPTURED_AT)
        assert [(q.type, q.strike) for q in quotes] == [
            (OptionType.CALL, Decimal("145.0")),
            (OptionType.CALL, Decimal("150.0")),
            (OptionType.PUT, Decimal("140.0")),
        ]
        assert {q.timestamp for q in quotes} == {CAPTURED_AT}

    def test_empty_chain(self) -> None:
        """빈 chain → 빈 리스트."""
        assert normalize_chain("AAPL", OptionChain(), 155.0, 0.045, CAPTURED_AT) == []
