"""Expiration window policy (ticker → lookahead days)."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from option_quoter.config.settings import QuoterSettings

DEFAULT_WINDOW_DAYS = 14
EXTENDED_WINDOW_DAYS = 70


class ExpirationWindowPolicy:
    """티커별 만기 조회 윈도우.

    확장 티커(SPY, TLT 등)는 extended_days, 나머지는 default_days.
    티커 비교는 대소문자를 구분하지 않으며 모든 입력에 대해 값을 반환합니다.

    Example:
        >>> policy = ExpirationWindowPolicy({"SPY"})
        >>> policy.window_days("spy")
        70
        >>> policy.window_days("UNKNOWN")
        14
    """

    def __init__(
        self,
        extended_tickers: Iterable[str] = (),
        *,
        default_days: int = DEFAULT_WINDOW_DAYS,
        extended_days: int = EXTENDED_WINDOW_DAYS,
    ) -> None:
        self._extended = frozenset(t.strip().upper() for t in extended_tickers)
        self._default_days = default_days
        self._extended_days = extended_days

    @classmethod
    def from_settings(cls, settings: QuoterSettings) -> ExpirationWindowPolicy:
        return cls(
            settings.extended_expiration_tickers,
            default_days=settings.default_window_days,
            extended_days=settings.extended_window_days,
        )

    @property
    def extended_tickers(self) -> frozenset[str]:
        return self._extended

    def window_days(self, ticker: str) -> int:
        if ticker.strip().upper() in self._extended:
            return self._extended_days
        return self._default_days


def filter_expirations(expirations: Iterable[date], today: date, window_days: int) -> list[date]:
    """[today, today + window_days] 범위의 만기만 정렬해서 반환."""
    horizon = today + timedelta(days=window_days)
    return sorted(exp for exp in expirations if today <= exp <= horizon)
