"""Tests for QuoterSettings (pydantic-settings)."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from option_quoter.config.settings import QuoterSettings, get_settings


@pytest.mark.usefixtures("clean_env")
class TestQuoterSettings:
    """QuoterSettings 테스트."""

    def test_defaults(self) -> None:
        """기본값."""
        settings = QuoterSettings()
        assert settings.tickers == []
        assert settings.default_window_days == 14
        assert settings.extended_window_days == 70
        assert settings.fallback_risk_free_rate == pytest.approx(0.045)
        assert settings.risk_free_rate_symbol == "^TNX"
        assert settings.batch_size == 1000
        assert settings.db_path == Path("data/option_quotes.db")
        assert settings.log_json is False
        assert not settings.has_tickers()

    def test_tickers_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """쉼표 구분 환경 변수 → 대문자, 중복/공백 제거."""
        monkeypatch.setenv("TICKERS", "aapl, SPY,,msft,AAPL")
        monkeypatch.setenv("EXTENDED_EXPIRATION_TICKERS", "spy,tlt")
        settings = QuoterSettings()
        assert settings.tickers == ["AAPL", "SPY", "MSFT"]
        assert settings.extended_expiration_tickers == ["SPY", "TLT"]
        assert settings.has_tickers()

    def test_log_json_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """LOG_JSON=true → JSON 파일 로그."""
        monkeypatch.setenv("LOG_JSON", "true")
        assert QuoterSettings().log_json is True

    def test_env_file(self, tmp_path: Path) -> None:
        """.env 파일 로드 (clean_env가 tmp_path로 chdir)."""
        (tmp_path / ".env").write_text("TICKERS=QQQ,IWM\nBATCH_SIZE=500\n", encoding="utf-8")
        settings = QuoterSettings()
        assert settings.tickers == ["QQQ", "IWM"]
        assert settings.batch_size == 500

    def test_batch_size_upper_bound(self) -> None:
        """batch_size × 14가 SQLite 파라미터 상한을 넘으면 거부."""
        with pytest.raises(ValidationError):
            QuoterSettings(batch_size=5000)

    def test_fallback_rate_must_be_positive(self) -> None:
        """fallback 이자율은 양수."""
        with pytest.raises(ValidationError):
            QuoterSettings(fallback_risk_free_rate=0)

    def test_ensure_directories(self, tmp_path: Path) -> None:
        """DB/로그 디렉토리 생성."""
        settings = QuoterSettings(db_path=tmp_path / "db" / "q.db", log_dir=tmp_path / "logs")
        settings.ensure_directories()
        assert (tmp_path / "db").is_dir()
        assert (tmp_path / "logs").is_dir()

    def test_get_settings_cached(self) -> None:
        """get_settings는 싱글톤."""
        assert get_settings() is get_settings()
