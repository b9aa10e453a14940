"""Pydantic Settings for configuration management.

All settings are loaded from environment variables and/or a .env file
with type validation.

Features:
    - Comma-separated ticker lists (TICKERS, EXTENDED_EXPIRATION_TICKERS)
    - Expiration window and fallback rate parameters
    - SQLite path, log directory and HTTP retry parameters

Rules Applied:
    - #11 Pydantic Modeling: BaseSettings
    - #19 Git Security: No secrets in code
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# SQLite 바인드 파라미터 상한 (SQLITE_MAX_VARIABLE_NUMBER, 3.32+)
SQLITE_MAX_PARAMETERS = 32766


class QuoterSettings(BaseSettings):
    """옵션 호가 수집 파이프라인 설정.

    환경 변수 또는 .env 파일에서 설정을 로드합니다.

    Environment Variables:
        - TICKERS: 수집 대상 티커 (쉼표 구분, 예: "AAPL,SPY")
        - EXTENDED_EXPIRATION_TICKERS: 확장 만기 윈도우 티커 (쉼표 구분)
        - DEFAULT_WINDOW_DAYS / EXTENDED_WINDOW_DAYS: 만기 윈도우 (일)
        - FALLBACK_RISK_FREE_RATE: 최종 fallback 이자율 (소수)
        - DB_PATH: SQLite 파일 경로 (기본: data/option_quotes.db)
        - LOG_DIR: 로그 저장 경로 (기본: logs)
        - LOG_JSON: 파일 로그 JSON 직렬화 여부 (기본: false)

    Example:
        >>> settings = get_settings()
        >>> settings.tickers
        ['AAPL', 'SPY']
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Universe
    # ==========================================================================
    tickers: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="수집 대상 티커 목록",
    )
    extended_expiration_tickers: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="확장 만기 윈도우를 사용하는 티커 목록",
    )

    # ==========================================================================
    # Expiration Window
    # ==========================================================================
    default_window_days: int = Field(default=14, ge=0, description="기본 만기 윈도우 (일)")
    extended_window_days: int = Field(default=70, ge=0, description="확장 만기 윈도우 (일)")

    # ==========================================================================
    # Risk-free Rate
    # ==========================================================================
    fallback_risk_free_rate: float = Field(
        default=0.045,
        gt=0,
        lt=1,
        description="모든 제공자 실패 시 사용하는 이자율 (소수)",
    )
    risk_free_rate_symbol: str = Field(
        default="^TNX",
        description="1차 제공자 수익률 심볼 (10년물 국채)",
    )
    treasury_security_desc: str = Field(
        default="Treasury 10-Year",
        description="Treasury fiscal data security_desc 필터",
    )

    # ==========================================================================
    # Storage
    # ==========================================================================
    db_path: Path = Field(
        default=Path("data/option_quotes.db"),
        description="SQLite 파일 경로",
    )
    batch_size: int = Field(
        default=1000,
        ge=1,
        le=SQLITE_MAX_PARAMETERS // 14,
        description="배치당 INSERT 행 수",
    )
    log_dir: Path = Field(
        default=Path("logs"),
        description="로그 파일 저장 경로",
    )
    log_json: bool = Field(
        default=False,
        description="파일 로그를 JSON lines로 직렬화",
    )

    # ==========================================================================
    # HTTP
    # ==========================================================================
    request_timeout: float = Field(default=30.0, gt=0, description="API 요청 타임아웃 (초)")
    max_retries: int = Field(default=3, ge=1, le=10, description="최대 재시도 횟수")
    backoff_base: float = Field(default=2.0, ge=1.0, le=5.0, description="지수 백오프 기준 값")

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("tickers", "extended_expiration_tickers", mode="before")
    @classmethod
    def split_tickers(cls, v: str | list[str] | None) -> list[str]:
        """쉼표 구분 문자열 → 대문자 티커 리스트 (빈 항목/중복 제거).

        Args:
            v: "AAPL, spy" 또는 ["AAPL", "spy"]

        Returns:
            ["AAPL", "SPY"]
        """
        if v is None:
            return []
        items = v.split(",") if isinstance(v, str) else v
        result: list[str] = []
        for item in items:
            ticker = str(item).strip().upper()
            if ticker and ticker not in result:
                result.append(ticker)
        return result

    @field_validator("db_path", "log_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        return Path(v) if isinstance(v, str) else v

    # ==========================================================================
    # Helper Methods
    # ==========================================================================
    def has_tickers(self) -> bool:
        """수집 대상 티커가 하나 이상 설정되어 있는지 확인."""
        return bool(self.tickers)

    def ensure_directories(self) -> None:
        """DB/로그 디렉토리 생성. 이미 존재하면 무시합니다."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> QuoterSettings:
    """설정 싱글톤 인스턴스 반환 (lru_cache)."""
    return QuoterSettings()


def clear_settings_cache() -> None:
    """설정 캐시 초기화 (테스트용)."""
    get_settings.cache_clear()
