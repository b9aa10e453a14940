"""Custom exception hierarchy for the option quote pipeline.

Exceptions are grouped by how the pipeline is expected to react to them.

Exception Categories:
    - Recoverable (Skip/Fallback): Provider errors, record validation errors
    - Unrecoverable (Fail Fast): Storage errors, configuration errors

Rules Applied:
    - #23 Exception Handling: Domain-driven hierarchy, add_note()
"""


class QuoterError(Exception):
    """모든 파이프라인 예외의 기본 클래스.

    이 예외를 직접 발생시키지 말고, 하위 클래스를 사용하세요.

    Attributes:
        message: 에러 메시지
        context: 추가 컨텍스트 정보 (디버깅용)
    """

    def __init__(self, message: str, *, context: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, object] = context or {}

    def __str__(self) -> str:
        """에러 메시지와 컨텍스트를 포함한 문자열 반환."""
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


# =============================================================================
# Provider Errors (Recoverable - skip ticker / next fallback step)
# =============================================================================


class ProviderError(QuoterError):
    """시장 데이터 제공자 오류 (연결 실패, 잘못된 응답 등).

    티커 단위(오케스트레이터) 또는 fallback 단계 단위(금리 resolver)로
    복구되며, 전체 실행을 중단시키지 않습니다.

    Example:
        >>> raise ProviderError(
        ...     "No option chain returned",
        ...     context={"ticker": "AAPL", "expiration": "2024-06-21"}
        ... )
    """


class NetworkError(ProviderError):
    """네트워크 연결 오류 (타임아웃, HTTP 오류 등)."""


class RateLimitError(ProviderError):
    """API 레이트 리밋 초과 (HTTP 429).

    Attributes:
        retry_after: 재시도까지 대기 시간 (초)
    """

    def __init__(
        self,
        message: str,
        *,
        retry_after: float | None = None,
        context: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.retry_after = retry_after


# =============================================================================
# Data Validation Errors (Unrecoverable for the record - Log and Skip)
# =============================================================================


class DataValidationError(QuoterError):
    """데이터 검증 오류 (제공자 응답 스키마 불일치 등).

    레코드 단위 검증 실패는 예외 대신 skip으로 처리합니다.
    이 예외는 응답 전체가 구조적으로 잘못된 경우에만 사용됩니다.
    """


# =============================================================================
# Fatal Errors
# =============================================================================


class StorageError(QuoterError):
    """저장소 쓰기 실패.

    실행을 중단시키는 유일한 오류입니다. 이미 커밋된 배치는 롤백되지 않습니다.

    Example:
        >>> raise StorageError(
        ...     "Batch insert failed",
        ...     context={"batch": 2, "rows": 1000}
        ... )
    """


class ConfigurationError(QuoterError):
    """설정 오류 (수집 대상 티커 없음 등). 시작 시점에 치명적."""


def add_context_note(exc: Exception, note: str) -> None:
    """예외에 컨텍스트 노트 추가 (Python 3.11+ add_note).

    원본 Traceback을 보존하면서 디버깅 정보를 추가합니다.

    Example:
        >>> try:
        ...     await writer.save(quotes)
        ... except StorageError as e:
        ...     add_context_note(e, f"While saving quotes for {ticker}")
        ...     raise
    """
    exc.add_note(note)
