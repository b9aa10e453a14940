"""공용 타입 정의.

여러 레이어에서 공통으로 사용되는 Enum을 정의합니다.
Models, Pricing, Storage 모듈에서 순환 참조 없이 사용할 수 있습니다.

Rules Applied:
    - #10 Python Standards: Modern typing (X | None, list[])
    - #01 Project Structure: Dependency flow (Models can be imported by all layers)
"""

from enum import Enum


class OptionType(str, Enum):
    """옵션 유형.

    DB의 ``type`` 컬럼에 값 그대로 저장됩니다.
    """

    CALL = "CALL"
    PUT = "PUT"


class RateSource(str, Enum):
    """무위험 이자율 출처 (fallback 체인 단계)."""

    PRIMARY_PROVIDER = "primary-provider"
    SECONDARY_PROVIDER = "secondary-provider"
    FALLBACK_CONSTANT = "fallback-constant"
