"""
프리세일즈 코어 커스텀 예외 계층입니다.
서비스별 구조화된 에러 코드와 메시지를 제공합니다.
"""

from typing import Optional, Any


class PresalesError(Exception):
    """프리세일즈 코어 기본 예외 클래스."""

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_UNKNOWN",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class StorageError(PresalesError):
    """키-값 저장소 쓰기/직렬화 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_STORE_001", details=details)


class SchedulerError(PresalesError):
    """재계산 스케줄러 에러 (이벤트 루프 없음 등)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_SCHED_001", details=details)


class InputValidationError(PresalesError):
    """입력 유효성 검증 에러 (400 응답)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_INPUT_001", details=details)
