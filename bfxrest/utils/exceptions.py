"""애플리케이션 공통 예외 계층."""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """프로젝트 전반에서 사용하는 기본 예외 클래스."""


class ConfigurationError(AppError):
    """환경 설정이나 필수 값이 누락된 경우 발생."""


class CredentialError(ConfigurationError):
    """API 키 또는 시크릿이 비어 있거나 잘못된 경우 발생.

    메시지에는 키 값을 절대 포함하지 않는다.
    """


class DataValidationError(AppError):
    """데이터 검증 실패를 표현."""


class InvalidParameterError(DataValidationError):
    """엔드포인트 인자가 허용 목록에 없는 경우."""

    def __init__(self, parameter: str, value: Any) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(f"허용되지 않은 {parameter} 값입니다: {value!r}")


class JsonDocumentError(DataValidationError):
    """JSON 문서 디코딩 실패의 공통 부모. ``offset`` 은 UTF-8 바이트 위치."""

    def __init__(self, offset: int, message: str) -> None:
        self.offset = offset
        super().__init__(f"{message} (offset {offset})")


class MalformedJsonError(JsonDocumentError):
    """문법적으로 올바르지 않은 JSON."""

    def __init__(self, offset: int, reason: str) -> None:
        self.reason = reason
        super().__init__(offset, f"잘못된 JSON 문서: {reason}")


class SchemaViolationError(JsonDocumentError):
    """문법은 올바르지만 스키마를 위반한 JSON."""

    def __init__(
        self,
        offset: int,
        keyword: str,
        *,
        schema_path: str = "",
        document_path: str = "",
        detail: str = "",
    ) -> None:
        self.keyword = keyword
        self.schema_path = schema_path
        self.document_path = document_path
        self.detail = detail
        message = f"스키마 위반: keyword={keyword}"
        if schema_path:
            message += f", schema={schema_path}"
        message += f", document={document_path or '/'}"
        if detail:
            message += f" - {detail}"
        super().__init__(offset, message)


class PayloadTooLargeError(AppError):
    """서명할 페이로드가 인코더 허용 크기를 넘는 경우."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"페이로드 크기 {size} 바이트가 허용 한도 {limit} 바이트를 초과했습니다.")


class ExchangeError(AppError):
    """거래소 API 호출 중 발생한 예외."""


__all__ = [
    "AppError",
    "ConfigurationError",
    "CredentialError",
    "DataValidationError",
    "ExchangeError",
    "InvalidParameterError",
    "JsonDocumentError",
    "MalformedJsonError",
    "PayloadTooLargeError",
    "SchemaViolationError",
]
