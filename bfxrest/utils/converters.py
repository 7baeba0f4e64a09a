"""데이터 변환 관련 헬퍼 함수."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

NumberLike = Union[str, int, float, Decimal]


def to_decimal(value: NumberLike) -> Decimal:
    """숫자형 또는 문자열 값을 Decimal로 변환한다."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Decimal 변환 실패: {value}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Decimal 변환 실패: {value}") from exc


def decimal_string(value: NumberLike) -> str:
    """지수 표기 없이 값을 그대로 표현하는 문자열. 금액과 가격 필드에 사용한다."""
    decimal_value = to_decimal(value)
    if not decimal_value.is_finite():
        raise ValueError(f"유한한 숫자가 아닙니다: {value}")
    return f"{decimal_value:f}"


__all__ = ["NumberLike", "decimal_string", "to_decimal"]
