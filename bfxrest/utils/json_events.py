"""SAX 방식의 JSON 이벤트 리더.

문서를 트리로 만들지 않고 토큰 단위로 ``JsonEvent`` 를 생성한다. 소비자가
이벤트를 거부하면 그 지점에서 순회를 멈추면 되므로 나머지 문서는 읽지 않는다.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from json import JSONDecodeError
from json.decoder import scanstring
from typing import Any, Iterator, List

from .exceptions import MalformedJsonError

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(\.\d+)?([eE][-+]?\d+)?")
_LITERALS = (("true", True), ("false", False), ("null", None))


class EventKind(str, Enum):
    """이벤트 종류."""

    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    STRING_VALUE = "string_value"
    OTHER = "other"


class OtherDetail(str, Enum):
    """``EventKind.OTHER`` 이벤트의 세부 종류."""

    OBJECT_START = "object_start"
    OBJECT_END = "object_end"
    KEY = "key"
    NUMBER = "number"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"


@dataclass(frozen=True)
class JsonEvent:
    """토큰 하나에 대응하는 이벤트. ``offset`` 은 UTF-8 바이트 위치."""

    kind: EventKind
    offset: int
    value: Any = None
    detail: OtherDetail | None = None

    @property
    def starts_value(self) -> bool:
        """값(스칼라 또는 컨테이너)의 시작 이벤트인지 여부."""
        if self.kind in (EventKind.ARRAY_START, EventKind.STRING_VALUE):
            return True
        return self.kind is EventKind.OTHER and self.detail not in (
            OtherDetail.OBJECT_END,
            OtherDetail.KEY,
        )

    def describe(self) -> str:
        if self.kind is EventKind.OTHER and self.detail is not None:
            return self.detail.value
        return self.kind.value


class _Expect(Enum):
    VALUE = "value"
    VALUE_OR_ARRAY_END = "value_or_array_end"
    COMMA_OR_END = "comma_or_end"
    KEY = "key"
    KEY_OR_OBJECT_END = "key_or_object_end"
    COLON = "colon"
    DONE = "done"


class _ByteOffsets:
    """문자 위치를 UTF-8 바이트 위치로 변환한다. 조회 위치는 단조 증가해야 한다."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._ascii = text.isascii()
        self._char_pos = 0
        self._byte_pos = 0

    def __call__(self, pos: int) -> int:
        if self._ascii:
            return pos
        if pos < self._char_pos:
            return len(self._text[:pos].encode("utf-8"))
        self._byte_pos += len(self._text[self._char_pos:pos].encode("utf-8"))
        self._char_pos = pos
        return self._byte_pos


def iter_json_events(text: str) -> Iterator[JsonEvent]:
    """``text`` 를 읽으며 이벤트를 생성한다.

    문법 오류는 해당 위치에 도달했을 때 ``MalformedJsonError`` 로 발생한다.
    최상위 값은 하나만 허용하며, 뒤에 공백 이외의 문자가 오면 오류다.
    """
    to_bytes = _ByteOffsets(text)
    length = len(text)
    stack: List[str] = []
    expect = _Expect.VALUE
    pos = 0

    def malformed(at: int, reason: str) -> MalformedJsonError:
        return MalformedJsonError(to_bytes(at), reason)

    def after_value() -> _Expect:
        return _Expect.COMMA_OR_END if stack else _Expect.DONE

    while True:
        pos = _WHITESPACE.match(text, pos).end()
        if pos >= length:
            if expect is _Expect.DONE:
                return
            raise malformed(pos, "문서가 예기치 않게 끝났습니다")
        char = text[pos]

        if expect is _Expect.DONE:
            raise malformed(pos, "최상위 값 뒤에 불필요한 문자가 있습니다")

        if expect is _Expect.COLON:
            if char != ":":
                raise malformed(pos, "':' 가 필요합니다")
            expect = _Expect.VALUE
            pos += 1
            continue

        if expect is _Expect.COMMA_OR_END:
            container = stack[-1]
            if char == ",":
                expect = _Expect.VALUE if container == "[" else _Expect.KEY
                pos += 1
            elif char == "]" and container == "[":
                stack.pop()
                yield JsonEvent(EventKind.ARRAY_END, to_bytes(pos))
                expect = after_value()
                pos += 1
            elif char == "}" and container == "{":
                stack.pop()
                yield JsonEvent(EventKind.OTHER, to_bytes(pos), detail=OtherDetail.OBJECT_END)
                expect = after_value()
                pos += 1
            else:
                raise malformed(pos, "',' 또는 닫는 괄호가 필요합니다")
            continue

        if expect in (_Expect.KEY, _Expect.KEY_OR_OBJECT_END):
            if char == "}" and expect is _Expect.KEY_OR_OBJECT_END:
                stack.pop()
                yield JsonEvent(EventKind.OTHER, to_bytes(pos), detail=OtherDetail.OBJECT_END)
                expect = after_value()
                pos += 1
                continue
            if char != '"':
                raise malformed(pos, "객체 키 문자열이 필요합니다")
            key, end = _scan_string(text, pos, malformed)
            yield JsonEvent(EventKind.OTHER, to_bytes(pos), value=key, detail=OtherDetail.KEY)
            expect = _Expect.COLON
            pos = end
            continue

        # 값 위치
        if char == "]" and expect is _Expect.VALUE_OR_ARRAY_END:
            stack.pop()
            yield JsonEvent(EventKind.ARRAY_END, to_bytes(pos))
            expect = after_value()
            pos += 1
        elif char == "[":
            yield JsonEvent(EventKind.ARRAY_START, to_bytes(pos))
            stack.append("[")
            expect = _Expect.VALUE_OR_ARRAY_END
            pos += 1
        elif char == "{":
            yield JsonEvent(EventKind.OTHER, to_bytes(pos), detail=OtherDetail.OBJECT_START)
            stack.append("{")
            expect = _Expect.KEY_OR_OBJECT_END
            pos += 1
        elif char == '"':
            value, end = _scan_string(text, pos, malformed)
            yield JsonEvent(EventKind.STRING_VALUE, to_bytes(pos), value=value)
            expect = after_value()
            pos = end
        else:
            event, end = _scan_scalar(text, pos, to_bytes(pos))
            if event is None:
                raise malformed(pos, "값이 필요합니다")
            yield event
            expect = after_value()
            pos = end


def _scan_string(text: str, pos: int, malformed) -> tuple[str, int]:
    try:
        return scanstring(text, pos + 1, True)
    except JSONDecodeError as exc:
        raise malformed(exc.pos, exc.msg) from exc


def _scan_scalar(text: str, pos: int, offset: int) -> tuple[JsonEvent | None, int]:
    match = _NUMBER.match(text, pos)
    if match:
        raw = match.group()
        number: int | float = float(raw) if match.group(1) or match.group(2) else int(raw)
        return JsonEvent(EventKind.OTHER, offset, value=number, detail=OtherDetail.NUMBER), match.end()
    for literal, value in _LITERALS:
        if text.startswith(literal, pos):
            return (
                JsonEvent(EventKind.OTHER, offset, value=value, detail=OtherDetail(literal)),
                pos + len(literal),
            )
    return None, pos


__all__ = ["EventKind", "JsonEvent", "OtherDetail", "iter_json_events"]
