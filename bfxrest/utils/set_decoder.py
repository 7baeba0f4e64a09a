"""스키마 검증과 문자열 집합 수집을 한 번의 순회로 수행하는 디코더.

``iter_json_events`` 가 만든 이벤트를 ``EventDispatcher`` 가 두 개의 독립된
오토마톤에 순서대로 전달한다.

- ``SchemaAutomaton``: 번들된 JSON 스키마로 각 값을 검증한다.
- ``StringSetCollector``: 1차원 문자열 배열만 받아들이며 값을 집합으로 모은다.

둘 중 하나라도 이벤트를 거부하면 즉시 예외가 발생하고 나머지 문서는 읽지 않는다.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from importlib.resources import files
from typing import Any, Dict, List, Mapping, Optional, Protocol, Set, Union

from jsonschema.exceptions import best_match
from jsonschema.validators import validator_for

from .exceptions import MalformedJsonError, SchemaViolationError
from .json_events import EventKind, JsonEvent, OtherDetail, iter_json_events
from .logger import get_logger

logger = get_logger(__name__)

FLAT_STRING_ARRAY_SCHEMA = "flat_string_array.json"

Schema = Union[Mapping[str, Any], bool]


@lru_cache(maxsize=None)
def load_schema(name: str = FLAT_STRING_ARRAY_SCHEMA) -> Dict[str, Any]:
    """패키지에 포함된 스키마를 읽고 메타 스키마로 검증한다.

    반환값은 캐시되어 공유되므로 호출자가 수정해서는 안 된다.
    """
    resource = files("bfxrest.schemas").joinpath(name)
    schema = json.loads(resource.read_text(encoding="utf-8"))
    validator_for(schema).check_schema(schema)
    return schema


class EventSink(Protocol):
    def feed(self, event: JsonEvent) -> None:
        ...


class EventDispatcher:
    """이벤트를 등록된 소비자 모두에게 순서대로 전달한다."""

    def __init__(self, *sinks: EventSink) -> None:
        self._sinks = sinks

    def dispatch(self, event: JsonEvent) -> None:
        for sink in self._sinks:
            sink.feed(event)


@dataclass
class _Frame:
    validator: Any
    schema_path: str
    pointer: str
    is_object: bool = False
    index: int = 0
    key: str = ""


def _escape_pointer(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _proxy_value(event: JsonEvent) -> Any:
    if event.kind is EventKind.ARRAY_START:
        return []
    if event.detail is OtherDetail.OBJECT_START:
        return {}
    return event.value


class SchemaAutomaton:
    """스트리밍 스키마 검증기.

    값이 시작될 때마다 그 값의 대리값(스칼라 자체, 배열은 ``[]``, 객체는 ``{}``)을
    해당 위치의 하위 스키마로 검증한다. 배열 내부는 ``items`` 스키마가 적용되고,
    객체 내부 값은 검증하지 않는다.
    """

    def __init__(self, schema: Schema) -> None:
        self._root = validator_for(schema)(schema)
        self._stack: List[_Frame] = []

    def feed(self, event: JsonEvent) -> None:
        if event.kind is EventKind.ARRAY_END or event.detail is OtherDetail.OBJECT_END:
            self._stack.pop()
            return
        if event.detail is OtherDetail.KEY:
            self._stack[-1].key = event.value
            return
        if not event.starts_value:
            return

        validator, schema_path, pointer = self._locate()
        if validator is not None:
            error = best_match(validator.iter_errors(_proxy_value(event)))
            if error is not None:
                relative = "/".join(str(part) for part in error.relative_schema_path)
                raise SchemaViolationError(
                    event.offset,
                    str(error.validator) if error.validator else "false",
                    schema_path=f"#{schema_path}/{relative}" if relative else f"#{schema_path}",
                    document_path=pointer,
                    detail=error.message,
                )

        if event.kind is EventKind.ARRAY_START:
            items_validator = None
            if validator is not None and isinstance(validator.schema, Mapping):
                items = validator.schema.get("items", True)
                if isinstance(items, (Mapping, bool)):
                    items_validator = validator.evolve(schema=items)
            self._stack.append(_Frame(items_validator, f"{schema_path}/items", pointer))
        elif event.detail is OtherDetail.OBJECT_START:
            self._stack.append(_Frame(None, schema_path, pointer, is_object=True))

    def _locate(self) -> tuple[Any, str, str]:
        if not self._stack:
            return self._root, "", ""
        frame = self._stack[-1]
        if frame.is_object:
            return None, frame.schema_path, f"{frame.pointer}/{_escape_pointer(frame.key)}"
        pointer = f"{frame.pointer}/{frame.index}"
        frame.index += 1
        return frame.validator, frame.schema_path, pointer


class CollectorState(str, Enum):
    """문자열 집합 수집기의 상태."""

    EXPECT_ARRAY_START = "expect_array_start"
    EXPECT_VALUE_OR_ARRAY_END = "expect_value_or_array_end"
    DONE = "done"


class StringSetCollector:
    """최상위 1차원 문자열 배열의 값을 집합으로 모은다.

    전이는 세 가지뿐이다. 배열 시작, 문자열 값, 배열 끝 이외의 이벤트를 받으면
    현재 상태를 키워드로 하는 ``SchemaViolationError`` 를 발생시킨다.
    """

    def __init__(self) -> None:
        self._state = CollectorState.EXPECT_ARRAY_START
        self._values: Set[str] = set()

    @property
    def state(self) -> CollectorState:
        return self._state

    def feed(self, event: JsonEvent) -> None:
        if self._state is CollectorState.EXPECT_ARRAY_START:
            if event.kind is EventKind.ARRAY_START:
                self._state = CollectorState.EXPECT_VALUE_OR_ARRAY_END
                return
        elif self._state is CollectorState.EXPECT_VALUE_OR_ARRAY_END:
            if event.kind is EventKind.STRING_VALUE:
                self._values.add(event.value)
                return
            if event.kind is EventKind.ARRAY_END:
                self._state = CollectorState.DONE
                return
        raise SchemaViolationError(
            event.offset,
            self._state.value,
            detail=f"'{event.describe()}' 이벤트를 처리할 수 없습니다",
        )

    def result(self) -> frozenset[str]:
        if self._state is not CollectorState.DONE:
            raise ValueError("배열이 닫히기 전에는 결과를 꺼낼 수 없습니다.")
        return frozenset(self._values)


def _as_text(document: Union[str, bytes]) -> str:
    if isinstance(document, str):
        return document
    try:
        return bytes(document).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedJsonError(exc.start, "UTF-8 로 해석할 수 없는 바이트가 있습니다") from exc


class StringSetDecoder:
    """평탄한 문자열 배열 JSON 을 ``frozenset`` 으로 디코딩한다.

    디코더 자체는 상태를 갖지 않으며 ``decode`` 호출마다 새 오토마톤을 만든다.
    """

    def __init__(self, schema: Optional[Schema] = None) -> None:
        if schema is None:
            schema = load_schema()
        else:
            validator_for(schema).check_schema(schema)
        self._schema = schema

    @property
    def schema(self) -> Schema:
        return self._schema

    def decode(self, document: Union[str, bytes]) -> frozenset[str]:
        """문서를 디코딩한다.

        Raises:
            MalformedJsonError: JSON 문법 오류.
            SchemaViolationError: 스키마 또는 수집기가 토큰을 거부한 경우.
        """
        text = _as_text(document)
        collector = StringSetCollector()
        dispatcher = EventDispatcher(SchemaAutomaton(self._schema), collector)
        try:
            for event in iter_json_events(text):
                dispatcher.dispatch(event)
        except (MalformedJsonError, SchemaViolationError) as exc:
            logger.debug("문자열 집합 디코딩 실패: %s", exc)
            raise
        return collector.result()


def decode_string_set(document: Union[str, bytes], schema: Optional[Schema] = None) -> frozenset[str]:
    """``StringSetDecoder(schema).decode(document)`` 의 축약형."""
    return StringSetDecoder(schema).decode(document)


__all__ = [
    "CollectorState",
    "EventDispatcher",
    "EventSink",
    "SchemaAutomaton",
    "StringSetCollector",
    "StringSetDecoder",
    "decode_string_set",
    "load_schema",
]
