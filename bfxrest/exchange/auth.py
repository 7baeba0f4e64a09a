"""인증 요청 서명 파이프라인.

요청 본문(nonce 포함) → 정규 바이트열 → base64 페이로드 → HMAC-SHA384 서명 →
``X-BFX-*`` 헤더 세 개. 네트워크 I/O 와 재시도는 이 모듈의 책임이 아니다.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import threading
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ..config import DEFAULT_MAX_PAYLOAD_SIZE
from ..utils.exceptions import CredentialError, PayloadTooLargeError

KeyMaterial = Union[str, bytes]
RequestBody = Union[bytes, Mapping[str, Any]]

API_KEY_HEADER = "X-BFX-APIKEY"
PAYLOAD_HEADER = "X-BFX-PAYLOAD"
SIGNATURE_HEADER = "X-BFX-SIGNATURE"
SIGNATURE_HEX_LENGTH = hashlib.sha384().digest_size * 2


def _to_bytes(name: str, value: Optional[KeyMaterial]) -> bytes:
    if value is None:
        raise CredentialError(f"{name} 가 설정되어 있지 않습니다.")
    if isinstance(value, str):
        value = value.encode("utf-8")
    elif not isinstance(value, (bytes, bytearray)):
        raise CredentialError(f"{name} 는 str 또는 bytes 여야 합니다.")
    return bytes(value)


@dataclass(frozen=True)
class Credentials:
    """API 키와 시크릿. 시크릿은 ``repr`` 에 나타나지 않는다."""

    access_key: bytes
    secret_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        for name, value in (("API 키", self.access_key), ("API 시크릿", self.secret_key)):
            if not isinstance(value, bytes) or not value.strip():
                raise CredentialError(f"{name} 가 비어 있거나 bytes 가 아닙니다.")
        try:
            self.access_key.decode("ascii")
        except UnicodeDecodeError as exc:
            raise CredentialError("API 키는 ASCII 문자열이어야 합니다.") from exc

    @classmethod
    def create(cls, access_key: Optional[KeyMaterial], secret_key: Optional[KeyMaterial]) -> "Credentials":
        """키를 검증해 ``Credentials`` 를 만든다. 키가 비어 있으면 ``CredentialError``."""
        return cls(_to_bytes("API 키", access_key), _to_bytes("API 시크릿", secret_key))

    @property
    def api_key(self) -> str:
        return self.access_key.decode("ascii")

    def __repr__(self) -> str:
        return f"Credentials(api_key={self.api_key!r}, secret_key='**********')"


class PayloadEncoder:
    """요청 본문을 정규 바이트열로 직렬화하고 base64 로 인코딩한다."""

    def __init__(self, max_payload_size: int = DEFAULT_MAX_PAYLOAD_SIZE) -> None:
        if max_payload_size < 1:
            raise ValueError("max_payload_size 는 1 이상이어야 합니다.")
        self._max_payload_size = max_payload_size

    @property
    def max_payload_size(self) -> int:
        return self._max_payload_size

    @staticmethod
    def serialize(fields: Mapping[str, Any]) -> bytes:
        """키 순서를 유지한 압축 JSON(UTF-8)."""
        return json.dumps(dict(fields), separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    def encode(self, payload: bytes) -> bytes:
        """``payload`` 전체를 base64 로 인코딩한다. 잘라내지 않는다."""
        size = len(payload)
        if size > self._max_payload_size:
            raise PayloadTooLargeError(size, self._max_payload_size)
        return base64.b64encode(payload)

    def encode_fields(self, fields: Mapping[str, Any]) -> bytes:
        return self.encode(self.serialize(fields))


class RequestSigner:
    """HMAC-SHA384 서명기. 결과는 96자리 소문자 16진수."""

    digestmod = hashlib.sha384

    def sign(self, secret_key: bytes, encoded_payload: bytes) -> str:
        if not secret_key:
            raise CredentialError("API 시크릿이 비어 있습니다.")
        return hmac.new(secret_key, encoded_payload, self.digestmod).hexdigest()


@dataclass(frozen=True)
class AuthHeaders:
    """인증 요청 한 건에 필요한 헤더 값."""

    api_key: str
    payload: str
    signature: str

    def as_headers(self) -> dict[str, str]:
        return {
            API_KEY_HEADER: self.api_key,
            PAYLOAD_HEADER: self.payload,
            SIGNATURE_HEADER: self.signature,
        }


class AuthenticatedRequestBuilder:
    """본문을 인코딩하고 서명해 ``AuthHeaders`` 를 만든다.

    nonce 는 호출자가 본문에 미리 넣어야 한다. 키는 ``replace_credentials`` 로만
    교체되며, 교체와 읽기는 잠금으로 보호된다.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        encoder: Optional[PayloadEncoder] = None,
        signer: Optional[RequestSigner] = None,
    ) -> None:
        if not isinstance(credentials, Credentials):
            raise CredentialError("Credentials 인스턴스가 필요합니다.")
        self._credentials = credentials
        self._encoder = encoder or PayloadEncoder()
        self._signer = signer or RequestSigner()
        self._lock = threading.Lock()

    @property
    def credentials(self) -> Credentials:
        with self._lock:
            return self._credentials

    @property
    def encoder(self) -> PayloadEncoder:
        return self._encoder

    def replace_credentials(self, credentials: Credentials) -> None:
        if not isinstance(credentials, Credentials):
            raise CredentialError("Credentials 인스턴스가 필요합니다.")
        with self._lock:
            self._credentials = credentials

    def build(self, request_body: RequestBody) -> AuthHeaders:
        credentials = self.credentials
        if isinstance(request_body, (bytes, bytearray)):
            raw = bytes(request_body)
        else:
            raw = self._encoder.serialize(request_body)
        encoded = self._encoder.encode(raw)
        signature = self._signer.sign(credentials.secret_key, encoded)
        return AuthHeaders(
            api_key=credentials.api_key,
            payload=encoded.decode("ascii"),
            signature=signature,
        )


def build_auth_headers(
    request_body: RequestBody,
    access_key: KeyMaterial,
    secret_key: KeyMaterial,
    *,
    encoder: Optional[PayloadEncoder] = None,
) -> AuthHeaders:
    """키를 직접 받아 한 번만 서명할 때 쓰는 함수형 진입점."""
    builder = AuthenticatedRequestBuilder(Credentials.create(access_key, secret_key), encoder=encoder)
    return builder.build(request_body)


__all__ = [
    "API_KEY_HEADER",
    "PAYLOAD_HEADER",
    "SIGNATURE_HEADER",
    "SIGNATURE_HEX_LENGTH",
    "AuthHeaders",
    "AuthenticatedRequestBuilder",
    "Credentials",
    "PayloadEncoder",
    "RequestSigner",
    "build_auth_headers",
]
