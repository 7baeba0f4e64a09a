"""환경변수 기반 애플리케이션 설정 로더."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

ROOT_DIR = Path(__file__).resolve().parent.parent
ENV_FILE = ROOT_DIR / ".env"
load_dotenv(ENV_FILE)

DEFAULT_REST_BASE_URL = "https://api.bitfinex.com/v1"
DEFAULT_MAX_PAYLOAD_SIZE = 64 * 1024


def _to_int(value: str | int | None, default: int) -> int:
    """문자열 값을 정수로 변환한다."""
    if isinstance(value, int):
        return value
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: str | float | None, default: float) -> float:
    """문자열 값을 실수로 변환한다."""
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class LoggingSettings(BaseModel):
    """로깅 관련 설정."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = Field(default="INFO")
    log_dir: Optional[Path] = Field(default=None)
    file_name: str = Field(default="bfxrest.log")
    rotation_when: str = Field(default="midnight")
    rotation_interval: int = Field(default=1, ge=1)
    backup_count: int = Field(default=7, ge=0)

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        """환경변수에서 로깅 설정을 생성한다."""
        log_dir_value = os.getenv("LOG_DIR")
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=Path(log_dir_value).expanduser() if log_dir_value else None,
            file_name=os.getenv("LOG_FILE_NAME", "bfxrest.log"),
            rotation_when=os.getenv("LOG_ROTATION_WHEN", "midnight"),
            rotation_interval=_to_int(os.getenv("LOG_ROTATION_INTERVAL"), 1),
            backup_count=_to_int(os.getenv("LOG_BACKUP_COUNT"), 7),
        )

    @property
    def normalized_level(self) -> str:
        """대문자로 정규화된 로그 레벨."""
        return self.level.upper()

    def resolve_log_path(self, root_dir: Path) -> Optional[Path]:
        """루트 경로 기준 로그 파일 전체 경로. 로그 디렉터리가 없으면 ``None``."""
        if self.log_dir is None:
            return None
        log_dir = self.log_dir if self.log_dir.is_absolute() else (root_dir / self.log_dir).resolve()
        return log_dir / self.file_name


class BitfinexSettings(BaseModel):
    """Bitfinex REST API 관련 설정."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: Optional[SecretStr] = Field(default=None)
    api_secret: Optional[SecretStr] = Field(default=None)
    rest_base_url: str = Field(default=DEFAULT_REST_BASE_URL)
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    max_payload_size: int = Field(default=DEFAULT_MAX_PAYLOAD_SIZE, ge=1)

    @classmethod
    def from_env(cls) -> "BitfinexSettings":
        """환경변수에서 Bitfinex API 설정을 생성한다."""
        api_key = os.getenv("BFX_API_KEY")
        api_secret = os.getenv("BFX_API_SECRET")
        return cls(
            api_key=SecretStr(api_key) if api_key else None,
            api_secret=SecretStr(api_secret) if api_secret else None,
            rest_base_url=os.getenv("BFX_REST_BASE_URL", DEFAULT_REST_BASE_URL),
            timeout=_to_float(os.getenv("BFX_TIMEOUT"), 30.0),
            max_retries=_to_int(os.getenv("BFX_MAX_RETRIES"), 3),
            max_payload_size=_to_int(os.getenv("BFX_MAX_PAYLOAD_SIZE"), DEFAULT_MAX_PAYLOAD_SIZE),
        )


class AppSettings(BaseModel):
    """애플리케이션 전반에 사용되는 설정 묶음."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path = Field(default=ROOT_DIR)
    environment: str = Field(default="development")
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    bitfinex: BitfinexSettings = Field(default_factory=BitfinexSettings)

    @classmethod
    def load(cls) -> "AppSettings":
        """환경변수 및 기본값을 반영하여 설정 인스턴스를 생성한다."""
        return cls(
            root_dir=ROOT_DIR,
            environment=os.getenv("APP_ENV", "development"),
            logging=LoggingSettings.from_env(),
            bitfinex=BitfinexSettings.from_env(),
        )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """애플리케이션 전역 설정을 캐시하여 반환한다."""
    return AppSettings.load()


__all__ = [
    "AppSettings",
    "BitfinexSettings",
    "LoggingSettings",
    "get_settings",
]
