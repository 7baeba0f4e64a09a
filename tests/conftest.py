from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from bfxrest.config import get_settings  # noqa: E402

_ENV_VARS = (
    "BFX_API_KEY",
    "BFX_API_SECRET",
    "BFX_REST_BASE_URL",
    "BFX_TIMEOUT",
    "BFX_MAX_RETRIES",
    "BFX_MAX_PAYLOAD_SIZE",
    "LOG_DIR",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fixed_time():
    """고정된 시각을 돌려주는 시간 소스. ``fixed_time.now`` 로 값을 바꾼다."""

    class _FixedTime:
        now = 1_700_000_000.0

        def __call__(self) -> float:
            return self.now

    return _FixedTime()
