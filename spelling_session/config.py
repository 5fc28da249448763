from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.getenv("SPELLING_SESSION_DATA_DIR", str(PROJECT_ROOT / "data")))
LOG_DIR = DATA_DIR / "logs"
PREFERENCES_DB_PATH = DATA_DIR / "preferences.db"
SETTINGS_NAMESPACE = "ispell_"


@dataclass(frozen=True)
class SessionTimings:
    error_cooldown_ms: int = 1000
    success_delay_ms: int = 300
    tick_ms: int = 1000


@dataclass(frozen=True)
class BackendSettings:
    base_url: str = "http://localhost:3001/api"
    token: str | None = None
    timeout_sec: float = 15.0

    @classmethod
    def from_env(cls) -> "BackendSettings":
        base_url = os.getenv("SPELLING_SESSION_API_BASE_URL", cls.base_url).strip() or cls.base_url
        token = os.getenv("SPELLING_SESSION_API_TOKEN", "").strip() or None
        timeout = max(1.0, float(os.getenv("SPELLING_SESSION_API_TIMEOUT_SEC", str(cls.timeout_sec))))
        return cls(base_url=base_url, token=token, timeout_sec=timeout)


def ensure_dirs() -> None:
    for path in [DATA_DIR, LOG_DIR]:
        path.mkdir(parents=True, exist_ok=True)
