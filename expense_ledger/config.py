"""Configuration: storage location, persistence mode, logging and CORS."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .storage import DEFAULT_STORAGE_KEY

TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in TRUTHY


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    storage_key: str = DEFAULT_STORAGE_KEY
    strict_persistence: bool = False
    log_level: str = "INFO"
    env: str = "prod"
    allowed_origins: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_dev(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("EXPENSE_TRACKER_ALLOWED_ORIGINS", "")
        return cls(
            data_dir=Path(env.get("EXPENSE_TRACKER_DATA_DIR") or "data"),
            storage_key=env.get("EXPENSE_TRACKER_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
            strict_persistence=_flag(env.get("EXPENSE_TRACKER_STRICT_PERSISTENCE")),
            log_level=(env.get("EXPENSE_TRACKER_LOG_LEVEL") or "INFO").upper(),
            env=(env.get("EXPENSE_TRACKER_ENV") or "prod").lower(),
            allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )
