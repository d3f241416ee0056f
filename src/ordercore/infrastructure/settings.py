"""Runtime settings.

Defaults suit a checkout of the repository; each value can be overridden
through an environment variable:

    ORDERCORE_DATA_DIR      directory holding store.json and its .lock file
    ORDERCORE_LOCK_TIMEOUT  seconds to wait for a record lock (float)
    ORDERCORE_LOG_LEVEL     logging level name, e.g. INFO or DEBUG
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from ordercore.infrastructure.persistence.locks import DEFAULT_LOCK_TIMEOUT

# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def parse_log_level(raw: str) -> str:
    """Normalise a level name such as ``"debug"``; unknown names are a ValueError."""
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level {raw!r}")
    return level


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    log_level: str = "WARNING"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        data_dir = Path(env.get("ORDERCORE_DATA_DIR", DEFAULT_DATA_DIR))

        raw_timeout = env.get("ORDERCORE_LOCK_TIMEOUT")
        lock_timeout = DEFAULT_LOCK_TIMEOUT
        if raw_timeout is not None:
            try:
                lock_timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"ORDERCORE_LOCK_TIMEOUT must be a number, got {raw_timeout!r}"
                ) from None
            if lock_timeout < 0:
                raise ValueError("ORDERCORE_LOCK_TIMEOUT cannot be negative")

        try:
            log_level = parse_log_level(env.get("ORDERCORE_LOG_LEVEL", "WARNING"))
        except ValueError as exc:
            raise ValueError(f"ORDERCORE_LOG_LEVEL: {exc}") from None

        return Settings(data_dir=data_dir, lock_timeout=lock_timeout, log_level=log_level)
