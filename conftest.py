"""Root conftest: seeds the environment before chat_realtime.config is imported.

``Settings`` is instantiated at import time, so POSTGRES_* and JWT_SECRET
must be present before any test module pulls in the package.
"""
from __future__ import annotations

import os
from pathlib import Path

ENV_FILE = Path(__file__).resolve().parent / os.environ.get("CHAT_TEST_ENV_FILE", ".env.test")


def _load_env(path: Path) -> None:
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip().strip("'\""))


if ENV_FILE.exists():
    _load_env(ENV_FILE)
