"""Root conftest: test settings must reach the environment before
``litbuddy_chat.config`` builds its module-level Settings."""
from __future__ import annotations

import os
from pathlib import Path

ENV_PREFIX = "LITBUDDY_"


def _load_test_env(path: Path) -> None:
    if not path.exists():
        return
    for raw in path.read_text().splitlines():
        key, sep, value = raw.strip().partition("=")
        if not sep or not key.startswith(ENV_PREFIX):
            continue
        os.environ.setdefault(key.strip(), value.strip())


_load_test_env(Path(__file__).resolve().parent / ".env.test")
