"""Root conftest: test settings must be in the environment before dm_service.config is imported."""
from __future__ import annotations

import os
from pathlib import Path

ENV_FILE = Path(__file__).resolve().parent / ".env.test"


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for raw in path.read_text().splitlines():
        key, sep, value = raw.strip().partition("=")
        if not sep or key.startswith("#"):
            continue
        # real environment wins, so CI can point tests at other services
        os.environ.setdefault(key.strip(), value.strip())


_load_env_file(ENV_FILE)
