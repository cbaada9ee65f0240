"""Root conftest: test settings must be in the environment before pairchat.config is imported."""
from __future__ import annotations

import os
from pathlib import Path

_ROOT = Path(__file__).resolve().parent


def _load_env(path: Path) -> None:
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())


if (_ROOT / ".env.test").exists():
    _load_env(_ROOT / ".env.test")

# Never start the planner / queuer / consumer inside the test process
os.environ["WORKERS_ENABLED"] = "false"
