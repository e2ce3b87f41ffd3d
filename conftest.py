"""Root conftest: loads .env.test and fast test defaults before any module imports."""
from __future__ import annotations

import os
from pathlib import Path

_TEST_DEFAULTS = {
    "WELCOME_DELAY_SECONDS": "0",
    "REPLY_DELAY_MIN_SECONDS": "0",
    "REPLY_DELAY_MAX_SECONDS": "0",
    "SHUTDOWN_GRACE_SECONDS": "1",
}

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

for key, value in _TEST_DEFAULTS.items():
    os.environ.setdefault(key, value)
