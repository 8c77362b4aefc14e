"""
Runtime configuration for stele.

Defaults can be overridden per-user in ``~/.stele/.env`` or through the
environment variables named next to each CLI option.  The process
environment always wins over the ``.env`` file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

STELE_DIR = Path.home() / ".stele"
STELE_ENV = STELE_DIR / ".env"

DEFAULT_NODE_URL = "http://localhost:20000"

# Energy budget for init/update/deploy transactions.
DEFAULT_ENERGY = 10_000
# Energy cap for read-only invocations (no transaction is sent).
VIEW_ENERGY = 1_000_000
# Transactions expire this many seconds after they are built.
DEFAULT_EXPIRY_SECONDS = 300
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_HTTP_TIMEOUT = 30.0


def load_env(env_path: Optional[Path] = None) -> bool:
    """
    Load ``~/.stele/.env`` into the process environment.

    Existing environment variables are left untouched.

    Returns:
        True if a file was found and loaded.
    """
    env_path = env_path or STELE_ENV
    if not env_path.exists():
        return False
    return load_dotenv(env_path, override=False)


def poll_interval() -> float:
    return float(os.environ.get("STELE_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL)))
