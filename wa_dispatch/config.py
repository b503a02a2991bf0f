"""
Runtime settings.

Values come from environment variables, after loading a ``.env`` file
from the working directory if one exists. The Wascript token is only
required when a message is actually sent, so a missing token is not an
error at load time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from wa_dispatch.dispatch.request import MIN_INTERVAL_FLOOR_SECONDS
from wa_dispatch.messaging.wascript import WASCRIPT_API_BASE


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Attributes:
        wascript_token: Wascript account token (``WASCRIPT_TOKEN``).
        wascript_base_url: Text endpoint base URL (``WASCRIPT_BASE_URL``).
        wascript_timeout: HTTP timeout in seconds (``WASCRIPT_TIMEOUT``).
        log_file: Send log path (``WA_DISPATCH_LOG_FILE``).
        db_url: Target directory database URL (``WA_DISPATCH_DB_URL``).
        default_interval: Seconds between sends when not given on the
                          command line (``WA_DISPATCH_INTERVAL``).
    """

    wascript_token: str = ""
    wascript_base_url: str = WASCRIPT_API_BASE
    wascript_timeout: float = 30.0
    log_file: Path = Path("wascript-send-log.txt")
    db_url: str = "sqlite:///wa_targets.db"
    default_interval: int = MIN_INTERVAL_FLOOR_SECONDS


def _opt(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _opt_number(name: str, default, cast):
    raw = _opt(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}")


def load_settings(env_file: Optional[str | Path] = None) -> Settings:
    """Build Settings from the environment.

    Args:
        env_file: Explicit .env path. Defaults to searching from the
                  current directory. Variables already set in the
                  environment take precedence over the file.

    Raises:
        ValueError: If a numeric variable cannot be parsed.
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    defaults = Settings()
    return Settings(
        wascript_token=_opt("WASCRIPT_TOKEN"),
        wascript_base_url=_opt("WASCRIPT_BASE_URL", defaults.wascript_base_url),
        wascript_timeout=_opt_number("WASCRIPT_TIMEOUT", defaults.wascript_timeout, float),
        log_file=Path(_opt("WA_DISPATCH_LOG_FILE", str(defaults.log_file))),
        db_url=_opt("WA_DISPATCH_DB_URL", defaults.db_url),
        default_interval=_opt_number("WA_DISPATCH_INTERVAL", defaults.default_interval, int),
    )
