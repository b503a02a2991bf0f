"""
Append-only send log.

Every dispatch event is written as a single timestamped line to a UTF-8
text file and mirrored to the ``wa_dispatch.sendlog`` logger. The file is
never truncated or rotated here.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class LogLevel(enum.Enum):
    """Severity of a send log entry."""

    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


# SUCCESS has no stdlib counterpart; it is mirrored at INFO.
_MIRROR_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    """A single line of the send log."""

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def format_line(self) -> str:
        # Embedded newlines would break the one-entry-per-line format.
        message = " ".join(self.message.splitlines())
        return f"{self.timestamp.isoformat()} {self.level.value}: {message}\n"


class LogSink(Protocol):
    """Anything the dispatcher can record events to."""

    def record(self, level: LogLevel, message: str) -> None: ...


class SendLog:
    """
    Durable, append-only send log backed by a text file.

    Usage:
        log = SendLog("wascript-send-log.txt")
        log.record(LogLevel.INFO, "Sending to 1203630@g.us (1/3)")
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def record(self, level: LogLevel, message: str) -> None:
        entry = LogEntry(level=level, message=message)
        line = entry.format_line()
        logger.log(_MIRROR_LEVELS[level], "%s", line.rstrip("\n"))

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Lone surrogates (undecodable argv bytes) are escaped, not fatal.
            with open(self.path, "a", encoding="utf-8", errors="backslashreplace") as f:
                f.write(line)
        except (OSError, UnicodeError) as e:
            logger.error("Could not write to send log %s: %s", self.path, e)
