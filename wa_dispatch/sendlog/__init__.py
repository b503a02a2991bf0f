"""
Send log — durable record of every dispatch event.
"""

from wa_dispatch.sendlog.sink import LogEntry, LogLevel, LogSink, SendLog

__all__ = [
    "LogEntry",
    "LogLevel",
    "LogSink",
    "SendLog",
]
