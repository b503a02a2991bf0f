"""
Dispatch layer for throttled message broadcasts.

Validates a broadcast request, delivers it to each target in order with a
mandatory pause between sends, and reports a per-target outcome.
"""

from wa_dispatch.dispatch.request import (
    MIN_INTERVAL_FLOOR_SECONDS,
    DispatchRequest,
    DispatchResult,
    DispatchValidationError,
)
from wa_dispatch.dispatch.runner import AsyncDispatcher, Dispatcher

__all__ = [
    "MIN_INTERVAL_FLOOR_SECONDS",
    "AsyncDispatcher",
    "DispatchRequest",
    "DispatchResult",
    "DispatchValidationError",
    "Dispatcher",
]
