"""
Messaging clients for the Wascript WhatsApp API.
"""

from wa_dispatch.messaging.outcome import DeliveryOutcome, DeliveryStatus
from wa_dispatch.messaging.wascript import (
    WASCRIPT_API_BASE,
    AsyncWascriptClient,
    WascriptClient,
    WascriptConfig,
    classify_response,
)

__all__ = [
    "DeliveryOutcome",
    "DeliveryStatus",
    "WASCRIPT_API_BASE",
    "AsyncWascriptClient",
    "WascriptClient",
    "WascriptConfig",
    "classify_response",
]
