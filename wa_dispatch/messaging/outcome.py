"""
Delivery outcome types shared by the messaging clients and the dispatcher.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class DeliveryStatus(enum.Enum):
    """Classification of a single delivery attempt."""

    SUCCESS = "success"
    API_REJECTED = "api_rejected"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class DeliveryOutcome:
    """Result of delivering one message to one target.

    Attributes:
        target_id: The recipient identifier the message was addressed to.
        status: How the attempt was classified.
        detail: Parsed response payload on success, raw response body when
                the provider rejected the message, error text on transport
                failure.
        timestamp: When the attempt finished (UTC).
    """

    target_id: str
    status: DeliveryStatus
    detail: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return self.status is DeliveryStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_id": self.target_id,
            "status": self.status.value,
            "detail": self.detail,
            "timestamp": self.timestamp.isoformat(),
        }
