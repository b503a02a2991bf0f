"""
Dispatch request and result models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Sequence

from wa_dispatch.messaging.outcome import DeliveryOutcome, DeliveryStatus

# Lowest accepted gap between two sends. Wascript flags accounts that send
# faster than this; it is not user-configurable.
MIN_INTERVAL_FLOOR_SECONDS = 13


class DispatchValidationError(ValueError):
    """A dispatch request was rejected before anything was sent.

    Attributes:
        field: Name of the DispatchRequest field that failed validation.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class DispatchRequest:
    """One message to broadcast to an ordered list of targets.

    Attributes:
        message_text: The text to send. Must not be blank.
        target_ids: Recipient identifiers, delivered in this order.
        min_interval_seconds: Seconds to wait between consecutive sends.
        auth_token: Wascript account token.
    """

    message_text: str
    target_ids: Sequence[str]
    min_interval_seconds: int = MIN_INTERVAL_FLOOR_SECONDS
    auth_token: str = ""

    def validate(self) -> None:
        """Raise DispatchValidationError for the first violated precondition."""
        if not self.auth_token or not self.auth_token.strip():
            raise DispatchValidationError(
                "auth_token",
                "Auth token is required.",
            )
        if not self.message_text or not self.message_text.strip():
            raise DispatchValidationError("message_text", "Message text must not be empty.")
        if isinstance(self.target_ids, str):
            raise DispatchValidationError(
                "target_ids",
                "Targets must be a list of ids, not a single string.",
            )
        if not self.target_ids:
            raise DispatchValidationError("target_ids", "No targets selected; nothing to send.")

        interval = self.min_interval_seconds
        if isinstance(interval, bool) or not isinstance(interval, int):
            raise DispatchValidationError(
                "min_interval_seconds",
                f"Interval must be a whole number of seconds, got {interval!r}.",
            )
        if interval < MIN_INTERVAL_FLOOR_SECONDS:
            raise DispatchValidationError(
                "min_interval_seconds",
                f"Interval of {interval}s is below the minimum of "
                f"{MIN_INTERVAL_FLOOR_SECONDS}s between sends.",
            )

    @property
    def preview(self) -> str:
        text = " ".join(self.message_text.split())
        return text if len(text) <= 100 else text[:100] + "..."


@dataclass
class DispatchResult:
    """Ordered per-target outcomes of a dispatch call.

    Behaves as a read-only sequence: ``result[i]`` is the outcome for
    ``request.target_ids[i]``.
    """

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    outcomes: list[DeliveryOutcome] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[DeliveryOutcome]:
        return iter(self.outcomes)

    def __getitem__(self, index):
        return self.outcomes[index]

    @property
    def delivered(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.delivered

    def failed_targets(self) -> list[str]:
        """Target ids to resubmit in a follow-up dispatch."""
        return [o.target_id for o in self.outcomes if not o.succeeded]

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "delivered": self.delivered,
            "failed": self.failed,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }

    def summary(self) -> str:
        """Format a human-readable dispatch summary."""
        duration = ""
        if self.completed_at:
            elapsed = (self.completed_at - self.started_at).total_seconds()
            duration = f" in {elapsed:.1f}s"

        lines = [
            "=== Dispatch Report ===",
            f"Started:   {self.started_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
        ]
        if self.completed_at:
            lines.append(
                f"Finished:  {self.completed_at.strftime('%Y-%m-%d %H:%M:%S UTC')}{duration}"
            )
        lines.extend([
            f"Targets:   {len(self.outcomes)}",
            f"Delivered: {self.delivered}",
            f"Failed:    {self.failed}",
            "",
        ])

        labels = {
            DeliveryStatus.SUCCESS: "SENT",
            DeliveryStatus.API_REJECTED: "REJ",
            DeliveryStatus.TRANSPORT_ERROR: "FAIL",
        }
        for i, o in enumerate(self.outcomes, 1):
            lines.append(f"  [{i:3d}] {labels[o.status]:4s} | {o.target_id}")
            if not o.succeeded:
                lines.append(f"         Detail: {str(o.detail)[:200]}")

        lines.append("")
        lines.append("=== End Report ===")
        return "\n".join(lines)
