"""
Wascript API client for sending WhatsApp text messages.

Wascript exposes a single text endpoint per account token:

    POST <base_url>/<token>
    {"phone": "<group or phone id>", "message": "<text>"}

A delivered message is acknowledged with ``{"success": true, ...}`` in the
response body. Every call is classified here, once, into a
:class:`DeliveryOutcome`; network errors never leave this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from wa_dispatch.messaging.outcome import DeliveryOutcome, DeliveryStatus


WASCRIPT_API_BASE = "https://api-whatsapp.wascript.com.br/api/enviar-texto"


@dataclass
class WascriptConfig:
    """Connection settings for the Wascript API."""

    base_url: str = WASCRIPT_API_BASE
    timeout: float = 30.0


def build_payload(target_id: str, message_text: str) -> dict[str, str]:
    """Request body for a text message; the target id goes in ``phone``."""
    return {"phone": target_id, "message": message_text}


def classify_response(target_id: str, resp: httpx.Response) -> DeliveryOutcome:
    """Turn a completed HTTP exchange into a delivery outcome.

    Non-2xx statuses count as transport errors. A 2xx response is a
    success only when its body is a JSON object with ``success`` set to
    ``true``; anything else is an API rejection carrying the raw body.
    """
    if not resp.is_success:
        return DeliveryOutcome(
            target_id=target_id,
            status=DeliveryStatus.TRANSPORT_ERROR,
            detail=f"HTTP {resp.status_code} {resp.reason_phrase}: {resp.text[:500]}",
        )

    try:
        data: Any = resp.json()
    except ValueError:
        data = None

    if isinstance(data, dict) and data.get("success") is True:
        return DeliveryOutcome(
            target_id=target_id,
            status=DeliveryStatus.SUCCESS,
            detail=data,
        )

    return DeliveryOutcome(
        target_id=target_id,
        status=DeliveryStatus.API_REJECTED,
        detail=resp.text,
    )


def transport_failure(target_id: str, error: Exception) -> DeliveryOutcome:
    """Outcome for a call that never produced a response."""
    description = str(error) or type(error).__name__
    return DeliveryOutcome(
        target_id=target_id,
        status=DeliveryStatus.TRANSPORT_ERROR,
        detail=f"{type(error).__name__}: {description}",
    )


class WascriptClient:
    """
    Blocking client for the Wascript text endpoint.

    Usage:
        with WascriptClient() as client:
            outcome = client.send("120363025@g.us", "Hello!", token)
            if outcome.succeeded:
                ...
    """

    def __init__(
        self,
        config: Optional[WascriptConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or WascriptConfig()
        self._client = httpx.Client(
            base_url=self.config.base_url,
            headers={"Content-Type": "application/json"},
            timeout=self.config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def send(self, target_id: str, message_text: str, auth_token: str) -> DeliveryOutcome:
        """Send one text message and classify the result."""
        try:
            resp = self._client.post(
                f"/{auth_token}",
                json=build_payload(target_id, message_text),
            )
        except httpx.HTTPError as e:
            return transport_failure(target_id, e)
        return classify_response(target_id, resp)


class AsyncWascriptClient:
    """
    Asyncio client for the Wascript text endpoint.

    Usage:
        async with AsyncWascriptClient() as client:
            outcome = await client.send("120363025@g.us", "Hello!", token)
    """

    def __init__(
        self,
        config: Optional[WascriptConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or WascriptConfig()
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            headers={"Content-Type": "application/json"},
            timeout=self.config.timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    async def send(self, target_id: str, message_text: str, auth_token: str) -> DeliveryOutcome:
        """Send one text message and classify the result."""
        try:
            resp = await self._client.post(
                f"/{auth_token}",
                json=build_payload(target_id, message_text),
            )
        except httpx.HTTPError as e:
            return transport_failure(target_id, e)
        return classify_response(target_id, resp)
