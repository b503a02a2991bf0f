"""
Dispatch runner — broadcasts one message to an ordered list of targets.

Targets are processed strictly one at a time, in the order given, with a
mandatory pause between consecutive sends. Each attempt is recorded in the
send log and in the returned DispatchResult; a failed delivery never stops
the batch and is never retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Protocol

from wa_dispatch.dispatch.request import DispatchRequest, DispatchResult
from wa_dispatch.messaging.outcome import DeliveryOutcome, DeliveryStatus
from wa_dispatch.sendlog.sink import LogLevel, LogSink

logger = logging.getLogger(__name__)


class MessagingClient(Protocol):
    def send(self, target_id: str, message_text: str, auth_token: str) -> DeliveryOutcome: ...


class AsyncMessagingClient(Protocol):
    async def send(self, target_id: str, message_text: str, auth_token: str) -> DeliveryOutcome: ...


class _DispatchLog:
    """Formats the send log entries written during a dispatch."""

    def __init__(self, sink: LogSink) -> None:
        self.sink = sink

    def started(self, request: DispatchRequest) -> None:
        self.sink.record(
            LogLevel.INFO,
            f'Starting dispatch of message "{request.preview}" '
            f"to {len(request.target_ids)} target(s).",
        )

    def attempt(self, target_id: str, position: int, total: int) -> None:
        self.sink.record(LogLevel.INFO, f"Sending to {target_id} ({position}/{total}).")

    def outcome(self, outcome: DeliveryOutcome) -> None:
        if outcome.status is DeliveryStatus.SUCCESS:
            self.sink.record(LogLevel.SUCCESS, f"Message delivered to {outcome.target_id}.")
        elif outcome.status is DeliveryStatus.API_REJECTED:
            self.sink.record(
                LogLevel.WARN,
                f"Wascript rejected message for {outcome.target_id}: {outcome.detail}",
            )
        else:
            self.sink.record(
                LogLevel.ERROR,
                f"Could not send to {outcome.target_id}: {outcome.detail}",
            )

    def waiting(self, seconds: int, next_target: str) -> None:
        self.sink.record(LogLevel.INFO, f"Waiting {seconds}s before sending to {next_target}.")

    def finished(self, result: DispatchResult) -> None:
        level = LogLevel.SUCCESS if result.failed == 0 else LogLevel.INFO
        self.sink.record(
            level,
            f"Dispatch finished: {result.delivered} delivered, "
            f"{result.failed} failed, {len(result)} total.",
        )


def _unexpected_failure(target_id: str, error: Exception) -> DeliveryOutcome:
    logger.exception("Unexpected error while sending to %s", target_id)
    return DeliveryOutcome(
        target_id=target_id,
        status=DeliveryStatus.TRANSPORT_ERROR,
        detail=f"{type(error).__name__}: {error}",
    )


class Dispatcher:
    """
    Send a message to each target in turn, pausing between sends.

    The pause blocks the calling thread; use AsyncDispatcher inside an
    event loop.

    Usage:
        with WascriptClient() as client:
            dispatcher = Dispatcher(client, SendLog("wascript-send-log.txt"))
            result = dispatcher.dispatch(DispatchRequest(
                message_text="Meeting at 8pm",
                target_ids=["1203630@g.us", "1203631@g.us"],
                min_interval_seconds=15,
                auth_token=token,
            ))
        print(result.summary())
    """

    def __init__(
        self,
        client: MessagingClient,
        log_sink: LogSink,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.client = client
        self.log = _DispatchLog(log_sink)
        self._sleep = sleep

    def dispatch(self, request: DispatchRequest) -> DispatchResult:
        """
        Deliver ``request.message_text`` to every target.

        Raises:
            DispatchValidationError: If the request is invalid. Nothing is
                sent or logged in that case.

        Returns:
            A DispatchResult with one outcome per target, in target order.
        """
        request.validate()

        result = DispatchResult()
        targets = list(request.target_ids)
        total = len(targets)
        sleep = self._sleep or time.sleep
        self.log.started(request)

        for i, target_id in enumerate(targets):
            self.log.attempt(target_id, i + 1, total)
            try:
                outcome = self.client.send(target_id, request.message_text, request.auth_token)
            except Exception as e:
                outcome = _unexpected_failure(target_id, e)
            result.outcomes.append(outcome)
            self.log.outcome(outcome)

            # Inter-send delay (none after the last target)
            if i < total - 1:
                self.log.waiting(request.min_interval_seconds, targets[i + 1])
                sleep(request.min_interval_seconds)

        result.completed_at = datetime.now(timezone.utc)
        self.log.finished(result)
        return result


class AsyncDispatcher:
    """
    Coroutine version of Dispatcher.

    The pause between sends awaits ``asyncio.sleep`` so other tasks on the
    event loop keep running while a batch is throttled.

    Usage:
        async with AsyncWascriptClient() as client:
            dispatcher = AsyncDispatcher(client, SendLog("wascript-send-log.txt"))
            result = await dispatcher.dispatch(request)
    """

    def __init__(
        self,
        client: AsyncMessagingClient,
        log_sink: LogSink,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.log = _DispatchLog(log_sink)
        self._sleep = sleep

    async def dispatch(self, request: DispatchRequest) -> DispatchResult:
        """Deliver ``request.message_text`` to every target; see Dispatcher.dispatch."""
        request.validate()

        result = DispatchResult()
        targets = list(request.target_ids)
        total = len(targets)
        self.log.started(request)

        for i, target_id in enumerate(targets):
            self.log.attempt(target_id, i + 1, total)
            try:
                outcome = await self.client.send(
                    target_id, request.message_text, request.auth_token
                )
            except Exception as e:
                outcome = _unexpected_failure(target_id, e)
            result.outcomes.append(outcome)
            self.log.outcome(outcome)

            if i < total - 1:
                self.log.waiting(request.min_interval_seconds, targets[i + 1])
                await self._sleep(request.min_interval_seconds)

        result.completed_at = datetime.now(timezone.utc)
        self.log.finished(result)
        return result
