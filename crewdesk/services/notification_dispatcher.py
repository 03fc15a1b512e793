"""Notification Dispatcher — priority-ordered channel fallback with failure isolation.

Invariants:
    - Channels are attempted in ascending priority, sequentially, never in parallel
    - Disabled channels are skipped without a send; each enabled channel is
      attempted at most once per notify()
    - The first successful send wins; later channels are not touched
    - Every attempt is bounded by asyncio.wait_for(attempt_timeout), so one
      notify() takes at most len(channels) * attempt_timeout
    - notify() NEVER raises: timeouts, ExternalServiceError and unexpected
      adapter exceptions all become a "not delivered" outcome plus a log line
    - Background tasks started via start() are tracked until done; drain() awaits them

Design Decisions:
    - Dispatcher is constructed once at startup with explicit channel adapters
      (no module-level channel state)
    - Given a NotificationConfig, the attempt timeout is read from it on each
      attempt, so NotificationConfig.refresh() applies to the next send
    - start() keeps a strong reference to each task so it is not garbage
      collected mid-flight; the result belongs to whoever attached a callback
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Coroutine, Sequence

from crewdesk.config import NotificationConfig
from crewdesk.core.errors import ExternalServiceError
from crewdesk.core.repository_protocols import ChannelAdapter

logger = logging.getLogger(__name__)

NO_CHANNEL_AVAILABLE = "no_channel_available"
ALL_CHANNELS_FAILED = "all_channels_failed"
UNKNOWN_CHANNEL = "unknown_channel"


@dataclass
class NotificationOutcome:
    """Result of one notify() call."""
    delivered: bool
    channel: str | None = None
    attempted: list[str] = field(default_factory=list)
    reason: str | None = None


def registration_confirmation_text(worker_name: str) -> str:
    return (
        f"Hello {worker_name}! Your registration as a worker has been received. "
        "We'll review your application and get back to you soon."
    )


class NotificationDispatcher:
    """Sends a message through the best available channel."""

    def __init__(
        self,
        channels: Sequence[ChannelAdapter],
        attempt_timeout: float = 5.0,
        config: NotificationConfig | None = None,
    ):
        self._channels = sorted(channels, key=lambda c: c.priority)
        self._attempt_timeout = attempt_timeout
        self._config = config
        self._pending: set[asyncio.Task] = set()

    @property
    def channels(self) -> list[ChannelAdapter]:
        return list(self._channels)

    @property
    def attempt_timeout(self) -> float:
        """Live value from the shared config when one was given."""
        if self._config is not None:
            return self._config.timeout_seconds
        return self._attempt_timeout

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def notify(
        self, recipient: str, message: str, channel: str | None = None,
    ) -> NotificationOutcome:
        """Deliver via the requested channel, or the first one that works."""
        candidates = self._channels
        if channel is not None:
            candidates = [c for c in self._channels if c.name == channel]
            if not candidates:
                logger.warning(
                    f"Unknown notification channel '{channel}'",
                    extra={"channel": channel},
                )
                return NotificationOutcome(delivered=False, reason=UNKNOWN_CHANNEL)

        attempted: list[str] = []
        for adapter in candidates:
            if not adapter.is_enabled():
                continue
            attempted.append(adapter.name)
            if await self._attempt(adapter, recipient, message, len(attempted)):
                logger.info(
                    f"Notification delivered via {adapter.name}",
                    extra={"channel": adapter.name, "delivered": True},
                )
                return NotificationOutcome(
                    delivered=True, channel=adapter.name, attempted=attempted,
                )

        reason = ALL_CHANNELS_FAILED if attempted else NO_CHANNEL_AVAILABLE
        logger.info(
            f"Notification not delivered: {reason}",
            extra={"delivered": False},
        )
        return NotificationOutcome(
            delivered=False, attempted=attempted, reason=reason,
        )

    async def _attempt(
        self, adapter: ChannelAdapter, recipient: str, message: str, attempt: int,
    ) -> bool:
        """One bounded send. Returns False on any failure."""
        log_extra = {"channel": adapter.name, "attempt": attempt}
        timeout = self.attempt_timeout
        try:
            sent = await asyncio.wait_for(
                adapter.send(recipient, message), timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{adapter.name} send timed out after {timeout}s",
                extra=log_extra,
            )
            return False
        except ExternalServiceError as e:
            logger.warning(
                f"{adapter.name} send failed: {e.message}",
                extra={**log_extra, "error_code": e.code},
            )
            return False
        except Exception as e:
            logger.error(
                f"Unexpected {adapter.name} adapter error: {e}",
                extra=log_extra, exc_info=True,
            )
            return False
        if not sent:
            logger.warning(f"{adapter.name} reported failure", extra=log_extra)
        return bool(sent)

    async def confirm_registration(
        self, phone_number: str, worker_name: str,
    ) -> NotificationOutcome:
        """Canned registration confirmation, best available channel."""
        return await self.notify(
            phone_number, registration_confirmation_text(worker_name),
        )

    def start(self, coro: Coroutine[Any, Any, NotificationOutcome]) -> asyncio.Task:
        """Run a dispatch in the background. Caller does not await it."""
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for in-flight background dispatches (shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
