"""Messaging Channels — WhatsApp and SMS adapters over a shared httpx.AsyncClient.

Invariants:
    - is_enabled() reads the ChannelConfig on every call (URL and key both set)
    - send() returns True on a 2xx response; every transport failure or non-2xx
      status raises ExternalServiceError (the dispatcher contains it)
    - send() on a disabled channel raises ExternalServiceError without any IO
    - Each request carries the timeout currently in its ChannelConfig

Design Decisions:
    - One shared AsyncClient per process (connection pooling), owned by the lifespan
    - Lower priority value = tried first; WhatsApp (10) precedes SMS (20)
"""

import logging

import httpx

from crewdesk.config import ChannelConfig, NotificationConfig
from crewdesk.core.domain_types import ChannelName
from crewdesk.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class HttpChannel:
    """Base for bearer-token JSON POST transports."""

    name: str = ""
    priority: int = 100

    def __init__(self, config: ChannelConfig, client: httpx.AsyncClient):
        self._config = config
        self._client = client

    def is_enabled(self) -> bool:
        return self._config.enabled

    def _endpoint(self) -> str:
        return self._config.api_url

    def _payload(self, recipient: str, message: str) -> dict:
        raise NotImplementedError

    async def send(self, recipient: str, message: str) -> bool:
        if not self.is_enabled():
            raise ExternalServiceError("channel is not configured", self.name)
        try:
            response = await self._client.post(
                self._endpoint(),
                json=self._payload(recipient, message),
                headers={
                    "Authorization": f"Bearer {self._config.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self._config.timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"{self.name} API returned {e.response.status_code}",
                extra={"channel": self.name},
            )
            raise ExternalServiceError(
                f"HTTP {e.response.status_code}", self.name,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                f"{self.name} API unreachable: {e}", extra={"channel": self.name},
            )
            raise ExternalServiceError("transport error", self.name) from e
        return True


class WhatsAppChannel(HttpChannel):
    """Primary instant-messaging channel."""

    name = ChannelName.WHATSAPP.value
    priority = 10

    def _endpoint(self) -> str:
        return f"{self._config.api_url}/send"

    def _payload(self, recipient: str, message: str) -> dict:
        return {"phone": recipient, "message": message}


class SmsChannel(HttpChannel):
    """Fallback SMS gateway."""

    name = ChannelName.SMS.value
    priority = 20

    def _payload(self, recipient: str, message: str) -> dict:
        return {"to": recipient, "message": message}


def build_channels(
    config: NotificationConfig, client: httpx.AsyncClient,
) -> list[HttpChannel]:
    """Default channel set, in priority order."""
    return [
        WhatsAppChannel(config.whatsapp, client),
        SmsChannel(config.sms, client),
    ]
