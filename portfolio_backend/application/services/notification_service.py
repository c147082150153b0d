"""
Owner notification webhook.

Posts short text notifications (for example a new chat session) to a
Discord-style webhook. Delivery is best effort: failures are logged and
never reach the request that triggered them.

Dependencies: httpx
System role: Outbound notification adapter
"""

import logging

import httpx

from portfolio_backend.core.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 2000


class WebhookNotifier:
    """Fire-and-forget webhook client."""

    def __init__(
        self,
        webhook_url: str | None,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize notifier.

        Args:
            webhook_url: Endpoint receiving {"content", "image_url"} JSON; None disables delivery
            timeout_seconds: Request timeout
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def send(self, content: str, image_url: str | None = None) -> None:
        """
        Deliver one notification.

        Raises:
            NotificationDeliveryError: On network error or non-2xx response
        """
        payload = {"content": content[:MAX_CONTENT_LENGTH], "image_url": image_url}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationDeliveryError(
                f"Webhook rejected notification: {e.response.status_code}",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Webhook unreachable: {e}") from e

    async def notify(self, content: str, image_url: str | None = None) -> bool:
        """
        Deliver a notification without raising.

        Returns:
            True when delivered, False when disabled or failed
        """
        if not self.enabled:
            return False
        try:
            await self.send(content, image_url)
        except NotificationDeliveryError as e:
            logger.warning(f"{__name__}:notify - Delivery failed: {e}")
            return False
        logger.info(f"{__name__}:notify - Delivered")
        return True
