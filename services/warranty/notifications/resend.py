"""
Resend Email Notifier.

Sends transactional email through the Resend HTTP API.
"""

from __future__ import annotations

from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shared.config import settings
from shared.logging import get_logger


logger = get_logger(__name__)


class ResendNotifier:
    """Notification port backed by the Resend API."""

    def __init__(
        self,
        api_key: str | None = None,
        from_address: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the notifier.

        Args:
            api_key: Resend API key (default from settings)
            from_address: Sender address (default from settings)
            base_url: API base URL (default from settings)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        key = api_key or settings.email.api_key.get_secret_value()
        self._from = from_address or settings.email.from_address
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.email.api_url,
            timeout=httpx.Timeout(timeout or settings.email.timeout_seconds),
            headers={"Authorization": f"Bearer {key}"},
            transport=transport,
        )

    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
        stop=stop_after_attempt(settings.email.max_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        before_sleep=lambda retry_state: logger.warning(
            "email_send_retry",
            attempt=retry_state.attempt_number,
        ),
        reraise=True,
    )
    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.post("/emails", json=payload)
        response.raise_for_status()
        return response.json()

    async def send(self, to_address: str, subject: str, html_body: str) -> bool:
        payload = {
            "from": self._from,
            "to": [to_address],
            "subject": subject,
            "html": html_body,
        }
        try:
            result = await self._post(payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                "email_send_failed",
                to=to_address,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        logger.info("email_sent", to=to_address, message_id=result.get("id"))
        return True

    async def close(self) -> None:
        """Release the underlying HTTP connections."""
        await self._client.aclose()
