"""
Slack Incoming Webhook Client.

Handles sending messages to Slack with retry logic and rate limit handling.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ...core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RETRY_AFTER = 5.0  # seconds


def _parse_retry_after(value: str | None) -> float:
    """Parse a Retry-After header in seconds; HTTP dates and garbage get the default."""
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value)
    except ValueError:
        logger.debug("Unparseable Retry-After header %r", value)
        return DEFAULT_RETRY_AFTER
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER


class SinkError(Exception):
    """Exception raised when a notification could not be delivered."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        result: dict[str, Any] = {"error": "sink_error", "message": self.message}
        if self.status_code:
            result["status_code"] = self.status_code
        return result


@dataclass
class SendResult:
    """Result of a webhook send attempt."""

    success: bool
    status_code: int | None = None
    error: str | None = None
    retry_after: float | None = None

    @property
    def is_rate_limited(self) -> bool:
        """Check if this result indicates rate limiting."""
        return self.status_code == 429

    def raise_for_failure(self) -> None:
        """
        Raise SinkError if the send did not succeed.

        Raises:
            SinkError: On any unsuccessful result
        """
        if not self.success:
            raise SinkError(
                f"Slack delivery failed: {self.error or 'unknown error'}",
                status_code=self.status_code,
            )


@dataclass
class SlackClient:
    """
    HTTP client for a Slack incoming webhook.

    Features:
    - Retry on 5xx, timeouts and network errors with exponential backoff
    - Rate limit reporting (429 with Retry-After)
    - No retry on other 4xx (bad payload, revoked webhook)
    """

    webhook_url: str
    defaults: dict[str, Any] = field(default_factory=dict)
    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    timeout: float = 30.0

    _client: httpx.Client | None = field(default=None, repr=False)

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> SlackClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def send(self, text: str, attachments: list[dict[str, Any]]) -> SendResult:
        """
        Send a message with attachments, merged over the configured defaults.
        """
        payload = dict(self.defaults)
        payload["text"] = text
        payload["attachments"] = attachments
        return self.post(payload)

    def post(self, payload: dict[str, Any]) -> SendResult:
        """
        Post a payload to the webhook.

        Implements retry logic:
        - 5xx: Retry with exponential backoff (1s, 2s, ...)
        - Timeout / network error: Retry with exponential backoff
        - 429: Return immediately with retry_after
        - Other 4xx: No retry

        Args:
            payload: Slack webhook payload

        Returns:
            SendResult with success status and details
        """
        client = self._get_client()

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            delay = self.base_delay * (2**attempt)
            try:
                response = client.post(self.webhook_url, json=payload)

                if 200 <= response.status_code < 300:
                    logger.debug("Slack accepted message (HTTP %d)", response.status_code)
                    return SendResult(success=True, status_code=response.status_code)

                if response.status_code == 429:
                    retry_after = _parse_retry_after(response.headers.get("Retry-After"))
                    logger.warning("Slack rate limited, retry after %.1fs", retry_after)
                    return SendResult(
                        success=False,
                        status_code=429,
                        retry_after=retry_after,
                        error="Rate limited",
                    )

                if response.status_code >= 500:
                    if not last_attempt:
                        logger.warning(
                            "Slack server error %d, retrying in %.1fs",
                            response.status_code,
                            delay,
                        )
                        time.sleep(delay)
                        continue
                    return SendResult(
                        success=False,
                        status_code=response.status_code,
                        error=f"Server error after {self.max_retries} retries",
                    )

                error_msg = f"HTTP {response.status_code}: {response.text[:200]}"
                logger.warning("Slack rejected message: %s", error_msg)
                return SendResult(
                    success=False,
                    status_code=response.status_code,
                    error=error_msg,
                )

            except httpx.TimeoutException:
                if not last_attempt:
                    logger.warning("Slack timeout, retrying in %.1fs", delay)
                    time.sleep(delay)
                    continue
                return SendResult(success=False, error="Timeout after retries")

            except httpx.RequestError as e:
                if not last_attempt:
                    logger.warning("Slack request error: %s, retrying", e)
                    time.sleep(delay)
                    continue
                return SendResult(success=False, error=f"Request error: {e}")

        return SendResult(success=False, error="Unknown error")
