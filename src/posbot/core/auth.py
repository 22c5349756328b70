"""
posbot EVE SSO Authentication

Exchanges a long-lived refresh token for a short-lived ESI access token and
identifies the character the token belongs to.

The refresh token is obtained once, out of band, by authorising the
application with the esi-corporations.read_starbases.v1 scope as a
Director of the corporation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .constants import SSO_TOKEN_URL, SSO_VERIFY_URL, STARBASE_SCOPE
from .logging import get_logger

_logger = get_logger(__name__)


class AuthError(Exception):
    """Exception raised when EVE SSO rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        result: dict[str, Any] = {"error": "auth_error", "message": self.message}
        if self.status_code:
            result["status_code"] = self.status_code
        return result


@dataclass
class AccessToken:
    """Result of a refresh-token grant."""

    access_token: str
    refresh_token: str
    expires_in: int = 1200

    @classmethod
    def from_dict(cls, data: dict[str, Any], fallback_refresh: str) -> AccessToken:
        """Build from an SSO token response; SSO may rotate the refresh token."""
        if "access_token" not in data:
            raise AuthError("SSO token response has no access_token")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or fallback_refresh,
            expires_in=int(data.get("expires_in", 1200)),
        )


def _post_json(client: httpx.Client, url: str, **kwargs: Any) -> dict[str, Any]:
    try:
        response = client.post(url, **kwargs)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        raise AuthError(
            f"SSO request failed: HTTP {e.response.status_code}: {e.response.text[:200]}",
            status_code=e.response.status_code,
        )
    except httpx.RequestError as e:
        raise AuthError(f"SSO network error: {e}")
    except ValueError as e:
        raise AuthError(f"Invalid JSON from SSO: {e}")
    if not isinstance(data, dict):
        raise AuthError("Unexpected SSO response shape")
    return data


def refresh_access_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
    http_client: Optional[httpx.Client] = None,
) -> AccessToken:
    """
    Refresh an ESI access token.

    Args:
        client_id: Application client ID from developers.eveonline.com
        client_secret: Application secret key
        refresh_token: Refresh token granted to the application
        http_client: Optional client to reuse (a private one is used otherwise)

    Returns:
        AccessToken with the new access token

    Raises:
        AuthError: If SSO rejects the grant or cannot be reached
    """
    _logger.debug("Refreshing ESI access token")
    client = http_client or httpx.Client(timeout=httpx.Timeout(30.0))
    try:
        data = _post_json(
            client,
            SSO_TOKEN_URL,
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
            auth=(client_id, client_secret),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    finally:
        if http_client is None:
            client.close()
    return AccessToken.from_dict(data, fallback_refresh=refresh_token)


def verify_character(access_token: str, http_client: Optional[httpx.Client] = None) -> int:
    """
    Identify the character that owns an access token.

    Returns:
        The CharacterID reported by SSO

    Raises:
        AuthError: If verification fails
    """
    client = http_client or httpx.Client(timeout=httpx.Timeout(30.0))
    try:
        try:
            response = client.get(
                SSO_VERIFY_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthError(
                f"Token verification failed: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except httpx.RequestError as e:
            raise AuthError(f"SSO network error: {e}")
        except ValueError as e:
            raise AuthError(f"Invalid JSON from SSO: {e}")
    finally:
        if http_client is None:
            client.close()

    if not isinstance(data, dict) or "CharacterID" not in data:
        raise AuthError("Token verification response has no CharacterID")

    _logger.info("Authenticated as %s (%s)", data.get("CharacterName"), data["CharacterID"])
    if STARBASE_SCOPE not in str(data.get("Scopes", "")).split():
        _logger.warning("Token does not carry the %s scope", STARBASE_SCOPE)
    return int(data["CharacterID"])
