"""
posbot ESI HTTP Client

HTTP client for EVE Online ESI API requests.
Uses httpx for connection pooling and tenacity for retrying transient failures.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx

from .constants import ESI_BASE_URL, ESI_DATASOURCE
from .logging import get_logger
from .retry import RetryableESIError, classify_httpx_error, esi_retry, is_retry_enabled

logger = get_logger(__name__)


@dataclass
class ESIResponse:
    """
    ESI response with headers.

    Used by get_with_headers() to capture pagination headers (X-Pages).
    """

    data: dict | list | None
    """Parsed JSON response body."""

    headers: dict[str, str] = field(default_factory=dict)
    """HTTP response headers."""

    status_code: int = 200
    """HTTP status code."""

    @property
    def x_pages(self) -> int | None:
        """Parse X-Pages header for pagination."""
        header = self.headers.get("X-Pages") or self.headers.get("x-pages")
        if not header:
            return None
        try:
            return int(header)
        except (ValueError, TypeError):
            return None


class ESIError(Exception):
    """Exception raised for ESI API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.response = response or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        result: dict[str, Any] = {"error": "esi_error", "message": self.message}
        if self.status_code:
            result["status_code"] = self.status_code
        return result


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Extract ESI's {"error": ...} message from a failed response."""
    try:
        error_json = response.json()
    except json.JSONDecodeError:
        return response.text or fallback
    if isinstance(error_json, dict):
        return error_json.get("error", fallback)
    return fallback


class ESIClient:
    """
    HTTP client for ESI API requests.

    Usage:
        # Public (unauthenticated) client
        client = ESIClient()
        moon = client.get("/universe/moons/40009082/")

        # Authenticated client
        client = ESIClient(token="your_access_token")
        starbases = client.get_paged_list("/corporations/98000001/starbases/", auth=True)

        # POST for name resolution
        result = client.post("/universe/ids/", ["Jita", "Amarr"])
    """

    def __init__(
        self, token: Optional[str] = None, timeout: int = 30, enable_retry: bool = True
    ) -> None:
        """
        Initialize ESI client.

        Args:
            token: OAuth access token for authenticated requests
            timeout: Request timeout in seconds (default: 30)
            enable_retry: Whether to enable retry logic (default: True)
        """
        self.token: Optional[str] = token
        self.timeout: int = timeout
        self.base_url: str = ESI_BASE_URL
        self.datasource: str = ESI_DATASOURCE
        self.enable_retry: bool = enable_retry and is_retry_enabled()

        # Lazy-initialized httpx client for connection pooling
        self._http_client: Optional[httpx.Client] = None

        # Error-limit state from x-esi-error-limit-* headers
        self._error_limit_remain: int = 100
        self._error_limit_reset: float = 0
        self._rate_limit_backoff_threshold: int = 20

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client (lazy initialization)."""
        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=httpx.Timeout(float(self.timeout)),
                headers={"Accept": "application/json"},
            )
        return self._http_client

    def close(self) -> None:
        """Close the underlying HTTP client and release resources."""
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> "ESIClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        self.close()

    def _build_url(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> str:
        """
        Build full URL with datasource parameter.

        Args:
            endpoint: API endpoint path (e.g., "/universe/moons/40009082/")
            params: Additional query parameters

        Returns:
            Full URL with query string
        """
        if not endpoint.startswith("/"):
            endpoint = "/" + endpoint

        query_params: dict[str, Any] = {"datasource": self.datasource}
        if params:
            query_params.update(params)

        query_string = "&".join(f"{k}={v}" for k, v in query_params.items())
        return f"{self.base_url}{endpoint}?{query_string}"

    def _auth_headers(self, auth: bool) -> dict[str, str]:
        headers: dict[str, str] = {}
        if auth:
            if not self.token:
                raise ESIError("Authentication required but no token provided")
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _update_rate_limits(self, headers: httpx.Headers) -> None:
        """
        Update error-limit tracking from ESI response headers.

        - x-esi-error-limit-remain: Errors remaining before rate limit
        - x-esi-error-limit-reset: Seconds until error count resets
        """
        if "x-esi-error-limit-remain" in headers:
            try:
                self._error_limit_remain = int(headers["x-esi-error-limit-remain"])
            except (ValueError, TypeError):
                pass

        if "x-esi-error-limit-reset" in headers:
            try:
                reset_seconds = int(headers["x-esi-error-limit-reset"])
                self._error_limit_reset = time.time() + reset_seconds
            except (ValueError, TypeError):
                pass

    def _check_rate_limit(self) -> None:
        """Sleep briefly if we are close to ESI's error limit (420 responses)."""
        if time.time() > self._error_limit_reset:
            self._error_limit_remain = 100

        if self._error_limit_remain < self._rate_limit_backoff_threshold:
            wait_time = min(max(0, self._error_limit_reset - time.time()), 5.0)
            if wait_time > 0:
                logger.warning(
                    "ESI error limit low (%d remaining), backing off %.1fs",
                    self._error_limit_remain,
                    wait_time,
                )
                time.sleep(wait_time)

    def _send(
        self, method: str, url: str, headers: dict[str, str], data: Optional[bytes]
    ) -> httpx.Response:
        self._check_rate_limit()
        client = self._get_client()
        if method == "GET":
            response = client.get(url, headers=headers)
        else:
            response = client.post(url, headers=headers, content=data)
        self._update_rate_limits(response.headers)
        return response

    def _execute_request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Execute an HTTP request, retrying transient failures when enabled.

        Raises:
            ESIError: On HTTP errors or request failures
        """
        try:
            if self.enable_retry:
                return self._execute_with_retry(method, url, headers, data)
            return self._execute_once(method, url, headers, data)
        except RetryableESIError as e:
            # All retries failed
            raise ESIError(e.message, status_code=e.status_code)
        except httpx.RequestError as e:
            raise ESIError(f"Network error: {e}")

    def _execute_once(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: Optional[bytes] = None,
    ) -> httpx.Response:
        """Execute request without retry logic."""
        response = self._send(method, url, headers, data)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ESIError(_error_message(e.response, str(e)), status_code=e.response.status_code)
        return response

    @esi_retry()
    def _execute_with_retry(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        data: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Execute request with retry logic.

        Retries 429, 502, 503, 504 and network errors (httpx.RequestError).
        """
        response = self._send(method, url, headers, data)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            classified = classify_httpx_error(e)
            if isinstance(classified, RetryableESIError):
                logger.debug("Retryable ESI error %s for %s", classified.status_code, url)
                raise classified
            raise ESIError(classified.message, status_code=classified.status_code)
        return response

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise ESIError(f"Invalid JSON response: {e}")

    def get(
        self, endpoint: str, auth: bool = False, params: Optional[dict[str, Any]] = None
    ) -> Union[dict[str, Any], list[Any], int, float, None]:
        """
        Make GET request to ESI.

        Args:
            endpoint: API endpoint path
            auth: Whether to include authorization header
            params: Additional query parameters

        Returns:
            Parsed JSON response (dict, list, or primitive)

        Raises:
            ESIError: On HTTP errors or request failures
        """
        url = self._build_url(endpoint, params)
        response = self._execute_request("GET", url, self._auth_headers(auth))
        return self._parse_json(response)

    def get_with_headers(
        self, endpoint: str, auth: bool = False, params: Optional[dict[str, Any]] = None
    ) -> ESIResponse:
        """
        Make GET request to ESI and keep the response headers.

        Raises:
            ESIError: On HTTP errors or request failures
        """
        url = self._build_url(endpoint, params)
        response = self._execute_request("GET", url, self._auth_headers(auth))
        return ESIResponse(
            data=self._parse_json(response),
            headers=dict(response.headers),
            status_code=response.status_code,
        )

    def get_dict(
        self, endpoint: str, auth: bool = False, params: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Make GET request expecting a dict response.

        Raises:
            ESIError: On HTTP errors, request failures, or non-dict response
        """
        result = self.get(endpoint, auth=auth, params=params)
        if not isinstance(result, dict):
            raise ESIError(f"Expected dict response from {endpoint}, got {type(result).__name__}")
        return result

    def get_list(
        self, endpoint: str, auth: bool = False, params: Optional[dict[str, Any]] = None
    ) -> list[Any]:
        """
        Make GET request expecting a list response.

        Raises:
            ESIError: On HTTP errors, request failures, or non-list response
        """
        result = self.get(endpoint, auth=auth, params=params)
        if not isinstance(result, list):
            raise ESIError(f"Expected list response from {endpoint}, got {type(result).__name__}")
        return result

    def get_paged_list(
        self, endpoint: str, auth: bool = False, params: Optional[dict[str, Any]] = None
    ) -> list[Any]:
        """
        Fetch every page of a paginated list endpoint.

        The first page's X-Pages header gives the page count; pages are
        fetched sequentially and concatenated.

        Raises:
            ESIError: On HTTP errors, request failures, or non-list pages
        """
        page_params = dict(params or {})
        first = self.get_with_headers(endpoint, auth=auth, params={**page_params, "page": 1})
        if not isinstance(first.data, list):
            raise ESIError(f"Expected list response from {endpoint}")

        results = list(first.data)
        pages = first.x_pages or 1
        for page in range(2, pages + 1):
            logger.debug("Fetching page %d/%d of %s", page, pages, endpoint)
            results.extend(self.get_list(endpoint, auth=auth, params={**page_params, "page": page}))
        return results

    def post(
        self, endpoint: str, data: Union[list[Any], dict[str, Any]], auth: bool = False
    ) -> Union[dict[str, Any], list[Any], None]:
        """
        Make POST request to ESI.

        Primarily used for /universe/ids/ name resolution.

        Raises:
            ESIError: On HTTP errors or request failures
        """
        url = self._build_url(endpoint)
        body = json.dumps(data).encode("utf-8")
        headers = {"Content-Type": "application/json", **self._auth_headers(auth)}

        result = self._parse_json(self._execute_request("POST", url, headers, body))
        if isinstance(result, (int, float)):
            return None
        return result

    def resolve_names(self, names: list[str]) -> dict[str, list[dict[str, Any]]]:
        """
        Resolve names to IDs using POST /universe/ids/.

        Args:
            names: Names to resolve (systems, characters, items, etc.)

        Returns:
            Dict with keys such as systems, regions, characters; each maps to a
            list of {id, name} dicts. ESI omits categories with no matches.
        """
        result = self.post("/universe/ids/", names)
        return result if isinstance(result, dict) else {}
