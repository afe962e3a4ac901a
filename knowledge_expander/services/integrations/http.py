"""
HTTP client wrapper for the AI vendor integrations.

Provides consistent error handling and timeouts for JSON requests.

Logging Guidelines:
- Logs method + host + path (no query string, no tokens/keys)
- On errors: status code + truncated response (max 500 chars)
- Never logs Authorization headers or API keys

Every request is sent exactly once. Failures are mapped to integration
exceptions and raised to the caller without retrying.
"""

import logging
from typing import Optional, Dict, Any
from urllib.parse import urljoin, urlparse

import httpx

from .errors import (
    IntegrationError,
    IntegrationAuthError,
    IntegrationRateLimited,
    IntegrationTemporaryError,
    IntegrationPermanentError,
    IntegrationResponseError,
)

logger = logging.getLogger(__name__)

# Maximum response text length to include in error messages
MAX_ERROR_RESPONSE_LENGTH = 500


def truncate_response(text: str) -> str:
    """
    Truncate response text for error messages.

    Args:
        text: Response text

    Returns:
        Truncated text (max MAX_ERROR_RESPONSE_LENGTH chars)
    """
    if len(text) > MAX_ERROR_RESPONSE_LENGTH:
        return text[:MAX_ERROR_RESPONSE_LENGTH] + "..."
    return text


def error_for_status(
    name: str,
    status: int,
    text: str,
    retry_after: Optional[str] = None
) -> IntegrationError:
    """
    Map an HTTP error status to an integration exception.

    - 401/403 → IntegrationAuthError
    - 429 → IntegrationRateLimited (with retry_after)
    - 5xx → IntegrationTemporaryError
    - 4xx → IntegrationPermanentError

    Shared by HTTPClient and the vendor SDK adapters so that both report
    upstream failures the same way.

    Args:
        name: Vendor name prefixed to the message
        status: HTTP status code (>= 400)
        text: Response body
        retry_after: Raw Retry-After header value, if any

    Returns:
        The exception to raise
    """
    truncated_text = truncate_response(text)

    # Authentication errors (401/403)
    if status in (401, 403):
        return IntegrationAuthError(
            f"{name}: Authentication failed (HTTP {status}): {truncated_text}"
        )

    # Rate limiting (429)
    if status == 429:
        try:
            seconds = int(retry_after) if retry_after else None
        except (ValueError, TypeError):
            seconds = None

        return IntegrationRateLimited(
            f"{name}: Rate limit exceeded: {truncated_text}",
            retry_after=seconds
        )

    # Server errors (5xx)
    if status >= 500:
        return IntegrationTemporaryError(
            f"{name}: Server error (HTTP {status}): {truncated_text}"
        )

    # Client errors (4xx)
    return IntegrationPermanentError(
        f"{name}: Client error (HTTP {status}): {truncated_text}"
    )


class HTTPClient:
    """
    HTTP client with consistent error handling for the AI vendors.

    Features:
    - Timeout configuration
    - Error mapping to integration-specific exceptions
    - Vendor name attached to every error message
    - Request logging without secrets
    """

    def __init__(
        self,
        base_url: str,
        name: str = 'http',
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL for all requests
            name: Vendor name used in log lines and error messages
            headers: Default headers to include in all requests
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests to stub the network)
        """
        self.base_url = base_url
        self.name = name
        self.default_headers = headers or {}
        self.timeout = timeout
        self.transport = transport

    def _sanitize_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        """
        Remove sensitive headers for logging.

        Args:
            headers: Original headers

        Returns:
            Sanitized headers safe for logging
        """
        sensitive_keys = {'authorization', 'x-api-key', 'api-key', 'x-goog-api-key', 'token'}
        return {
            k: '***' if k.lower() in sensitive_keys else v
            for k, v in headers.items()
        }

    def _build_url(self, path: str) -> str:
        """Build full URL from base URL and path."""
        return urljoin(self.base_url, path.lstrip('/'))

    def _request(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send a single HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: URL path (relative to base_url)
            headers: Additional headers for this request
            params: Query parameters
            json: JSON body

        Returns:
            HTTP response object

        Raises:
            IntegrationError: On HTTP errors or connection issues
        """
        url = self._build_url(path)
        parsed = urlparse(url)

        # Merge headers
        request_headers = {**self.default_headers}
        if headers:
            request_headers.update(headers)

        # Log request (without sensitive data)
        logger.debug(
            f"{method} {parsed.scheme}://{parsed.netloc}{parsed.path} "
            f"headers={self._sanitize_headers(request_headers)}"
        )

        client_kwargs = {'timeout': self.timeout}
        if self.transport is not None:
            client_kwargs['transport'] = self.transport

        try:
            with httpx.Client(**client_kwargs) as client:
                response = client.request(
                    method=method,
                    url=url,
                    headers=request_headers,
                    params=params,
                    json=json,
                )
        except httpx.TimeoutException as e:
            raise IntegrationTemporaryError(
                f"{self.name}: Request timed out: {e.__class__.__name__}"
            ) from e
        except httpx.TransportError as e:
            raise IntegrationTemporaryError(
                f"{self.name}: Connection failed: {e.__class__.__name__}: {str(e)[:200]}"
            ) from e

        # Check for HTTP errors
        if response.status_code >= 400:
            logger.warning(
                f"{self.name} returned HTTP {response.status_code} for "
                f"{method} {parsed.path}"
            )
            raise error_for_status(
                self.name,
                response.status_code,
                response.text,
                response.headers.get('Retry-After'),
            )

        return response

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make HTTP request and return the decoded JSON object.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: URL path (relative to base_url)
            headers: Optional headers
            params: Optional query parameters
            json: Optional JSON body

        Returns:
            Parsed JSON response

        Raises:
            IntegrationResponseError: If the body is not a JSON object
        """
        response = self._request(method, url, headers=headers, params=params, json=json)
        try:
            data = response.json()
        except ValueError as e:
            raise IntegrationResponseError(
                f"{self.name}: Response is not valid JSON: "
                f"{truncate_response(response.text)}"
            ) from e

        if not isinstance(data, dict):
            raise IntegrationResponseError(
                f"{self.name}: Expected a JSON object, got {type(data).__name__}"
            )
        return data

    def post(
        self,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make POST request and return JSON response."""
        return self.request_json('POST', path, headers=headers, params=params, json=json)
