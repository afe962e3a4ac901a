"""
Base provider interface for AI providers.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from types import ModuleType
from typing import Any, Iterator, Optional

import httpx

from knowledge_expander.services.exceptions import ServiceNotConfigured
from knowledge_expander.services.integrations import (
    IntegrationResponseError,
    IntegrationTemporaryError,
    error_for_status,
)
from .schemas import ProviderResponse

# Generation defaults shared by every vendor
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

# Seconds per request
REQUEST_TIMEOUT = 120.0


@contextmanager
def translate_sdk_errors(sdk: ModuleType, name: str) -> Iterator[None]:
    """
    Re-raise vendor SDK exceptions as integration exceptions.

    Works with any SDK exposing the APIStatusError / APITimeoutError /
    APIConnectionError / APIError family (openai, anthropic).

    Args:
        sdk: The SDK module
        name: Vendor name prefixed to the message
    """
    try:
        yield
    except sdk.APIStatusError as e:
        raise error_for_status(
            name,
            e.status_code,
            e.response.text,
            e.response.headers.get('Retry-After'),
        ) from e
    except sdk.APITimeoutError as e:
        raise IntegrationTemporaryError(
            f"{name}: Request timed out: {e.__class__.__name__}"
        ) from e
    except sdk.APIConnectionError as e:
        raise IntegrationTemporaryError(
            f"{name}: Connection failed: {e.__class__.__name__}: {str(e)[:200]}"
        ) from e
    except sdk.APIError as e:
        raise IntegrationResponseError(f"{name}: Unexpected response: {e}") from e


class BaseProvider(ABC):
    """
    Abstract base class for AI providers.

    A provider builds the vendor-specific request for a single prompt,
    sends it once and parses the reply into a ProviderResponse. Providers
    hold no state between calls.

    Subclasses should:
    - Set `base_url`
    - Implement `provider_type` and `generate()`
    - Call `require_api_key()` before building a request
    """

    base_url: str = None

    def __init__(self, api_key: str, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the provider.

        Args:
            api_key: API key for the provider (may be blank; checked per call)
            transport: Optional httpx transport used for every request
        """
        self.api_key = api_key or ''
        self.transport = transport

    @property
    @abstractmethod
    def provider_type(self) -> str:
        """Return the provider type identifier."""
        pass

    @property
    def logger(self) -> logging.Logger:
        """Logger namespaced as knowledge_expander.provider.<type>."""
        return logging.getLogger(f"knowledge_expander.provider.{self.provider_type.lower()}")

    def require_api_key(self) -> str:
        """
        Ensure an API key is configured.

        Returns:
            The API key

        Raises:
            ServiceNotConfigured: If the key is missing or blank
        """
        if not self.api_key.strip():
            raise ServiceNotConfigured(f"{self.provider_type} API key is not configured")
        return self.api_key

    def _http_client(self) -> httpx.Client:
        """httpx client handed to a vendor SDK for one request."""
        return httpx.Client(transport=self.transport, timeout=REQUEST_TIMEOUT)

    def _missing(self, what: str) -> IntegrationResponseError:
        return IntegrationResponseError(
            f"{self.provider_type}: Unexpected response shape, missing {what}"
        )

    @staticmethod
    def _token_count(usage: Any, key: str) -> int:
        """Read a token counter from a usage block or object, 0 when absent."""
        if usage is None:
            return 0
        if isinstance(usage, dict):
            value = usage.get(key)
        else:
            value = getattr(usage, key, None)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return 0
        return value

    @abstractmethod
    def generate(
        self,
        prompt: str,
        model_id: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ProviderResponse:
        """
        Generate a completion for a single user prompt.

        Args:
            prompt: Complete prompt text
            model_id: Model identifier
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens to generate
            **kwargs: Additional request body fields

        Returns:
            ProviderResponse with text, raw response, and token counts

        Raises:
            ServiceNotConfigured: If the API key is missing (no request is sent)
            IntegrationError: If the request fails or the reply cannot be parsed
        """
        pass
