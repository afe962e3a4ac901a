"""
Anthropic Claude provider implementation.
"""

from typing import Optional

import anthropic

from .base_provider import BaseProvider, DEFAULT_MAX_TOKENS, REQUEST_TIMEOUT, translate_sdk_errors
from .schemas import ProviderResponse

ANTHROPIC_VERSION = '2023-06-01'


class ClaudeProvider(BaseProvider):
    """Anthropic Messages API provider implementation."""

    base_url = 'https://api.anthropic.com'

    @property
    def provider_type(self) -> str:
        """Return provider type."""
        return 'Claude'

    def _get_client(self) -> anthropic.Anthropic:
        """Create the Anthropic client for one request. Retries are disabled."""
        return anthropic.Anthropic(
            api_key=self.require_api_key(),
            base_url=self.base_url,
            timeout=REQUEST_TIMEOUT,
            max_retries=0,
            default_headers={'anthropic-version': ANTHROPIC_VERSION},
            http_client=self._http_client(),
        )

    def generate(
        self,
        prompt: str,
        model_id: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ProviderResponse:
        """
        Execute a Claude messages call with a single user message.

        Args:
            prompt: Complete prompt text
            model_id: Claude model ID (e.g., 'claude-3-5-sonnet-20241022')
            temperature: Optional sampling temperature (vendor default if None)
            max_tokens: Maximum tokens to generate (default 2000, always sent)
            **kwargs: Additional Anthropic parameters

        Returns:
            ProviderResponse with the first content block's text
        """
        self.require_api_key()

        request_params = {
            'model': model_id,
            'max_tokens': DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
            'messages': [
                {'role': 'user', 'content': prompt}
            ],
        }
        if temperature is not None:
            request_params['temperature'] = temperature
        request_params.update(kwargs)

        self.logger.info(f"Claude messages request - model: {model_id}")
        with self._get_client() as client, translate_sdk_errors(anthropic, self.provider_type):
            response = client.messages.create(**request_params)

        try:
            text = response.content[0].text
        except (AttributeError, IndexError, TypeError):
            raise self._missing('content[0].text')
        if text is None:
            raise self._missing('content[0].text')

        usage = getattr(response, 'usage', None)

        return ProviderResponse(
            text=text,
            raw=response,
            input_tokens=self._token_count(usage, 'input_tokens'),
            output_tokens=self._token_count(usage, 'output_tokens'),
        )
