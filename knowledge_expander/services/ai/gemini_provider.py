"""
Google Gemini provider implementation.

Calls the ``generateContent`` REST endpoint through HTTPClient. The
google-generativeai SDK is deprecated, so it is not used here.
"""

from typing import Any, Optional

from knowledge_expander.services.integrations import HTTPClient
from .base_provider import BaseProvider, DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, REQUEST_TIMEOUT
from .schemas import ProviderResponse


class GeminiProvider(BaseProvider):
    """Google Gemini API provider implementation."""

    base_url = 'https://generativelanguage.googleapis.com/v1beta/'

    @property
    def provider_type(self) -> str:
        """Return provider type."""
        return 'Gemini'

    def _get_client(self) -> HTTPClient:
        # Gemini takes the key as a query parameter, not a header
        return HTTPClient(
            base_url=self.base_url,
            name=self.provider_type,
            headers={'Content-Type': 'application/json'},
            timeout=REQUEST_TIMEOUT,
            transport=self.transport,
        )

    def _extract(self, data: Any, *path, what: str) -> Any:
        """
        Walk a decoded JSON document along ``path``.

        Raises:
            IntegrationResponseError: If any step of the path is missing or null
        """
        current = data
        for step in path:
            try:
                current = current[step]
            except (KeyError, IndexError, TypeError):
                raise self._missing(what)
        if current is None:
            raise self._missing(what)
        return current

    def generate(
        self,
        prompt: str,
        model_id: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ProviderResponse:
        """
        Execute Gemini generateContent with a single text part.

        Args:
            prompt: Complete prompt text
            model_id: Gemini model ID (e.g., 'gemini-1.5-flash')
            temperature: Sampling temperature (default 0.7)
            max_tokens: Maximum tokens to generate (default 2000)
            **kwargs: Additional generationConfig fields

        Returns:
            ProviderResponse with completion text and token counts
        """
        api_key = self.require_api_key()

        # Build generation config
        generation_config = {
            'temperature': DEFAULT_TEMPERATURE if temperature is None else temperature,
            'maxOutputTokens': DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
        }
        generation_config.update(kwargs)

        request_body = {
            'contents': [{
                'parts': [{'text': prompt}]
            }],
            'generationConfig': generation_config,
        }

        self.logger.info(f"Gemini generateContent request - model: {model_id}")
        data = self._get_client().post(
            f'models/{model_id}:generateContent',
            params={'key': api_key},
            json=request_body,
        )

        # Extract text from the first candidate
        text = self._extract(
            data, 'candidates', 0, 'content', 'parts', 0, 'text',
            what='candidates[0].content.parts[0].text'
        )

        # Token counts live in usageMetadata
        metadata = data.get('usageMetadata')

        return ProviderResponse(
            text=text,
            raw=data,
            input_tokens=self._token_count(metadata, 'promptTokenCount'),
            output_tokens=self._token_count(metadata, 'candidatesTokenCount'),
        )
