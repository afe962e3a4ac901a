"""
OpenAI provider implementation.

Two OpenAI endpoints are used:
- ``chat.completions`` for the older model families (gpt-4o, gpt-4, o1, ...)
- ``responses`` for the newer families and for web search, which attaches
  the ``web_search_preview`` tool
"""

from typing import Any, Dict, List, Optional

import openai

from .base_provider import (
    BaseProvider,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    REQUEST_TIMEOUT,
    translate_sdk_errors,
)
from .schemas import ProviderResponse

# Model families served by the Responses API
RESPONSES_API_PREFIXES = ('gpt-5', 'gpt-4.1', 'o3', 'o4')

WEB_SEARCH_TOOL = {'type': 'web_search_preview'}


def is_responses_api_model(model_id: str) -> bool:
    """Return True if ``model_id`` belongs to a Responses API model family."""
    return model_id.startswith(RESPONSES_API_PREFIXES)


class OpenAIProvider(BaseProvider):
    """OpenAI API provider implementation."""

    base_url = 'https://api.openai.com/v1'

    @property
    def provider_type(self) -> str:
        """Return provider type."""
        return 'OpenAI'

    def _get_client(self) -> openai.OpenAI:
        """Create the OpenAI client for one request. Retries are disabled."""
        return openai.OpenAI(
            api_key=self.require_api_key(),
            base_url=self.base_url,
            timeout=REQUEST_TIMEOUT,
            max_retries=0,
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
        Execute a completion, choosing the endpoint by model family.

        Args:
            prompt: Complete prompt text
            model_id: OpenAI model ID (e.g., 'gpt-4o', 'gpt-4.1')
            temperature: Sampling temperature (chat completions only)
            max_tokens: Maximum tokens to generate (chat completions only)
            **kwargs: Additional request parameters

        Returns:
            ProviderResponse with completion text and token counts
        """
        if is_responses_api_model(model_id):
            return self.respond(prompt, model_id, **kwargs)
        return self.chat_completion(
            prompt,
            model_id,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )

    def chat_completion(
        self,
        prompt: str,
        model_id: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> ProviderResponse:
        """
        Execute OpenAI chat completion with a single user message.

        Args:
            prompt: Complete prompt text
            model_id: OpenAI model ID
            temperature: Sampling temperature (default 0.7)
            max_tokens: Maximum tokens to generate (default 2000)
            **kwargs: Additional OpenAI parameters

        Returns:
            ProviderResponse with completion text and token counts
        """
        self.require_api_key()

        # Build request parameters
        request_params = {
            'model': model_id,
            'messages': [
                {'role': 'user', 'content': prompt}
            ],
            'temperature': DEFAULT_TEMPERATURE if temperature is None else temperature,
            'max_tokens': DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
        }

        # Add any additional kwargs
        request_params.update(kwargs)

        self.logger.info(f"OpenAI chat completion request - model: {model_id}")
        with self._get_client() as client, translate_sdk_errors(openai, self.provider_type):
            response = client.chat.completions.create(**request_params)

        # Extract text and token counts
        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            raise self._missing('choices[0].message.content')
        if text is None:
            raise self._missing('choices[0].message.content')

        usage = getattr(response, 'usage', None)

        return ProviderResponse(
            text=text,
            raw=response,
            input_tokens=self._token_count(usage, 'prompt_tokens'),
            output_tokens=self._token_count(usage, 'completion_tokens'),
        )

    def respond(
        self,
        prompt: str,
        model_id: str,
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ) -> ProviderResponse:
        """
        Execute a Responses API call.

        Args:
            prompt: Complete prompt text, sent as the ``input`` string
            model_id: OpenAI model ID
            tools: Optional tool declarations (e.g. web search)
            **kwargs: Additional OpenAI parameters

        Returns:
            ProviderResponse with the SDK's aggregated ``output_text``
        """
        self.require_api_key()

        request_params = {
            'model': model_id,
            'input': prompt,
        }
        if tools:
            request_params['tools'] = tools
        request_params.update(kwargs)

        self.logger.info(
            f"OpenAI responses request - model: {model_id}, "
            f"tools: {[tool.get('type') for tool in tools or []]}"
        )
        with self._get_client() as client, translate_sdk_errors(openai, self.provider_type):
            response = client.responses.create(**request_params)

        # output_text joins the output_text parts of all message items
        if not isinstance(getattr(response, 'output', None), list):
            raise self._missing('output')
        text = response.output_text

        usage = getattr(response, 'usage', None)

        return ProviderResponse(
            text=text,
            raw=response,
            input_tokens=self._token_count(usage, 'input_tokens'),
            output_tokens=self._token_count(usage, 'output_tokens'),
        )

    def web_search(self, prompt: str, model_id: str) -> ProviderResponse:
        """Responses API call with the web search tool attached."""
        return self.respond(prompt, model_id, tools=[dict(WEB_SEARCH_TOOL)])
