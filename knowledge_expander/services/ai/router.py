"""
AI Router - Main entry point for AI services in Knowledge Expander.
"""

import logging
import time
from typing import Callable, Dict, Optional

import httpx

from knowledge_expander.services import config as config_service
from knowledge_expander.services.config import ExpanderSettings
from knowledge_expander.services.exceptions import ServiceNotConfigured
from .base_provider import BaseProvider
from .openai_provider import OpenAIProvider, is_responses_api_model
from .gemini_provider import GeminiProvider
from .claude_provider import ClaudeProvider
from .schemas import AIRequestContext, AIResponse, Provider, ProviderResponse, Route, RouteKind
from .pricing import estimate_cost
from .postprocess import parse_response, strip_markdown_code_block
from .prompts import build_prompt, build_web_search_prompt

logger = logging.getLogger(__name__)

# Model used for OpenAI when the settings leave it blank
DEFAULT_OPENAI_MODEL = 'gpt-4o-mini'


def resolve_route_kind(route: Route, web_search: bool = False) -> RouteKind:
    """
    Map a route to the transport variant that serves it.

    Args:
        route: Selected provider and model
        web_search: True for a web search request

    Returns:
        RouteKind of the handler to call

    Raises:
        ServiceNotConfigured: If web search is requested for a non-OpenAI route
    """
    try:
        provider = Provider(route.provider)
    except ValueError:
        raise ServiceNotConfigured(f"Unknown AI provider: {route.provider}")

    if web_search:
        if provider is not Provider.OPENAI:
            raise ServiceNotConfigured("Web search is only available through OpenAI")
        return RouteKind.OPENAI_WEB_SEARCH

    if provider is Provider.OPENAI:
        if is_responses_api_model(route.model):
            return RouteKind.OPENAI_RESPONSES
        return RouteKind.OPENAI_CHAT
    if provider is Provider.GEMINI:
        return RouteKind.GEMINI
    return RouteKind.CLAUDE


class AIRouter:
    """
    AI Router for managing multiple AI providers.

    Provides a unified interface for knowledge expansion and web search
    across OpenAI, Gemini and Claude. Every call sends exactly one request
    and returns an AIResponse with the title split off, token usage and
    an estimated cost.

    The router keeps a reference to the settings it was given. The host
    calls update_settings() after the user saves new settings.
    """

    # Provider class mapping
    PROVIDER_CLASSES = {
        Provider.OPENAI: OpenAIProvider,
        Provider.GEMINI: GeminiProvider,
        Provider.CLAUDE: ClaudeProvider,
    }

    def __init__(
        self,
        settings: ExpanderSettings,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the AI Router.

        Args:
            settings: Settings snapshot owned by the host
            transport: Optional httpx transport for all provider requests
        """
        self.settings = settings
        self.transport = transport

        # One handler per route kind
        self._handlers: Dict[RouteKind, Callable[[str, Route], ProviderResponse]] = {
            RouteKind.OPENAI_CHAT: self._call_openai_chat,
            RouteKind.OPENAI_RESPONSES: self._call_openai_responses,
            RouteKind.OPENAI_WEB_SEARCH: self._call_openai_web_search,
            RouteKind.GEMINI: self._call_gemini,
            RouteKind.CLAUDE: self._call_claude,
        }

    def update_settings(self, settings: ExpanderSettings) -> None:
        """Replace the settings snapshot used by subsequent calls."""
        self.settings = settings

    def _get_provider_instance(self, provider: Provider) -> BaseProvider:
        """
        Create a provider instance from the current settings.

        Args:
            provider: Provider to instantiate

        Returns:
            Initialized provider instance

        Raises:
            ServiceNotConfigured: If provider type is not supported
        """
        try:
            provider_class = self.PROVIDER_CLASSES[Provider(provider)]
        except (KeyError, ValueError):
            raise ServiceNotConfigured(f"Unknown AI provider: {provider}")

        api_key = config_service.get_api_key(self.settings, provider)
        return provider_class(api_key=api_key, transport=self.transport)

    def default_route(self) -> Route:
        """
        Route for knowledge expansion, taken from the settings.

        Raises:
            ServiceNotConfigured: If the configured provider is unknown
        """
        try:
            provider = Provider(self.settings.ai_provider)
        except ValueError:
            raise ServiceNotConfigured(f"Unknown AI provider: {self.settings.ai_provider}")

        model = config_service.get_model(self.settings, provider)
        if provider is Provider.OPENAI and not model:
            model = DEFAULT_OPENAI_MODEL
        return Route(provider=provider, model=model)

    def web_search_route(self) -> Route:
        """Route for web search. Always OpenAI, whatever the default provider."""
        return Route(
            provider=Provider.OPENAI,
            model=self.settings.openai_web_search_model,
            web_search_model=self.settings.openai_web_search_model,
        )

    def _call_openai_chat(self, prompt: str, route: Route) -> ProviderResponse:
        return self._get_provider_instance(Provider.OPENAI).chat_completion(prompt, route.model)

    def _call_openai_responses(self, prompt: str, route: Route) -> ProviderResponse:
        return self._get_provider_instance(Provider.OPENAI).respond(prompt, route.model)

    def _call_openai_web_search(self, prompt: str, route: Route) -> ProviderResponse:
        model = route.web_search_model or route.model
        return self._get_provider_instance(Provider.OPENAI).web_search(prompt, model)

    def _call_gemini(self, prompt: str, route: Route) -> ProviderResponse:
        return self._get_provider_instance(Provider.GEMINI).generate(prompt, route.model)

    def _call_claude(self, prompt: str, route: Route) -> ProviderResponse:
        return self._get_provider_instance(Provider.CLAUDE).generate(prompt, route.model)

    def dispatch(self, prompt: str, route: Route, web_search: bool = False) -> AIResponse:
        """
        Send a prompt along a route and normalize the reply.

        Args:
            prompt: Complete prompt text
            route: Provider and model to use
            web_search: Attach the web search tool (OpenAI only)

        Returns:
            AIResponse with title, content, token counts and estimated cost

        Raises:
            ServiceNotConfigured: If the provider's API key is missing
            IntegrationError: If the request fails or the reply cannot be parsed
        """
        kind = resolve_route_kind(route, web_search=web_search)
        handler = self._handlers[kind]
        model = (route.web_search_model or route.model) if web_search else route.model

        # Start timing
        start_time = time.time()

        try:
            response = handler(prompt, route)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(
                f"AI request failed after {duration_ms}ms "
                f"({kind.value}, model: {model}): {e.__class__.__name__}: {e}"
            )
            # Re-raise exception
            raise

        duration_ms = int((time.time() - start_time) * 1000)

        # Post-process the raw reply
        stripped = strip_markdown_code_block(response.text)
        title, content = parse_response(stripped)

        input_tokens = response.input_tokens
        output_tokens = response.output_tokens
        cost = estimate_cost(route.provider, model, input_tokens, output_tokens)

        logger.info(
            f"AI request completed in {duration_ms}ms ({kind.value}, model: {model}): "
            f"tokens {input_tokens}/{output_tokens}, cost ${cost:.6f}"
        )

        return AIResponse(
            title=title,
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
            estimated_cost=cost,
            provider=Provider(route.provider).value,
            model=model,
        )

    def expand(
        self,
        selected_text: str,
        context: str,
        user_question: str = '',
        route: Optional[Route] = None
    ) -> AIResponse:
        """
        Explain a selected passage using the configured provider.

        Args:
            selected_text: Text selected in the note
            context: Lines surrounding the selection
            user_question: Optional extra question from the user
            route: Optional route overriding the configured provider/model

        Returns:
            AIResponse with generated title and Markdown content
        """
        ctx = AIRequestContext(
            selected_text=selected_text,
            surrounding_context=context,
            user_question=user_question or '',
        )
        prompt = build_prompt(ctx, self.settings.system_prompt)
        return self.dispatch(prompt, route or self.default_route())

    def web_search(
        self,
        selected_text: str,
        context: str,
        user_question: str = ''
    ) -> AIResponse:
        """
        Research a selected passage with OpenAI's web search tool.

        Raises:
            ServiceNotConfigured: If no OpenAI API key is configured,
                regardless of the default provider
        """
        if not config_service.is_provider_configured(self.settings, Provider.OPENAI):
            raise ServiceNotConfigured("OpenAI API key is required for web search")

        ctx = AIRequestContext(
            selected_text=selected_text,
            surrounding_context=context,
            user_question=user_question or '',
        )
        prompt = build_web_search_prompt(ctx)
        return self.dispatch(prompt, self.web_search_route(), web_search=True)
