"""
Data schemas for AI service requests and responses.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Provider(str, Enum):
    """Supported AI vendors."""
    OPENAI = 'openai'
    GEMINI = 'gemini'
    CLAUDE = 'claude'


class RouteKind(str, Enum):
    """Transport variant used for one request."""
    OPENAI_CHAT = 'openai-chat'
    OPENAI_RESPONSES = 'openai-responses'
    OPENAI_WEB_SEARCH = 'openai-web-search'
    GEMINI = 'gemini'
    CLAUDE = 'claude'


@dataclass(frozen=True)
class Route:
    """Provider and model selected for a request."""
    provider: Provider
    model: str
    web_search_model: Optional[str] = None


@dataclass(frozen=True)
class AIRequestContext:
    """Selection handed over by the caller for one expansion."""
    selected_text: str
    surrounding_context: str
    user_question: str = ''


@dataclass
class ProviderResponse:
    """Internal response from provider implementation."""
    text: str
    raw: Any
    input_tokens: int
    output_tokens: int


@dataclass(frozen=True)
class AIResponse:
    """Normalized response returned to the caller."""
    title: str
    content: str
    input_tokens: int
    output_tokens: int
    total_tokens: int
    estimated_cost: float
    provider: str
    model: str
