"""
AI Core Service for Knowledge Expander.

This package provides a unified AI service layer supporting multiple providers
(OpenAI, Gemini, Claude) with a consistent API, title splitting and cost estimation.
"""

from .router import AIRouter
from .schemas import AIRequestContext, AIResponse, Provider, Route, RouteKind

__all__ = ['AIRouter', 'AIRequestContext', 'AIResponse', 'Provider', 'Route', 'RouteKind']
