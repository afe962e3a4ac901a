"""
Integration Base Package

Provides the HTTP transport and exceptions shared by the AI vendor adapters.

Key Components:
- errors.py: Integration-specific exceptions
- http.py: Single-attempt HTTP client with error mapping
"""

from .errors import (
    IntegrationError,
    IntegrationAuthError,
    IntegrationRateLimited,
    IntegrationTemporaryError,
    IntegrationPermanentError,
    IntegrationResponseError,
)
from .http import HTTPClient, error_for_status, truncate_response

__all__ = [
    # Exceptions
    'IntegrationError',
    'IntegrationAuthError',
    'IntegrationRateLimited',
    'IntegrationTemporaryError',
    'IntegrationPermanentError',
    'IntegrationResponseError',
    # Classes
    'HTTPClient',
    # Functions
    'error_for_status',
    'truncate_response',
]
