"""
Integration-specific exceptions for consistent error handling.

These exceptions provide a unified way to handle errors raised while talking
to the AI vendors (OpenAI, Gemini, Claude).

Design principles:
- Never include secrets or tokens in exception messages
- Map HTTP status codes consistently
- Name the vendor in every message so failures can be traced
- Requests are attempted once; nothing here triggers a retry
"""


class IntegrationError(Exception):
    """
    Base exception for all integration-related errors.

    All integration exceptions inherit from this class, allowing
    consumers to catch all upstream errors with a single except clause.
    """
    pass


class IntegrationAuthError(IntegrationError):
    """
    Raised when authentication with the vendor fails.

    Corresponds to HTTP 401/403 errors.

    Example:
        Invalid API key, revoked key, model not available to the account.
    """
    pass


class IntegrationRateLimited(IntegrationError):
    """
    Raised when the vendor rejects the request with HTTP 429.

    Attributes:
        retry_after: Optional seconds the vendor asked the client to wait
    """

    def __init__(self, message="Rate limit exceeded", retry_after=None):
        """
        Initialize rate limit error.

        Args:
            message: Error message (no secrets!)
            retry_after: Optional seconds to wait, taken from Retry-After
        """
        super().__init__(message)
        self.retry_after = retry_after


class IntegrationTemporaryError(IntegrationError):
    """
    Raised for failures that are not caused by the request itself.

    Typically corresponds to:
    - HTTP 5xx server errors
    - Network timeouts
    - Connection errors
    """
    pass


class IntegrationPermanentError(IntegrationError):
    """
    Raised for HTTP 4xx client errors other than 401/403/429.

    Example:
        Unknown model id, malformed request body, context length exceeded.
    """
    pass


class IntegrationResponseError(IntegrationError):
    """
    Raised when a successful response cannot be parsed.

    The body is not JSON, or it lacks the fields the provider adapter
    needs to extract the generated text (choices, candidates, content).
    """
    pass
