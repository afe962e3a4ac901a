"""
Service-layer exceptions for consistent error handling across Knowledge Expander.

These exceptions provide a consistent way to handle service configuration
issues throughout the package.
"""


class ServiceError(Exception):
    """Base exception for all service-related errors."""
    pass


class ServiceNotConfigured(ServiceError):
    """
    Raised when a service is used but its configuration is incomplete or invalid.

    Example:
        If the Claude provider is selected but no Claude API key is set,
        this exception is raised before any request is sent.
    """
    pass
