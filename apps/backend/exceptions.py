"""
Custom exception hierarchy for the video search backend.

Request-level failures are raised as subclasses of VideoSearchError and
converted to JSON error responses by the HTTP layer. Provider-level failures
never leave the provider client; they are classified into outcomes instead.

Exception Hierarchy:
    VideoSearchError (base)
    ├── ValidationError
    ├── ConfigurationError
    └── ExternalServiceError
        └── SearchProviderError
            ├── ProviderRejectedError
            └── MalformedPayloadError

Usage:
    from exceptions import ValidationError

    raise ValidationError("Search query not provided")
"""

from typing import Optional, Dict, Any


class VideoSearchError(Exception):
    """
    Base exception for all video search application errors.

    Attributes:
        message: Human-readable error message
        detail: Optional dict with additional error context
        status_code: Suggested HTTP status code (for API errors)
    """

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the public error envelope."""
        return {"error": self.message}


class ValidationError(VideoSearchError):
    """
    Raised when request input validation fails.

    Examples:
        raise ValidationError("Search query not provided")
    """

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message, detail=detail, status_code=400)


class ConfigurationError(VideoSearchError):
    """
    Raised when the provider registry is missing or empty.

    Examples:
        raise ConfigurationError("API configuration not found")
    """

    def __init__(self, message: str, *, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message, detail=detail, status_code=500)


class ExternalServiceError(VideoSearchError):
    """Base exception for external service failures."""

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        service_name: Optional[str] = None,
    ):
        if service_name and detail is None:
            detail = {"service": service_name}
        elif service_name and detail:
            detail["service"] = service_name

        super().__init__(message, detail=detail, status_code=502)


class SearchProviderError(ExternalServiceError):
    """
    Raised inside the provider client when a provider call fails.

    Never propagated past the client; converted into a failed outcome.
    """

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[Dict[str, Any]] = None,
        provider: Optional[str] = None,
    ):
        if provider and detail is None:
            detail = {"provider": provider}
        elif provider and detail:
            detail["provider"] = provider

        super().__init__(message, detail=detail, service_name="search_provider")
        self.provider = provider


class ProviderRejectedError(SearchProviderError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, message: str, *, provider: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message, detail={"http_status": status} if status is not None else None, provider=provider)
        self.http_status = status


class MalformedPayloadError(SearchProviderError):
    """The provider body could not be decoded as XML."""

    pass
