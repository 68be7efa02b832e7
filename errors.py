"""Error types shared by the three API routes and the speech providers."""

from typing import Any, Dict, Optional

import openai

# Fallback wording check, only used when the upstream error carries no
# status code or error kind we recognise.
AUTH_HINTS = ("api key", "authentication")
AUTH_STATUS_CODES = (401, 403)
AUTH_ERROR_CODES = ("INVALID_AUTH",)


class ServiceError(Exception):
    """An error that maps straight onto a JSON error response."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidRequest(ServiceError):
    status_code = 400


class Unauthorized(ServiceError):
    status_code = 401


class EmptyResult(ServiceError):
    """The upstream call worked but gave back nothing usable."""


class UpstreamFailure(ServiceError):
    pass


class ProviderError(Exception):
    """Non-success response from a speech provider."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class MissingCredentials(RuntimeError):
    """A required API key is not configured."""


def is_auth_failure(exc: BaseException) -> bool:
    """Decide whether an upstream failure was caused by bad or missing credentials."""
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError, MissingCredentials)):
        return True
    if getattr(exc, "status_code", None) in AUTH_STATUS_CODES:
        return True
    if getattr(exc, "error_code", None) in AUTH_ERROR_CODES:
        return True
    text = str(exc).lower()
    return any(hint in text for hint in AUTH_HINTS)
