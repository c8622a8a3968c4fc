"""
Service-layer exceptions, translated to HTTP errors by the routers.
"""


class SukejuruError(Exception):
    """Base exception for request-level failures raised by services."""

    def __init__(self, message: str):
        """
        Args:
            message: Client-facing error message
        """
        super().__init__(message)
        self.message = message


class InvalidRequestError(SukejuruError):
    """The request is well-formed JSON but cannot be acted on (400)."""


class NotFoundError(SukejuruError):
    """The referenced row does not exist or is not owned by the caller (404)."""


class ConflictError(SukejuruError):
    """The write would violate a uniqueness rule (409)."""


class UpstreamError(SukejuruError):
    """A third-party API (LLM provider, Google) answered with an error."""

    def __init__(self, message: str, status_code: int = 500, body=None):
        """
        Args:
            message: Client-facing error message
            status_code: HTTP status relayed to the client
            body: Upstream response body, relayed verbatim when present
        """
        super().__init__(message)
        self.status_code = status_code
        self.body = body
