"""
Exception hierarchy for jujuform.

Lifecycle handlers never let these escape; they are converted into
error diagnostics so the declarative engine sees the message verbatim.
"""


class JujuformError(Exception):
    """Base class for all jujuform errors."""
    pass


class ConfigError(JujuformError):
    """Raised when provider configuration is missing or invalid."""
    pass


class SchemaError(JujuformError):
    """Raised when a value does not fit the attribute schema."""
    pass


class ResourceIdError(JujuformError):
    """Raised when a resource id cannot be parsed."""
    pass


class ControllerConnectionError(JujuformError):
    """Raised when no controller address accepts a connection."""
    pass


class APIError(JujuformError):
    """
    Error reply from the controller API.

    Attributes:
        message: Error message as sent by the controller
        code: Optional error code (e.g. "not found", "unauthorized access")
    """

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or None
        super().__init__(message)

    @classmethod
    def from_reply(cls, error: dict) -> "APIError":
        """Build the most specific error for an error object in a reply."""
        message = error.get("message", "")
        code = error.get("code")
        if code == NotFoundError.CODE:
            return NotFoundError(message, code)
        return cls(message, code)


class NotFoundError(APIError):
    """The requested entity does not exist on the controller."""

    CODE = "not found"
