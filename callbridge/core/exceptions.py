"""Application error types.

Every error carries the HTTP status it is reported with. The API layer turns
them into ``{"success": false, "error": <message>}`` bodies.
"""
from typing import Optional


class CallBridgeError(Exception):
    """Base class for errors reported to API clients."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(CallBridgeError):
    """A required field is missing or malformed."""

    status_code = 400
    default_message = "All fields are required."


class AuthError(CallBridgeError):
    """Credentials did not match a stored user."""

    status_code = 401
    default_message = "Invalid username or password."


class NotFoundError(CallBridgeError):
    status_code = 404
    default_message = "Not found"


class ConflictError(CallBridgeError):
    status_code = 409
    default_message = "Already exists."


class ConfigError(CallBridgeError):
    """Required configuration is absent."""

    status_code = 500
    default_message = "Service is not configured."


class PersistenceError(CallBridgeError):
    """A database operation failed."""

    status_code = 500


class ProviderError(CallBridgeError):
    """The voice-call provider rejected or failed a request."""

    status_code = 500
    default_message = "Failed to make call"
