# app/core/errors.py


class RelayError(Exception):
    """Base for every error that is rendered to the caller as JSON."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RelayError):
    status_code = 400
    default_message = "Invalid input"


class AuthError(RelayError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(RelayError):
    # Expired and never-issued codes share this message
    status_code = 404
    default_message = "Invalid or expired code"


class CollisionExhaustedError(RelayError):
    status_code = 500
    default_message = "Could not allocate a unique code"


class StoreError(RelayError):
    """Any failure talking to the store. The message is safe to show; details go to the log."""

    status_code = 500
    default_message = "Server error"
