# klassflow/core/errors.py
"""
Failures of the signature engine.

Every error carries the HTTP status it is rendered with at the API
boundary. Only PersistenceError is a genuine fault; the others are
expected outcomes the client shows to the user.
"""


class SignatureError(Exception):
    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class NotFound(SignatureError):
    status_code = 404
    message = "Not found"


class TokenNotFound(NotFound):
    message = "Invalid token"


class Expired(SignatureError):
    status_code = 410
    message = "Token expired"


class AlreadyUsed(SignatureError):
    status_code = 410
    message = "Token already used"


class Forbidden(SignatureError):
    status_code = 403
    message = "Forbidden"


class PersistenceError(SignatureError):
    status_code = 500
    message = "Internal Server Error"


class NotificationError(Exception):
    """Raised when an email could not be handed to the mail provider."""
