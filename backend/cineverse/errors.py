"""
Error kinds raised by the actions.

Callers branch on ``error.kind`` instead of on message text. The HTTP layer
maps each kind to a status code (see ``main.py``).
"""
import enum


class ErrorKind(str, enum.Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_AUTHORIZED = "not_authorized"
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"


STATUS_CODES = {
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.NOT_AUTHORIZED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_ARGUMENT: 400,
}


class ActionError(Exception):
    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT
    default_message = "Invalid request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.kind.value}


class NotAuthenticated(ActionError):
    kind = ErrorKind.NOT_AUTHENTICATED
    default_message = "Not authenticated"


class NotAuthorized(ActionError):
    kind = ErrorKind.NOT_AUTHORIZED
    default_message = "Not authorized"


class NotFound(ActionError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"

    @classmethod
    def resource(cls, name: str) -> "NotFound":
        return cls(f"{name} not found")


class InvalidArgument(ActionError):
    kind = ErrorKind.INVALID_ARGUMENT
