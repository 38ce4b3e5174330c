"""Exception types shared across the client."""


class RootyError(Exception):
    """Base class for every error the client raises or returns."""


class ConfigError(RootyError):
    pass


class TransportError(RootyError):
    """Network failure, or no response within the allowed time."""


class BackendError(RootyError):
    """Structured failure reported by the backend."""

    def __init__(self, message: str, code: str | None = None, details: str | None = None,
                 hint: str | None = None, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status = status

    @classmethod
    def from_payload(cls, payload, status: int | None = None) -> "BackendError":
        if not isinstance(payload, dict):
            return cls(str(payload) if payload else f"Request failed with status {status}", status=status)
        message = (
            payload.get("message")
            or payload.get("msg")
            or payload.get("error_description")
            or payload.get("error")
            or f"Request failed with status {status}"
        )
        return cls(
            message,
            code=payload.get("code"),
            details=payload.get("details"),
            hint=payload.get("hint"),
            status=status,
        )


class NoDataError(RootyError):
    """The backend answered but sent nothing back."""


class AuthError(RootyError):
    pass


class AnswerLockedError(RootyError):
    """An item already has an answer."""
