"""Exceptions raised by the tracker core and translated by the web layer."""


class TrackerError(Exception):
    """Base class for user-facing tracker failures."""

    status_code = 400


class ValidationError(TrackerError):
    """Form input rejected before any store call."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class RateLimitedError(TrackerError):
    status_code = 429

    def __init__(self, message: str = "Please wait before performing another action."):
        super().__init__(message)


class StoreError(TrackerError):
    """A read or write against the backing store failed."""

    status_code = 502


class NotFoundError(TrackerError):
    status_code = 404


class PermissionDeniedError(TrackerError):
    """The signed-in user's role does not allow the action."""

    status_code = 403


class ConflictError(TrackerError):
    status_code = 409
