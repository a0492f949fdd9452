"""Domain error types translated to HTTP responses at the API boundary."""

from fastapi import status


class ClinicError(Exception):
    """Base class for errors that carry a user-facing message."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(ClinicError):
    """Missing or malformed request data."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailed(ClinicError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDenied(ClinicError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ClinicError):
    status_code = status.HTTP_404_NOT_FOUND


class SlotConflict(ClinicError):
    """The requested resource was taken by another request."""

    status_code = status.HTTP_409_CONFLICT


class TransitionError(ClinicError):
    """An appointment state change that is not allowed from the current state."""

    status_code = status.HTTP_400_BAD_REQUEST


class MailDeliveryError(ClinicError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
