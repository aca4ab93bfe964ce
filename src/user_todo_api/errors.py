from __future__ import annotations

from fastapi import status


# PUBLIC_INTERFACE
class ServiceError(Exception):
    """
    Base class for domain errors raised by stores and services.

    Each subclass carries the error kind reported to API clients and the HTTP
    status code it maps to.
    """

    kind: str = "ServiceError"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR


class InvalidInput(ServiceError, ValueError):
    """A required field is missing, empty, or of the wrong type."""

    kind = "InvalidInput"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(ServiceError):
    """No record exists with the requested id."""

    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class UserNotFound(NotFound):
    """A todo references a user that does not exist."""

    kind = "UserNotFound"
