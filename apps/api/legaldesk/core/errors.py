from __future__ import annotations

from typing import Any

from fastapi import status


STORAGE_FAILURE_MESSAGE = "Unable to complete request. Please try again."


class ServiceError(Exception):
    """Base class for failures surfaced by the service layer.

    Each subclass carries the HTTP status and machine-readable code the API
    layer renders; services never raise framework exceptions themselves.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "service_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class ValidationFailure(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_failed"

    @classmethod
    def duplicate(cls, message: str = "A record with the same unique value already exists") -> ValidationFailure:
        return cls(message, code="duplicate", status_code=status.HTTP_409_CONFLICT)

    @classmethod
    def invalid_reference(cls, message: str = "A referenced record does not exist") -> ValidationFailure:
        return cls(message, code="invalid_reference", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class StorageFailure(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "storage_failure"

    def __init__(self, message: str = STORAGE_FAILURE_MESSAGE, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
