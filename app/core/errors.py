from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException


class ServiceError(Exception):
    """Base class for errors the session core surfaces to its callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "service_error"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidStateError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_state"


class StorageUnavailableError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_unavailable"


class SessionValidationError(ServiceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class StopAllError(ServiceError):
    """Raised when one or more running sessions could not be completed.

    Sessions completed before (or after) the failing ones stay completed.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "stop_all_failed"

    def __init__(self, failures: dict[str, str], completed_ids: list[str]) -> None:
        failed = ", ".join(sorted(failures))
        super().__init__(
            f"Failed to stop running session(s): {failed}",
            details={"failed": dict(failures), "completed": list(completed_ids)},
        )
        self.failures = dict(failures)
        self.completed_ids = list(completed_ids)


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def service_error_handler(request: Request, exc: ServiceError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc):  # type: ignore[override]
    from fastapi.exceptions import RequestValidationError

    if isinstance(exc, RequestValidationError):
        return ErrorEnvelope(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": jsonable_errors(exc.errors())},
        )
    raise exc


def jsonable_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # pydantic puts the raw exception under ``ctx`` for value errors.
    cleaned = []
    for error in errors:
        item = {k: v for k, v in error.items() if k != "ctx"}
        ctx = error.get("ctx")
        if isinstance(ctx, dict):
            item["ctx"] = {k: str(v) for k, v in ctx.items()}
        cleaned.append(item)
    return cleaned
