"""Error kinds surfaced by the service layer.

Learn: Services never raise HTTPException. They raise one tagged exception,
ServiceError, whose ``kind`` says what went wrong. The HTTP layer maps the
kind to a status code in one place (install_error_handlers), and callers
that need to branch do so on ``err.kind`` rather than on exception classes.

Anything that is not a ServiceError (driver errors, bugs) is caught at the
service boundary, logged with detail, and re-raised as INTERNAL with a
generic message. Raw storage errors never reach the client.
"""

import enum
import functools

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """A failure with a known kind and a client-safe message."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.value!r}, {self.message!r})"


def NotFound(message: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message)


def Unauthorized(message: str) -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, message)


def Forbidden(message: str) -> ServiceError:
    return ServiceError(ErrorKind.FORBIDDEN, message)


def Conflict(message: str) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, message)


def InternalError(message: str) -> ServiceError:
    return ServiceError(ErrorKind.INTERNAL, message)


def service_boundary(message: str):
    """Wrap an async service method so unexpected errors become INTERNAL.

    The wrapped method's instance must carry a ``logger``. ServiceErrors
    propagate untouched; everything else is logged (with the original
    error text) and replaced by ``InternalError(message)``.
    """

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(self, *args, **kwargs):
            try:
                return await fn(self, *args, **kwargs)
            except ServiceError:
                raise
            except Exception as e:
                self.logger.error(
                    "service.unexpected_error",
                    operation=fn.__qualname__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise InternalError(message) from e

        return wrapper

    return decorator


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    headers = None
    if exc.kind is ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the ServiceError → HTTP response mapping on an app."""
    app.add_exception_handler(ServiceError, _service_error_handler)
