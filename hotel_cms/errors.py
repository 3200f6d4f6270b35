import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an ``{success: false, error}`` response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message}


class Unauthorized(AppError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFound(AppError):
    status_code = 404


class ValidationFailed(AppError):
    status_code = 400

    def __init__(self, message: str = "Validation failed", fields: list[dict] | None = None):
        super().__init__(message)
        self.fields = fields or []

    @classmethod
    def from_pydantic(cls, exc: ValidationError, message: str = "Validation failed") -> "ValidationFailed":
        return cls(message, _field_errors(exc.errors()))

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.fields:
            body["fields"] = self.fields
        return body


class StorageError(AppError):
    """Upload or delete against the file storage service failed."""

    status_code = 500


class UploadRejected(StorageError):
    """File type or size is outside the upload policy."""

    status_code = 400


def _field_errors(errors) -> list[dict]:
    fields = []
    for err in errors:
        # Drop the "body" prefix FastAPI adds to request-level errors
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        fields.append({"field": ".".join(loc) or "__root__", "message": err.get("msg", "Invalid value")})
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        err = ValidationFailed("Validation failed", _field_errors(exc.errors()))
        return JSONResponse(err.to_dict(), status_code=err.status_code)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"success": False, "error": "Internal server error"}, status_code=500)
