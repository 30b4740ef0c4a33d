"""
The response envelope: {success, message, data?, errors?}.
"""
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from errors import InternalError, TaskTrackerError


def send_response(status_code: int, message: str, data: Optional[Any] = None) -> JSONResponse:
    content = {"success": status_code < 400, "message": message}
    if data is not None:
        content["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=content)


def send_success(message: str, data: Optional[Any] = None, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return send_response(status_code, message, data)


def send_error(status_code: int, message: str, errors: Optional[Any] = None, headers: Optional[dict] = None) -> JSONResponse:
    content = {"success": False, "message": message}
    if errors is not None:
        content["errors"] = jsonable_encoder(errors)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskTrackerError)
    async def handle_task_tracker_error(request: Request, exc: TaskTrackerError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return send_error(exc.status_code, exc.message, exc.errors, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return send_error(status.HTTP_400_BAD_REQUEST, "Validation failed", _validation_errors(exc))

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException):
        return send_error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError):
        logger.opt(exception=exc).error("Unhandled store error on {} {}", request.method, request.url.path)
        return send_error(InternalError.status_code, InternalError.default_message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
        return send_error(InternalError.status_code, InternalError.default_message)
