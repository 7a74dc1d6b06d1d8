"""
Định nghĩa các exception nghiệp vụ và handler chuyển chúng thành response JSON.

Mọi lỗi trả về cho client đều có dạng `{"message": str}`. Lỗi không lường
trước (bao gồm lỗi database) được ghi log đầy đủ ở phía server nhưng chỉ trả
về một thông báo chung chung, không làm lộ chi tiết nội bộ.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Lỗi nghiệp vụ cơ sở, mang theo mã HTTP và thông báo cho client."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Duplicate"


def _message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _message_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _message_response(exc.status_code, str(exc.detail))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Chuyển lỗi xác thực của FastAPI (422) thành lỗi 400 với thông báo ngắn gọn."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return _message_response(status.HTTP_400_BAD_REQUEST, message)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Lỗi database khi xử lý {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Lỗi không xác định khi xử lý {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Đăng ký toàn bộ exception handler cho ứng dụng FastAPI."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
