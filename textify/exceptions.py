import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred."


class TextifyError(Exception):
    """Base error carrying an HTTP status and a message that is safe to show clients."""

    status_code = 500
    message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(TextifyError):
    status_code = 400
    message = "Invalid request."


class OTPNotFoundError(TextifyError):
    status_code = 400
    message = "OTP not found. Please request a new one."


class OTPExpiredError(TextifyError):
    status_code = 400
    message = "OTP has expired. Please request a new one."


class OTPMismatchError(TextifyError):
    status_code = 400
    message = "Invalid OTP."


class ProfileNotFoundError(TextifyError):
    status_code = 404
    message = "User not found."


class DeliveryError(TextifyError):
    status_code = 500
    message = "Failed to send OTP. Please check the phone number and try again."


def create_error_response(message: str) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "message": message,
    }


def create_success_response(message: str, **extra) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "message": message,
        **extra,
    }


async def textify_exception_handler(request: Request, exc: TextifyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail)),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=create_error_response("Malformed request body."),
    )
