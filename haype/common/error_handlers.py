from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from haype.common.response import ErrorResponse
from haype.logger_config import logger


def register_error_handlers(app: FastAPI):
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # 404, 400, 401 ... raised by routers and dependencies
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
        return ErrorResponse.send(
            message=str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg"),
            }
            for err in exc.errors()
        ]
        return ErrorResponse.send(message="Validation error", status_code=422, errors=errors)

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return ErrorResponse.send(message="Internal Server Error", status_code=500)
