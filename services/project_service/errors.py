"""Domain exceptions raised by crud.py and their FastAPI handlers."""

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class MarketplaceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST


class ProjectNotOpenForBidding(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, project_id: int, project_status: str):
        super().__init__(f"Project {project_id} is not open for bidding (status: {project_status})")
        self.project_id = project_id
        self.project_status = project_status


class InvalidProjectTransition(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, project_id: int, project_status: str, action: str):
        super().__init__(f"Cannot {action} project {project_id} (status: {project_status})")
        self.project_id = project_id
        self.project_status = project_status
        self.action = action


async def handle_marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
    logger.bind(
        http_status=exc.status_code,
        http_method=request.method,
        url_path=str(request.url.path),
    ).info(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are reported as 400 with field-level detail."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    logger.bind(
        http_method=request.method,
        url_path=str(request.url.path),
        errors=errors,
    ).info("Request validation failed")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"success": False, "errors": errors}),
    )
