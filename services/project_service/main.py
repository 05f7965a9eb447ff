from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from database import init_db
from errors import MarketplaceError, handle_marketplace_error, handle_request_validation_error
from log import configure_logger
from routes import router
from admin_routes import router as admin_router
from notification_routes import router as notification_router
import os

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

app = FastAPI(
    title="Project Service API",
    description="Project moderation, bidding and bid selection for the construction marketplace",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(MarketplaceError, handle_marketplace_error)
app.add_exception_handler(RequestValidationError, handle_request_validation_error)

app.include_router(router)
app.include_router(admin_router)
app.include_router(notification_router)


@app.on_event("startup")
async def startup_event():
    configure_logger()
    init_db()
    logger.info("Project service started")


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "project-service"}
