"""
Shopify Import Panel - FastAPI service
"""
import logging

import uvicorn
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import status

from routes.api import register_routes
from import_panel.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Shopify Import Panel",
    description="Credentials, fetch and sync control panel for the Shopify import backend",
    version="1.0.0",
    docs_url="/docs" if settings.IS_DEVELOPMENT else None,
    redoc_url="/redoc" if settings.IS_DEVELOPMENT else None,
)

logger.info("🚀 Starting Shopify Import Panel")
logger.info(f"📊 Environment: {settings.ENV}")
logger.info(f"🔗 Import backend: {settings.BACKEND_BASE_URL}")
logger.info(f"🏬 Allowed stores: {settings.ALLOWED_STORE_URLS}")

if settings.IS_PRODUCTION and settings.MOCK_BACKEND:
    logger.warning("⚠️ MOCK_BACKEND is enabled in production. The panel will not reach the real import backend.")


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": jsonable_errors(exc),
            "message": "Validation error: Please check your request format"
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Last resort: log and answer 500 (message only in development)"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.IS_DEVELOPMENT else "An error occurred"
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
logger.info(f"✅ CORS configured for {len(settings.ALLOWED_ORIGINS)} origin(s)")

register_routes(app, settings)


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "import-panel",
        "environment": settings.ENV,
        "backend": settings.BACKEND_BASE_URL,
        "mock_backend": settings.MOCK_BACKEND,
    }


@app.get("/")
async def root():
    return JSONResponse(
        content={
            "message": "Shopify Import Panel",
            "version": "1.0.0",
            "panel": "/panel",
            "docs": "/docs" if settings.IS_DEVELOPMENT else None,
            "health": "/health",
        }
    )


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.IS_DEVELOPMENT,
        log_level=settings.LOG_LEVEL.lower()
    )
