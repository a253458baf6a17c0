"""
FastAPI Application

Main entry point for the training load engine web API.
"""

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from trainload.api.routes import plans, sessions, zones
from trainload.config import get_settings
from trainload.errors import EngineError
from trainload.logger import setup_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging once the server starts."""
    setup_logger(get_settings())
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Training Load Engine API",
    description="Training zones, session load scoring and season periodization",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS configuration - allow frontend to access API
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # React dev server
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(zones.router, prefix="/api", tags=["Zones"])
app.include_router(sessions.router, prefix="/api", tags=["Sessions"])
app.include_router(plans.router, prefix="/api", tags=["Plans"])


@app.get("/")
async def root() -> Dict[str, str]:
    """Root endpoint - API information."""
    return {
        "name": "Training Load Engine API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "trainload-api"}


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    """Refused engine input: the caller must correct it and retry."""
    logger.info(f"{request.url.path} refused: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": type(exc).__name__, "message": str(exc)},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "message": str(exc.detail)},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "trainload.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
