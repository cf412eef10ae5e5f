"""
KOL Marketplace - Main Application

FastAPI backend with:
- PostgreSQL for all marketplace data (SQLite works for local runs and tests)
- Contact requests: businesses ask us to reach a KOL about a campaign
- Campaigns, applications, withdrawals, KOL profiles and discovery

Every error response has the shape {"error": "<message>"}.

Run: uvicorn kolmarket.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kolmarket.api.routes import api_router
from kolmarket.core.config import get_settings
from kolmarket.core.logging import configure_logging
from kolmarket.db.postgres import check_db_connection
from kolmarket.db.schema import init_schema
from kolmarket.schemas.schemas import ErrorResponse

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="KOL Marketplace",
    description="""
    Marketplace API connecting businesses with influencers (KOLs).

    ## Features
    - **Discover**: contact requests (request / list / withdraw), verified KOL listing
    - **Campaigns**: create, browse, apply, list and filter applicants
    - **Applications**: a KOL's own applications
    - **Withdrawals**: withdraw an application, cancel a campaign
    - **Profiles**: KOL profile fetch and update
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    in_body = any(err.get("loc", ("",))[0] == "body" for err in errors)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Invalid request body" if in_body else "Invalid request parameters"
        ).model_dump()
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ErrorResponse(error="Internal server error").model_dump())


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create missing tables on startup."""
    if not settings.auto_create_schema:
        return
    try:
        init_schema()
    except Exception as e:
        logger.warning("Schema initialization failed: %s", e)


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if check_db_connection() else "disconnected"
    }
