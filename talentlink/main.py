"""
TalentLink - Main Application

FastAPI backend with:
- MongoDB for users, jobs (with applications) and posts (with likes/comments)
- JWT bearer authentication

Run: uvicorn talentlink.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talentlink.api.routes import api_router
from talentlink.core.config import get_settings
from talentlink.core.errors import register_exception_handlers
from talentlink.core.logging import setup_logging
from talentlink.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)
    yield


# Create FastAPI app
app = FastAPI(
    title="TalentLink",
    description="""
    Job board and professional network.

    ## Features
    - **Authentication**: JWT bearer tokens
    - **Jobs**: Post, search, filter and apply; posters review applications
    - **Posts**: Feed, likes (toggle) and comments
    - **Users**: Profiles, search and connection requests
    """,
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
