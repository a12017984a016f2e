"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from talentlink.api.routes.auth_routes import router as auth_router
from talentlink.api.routes.user_routes import router as user_router
from talentlink.api.routes.job_routes import router as job_router
from talentlink.api.routes.post_routes import router as post_router
from talentlink.schemas.schemas import ErrorResponse, ValidationErrorResponse

# Error bodies produced by talentlink.core.errors, documented on every route
ERROR_RESPONSES = {
    400: {"model": ValidationErrorResponse, "description": "Invalid request fields"},
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}

# Main API router
api_router = APIRouter(responses=ERROR_RESPONSES)

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(job_router)
api_router.include_router(post_router)
