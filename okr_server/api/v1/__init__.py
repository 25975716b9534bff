"""
API v1 Router

Every endpoint here is scoped to the caller's organization; the organization
comes from the authenticated user, never from the path.
"""

from fastapi import APIRouter
from . import departments, okrs, organizations, teams, users

router = APIRouter()

router.include_router(organizations.router, prefix="/organizations", tags=["Organizations"])
router.include_router(departments.router, prefix="/departments", tags=["Departments"])
router.include_router(teams.router, prefix="/teams", tags=["Teams"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(okrs.router, prefix="/okrs", tags=["OKRs"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/organizations",
            "/departments",
            "/teams",
            "/users",
            "/okrs",
        ],
    }
