"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a router-wide auth dependency, the users router mixes open
routes (signup, login) with protected ones, so each protected handler
asks for the identity itself via Depends(get_current_identity).
"""

from fastapi import APIRouter

from docman.api.health import router as health_router
from docman.api.users import router as users_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users"])
