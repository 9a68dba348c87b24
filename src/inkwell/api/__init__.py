"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a router-wide dependency, auth here is applied per route:
reads of posts, comments and users are public, while writes declare
Depends(get_current_user) on the handler itself.
"""

from fastapi import APIRouter

from inkwell.api.auth import router as auth_router
from inkwell.api.comments import router as comments_router
from inkwell.api.health import router as health_router
from inkwell.api.posts import router as posts_router
from inkwell.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(posts_router, tags=["posts"])
api_router.include_router(comments_router, tags=["comments"])
