"""REST route aggregation.

All routers registered here get mounted in main.py, next to the GraphQL
endpoint.

Learn: Routes are open at the router level. The image upload requires a
user through its require_identity dependency; health is public.
"""

from fastapi import APIRouter

from inkpost.api.health import router as health_router
from inkpost.api.images import router as images_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(images_router, tags=["images"])
