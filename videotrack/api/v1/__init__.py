"""
API v1 Router

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from videotrack.api.v1.endpoints import completion, video

router = APIRouter()

# Include video attempt routes
router.include_router(video.router)

# Include completion capability routes
router.include_router(completion.router)
