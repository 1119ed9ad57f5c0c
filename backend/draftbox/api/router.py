"""API router that aggregates all routes."""

from fastapi import APIRouter

from draftbox.api.routes import designs, folders, health, search, tags

api_router = APIRouter(prefix="/api")

# Include route modules
api_router.include_router(health.router)

# V1 API routes
v1_router = APIRouter(prefix="/v1")
v1_router.include_router(designs.router)
v1_router.include_router(folders.router)
v1_router.include_router(search.router)
v1_router.include_router(tags.router)

api_router.include_router(v1_router)
