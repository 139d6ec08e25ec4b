"""API v1 routes."""

from fastapi import APIRouter

from blogai.api.v1 import admin, auth, collections, dashboard, generate, health, posts, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/user", tags=["user"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(collections.router, prefix="/collections", tags=["collections"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
router.include_router(generate.router, prefix="/generate", tags=["generate"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
