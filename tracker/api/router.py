"""
API main router
"""

from fastapi import APIRouter

from tracker.api.endpoints import admin, auth, projects, tasks, users

api_router = APIRouter()

# Literal routes first: "/admin/..." must win over "/{user}/..." on the same path shape
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(admin.router, tags=["Admin"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(projects.router, tags=["Projects"])
api_router.include_router(tasks.router, tags=["Tasks"])
