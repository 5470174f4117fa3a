from fastapi import APIRouter

from app.api.v1.endpoints import auth, health, students, tasks
from app.models.user import DeploymentProfile


def build_api_router(profile: str) -> APIRouter:
    """Shared auth and health routes plus the resource router of the profile"""
    router = APIRouter()

    router.include_router(health.router)
    router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

    if DeploymentProfile(profile) == DeploymentProfile.TASKS:
        router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
    else:
        router.include_router(students.router, prefix="/students", tags=["Student Records"])

    return router
