"""API v1 router aggregating all route modules."""

from fastapi import APIRouter

from app.api.v1.routes import (
    admin,
    auth,
    payments,
    profiles,
    students,
    tariffs,
    uploads,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(profiles.router)
api_router.include_router(admin.router)
api_router.include_router(tariffs.router)
api_router.include_router(students.router)
api_router.include_router(payments.router)
api_router.include_router(uploads.router)
