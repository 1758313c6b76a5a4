"""
Admin API endpoints for the Alumni Network admin dashboard.
All endpoints require the admin role.
"""
from fastapi import APIRouter

from alumni_api.api.endpoints.admin import dashboard, analytics, users, settings, export, notifications

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(dashboard.router, prefix="/dashboard", tags=["Admin Dashboard"])
admin_router.include_router(analytics.router, prefix="/analytics", tags=["Admin Analytics"])
admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
admin_router.include_router(settings.router, prefix="/settings", tags=["Admin Settings"])
admin_router.include_router(export.router, prefix="/export", tags=["Admin Export"])
admin_router.include_router(notifications.router, prefix="/notifications", tags=["Admin Notifications"])
