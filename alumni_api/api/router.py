from fastapi import APIRouter

from alumni_api.api.endpoints import auth, users, events, announcements, jobs, payments
from alumni_api.api.endpoints.admin import admin_router

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Admin routes (/admin/dashboard, /admin/users, ...)
api_router.include_router(admin_router)
