from fastapi import APIRouter
from pingtopass.api.endpoints import admin, auth, dashboard, exams, health, monitoring, progress, sessions, study, tests

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(exams.router, prefix="/exams", tags=["exams"])
api_router.include_router(study.router, prefix="/study", tags=["study"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(tests.router, prefix="/tests", tags=["tests"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(monitoring.router, prefix="/monitoring", tags=["monitoring"])
