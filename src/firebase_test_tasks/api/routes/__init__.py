from fastapi import APIRouter

from firebase_test_tasks.api.routes.healthz import router as healthz_router
from firebase_test_tasks.api.routes.tasks import router as tasks_router

api_router = APIRouter()
api_router.include_router(healthz_router)
api_router.include_router(tasks_router)
