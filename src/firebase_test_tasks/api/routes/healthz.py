from fastapi import APIRouter

from firebase_test_tasks.api.openapi import error_responses
from firebase_test_tasks.api.schemas import HealthzResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthzResponse, responses=error_responses(500))
def healthz() -> HealthzResponse:
    return HealthzResponse(status="ok")
