"""Health check endpoint."""

from fastapi import APIRouter

from sse_session.models import HealthResponse

router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()
