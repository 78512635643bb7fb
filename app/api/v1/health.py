"""Liveness endpoint."""

from fastapi import APIRouter

from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health() -> HealthResponse:
    """
    Return a static liveness payload.
    Used by load balancers and monitoring; does not touch the database.
    """
    return HealthResponse()
