"""Health check endpoints."""

from typing import Dict

from fastapi import APIRouter

from ...infrastructure.settings import SERVICE_NAME

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, str]:
    """Report that the service is up."""
    return {"status": "ok", "service": SERVICE_NAME}
