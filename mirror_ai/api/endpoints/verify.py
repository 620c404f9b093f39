"""Verification API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...domain.models.verification import VerificationResult
from ...infrastructure.dependencies import ServiceContainer, get_service_container

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["verification"])


class VerifyRequest(BaseModel):
    """Request model for post verification."""

    text: Optional[str] = Field(None, description="Post text to verify")


class ErrorResponse(BaseModel):
    """Error payload returned by the API."""

    error: str


@router.post(
    "/verify",
    response_model=VerificationResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def verify_post(
    request: Optional[VerifyRequest] = None,
    container: ServiceContainer = Depends(get_service_container),
):
    """Verify the claims in a post.

    Missing or empty text is answered with a 400 error payload. A text of
    the wrong type fails request validation with FastAPI's 422 response.

    Args:
        request: Verification request
        container: Service container providing the pipeline

    Returns:
        Verification result, or an error payload
    """
    if request is None or not request.text:
        return JSONResponse(status_code=400, content={"error": "Text is required"})

    logger.info(f"Starting verification for text: {request.text[:100]}...")
    try:
        pipeline = await container.get_verification_pipeline()
        return await pipeline.verify_post(request.text)
    except Exception as e:
        logger.error(f"Verification error: {type(e).__name__}: {str(e)}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Verification failed"})
