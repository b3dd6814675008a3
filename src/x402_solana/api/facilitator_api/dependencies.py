"""FastAPI dependencies for the facilitator API."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ...application.facilitator.use_cases.facilitator import FacilitatorService


def get_facilitator_service(request: Request) -> FacilitatorService:
    """Get the facilitator service created at application startup."""
    service = getattr(request.app.state, "facilitator_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Facilitator is not initialized",
        )
    return service
