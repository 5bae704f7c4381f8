"""API router for interviews and the problems assigned to them."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.auth_models import Identity
from app.models.interview_models import (
    InterviewCreate,
    InterviewProblemResponse,
    InterviewResponse,
    InterviewStatusUpdate,
)
from app.routers.auth import get_current_identity
from app.services.interview_service import InterviewService
from app.services.mongodb_service import (
    MongoInterviewStore,
    MongoProblemStore,
    mongodb_service,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_interview_service() -> InterviewService:
    """Dependency injection for InterviewService."""
    return InterviewService(
        interviews=MongoInterviewStore(mongodb_service),
        problems=MongoProblemStore(mongodb_service),
    )


@router.post(
    "/interviews",
    response_model=InterviewResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_interview(
    request: InterviewCreate,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: InterviewService = Depends(get_interview_service),
) -> InterviewResponse:
    """Schedule an interview, linking the given problems in order."""
    try:
        return await service.create_interview(identity, request)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in create_interview: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create interview",
        ) from e


@router.get(
    "/interviews",
    response_model=List[InterviewResponse],
    response_model_exclude_none=True,
)
async def get_all_interviews(
    identity: Optional[Identity] = Depends(get_current_identity),
    service: InterviewService = Depends(get_interview_service),
) -> List[InterviewResponse]:
    """Get every interview."""
    try:
        return await service.list_interviews(identity)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in get_all_interviews: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch interviews",
        ) from e


@router.get(
    "/interviews/mine",
    response_model=List[InterviewResponse],
    response_model_exclude_none=True,
)
async def get_my_interviews(
    identity: Optional[Identity] = Depends(get_current_identity),
    service: InterviewService = Depends(get_interview_service),
) -> List[InterviewResponse]:
    """Get the interviews where the caller is the candidate."""
    try:
        return await service.list_my_interviews(identity)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in get_my_interviews: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch interviews",
        ) from e


@router.get(
    "/interviews/by-call/{stream_call_id}",
    response_model=InterviewResponse,
    response_model_exclude_none=True,
)
async def get_interview_by_stream_call_id(
    stream_call_id: str,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: InterviewService = Depends(get_interview_service),
) -> InterviewResponse:
    """Look up the interview bound to a video call."""
    try:
        return await service.get_by_stream_call_id(identity, stream_call_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in get_interview_by_stream_call_id: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch interview",
        ) from e


@router.patch(
    "/interviews/{interview_id}/status",
    response_model=InterviewResponse,
    response_model_exclude_none=True,
)
async def update_interview_status(
    interview_id: str,
    request: InterviewStatusUpdate,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: InterviewService = Depends(get_interview_service),
) -> InterviewResponse:
    """Change an interview's status. Completing it records the end time."""
    try:
        return await service.update_status(identity, interview_id, request.status)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in update_interview_status: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update interview status",
        ) from e


@router.get(
    "/interviews/{interview_id}/problems",
    response_model=List[InterviewProblemResponse],
    response_model_exclude_none=True,
)
async def get_interview_problems(
    interview_id: str,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: InterviewService = Depends(get_interview_service),
) -> List[InterviewProblemResponse]:
    """Get the interview's problems in their assigned order."""
    try:
        return await service.get_interview_problems(identity, interview_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in get_interview_problems: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch interview problems",
        ) from e
