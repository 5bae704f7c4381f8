"""API router for problem-related endpoints."""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.models.auth_models import Identity
from app.models.problem_models import (
    Difficulty,
    GenerateProblemRequest,
    ProblemCreate,
    ProblemDetail,
)
from app.routers.auth import get_current_identity
from app.services.generation_client import generation_client
from app.services.mongodb_service import (
    MongoProblemStore,
    MongoUserStore,
    mongodb_service,
)
from app.services.problem_service import ProblemService

logger = logging.getLogger(__name__)
router = APIRouter()


def get_problem_service() -> ProblemService:
    """Dependency injection for ProblemService."""
    return ProblemService(
        problems=MongoProblemStore(mongodb_service),
        users=MongoUserStore(mongodb_service),
        client=generation_client,
    )


@router.post(
    "/problems/generate",
    response_model=ProblemDetail,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def generate_problem(
    request: GenerateProblemRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: ProblemService = Depends(get_problem_service),
) -> ProblemDetail:
    """
    Generate a coding problem with AI and store it.

    Only interviewers may generate problems. The stored record keeps the
    exact prompt that was sent in ``aiPrompt``.
    """
    try:
        return await service.generate_problem(identity, request)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in generate_problem: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate problem",
        ) from e


@router.post(
    "/problems",
    response_model=ProblemDetail,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_problem(
    request: ProblemCreate,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: ProblemService = Depends(get_problem_service),
) -> ProblemDetail:
    """Create a custom (not AI-generated) problem. Interviewers only."""
    try:
        return await service.create_custom_problem(identity, request)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in create_problem: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create problem",
        ) from e


@router.get(
    "/problems", response_model=List[ProblemDetail], response_model_exclude_none=True
)
async def get_all_problems(
    difficulty: Optional[Difficulty] = Query(
        None, description="Filter by difficulty (easy/medium/hard)"
    ),
    identity: Optional[Identity] = Depends(get_current_identity),
    service: ProblemService = Depends(get_problem_service),
) -> List[ProblemDetail]:
    """
    Get all problems, newest first.

    Query Parameters:
        difficulty: Optional filter by difficulty ('easy', 'medium', 'hard')
    """
    try:
        return await service.list_problems(identity, difficulty)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in get_all_problems: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch problems from database",
        ) from e


@router.get(
    "/problems/mine",
    response_model=List[ProblemDetail],
    response_model_exclude_none=True,
)
async def get_my_problems(
    identity: Optional[Identity] = Depends(get_current_identity),
    service: ProblemService = Depends(get_problem_service),
) -> List[ProblemDetail]:
    """Get the problems created by the caller, newest first."""
    try:
        return await service.list_my_problems(identity)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in get_my_problems: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch problems from database",
        ) from e


@router.get(
    "/problems/{problem_id}",
    response_model=ProblemDetail,
    response_model_exclude_none=True,
)
async def get_problem_by_id(
    problem_id: str,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: ProblemService = Depends(get_problem_service),
) -> ProblemDetail:
    """
    Get a specific problem by ID with full details.

    Args:
        problem_id: The unique identifier of the problem
    """
    try:
        return await service.get_problem(identity, problem_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in get_problem_by_id: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch problem from database",
        ) from e


@router.delete("/problems/{problem_id}")
async def delete_problem(
    problem_id: str,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: ProblemService = Depends(get_problem_service),
) -> Dict[str, bool]:
    """Delete a problem. Only its creator may delete it."""
    try:
        await service.delete_problem(identity, problem_id)
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error in delete_problem: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete problem",
        ) from e
