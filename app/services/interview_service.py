"""Service for interview scheduling and the problems assigned to interviews."""

import logging
from typing import List, Optional

from app.models.auth_models import Identity
from app.models.interview_models import (
    InterviewCreate,
    InterviewProblemResponse,
    InterviewResponse,
    InterviewStatus,
)
from app.services.authorization import require_identity
from app.services.store_interfaces import InterviewStore, ProblemStore
from app.utils.errors import NotFoundError

logger = logging.getLogger(__name__)


class InterviewService:
    """Interview operations for authenticated callers."""

    def __init__(self, interviews: InterviewStore, problems: ProblemStore):
        self.interviews = interviews
        self.problems = problems

    async def create_interview(
        self, identity: Optional[Identity], request: InterviewCreate
    ) -> InterviewResponse:
        """Create an interview; every linked problem must exist."""
        require_identity(identity)
        for problem_id in request.problemIds:
            if await self.problems.get(problem_id) is None:
                raise NotFoundError(f"Problem with ID '{problem_id}' not found")
        interview = await self.interviews.create(request)
        logger.info(
            "Created interview %s with %s problem(s)", interview.id, len(request.problemIds)
        )
        return interview

    async def list_interviews(self, identity: Optional[Identity]) -> List[InterviewResponse]:
        require_identity(identity)
        return await self.interviews.query_all()

    async def list_my_interviews(self, identity: Optional[Identity]) -> List[InterviewResponse]:
        identity = require_identity(identity)
        return await self.interviews.query_by_candidate(identity.subject)

    async def get_by_stream_call_id(
        self, identity: Optional[Identity], stream_call_id: str
    ) -> InterviewResponse:
        require_identity(identity)
        interview = await self.interviews.get_by_stream_call_id(stream_call_id)
        if interview is None:
            raise NotFoundError(f"No interview for call '{stream_call_id}'")
        return interview

    async def update_status(
        self, identity: Optional[Identity], interview_id: str, status: InterviewStatus
    ) -> InterviewResponse:
        """Change the status; moving to completed records the end time."""
        require_identity(identity)
        return await self.interviews.update_status(interview_id, status)

    async def get_interview_problems(
        self, identity: Optional[Identity], interview_id: str
    ) -> List[InterviewProblemResponse]:
        """Return the interview's problems in their assigned order."""
        require_identity(identity)
        if await self.interviews.get(interview_id) is None:
            raise NotFoundError(f"Interview with ID '{interview_id}' not found")

        results: List[InterviewProblemResponse] = []
        for link in await self.interviews.get_problem_links(interview_id):
            problem = await self.problems.get(link.problemId)
            if problem is None:
                logger.warning(
                    "Interview %s links missing problem %s", interview_id, link.problemId
                )
                continue
            results.append(
                InterviewProblemResponse(
                    **problem.model_dump(),
                    order=link.order,
                    assignedAt=link.assignedAt,
                )
            )
        return results
