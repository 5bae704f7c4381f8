"""
Abstract interfaces for the document store.

Focused, minimal interfaces for each collection:
- ProblemStore: problem records written by the generation pipeline and the
  custom creation path
- UserStore: per-user role records keyed by identity subject
- InterviewStore: interviews and their ordered problem links

Each call is atomic on its own; no cross-record transactions are required.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.models.auth_models import Identity, Role, UserResponse, UserSyncRequest
from app.models.interview_models import (
    InterviewCreate,
    InterviewProblemLink,
    InterviewResponse,
    InterviewStatus,
)
from app.models.problem_models import Difficulty, NewProblem, ProblemDetail


class ProblemStore(ABC):
    """Interface for problem persistence."""

    @abstractmethod
    async def insert(self, problem: NewProblem) -> ProblemDetail:
        """Store a new problem, assigning its identifier and createdAt."""

    @abstractmethod
    async def get(self, problem_id: str) -> Optional[ProblemDetail]:
        """Return the problem with this identifier, or None."""

    @abstractmethod
    async def query_all(self) -> List[ProblemDetail]:
        """Return every problem, newest first."""

    @abstractmethod
    async def query_by_creator(self, subject: str) -> List[ProblemDetail]:
        """Return problems created by this subject, newest first."""

    @abstractmethod
    async def query_by_difficulty(self, difficulty: Difficulty) -> List[ProblemDetail]:
        """Return problems of this difficulty, newest first."""

    @abstractmethod
    async def delete(self, problem_id: str) -> None:
        """Delete a problem. Raises NotFoundError if it does not exist."""


class UserStore(ABC):
    """Interface for user role records."""

    @abstractmethod
    async def get_by_subject(self, subject: str) -> Optional[UserResponse]:
        """Return the user record for an identity subject, or None."""

    @abstractmethod
    async def upsert(self, identity: Identity, profile: UserSyncRequest) -> UserResponse:
        """Create or refresh the caller's record, keeping an existing role."""

    @abstractmethod
    async def update_role(self, subject: str, role: Role) -> UserResponse:
        """Change a user's role. Raises NotFoundError for unknown subjects."""


class InterviewStore(ABC):
    """Interface for interviews and their problem links."""

    @abstractmethod
    async def create(self, interview: InterviewCreate) -> InterviewResponse:
        """Store an interview and link its problems in the given order."""

    @abstractmethod
    async def get(self, interview_id: str) -> Optional[InterviewResponse]:
        """Return the interview with this identifier, or None."""

    @abstractmethod
    async def query_all(self) -> List[InterviewResponse]:
        """Return every interview."""

    @abstractmethod
    async def query_by_candidate(self, candidate_id: str) -> List[InterviewResponse]:
        """Return interviews for a candidate."""

    @abstractmethod
    async def get_by_stream_call_id(self, stream_call_id: str) -> Optional[InterviewResponse]:
        """Return the interview bound to a call id, or None."""

    @abstractmethod
    async def update_status(
        self, interview_id: str, status: InterviewStatus
    ) -> InterviewResponse:
        """Change an interview's status. Raises NotFoundError if absent."""

    @abstractmethod
    async def get_problem_links(self, interview_id: str) -> List[InterviewProblemLink]:
        """Return the interview's problem links in ascending order."""
