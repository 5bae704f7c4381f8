"""Interview related Pydantic models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.problem_models import ProblemDetail


class InterviewStatus(str, Enum):
    """Interview lifecycle states. Transitions are caller-driven."""

    UPCOMING = "upcoming"
    LIVE = "live"
    COMPLETED = "completed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class InterviewCreate(BaseModel):
    """Request model for scheduling an interview."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    startTime: datetime
    status: InterviewStatus = InterviewStatus.UPCOMING
    streamCallId: str = Field(..., min_length=1)
    candidateId: str = Field(..., min_length=1)
    interviewerIds: List[str] = Field(default_factory=list)
    problemIds: List[str] = Field(
        default_factory=list, description="Problems to link, in display order"
    )


class InterviewStatusUpdate(BaseModel):
    """Request model for changing an interview's status."""

    status: InterviewStatus


class InterviewResponse(BaseModel):
    """Response model for interview data."""

    id: str
    title: str
    description: Optional[str] = None
    startTime: datetime
    endTime: Optional[datetime] = None
    status: InterviewStatus
    streamCallId: str
    candidateId: str
    interviewerIds: List[str]


class InterviewProblemLink(BaseModel):
    """Association between an interview and one of its problems."""

    interviewId: str
    problemId: str
    order: int = Field(..., ge=0)
    assignedAt: datetime


class InterviewProblemResponse(ProblemDetail):
    """A problem as it appears inside an interview."""

    order: int
    assignedAt: datetime
