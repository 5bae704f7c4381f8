"""Shared fixtures. The environment is set before the application is imported."""

import os

os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["RATE_LIMIT_PER_MINUTE"] = "1000"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.auth_models import Role
from app.routers.auth import get_user_store
from app.routers.interviews import get_interview_service
from app.routers.problems import get_problem_service
from app.services.interview_service import InterviewService
from app.services.problem_service import ProblemService
from fakes import (
    CANDIDATE,
    INTERVIEWER,
    OTHER_INTERVIEWER,
    FakeGenerationClient,
    InMemoryInterviewStore,
    InMemoryProblemStore,
    InMemoryUserStore,
)


@pytest.fixture
def problem_store() -> InMemoryProblemStore:
    return InMemoryProblemStore()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    store = InMemoryUserStore()
    store.add(INTERVIEWER, Role.INTERVIEWER)
    store.add(OTHER_INTERVIEWER, Role.INTERVIEWER)
    store.add(CANDIDATE, Role.CANDIDATE)
    return store


@pytest.fixture
def interview_store() -> InMemoryInterviewStore:
    return InMemoryInterviewStore()


@pytest.fixture
def fake_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def problem_service(problem_store, user_store, fake_client) -> ProblemService:
    return ProblemService(problem_store, user_store, fake_client, malformed_retries=0)


@pytest.fixture
def interview_service(interview_store, problem_store) -> InterviewService:
    return InterviewService(interview_store, problem_store)


@pytest.fixture
def api_client(problem_service, interview_service, user_store):
    """TestClient with the stores and completion client replaced by fakes."""
    app.dependency_overrides[get_problem_service] = lambda: problem_service
    app.dependency_overrides[get_interview_service] = lambda: interview_service
    app.dependency_overrides[get_user_store] = lambda: user_store
    yield TestClient(app)
    app.dependency_overrides.clear()
