"""
Tests for the problem generation pipeline and problem ownership.

Tests cover:
1. Authorization before any network call or store write
2. End-to-end generation against a mocked completion endpoint
3. Failure paths that must leave the store untouched
4. Custom creation, listing and deletion
"""

import json

import httpx
import pytest

from app.models.auth_models import Identity, Role
from app.models.problem_models import Difficulty, GenerateProblemRequest, ProblemCreate
from app.services.problem_service import ProblemService
from app.utils.errors import (
    ConfigurationError,
    ForbiddenError,
    MalformedResponseError,
    NotFoundError,
    SchemaViolationError,
    UnauthorizedError,
    UpstreamError,
)
from app.utils.prompts import build_prompt
from fakes import (
    CANDIDATE,
    INTERVIEWER,
    OTHER_INTERVIEWER,
    SAMPLE_PROBLEM,
    SAMPLE_REPLY,
    CompletionEndpoint,
    FakeGenerationClient,
    completion_response,
    make_generation_client,
)

REQUEST = GenerateProblemRequest(difficulty="medium", topic="arrays", category="algorithms")


def identity(subject: str) -> Identity:
    return Identity(subject=subject)


def custom_problem(**overrides) -> ProblemCreate:
    data = {
        "title": SAMPLE_PROBLEM["title"],
        "description": SAMPLE_PROBLEM["description"],
        "difficulty": "easy",
        "examples": SAMPLE_PROBLEM["examples"],
        "starterCode": SAMPLE_PROBLEM["starterCode"],
    }
    data.update(overrides)
    return ProblemCreate(**data)


class TestAuthorization:
    """Rejections happen before any completion call or store write."""

    async def test_candidate_cannot_generate(self, problem_service, fake_client, problem_store):
        with pytest.raises(ForbiddenError):
            await problem_service.generate_problem(identity(CANDIDATE), REQUEST)

        assert fake_client.calls == []
        assert problem_store.insert_calls == 0

    async def test_unknown_user_cannot_generate(self, problem_service, fake_client, problem_store):
        with pytest.raises(ForbiddenError):
            await problem_service.generate_problem(identity("nobody"), REQUEST)

        assert fake_client.calls == []
        assert problem_store.insert_calls == 0

    async def test_anonymous_caller_is_unauthorized(self, problem_service, fake_client):
        with pytest.raises(UnauthorizedError):
            await problem_service.generate_problem(None, REQUEST)

        assert fake_client.calls == []

    async def test_role_claim_alone_does_not_grant_access(self, problem_service, fake_client):
        """The stored role decides, not the token claim"""
        caller = Identity(subject=CANDIDATE, role=Role.INTERVIEWER)
        with pytest.raises(ForbiddenError):
            await problem_service.generate_problem(caller, REQUEST)

        assert fake_client.calls == []

    async def test_candidate_cannot_create_custom_problem(self, problem_service, problem_store):
        with pytest.raises(ForbiddenError):
            await problem_service.create_custom_problem(identity(CANDIDATE), custom_problem())

        assert problem_store.insert_calls == 0


class TestGenerationScenarios:
    """End-to-end runs through the real client and a mocked endpoint."""

    def service(self, problem_store, user_store, endpoint, **settings) -> ProblemService:
        client = make_generation_client(endpoint, **settings)
        return ProblemService(problem_store, user_store, client, malformed_retries=0)

    async def test_generated_problem_is_stored(self, problem_store, user_store):
        endpoint = CompletionEndpoint(completion_response(SAMPLE_REPLY))
        service = self.service(problem_store, user_store, endpoint)

        record = await service.generate_problem(identity(INTERVIEWER), REQUEST)

        user_prompt, system_prompt = build_prompt("medium", "arrays", "algorithms")
        assert record.id
        assert record.difficulty == Difficulty.MEDIUM
        assert record.tags == ["arrays"]
        assert record.category == "algorithms"
        assert record.isAIGenerated is True
        assert record.aiPrompt == user_prompt
        assert record.createdBy == INTERVIEWER
        assert record.title == "Two Sum"
        assert record.examples[0].output == "[0,1]"
        assert record.constraints == ["1<=n<=100"]
        assert record.hints == SAMPLE_PROBLEM["hints"]
        assert problem_store.records[record.id] == record

        sent = endpoint.requests[0]["messages"]
        assert sent == [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    async def test_missing_api_key(self, problem_store, user_store):
        endpoint = CompletionEndpoint(completion_response(SAMPLE_REPLY))
        service = self.service(problem_store, user_store, endpoint, openai_api_key=None)

        with pytest.raises(ConfigurationError):
            await service.generate_problem(identity(INTERVIEWER), REQUEST)

        assert endpoint.requests == []
        assert problem_store.insert_calls == 0

    async def test_upstream_failure(self, problem_store, user_store):
        endpoint = CompletionEndpoint(httpx.Response(500, text="rate limited"))
        service = self.service(problem_store, user_store, endpoint)

        with pytest.raises(UpstreamError) as exc_info:
            await service.generate_problem(identity(INTERVIEWER), REQUEST)

        assert "rate limited" in exc_info.value.message
        assert problem_store.insert_calls == 0

    async def test_malformed_reply(self, problem_store, user_store):
        endpoint = CompletionEndpoint(completion_response("not json"))
        service = self.service(problem_store, user_store, endpoint)

        with pytest.raises(MalformedResponseError):
            await service.generate_problem(identity(INTERVIEWER), REQUEST)

        assert problem_store.insert_calls == 0

    async def test_schema_violation(self, problem_store, user_store):
        reply = json.dumps({k: v for k, v in SAMPLE_PROBLEM.items() if k != "title"})
        endpoint = CompletionEndpoint(completion_response(reply))
        service = self.service(problem_store, user_store, endpoint)

        with pytest.raises(SchemaViolationError) as exc_info:
            await service.generate_problem(identity(INTERVIEWER), REQUEST)

        assert exc_info.value.fields == ["title"]
        assert problem_store.insert_calls == 0


class TestMalformedRetry:
    async def test_retry_recovers_from_one_malformed_reply(self, problem_store, user_store):
        client = FakeGenerationClient(["not json", SAMPLE_REPLY])
        service = ProblemService(problem_store, user_store, client, malformed_retries=1)

        record = await service.generate_problem(identity(INTERVIEWER), REQUEST)

        assert record.title == "Two Sum"
        assert len(client.calls) == 2
        assert problem_store.insert_calls == 1

    async def test_retries_exhausted_surface_malformed(self, problem_store, user_store):
        client = FakeGenerationClient(["not json"])
        service = ProblemService(problem_store, user_store, client, malformed_retries=1)

        with pytest.raises(MalformedResponseError):
            await service.generate_problem(identity(INTERVIEWER), REQUEST)

        assert len(client.calls) == 2
        assert problem_store.insert_calls == 0

    async def test_schema_violation_is_not_retried(self, problem_store, user_store):
        client = FakeGenerationClient(["{}", SAMPLE_REPLY])
        service = ProblemService(problem_store, user_store, client, malformed_retries=1)

        with pytest.raises(SchemaViolationError):
            await service.generate_problem(identity(INTERVIEWER), REQUEST)

        assert len(client.calls) == 1

    def test_default_retries_come_from_settings(self, problem_store, user_store, fake_client):
        service = ProblemService(problem_store, user_store, fake_client)
        assert service.malformed_retries == fake_client.settings.generation_malformed_retries


async def test_generation_without_optional_terms(problem_service):
    record = await problem_service.generate_problem(
        identity(INTERVIEWER), GenerateProblemRequest(difficulty="hard")
    )

    assert record.category is None
    assert record.tags is None
    assert record.aiPrompt == build_prompt("hard")[0]


async def test_long_generated_title_is_stored(problem_store, user_store):
    title = "Minimum Cost to Connect All Points " * 8
    client = FakeGenerationClient([json.dumps(dict(SAMPLE_PROBLEM, title=title))])
    service = ProblemService(problem_store, user_store, client, malformed_retries=0)

    record = await service.generate_problem(identity(INTERVIEWER), REQUEST)

    assert record.title == title
    assert problem_store.insert_calls == 1


async def test_custom_problem_has_no_ai_prompt(problem_service):
    record = await problem_service.create_custom_problem(
        identity(INTERVIEWER), custom_problem(tags=["hash-map"], category="arrays")
    )

    assert record.isAIGenerated is False
    assert record.aiPrompt is None
    assert record.tags == ["hash-map"]
    assert record.createdBy == INTERVIEWER


async def test_only_creator_can_delete(problem_service, problem_store):
    record = await problem_service.create_custom_problem(identity(INTERVIEWER), custom_problem())

    with pytest.raises(ForbiddenError):
        await problem_service.delete_problem(identity(OTHER_INTERVIEWER), record.id)
    assert problem_store.records[record.id] == record

    await problem_service.delete_problem(identity(INTERVIEWER), record.id)
    assert record.id not in problem_store.records


async def test_delete_missing_problem(problem_service):
    with pytest.raises(NotFoundError):
        await problem_service.delete_problem(identity(INTERVIEWER), "problem-404")


async def test_listing_is_newest_first(problem_service):
    first = await problem_service.create_custom_problem(identity(INTERVIEWER), custom_problem())
    second = await problem_service.generate_problem(identity(INTERVIEWER), REQUEST)
    await problem_service.create_custom_problem(identity(OTHER_INTERVIEWER), custom_problem())

    mine = await problem_service.list_my_problems(identity(INTERVIEWER))
    assert [p.id for p in mine] == [second.id, first.id]

    everything = await problem_service.list_problems(identity(CANDIDATE))
    assert len(everything) == 3
    assert everything[0].createdAt >= everything[1].createdAt >= everything[2].createdAt

    medium = await problem_service.list_problems(identity(CANDIDATE), Difficulty.MEDIUM)
    assert [p.id for p in medium] == [second.id]


async def test_listing_requires_identity(problem_service):
    with pytest.raises(UnauthorizedError):
        await problem_service.list_problems(None)
