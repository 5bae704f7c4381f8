"""Service for coding problem operations, including AI generation."""

import logging
from typing import List, Optional

from app.models.auth_models import Identity, Role
from app.models.problem_models import (
    Difficulty,
    GeneratedProblem,
    GenerateProblemRequest,
    NewProblem,
    ProblemCreate,
    ProblemDetail,
)
from app.services.authorization import authorize, ensure_owner, require_identity
from app.services.generation_client import GenerationClient
from app.services.store_interfaces import ProblemStore, UserStore
from app.services.validation import parse_problem
from app.utils.errors import MalformedResponseError, NotFoundError
from app.utils.prompts import build_prompt

logger = logging.getLogger(__name__)


class ProblemService:
    """
    Single entry point for every problem operation.

    Generation runs: authorization -> prompt -> completion -> validation ->
    store write. Nothing is written unless every earlier step succeeded.
    """

    def __init__(
        self,
        problems: ProblemStore,
        users: UserStore,
        client: GenerationClient,
        malformed_retries: Optional[int] = None,
    ):
        self.problems = problems
        self.users = users
        self.client = client
        if malformed_retries is None:
            malformed_retries = client.settings.generation_malformed_retries
        self.malformed_retries = malformed_retries

    async def _generate(self, system_prompt: str, user_prompt: str) -> GeneratedProblem:
        attempt = 1
        while True:
            raw_reply = await self.client.request_completion(system_prompt, user_prompt)
            try:
                return parse_problem(raw_reply)
            except MalformedResponseError:
                if attempt > self.malformed_retries:
                    raise
                logger.warning("Malformed completion reply (attempt %s), retrying", attempt)
                attempt += 1

    async def generate_problem(
        self, identity: Optional[Identity], request: GenerateProblemRequest
    ) -> ProblemDetail:
        """Generate a problem with the completion endpoint and store it."""
        await authorize(identity, Role.INTERVIEWER, self.users, "generate problems")

        user_prompt, system_prompt = build_prompt(
            request.difficulty, request.topic, request.category
        )
        generated = await self._generate(system_prompt, user_prompt)

        problem = NewProblem(
            title=generated.title,
            description=generated.description,
            difficulty=request.difficulty,
            category=request.category,
            tags=[request.topic] if request.topic else None,
            examples=generated.examples,
            starterCode=generated.starterCode,
            constraints=generated.constraints,
            hints=generated.hints,
            createdBy=identity.subject,
            isAIGenerated=True,
            aiPrompt=user_prompt,
        )
        return await self.problems.insert(problem)

    async def create_custom_problem(
        self, identity: Optional[Identity], request: ProblemCreate
    ) -> ProblemDetail:
        """Store a hand-written problem."""
        await authorize(identity, Role.INTERVIEWER, self.users, "create problems")
        problem = NewProblem(
            **request.model_dump(),
            createdBy=identity.subject,
            isAIGenerated=False,
        )
        return await self.problems.insert(problem)

    async def delete_problem(self, identity: Optional[Identity], problem_id: str) -> None:
        """Delete a problem owned by the caller."""
        identity = require_identity(identity)
        problem = await self.problems.get(problem_id)
        if problem is None:
            raise NotFoundError(f"Problem with ID '{problem_id}' not found")
        ensure_owner(identity, problem)
        await self.problems.delete(problem_id)

    async def get_problem(self, identity: Optional[Identity], problem_id: str) -> ProblemDetail:
        """Return a single problem."""
        require_identity(identity)
        problem = await self.problems.get(problem_id)
        if problem is None:
            raise NotFoundError(f"Problem with ID '{problem_id}' not found")
        return problem

    async def list_problems(
        self, identity: Optional[Identity], difficulty: Optional[Difficulty] = None
    ) -> List[ProblemDetail]:
        """Return all problems, optionally only those of one difficulty."""
        require_identity(identity)
        if difficulty is not None:
            return await self.problems.query_by_difficulty(difficulty)
        return await self.problems.query_all()

    async def list_my_problems(self, identity: Optional[Identity]) -> List[ProblemDetail]:
        """Return the caller's problems, newest first."""
        identity = require_identity(identity)
        return await self.problems.query_by_creator(identity.subject)
