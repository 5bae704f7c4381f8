"""Utility functions to generate prompts for coding problem generation."""

import json
from typing import Dict, Optional, Tuple, Union

from app.models.problem_models import (
    STARTER_CODE_LANGUAGES,
    Difficulty,
    normalize_prompt_term,
)

# Shape the completion must reply with. The response validator checks the
# same keys (see GeneratedProblem).
PROBLEM_SCHEMA_TEMPLATE: Dict[str, object] = {
    "title": "string",
    "description": "string",
    "examples": [{"input": "string", "output": "string", "explanation": "string"}],
    "constraints": ["string"],
    "starterCode": {language: "string" for language in STARTER_CODE_LANGUAGES},
    "hints": ["string"],
}


def _problem_subject(
    difficulty: Difficulty, topic: Optional[str], category: Optional[str]
) -> str:
    article = "an" if difficulty.value[0] in "aeiou" else "a"
    subject = f"{article} {difficulty.value} level coding problem"
    if topic:
        subject += f" about {topic}"
    if category:
        subject += f" in the {category} category"
    return subject


def get_schema_description() -> str:
    """Return the JSON schema text embedded in the system prompt."""
    return json.dumps(PROBLEM_SCHEMA_TEMPLATE, indent=2)


def build_prompt(
    difficulty: Union[Difficulty, str],
    topic: Optional[str] = None,
    category: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Build the (user prompt, system prompt) pair for problem generation.

    ``topic`` and ``category`` go through ``normalize_prompt_term`` first, so
    an invalid value raises ``ValueError`` and never reaches the prompt.
    """
    difficulty = Difficulty(difficulty)
    topic = normalize_prompt_term(topic, "topic")
    category = normalize_prompt_term(category, "category")
    subject = _problem_subject(difficulty, topic, category)

    user_prompt = (
        f"Generate {subject}. "
        "The problem should be challenging but solvable within 30-45 minutes."
    )

    system_prompt = f"""You are an expert coding interview problem generator.
Generate {subject}.
The problem should be solvable in 30-45 minutes.

Include:
- Title: a clear, concise title
- Description: a detailed problem statement
- Examples: 2-3 test cases with input, output, and explanation
- Constraints: 3-5 constraints for the solution
- Starter Code: function stubs in JavaScript, Python, and Java
- Hints: 3 helpful hints for solving the problem

Format the response as a valid JSON object with these exact keys:
{get_schema_description()}

Every key is required. "examples" must contain at least one entry and
"starterCode" must contain all of: {", ".join(STARTER_CODE_LANGUAGES)}."""

    return user_prompt, system_prompt
