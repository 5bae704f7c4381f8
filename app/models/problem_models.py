"""Models for coding problems, generated or hand-written."""

import json
import re
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

# Languages every problem must ship starter code for.
STARTER_CODE_LANGUAGES = ("javascript", "python", "java")

PROMPT_TERM_MAX_LENGTH = 60
_PROMPT_TERM_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 +#&/.,'()_-]*$")


class Difficulty(str, Enum):
    """Problem difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def normalize_prompt_term(value: Optional[str], field_name: str = "value") -> Optional[str]:
    """
    Normalize a caller-supplied topic/category before it is put in a prompt.

    Whitespace is collapsed and blank values become ``None``. Anything longer
    than ``PROMPT_TERM_MAX_LENGTH`` or outside the allowed character set
    raises ``ValueError``.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    cleaned = " ".join(value.split())
    if not cleaned:
        return None
    if len(cleaned) > PROMPT_TERM_MAX_LENGTH:
        raise ValueError(
            f"{field_name} must be at most {PROMPT_TERM_MAX_LENGTH} characters"
        )
    if not _PROMPT_TERM_PATTERN.match(cleaned):
        raise ValueError(f"{field_name} contains unsupported characters")
    return cleaned


def _json_text(value: Any) -> Any:
    """Render JSON scalars, arrays and objects as compact text; leave the rest."""
    if isinstance(value, (bool, int, float, list, dict)):
        return json.dumps(value, separators=(",", ":"))
    return value


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class ProblemExample(BaseModel):
    """One worked example of a problem."""

    model_config = ConfigDict(extra="ignore")

    input: str
    output: str
    explanation: Optional[str] = None

    @field_validator("input", "output", "explanation", mode="before")
    @classmethod
    def stringify_structured_values(cls, v: Any) -> Any:
        """Render JSON numbers, arrays and objects back to compact text."""
        return _json_text(v)


class StarterCode(BaseModel):
    """Starter code stubs, one per supported language."""

    model_config = ConfigDict(extra="ignore")

    javascript: str
    python: str
    java: str


class GeneratedProblem(BaseModel):
    """Problem content as returned by the completion endpoint."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    examples: List[ProblemExample] = Field(..., min_length=1)
    constraints: List[str] = Field(default_factory=list)
    starterCode: StarterCode
    hints: List[str] = Field(default_factory=list)

    @field_validator("title", "description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure text fields are not just whitespace."""
        return _require_text(v)

    @field_validator("constraints", "hints", mode="before")
    @classmethod
    def default_missing_lists(cls, v: Any) -> Any:
        """Treat an explicit null as an empty list; render non-text entries as text."""
        if v is None:
            return []
        if isinstance(v, list):
            return [_json_text(item) for item in v]
        return v


class GenerateProblemRequest(BaseModel):
    """Request body for AI problem generation."""

    difficulty: Difficulty
    topic: Optional[str] = Field(
        None, description="Specific topic, e.g. 'binary search' or 'two pointers'"
    )
    category: Optional[str] = Field(None, description="Category, e.g. 'arrays'")

    @field_validator("topic", "category", mode="before")
    @classmethod
    def validate_prompt_terms(cls, v: Any, info: ValidationInfo) -> Optional[str]:
        """Constrain free text that ends up inside the prompt."""
        return normalize_prompt_term(v, info.field_name)


class ProblemCreate(BaseModel):
    """Request body for creating a custom (hand-written) problem."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    difficulty: Difficulty
    category: Optional[str] = Field(None, max_length=100)
    tags: Optional[List[str]] = None
    examples: List[ProblemExample] = Field(..., min_length=1)
    starterCode: StarterCode
    constraints: List[str] = Field(default_factory=list)
    hints: List[str] = Field(default_factory=list)

    @field_validator("title", "description")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure text fields are not just whitespace."""
        return _require_text(v)


class NewProblem(ProblemCreate):
    """A validated problem plus ownership metadata, ready to be stored."""

    # Generated titles are stored as the model wrote them.
    title: str = Field(..., min_length=1)
    createdBy: str = Field(..., min_length=1)
    isAIGenerated: bool
    aiPrompt: Optional[str] = None

    @model_validator(mode="after")
    def check_ai_prompt(self) -> "NewProblem":
        """Only AI-generated problems carry the prompt used to generate them."""
        if not self.isAIGenerated and self.aiPrompt is not None:
            raise ValueError("aiPrompt is only allowed on AI-generated problems")
        return self


class ProblemDetail(NewProblem):
    """A stored problem (used by every /problems endpoint)."""

    id: str
    createdAt: datetime
