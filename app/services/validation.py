"""Validation of completion replies for generated coding problems."""

import json
import logging
from typing import Any, List, Sequence, Union

from pydantic import ValidationError

from app.models.problem_models import GeneratedProblem
from app.utils.errors import MalformedResponseError, SchemaViolationError

logger = logging.getLogger(__name__)


def _field_path(loc: Sequence[Union[str, int]]) -> str:
    """Render a pydantic error location as e.g. ``examples[0].output``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path or "<root>"


def collect_invalid_fields(error: ValidationError) -> List[str]:
    """
    Collect the distinct field paths reported by a pydantic validation error,
    in the order pydantic reported them.
    """
    fields: List[str] = []
    for item in error.errors():
        path = _field_path(item["loc"])
        if path not in fields:
            fields.append(path)
    return fields


def parse_problem(raw_reply_text: Any) -> GeneratedProblem:
    """
    Parse the raw completion reply into a GeneratedProblem.

    Raises MalformedResponseError when the text is not JSON and
    SchemaViolationError naming every missing or invalid field otherwise.
    """
    try:
        data = json.loads(raw_reply_text)
    except (TypeError, ValueError) as e:
        logger.warning("Completion reply is not valid JSON: %s", e)
        raise MalformedResponseError(
            f"Completion reply is not valid JSON: {e}"
        ) from e

    if not isinstance(data, dict):
        raise SchemaViolationError(
            ["<root>"], "Generated problem must be a JSON object"
        )

    try:
        return GeneratedProblem.model_validate(data)
    except ValidationError as e:
        fields = collect_invalid_fields(e)
        logger.warning("Generated problem failed validation: %s", fields)
        raise SchemaViolationError(fields) from e
