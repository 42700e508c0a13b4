"""
Input Validator — decodes the loosely-typed argument bag into a typed request.

Reports only the first violated constraint, naming the offending field.
Messages are built from field paths and constraint text, never from the
rejected value itself.
"""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from shared.errors import InvalidArgumentError, sanitize_for_message

logger = logging.getLogger(__name__)


def validate_arguments(input_model: type[BaseModel], arguments: Any) -> BaseModel:
    """Validate arguments against input_model or raise InvalidArgumentError."""
    if not isinstance(arguments, dict):
        raise InvalidArgumentError("arguments", "expected a JSON object of named fields")

    try:
        return input_model.model_validate(arguments)
    except ValidationError as ve:
        first = ve.errors(include_url=False, include_input=False)[0]
        field = format_location(first.get("loc", ()))
        logger.debug("Validation failed for %s: %d error(s), first at %s", input_model.__name__, ve.error_count(), field)
        raise InvalidArgumentError(field, first.get("msg", "invalid value")) from None


def format_location(loc: tuple[Any, ...]) -> str:
    """('segments', 'legacy', 'revenue') → 'segments.legacy.revenue'."""
    if not loc:
        return "arguments"
    parts = []
    for part in loc:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        else:
            parts.append(("." if parts else "") + sanitize_for_message(part))
    return "".join(parts)
