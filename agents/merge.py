"""
Merge policy for extracted data.

A completion is cleaned of "not stated" sentinels, then assigned onto the
target top-level only: a nested object in the completion replaces the
target's object wholesale.
"""

import re
from typing import Any

from pydantic import BaseModel, ValidationError

from config.log import get_logger

log = get_logger(__name__)

_NULL = re.compile(r"^[^a-z0-9]*null[^a-z0-9]*$")
_UNDEFINED = re.compile(r"^[^a-z0-9]*undefined[^a-z0-9]*$")

# Marks a value removed by cleaning
_DROP = object()


def remove_nulls(value: Any) -> Any:
    """
    Recursively clean a completion value.

    Returns the cleaned value, or `_DROP` when nothing meaningful remains:
    None, blank or null/undefined strings, the number -1, and empty lists/dicts.
    List elements that clean to a falsy value are removed.
    """
    if value is None:
        return _DROP

    if isinstance(value, str):
        trimmed = value.strip()
        lowered = trimmed.lower()
        if not trimmed or _NULL.match(lowered) or _UNDEFINED.match(lowered):
            return _DROP
        return trimmed

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return _DROP if value == -1 else value

    if isinstance(value, (list, tuple)):
        cleaned = [remove_nulls(v) for v in value]
        cleaned = [v for v in cleaned if v is not _DROP and v]
        return cleaned if cleaned else _DROP

    if isinstance(value, dict):
        cleaned = {k: remove_nulls(v) for k, v in value.items()}
        cleaned = {k: v for k, v in cleaned.items() if v is not _DROP}
        return cleaned if cleaned else _DROP

    return value


def set_extracted_data(item: Any, completion: Any) -> None:
    """
    Assign cleaned completion data onto `item`.

    Args:
        item: A dict or pydantic model to update in place.
        completion: A dict or pydantic model from the LLM.
    """
    if isinstance(completion, BaseModel):
        completion = completion.model_dump(mode="json")

    cleaned = remove_nulls(completion)
    if cleaned is _DROP or not isinstance(cleaned, dict):
        return

    if isinstance(item, dict):
        item.update(cleaned)
        return

    if isinstance(item, BaseModel):
        fields = type(item).model_fields
        for key, value in cleaned.items():
            if key not in fields:
                continue
            try:
                setattr(item, key, value)
            except ValidationError as e:
                log.warning("Skipping extracted %s=%r: %s", key, value, e.errors()[0].get("msg", e))
        return

    raise TypeError(f"Cannot merge extracted data into {type(item).__name__}")
