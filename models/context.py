"""
LLM context — the item under extraction plus supporting documents.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from tools.errors import ValidationFailed

T = TypeVar("T")


@dataclass
class ContextEntry:
    description: str
    content: Any


@dataclass
class LLMContext(Generic[T]):
    """An item to extract into, with optional supporting context."""

    item: T
    context: Optional[list[ContextEntry]] = field(default=None)

    def to_prompt(self) -> str:
        """
        Serialize for the completion request.

        A bare string item without context is passed through unchanged;
        anything else becomes a JSON document with "item" and "context".

        Raises:
            ValidationFailed: if the item or context cannot be serialized.
        """
        if isinstance(self.item, str) and not self.context:
            return self.item

        doc: dict[str, Any] = {"item": _plain(self.item)}
        if self.context:
            doc["context"] = [
                {"description": entry.description, "content": _plain(entry.content)}
                for entry in self.context
            ]

        try:
            return json.dumps(doc, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValidationFailed("Context could not be serialized", e) from e


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    return value
