"""
Core types for the question graph.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class QuestionType(str, Enum):
    TEXT = "text"
    LONG_TEXT = "long_text"
    SHORT_TEXT = "short_text"
    SINGLE_SELECTION_LIST = "single_selection_list"
    MULTI_SELECTION_LIST = "multi_selection_list"
    BOOLEAN = "boolean"
    NUMBER = "number"
    FLOAT = "float"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    DEAD_END = "dead_end"

    @property
    def is_list(self) -> bool:
        return self in (QuestionType.SINGLE_SELECTION_LIST, QuestionType.MULTI_SELECTION_LIST)


class EdgeLabel(str, Enum):
    """Label the editor puts on a proposed edge."""
    NEXT = "Next"
    YES = "Yes"
    NO = "No"

    @property
    def slot(self) -> str:
        return self.value.lower()


# Connection slot names; criteria lists are keyed by these
NEXT_SLOT = "next"
YES_SLOT = "yes"
NO_SLOT = "no"
BRANCH_SLOTS = (YES_SLOT, NO_SLOT)


def slots_for(question_type: QuestionType) -> tuple[str, ...]:
    """Connection slots a question of this type exposes."""
    if question_type is QuestionType.BOOLEAN:
        return BRANCH_SLOTS
    return (NEXT_SLOT,)


def default_type_params(
    question_type: QuestionType,
    previous: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Fresh ``type_params`` for a question switching to ``question_type``."""
    previous = previous or {}
    if question_type.is_list:
        return {
            "other": previous.get("other", False),
            "exclusive": list(previous.get("exclusive", [])),
        }
    if question_type is QuestionType.NUMBER:
        return {"min": None, "max": None}
    if question_type is QuestionType.FLOAT:
        return {"min": None, "max": None, "decimal_places": 2}
    if question_type is QuestionType.DATE:
        return {"format": "YYYY-MM-DD"}
    if question_type is QuestionType.TIME:
        return {"format": "HH:mm"}
    if question_type is QuestionType.DATETIME:
        return {"format": "YYYY-MM-DD HH:mm"}
    return {}
