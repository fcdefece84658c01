"""Rule check for edges proposed in the live editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .model import GraphEdge, Question
from .types import EdgeLabel, QuestionType

BOOLEAN_NEXT = "boolean questions cannot take a plain successor edge"
DUPLICATE_BRANCH = "duplicate branch"
SINGLE_SUCCESSOR = "linear questions take at most one successor"
BRANCH_NEEDS_BOOLEAN = "branch labels require a boolean source"
DUPLICATE_CONNECTION = "duplicate connection"


@dataclass(frozen=True)
class ConnectionVerdict:
    accepted: bool
    reason: str | None = None

    @classmethod
    def accept(cls) -> "ConnectionVerdict":
        return cls(True)

    @classmethod
    def reject(cls, reason: str) -> "ConnectionVerdict":
        return cls(False, reason)

    def to_dict(self) -> dict:
        return {"accepted": self.accepted, "reason": self.reason}


def validate_connection(
    source: Question,
    target: Question,
    label: EdgeLabel | str,
    existing_edges: Iterable[GraphEdge],
) -> ConnectionVerdict:
    """
    Decide whether ``source -label-> target`` may be added.

    Rules run in order and the first failure wins. Unknown labels raise
    ValueError since they are a caller error, not a rejection.
    """
    label = EdgeLabel(label)
    outgoing = [edge for edge in existing_edges if edge.source == source.id]
    is_boolean = source.type is QuestionType.BOOLEAN

    if is_boolean and label is EdgeLabel.NEXT:
        return ConnectionVerdict.reject(BOOLEAN_NEXT)

    if is_boolean and any(edge.label == label for edge in outgoing):
        return ConnectionVerdict.reject(DUPLICATE_BRANCH)

    if label is EdgeLabel.NEXT and any(edge.label == EdgeLabel.NEXT for edge in outgoing):
        return ConnectionVerdict.reject(SINGLE_SUCCESSOR)

    if not is_boolean and label in (EdgeLabel.YES, EdgeLabel.NO):
        return ConnectionVerdict.reject(BRANCH_NEEDS_BOOLEAN)

    if any(edge.target == target.id and edge.label == label for edge in outgoing):
        return ConnectionVerdict.reject(DUPLICATE_CONNECTION)

    return ConnectionVerdict.accept()
