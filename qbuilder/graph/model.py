"""In-memory question graph: questions, their connections, and per-slot criteria."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from ..criteria import Criterion, CriterionKind
from .types import (
    BRANCH_SLOTS,
    NEXT_SLOT,
    NO_SLOT,
    YES_SLOT,
    EdgeLabel,
    QuestionType,
    default_type_params,
    slots_for,
)


class QuestionNotFound(KeyError):
    """No question with the given id exists in the graph."""


# Content fields callers may change through QuestionGraph.update()
EDITABLE_FIELDS = (
    "text",
    "subtitle",
    "placeholder",
    "tags",
    "labels",
    "options",
    "type_params",
    "required",
    "auto_next",
    "internal_note",
)

_STRING_FIELDS = ("text", "subtitle", "placeholder", "internal_note")
_STRING_LIST_FIELDS = ("tags", "labels", "options")
_FLAG_FIELDS = ("required", "auto_next")


def _checked(name: str, value: Any) -> Any:
    """Validate one editable field and return the value to store."""
    if name in _STRING_LIST_FIELDS:
        if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
            raise ValueError(f"{name} must be a list of strings")
        return list(value)
    if name == "type_params":
        if not isinstance(value, dict):
            raise ValueError("type_params must be an object")
        return dict(value)
    if name in _STRING_FIELDS and not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    if name in _FLAG_FIELDS and not isinstance(value, bool):
        raise ValueError(f"{name} must be true or false")
    return value


def _checked_fields(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown question fields: {', '.join(sorted(unknown))}")
    return {name: _checked(name, value) for name, value in fields.items()}


def slot_criteria(slot: str, criteria: Iterable[Criterion]) -> list[Criterion]:
    """
    Normalize criteria for storage on ``slot``.

    A branch slot already names its boolean outcome, and "Boolean yes" is
    what the exporter writes for a linear slot with no criteria, so those
    markers are not stored. Repeats are dropped.
    """
    if slot in BRANCH_SLOTS:
        kept = [criterion for criterion in criteria if not criterion.is_boolean]
    else:
        kept = [criterion for criterion in criteria if criterion.kind is not CriterionKind.BOOL_YES]
    return list(dict.fromkeys(kept))


@dataclass
class Branches:
    yes: str | None = None
    no: str | None = None


@dataclass
class Question:
    id: str
    text: str = ""
    type: QuestionType = QuestionType.LONG_TEXT
    subtitle: str = ""
    placeholder: str = ""
    tags: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    options: list[str] = field(default_factory=list)
    type_params: dict[str, Any] = field(default_factory=dict)
    required: bool = False
    auto_next: bool = False
    internal_note: str = ""
    next_question: str | None = None
    branches: Branches = field(default_factory=Branches)
    edge_criteria: dict[str, list[Criterion]] = field(default_factory=dict)

    @property
    def is_boolean(self) -> bool:
        return self.type is QuestionType.BOOLEAN

    def target(self, slot: str) -> str | None:
        if slot == NEXT_SLOT:
            return self.next_question
        if slot == YES_SLOT:
            return self.branches.yes
        if slot == NO_SLOT:
            return self.branches.no
        raise ValueError(f"Unknown connection slot: {slot}")

    def set_target(self, slot: str, target_id: str | None) -> None:
        if slot == NEXT_SLOT:
            self.next_question = target_id
        elif slot == YES_SLOT:
            self.branches.yes = target_id
        elif slot == NO_SLOT:
            self.branches.no = target_id
        else:
            raise ValueError(f"Unknown connection slot: {slot}")

    def criteria(self, slot: str) -> list[Criterion]:
        return self.edge_criteria.setdefault(slot, [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "subtitle": self.subtitle,
            "placeholder": self.placeholder,
            "tags": list(self.tags),
            "labels": list(self.labels),
            "options": list(self.options),
            "type_params": dict(self.type_params),
            "required": self.required,
            "auto_next": self.auto_next,
            "internal_note": self.internal_note,
            "next_question": self.next_question,
            "branches": {"yes": self.branches.yes, "no": self.branches.no},
            "edge_criteria": {
                slot: [criterion.to_dict() for criterion in criteria]
                for slot, criteria in self.edge_criteria.items()
            },
        }


@dataclass
class GraphEdge:
    """Derived view of one populated connection slot."""
    source: str
    target: str
    label: EdgeLabel
    criteria: list[Criterion] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "label": self.label.value,
            "criteria": [criterion.to_dict() for criterion in self.criteria],
        }


@dataclass
class GraphMeta:
    """Questionnaire-level fields carried by the graph record."""
    name: str | None = None
    category: Any = None
    status: str | None = None
    internal_note: str | None = None
    variant: str | None = None
    variant_weighting: str | None = None
    start_question_id: str | None = None
    end_question_id: str | None = None


_SLOT_LABELS = {NEXT_SLOT: EdgeLabel.NEXT, YES_SLOT: EdgeLabel.YES, NO_SLOT: EdgeLabel.NO}


class QuestionGraph:
    """
    Ordered mapping of question id to question.

    Order is the editor's question order: the exporter treats the first and
    last questions as the questionnaire's start and end.
    """

    def __init__(self, questions: Iterable[Question] = (), meta: GraphMeta | None = None):
        self._questions: dict[str, Question] = {}
        self._order: list[str] = []
        self.meta = meta or GraphMeta()
        for question in questions:
            self.add(question)

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Question]:
        return (self._questions[qid] for qid in self._order)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._questions

    @property
    def questions(self) -> list[Question]:
        return list(self)

    @property
    def ids(self) -> list[str]:
        return list(self._order)

    def get(self, question_id: str) -> Question:
        try:
            return self._questions[question_id]
        except KeyError:
            raise QuestionNotFound(question_id) from None

    def index_of(self, question_id: str) -> int:
        self.get(question_id)
        return self._order.index(question_id)

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------

    def add(self, question: Question) -> Question:
        if question.id in self._questions:
            raise ValueError(f"Duplicate question id: {question.id}")
        self._questions[question.id] = question
        self._order.append(question.id)
        return question

    def create(
        self,
        question_id: str,
        text: str = "New Question",
        question_type: QuestionType | str = QuestionType.LONG_TEXT,
        **fields: Any,
    ) -> Question:
        question_type = QuestionType(question_type)
        fields = _checked_fields(fields)
        question = Question(
            id=question_id,
            text=_checked("text", text),
            type=question_type,
            type_params=default_type_params(question_type),
        )
        for name, value in fields.items():
            setattr(question, name, value)
        return self.add(question)

    def update(self, question_id: str, **changes: Any) -> Question:
        question = self.get(question_id)
        new_type = changes.pop("type", None)
        changes = _checked_fields(changes)
        if new_type is not None:
            self.change_type(question_id, new_type)
        for name, value in changes.items():
            setattr(question, name, value)
        return question

    def change_type(self, question_id: str, new_type: QuestionType | str) -> Question:
        """
        Switch a question's type and reset its connection shape.

        All targets are cleared. Criteria lists survive only for slot names
        the new type still exposes.
        """
        question = self.get(question_id)
        new_type = QuestionType(new_type)
        if new_type is question.type:
            return question

        question.type_params = default_type_params(new_type, question.type_params)
        if not new_type.is_list:
            question.options = []
        question.type = new_type
        question.next_question = None
        question.branches = Branches()

        kept = slots_for(new_type)
        question.edge_criteria = {
            slot: question.edge_criteria.get(slot, []) for slot in kept
        }
        return question

    def delete(self, question_id: str) -> Question:
        """Remove a question and unset every slot that pointed at it, with its criteria."""
        question = self.get(question_id)
        del self._questions[question_id]
        self._order.remove(question_id)

        for other in self._questions.values():
            for slot in (NEXT_SLOT, YES_SLOT, NO_SLOT):
                if other.target(slot) == question_id:
                    other.set_target(slot, None)
                    other.edge_criteria.pop(slot, None)
        return question

    # ------------------------------------------------------------------
    # Ordering and editor conveniences
    # ------------------------------------------------------------------

    def move(self, question_id: str, direction: str) -> bool:
        """Swap a question with its neighbour. Returns False at either end."""
        index = self.index_of(question_id)
        if direction == "up":
            other = index - 1
        elif direction == "down":
            other = index + 1
        else:
            raise ValueError(f"Unknown direction: {direction}")
        if other < 0 or other >= len(self._order):
            return False
        self._order[index], self._order[other] = self._order[other], self._order[index]
        return True

    def move_up(self, question_id: str) -> bool:
        return self.move(question_id, "up")

    def move_down(self, question_id: str) -> bool:
        return self.move(question_id, "down")

    def copy(self, question_id: str, new_id: str) -> Question:
        source = self.get(question_id)
        duplicate = Question(
            id=new_id,
            text=f"{source.text} (Copy)",
            type=source.type,
            subtitle=source.subtitle,
            placeholder=source.placeholder,
            tags=list(source.tags),
            labels=list(source.labels),
            options=list(source.options),
            type_params=dict(source.type_params),
            required=source.required,
            auto_next=source.auto_next,
            internal_note=source.internal_note,
        )
        return self.add(duplicate)

    def swap_titles(self, first_id: str, second_id: str) -> None:
        first, second = self.get(first_id), self.get(second_id)
        first.text, second.text = second.text, first.text

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def get_connection(self, question_id: str) -> dict[str, str | None]:
        question = self.get(question_id)
        return {slot: question.target(slot) for slot in slots_for(question.type)}

    def set_connection(self, question_id: str, slot: str, target_id: str | None) -> None:
        question = self.get(question_id)
        if slot not in slots_for(question.type):
            raise ValueError(
                f"Question {question_id} ({question.type.value}) has no '{slot}' slot"
            )
        if target_id is not None:
            self.get(target_id)
        question.set_target(slot, target_id)

    def clear_connection(self, question_id: str, slot: str) -> None:
        """Unset one slot. Its criteria go with it."""
        question = self.get(question_id)
        question.set_target(slot, None)
        question.edge_criteria.pop(slot, None)

    def get_criteria(self, question_id: str, slot: str) -> list[Criterion]:
        return list(self.get(question_id).edge_criteria.get(slot, []))

    def set_criteria(self, question_id: str, slot: str, criteria: Iterable[Criterion]) -> None:
        if slot != NEXT_SLOT and slot not in BRANCH_SLOTS:
            raise ValueError(f"Unknown connection slot: {slot}")
        self.get(question_id).edge_criteria[slot] = slot_criteria(slot, criteria)

    def edges(self) -> list[GraphEdge]:
        """Every populated slot, in question order then next/yes/no order."""
        edges: list[GraphEdge] = []
        for question in self:
            for slot in (NEXT_SLOT, YES_SLOT, NO_SLOT):
                target = question.target(slot)
                if target is None:
                    continue
                edges.append(
                    GraphEdge(
                        source=question.id,
                        target=target,
                        label=_SLOT_LABELS[slot],
                        criteria=list(question.edge_criteria.get(slot, [])),
                    )
                )
        return edges

    def to_dict(self) -> dict[str, Any]:
        return {
            "questions": [question.to_dict() for question in self],
            "edges": [edge.to_dict() for edge in self.edges()],
        }
