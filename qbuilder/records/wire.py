"""
Flat record wire format.

Every element of the exchanged JSON array looks like::

    {"model": "questionnaire.edge", "pk": 2100, "fields": {...}}

``decode_record`` turns one element into one of the record dataclasses below
so the rest of the package never compares model strings itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

Key = Union[str, int]

GRAPH_MODEL = "questionnaire.questionnairegraph"
QUESTION_MODEL = "questionnaire.question"
TAG_MODEL = "questionnaire.questiontag"
LABEL_MODEL = "questionnaire.questionlabel"
NODE_MODEL = "questionnaire.node"
EDGE_MODEL = "questionnaire.edge"
CRITERION_MODEL = "questionnaire.edgetriggercriteria"

REQUIRED_MODELS = (QUESTION_MODEL, NODE_MODEL, EDGE_MODEL)


class RecordDecodeError(ValueError):
    """An element of the record list cannot be decoded."""


def _wrap(model: str, pk: Key, fields: dict[str, Any]) -> dict[str, Any]:
    return {"model": model, "pk": pk, "fields": fields}


@dataclass
class GraphRecord:
    MODEL: ClassVar[str] = GRAPH_MODEL
    pk: Key
    name: str | None = None
    start: Key | None = None
    end: Key | None = None
    category: Any = None
    status: str | None = None
    internal_note: str | None = None
    variant: str | None = None
    variant_weighting: str | None = None

    @classmethod
    def from_fields(cls, pk: Key, fields: dict[str, Any]) -> "GraphRecord":
        return cls(
            pk=pk,
            name=fields.get("name"),
            start=fields.get("start"),
            end=fields.get("end"),
            category=fields.get("category"),
            status=fields.get("status"),
            internal_note=fields.get("internal_note"),
            variant=fields.get("variant"),
            variant_weighting=fields.get("variant_weighting"),
        )

    def to_wire(self) -> dict[str, Any]:
        return _wrap(self.MODEL, self.pk, {
            "name": self.name,
            "start": self.start,
            "end": self.end,
            "category": self.category,
            "status": self.status,
            "internal_note": self.internal_note,
            "variant": self.variant,
            "variant_weighting": self.variant_weighting,
        })


@dataclass
class QuestionRecord:
    MODEL: ClassVar[str] = QUESTION_MODEL
    pk: Key
    title: str = ""
    subtitle: str | None = None
    placeholder: str | None = None
    type: str = "text"
    type_params: dict[str, Any] = field(default_factory=dict)
    required: bool = False
    auto_next: bool = False
    internal_note: str = ""

    @classmethod
    def from_fields(cls, pk: Key, fields: dict[str, Any]) -> "QuestionRecord":
        type_params = fields.get("type_params") or {}
        if not isinstance(type_params, dict):
            raise RecordDecodeError(f"Question {pk}: type_params must be an object")
        return cls(
            pk=pk,
            title=fields.get("title") or "",
            subtitle=fields.get("subtitle"),
            placeholder=fields.get("placeholder"),
            type=fields.get("type") or "text",
            type_params=type_params,
            required=bool(fields.get("required", False)),
            auto_next=bool(fields.get("auto_next", False)),
            internal_note=fields.get("internal_note") or "",
        )

    def to_wire(self) -> dict[str, Any]:
        return _wrap(self.MODEL, self.pk, {
            "title": self.title,
            "subtitle": self.subtitle,
            "placeholder": self.placeholder,
            "type": self.type,
            "type_params": self.type_params,
            "required": self.required,
            "auto_next": self.auto_next,
            "internal_note": self.internal_note,
        })


@dataclass
class TagRecord:
    MODEL: ClassVar[str] = TAG_MODEL
    pk: Key
    question: Key | None = None
    choice: str = ""

    @classmethod
    def from_fields(cls, pk: Key, fields: dict[str, Any]) -> "TagRecord":
        return cls(pk=pk, question=fields.get("question"), choice=str(fields.get("choice") or ""))

    def to_wire(self) -> dict[str, Any]:
        return _wrap(self.MODEL, self.pk, {"question": self.question, "choice": self.choice})


@dataclass
class LabelRecord(TagRecord):
    MODEL: ClassVar[str] = LABEL_MODEL


@dataclass
class NodeRecord:
    MODEL: ClassVar[str] = NODE_MODEL
    pk: Key
    question: Key | None = None
    sub_graph: Key | None = None
    parent_graph: Key | None = None

    @classmethod
    def from_fields(cls, pk: Key, fields: dict[str, Any]) -> "NodeRecord":
        return cls(
            pk=pk,
            question=fields.get("question"),
            sub_graph=fields.get("sub_graph"),
            parent_graph=fields.get("parent_graph"),
        )

    def to_wire(self) -> dict[str, Any]:
        return _wrap(self.MODEL, self.pk, {
            "question": self.question,
            "sub_graph": self.sub_graph,
            "parent_graph": self.parent_graph,
        })


@dataclass
class EdgeRecord:
    MODEL: ClassVar[str] = EDGE_MODEL
    pk: Key
    start: Key | None = None
    end: Key | None = None

    @classmethod
    def from_fields(cls, pk: Key, fields: dict[str, Any]) -> "EdgeRecord":
        return cls(pk=pk, start=fields.get("start"), end=fields.get("end"))

    def to_wire(self) -> dict[str, Any]:
        return _wrap(self.MODEL, self.pk, {"start": self.start, "end": self.end})


@dataclass
class CriterionRecord:
    MODEL: ClassVar[str] = CRITERION_MODEL
    pk: Key
    edge: Key | None = None
    choice: str = ""
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, pk: Key, fields: dict[str, Any]) -> "CriterionRecord":
        config = fields.get("config") or {}
        if not isinstance(config, dict):
            raise RecordDecodeError(f"Criterion {pk}: config must be an object")
        return cls(pk=pk, edge=fields.get("edge"), choice=str(fields.get("choice") or ""), config=config)

    def to_wire(self) -> dict[str, Any]:
        return _wrap(self.MODEL, self.pk, {
            "choice": self.choice,
            "config": self.config,
            "edge": self.edge,
        })


Record = Union[
    GraphRecord,
    QuestionRecord,
    TagRecord,
    LabelRecord,
    NodeRecord,
    EdgeRecord,
    CriterionRecord,
]

RECORD_TYPES: dict[str, type] = {
    record_type.MODEL: record_type
    for record_type in (
        GraphRecord,
        QuestionRecord,
        TagRecord,
        LabelRecord,
        NodeRecord,
        EdgeRecord,
        CriterionRecord,
    )
}

MODEL_NAMES = tuple(RECORD_TYPES)


def model_of(item: Any) -> str | None:
    if isinstance(item, dict) and isinstance(item.get("model"), str):
        return item["model"]
    return None


def decode_record(item: Any) -> Record:
    """Decode one wire element. Raises RecordDecodeError on anything malformed."""
    model = model_of(item)
    if model is None:
        raise RecordDecodeError("Record has no model discriminator")
    record_type = RECORD_TYPES.get(model)
    if record_type is None:
        raise RecordDecodeError(f"Unknown record model: {model}")
    pk = item.get("pk")
    if pk is None or isinstance(pk, bool) or not isinstance(pk, (str, int)):
        raise RecordDecodeError(f"{model} record has no usable pk")
    fields = item.get("fields")
    if not isinstance(fields, dict):
        raise RecordDecodeError(f"{model} record {pk} has no fields object")
    return record_type.from_fields(pk, fields)
