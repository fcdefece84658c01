"""
Serialize a question graph into the flat record list.

Identifiers are minted fresh on every call: one id per question record and
one per node record, allocated up front so the graph record can point at
the first and last nodes before they are emitted. Edge and criterion pks
are counters local to the call.
"""

from __future__ import annotations

import itertools
import json
import logging
from typing import Any

from ..config import BuilderSettings
from ..criteria import Criterion, CriterionKind
from ..graph.model import Question, QuestionGraph
from ..graph.types import NEXT_SLOT, NO_SLOT, YES_SLOT
from .ids import IdentifierProvider, UUIDProvider
from .wire import (
    CriterionRecord,
    EdgeRecord,
    GraphRecord,
    LabelRecord,
    NodeRecord,
    QuestionRecord,
    TagRecord,
)

logger = logging.getLogger(__name__)

# Marker emitted for each slot; linear slots default to "yes"
SLOT_MARKERS = {
    NEXT_SLOT: CriterionKind.BOOL_YES,
    YES_SLOT: CriterionKind.BOOL_YES,
    NO_SLOT: CriterionKind.BOOL_NO,
}


class ExportError(ValueError):
    """The graph cannot be exported."""


def _question_record(question: Question, pk: str) -> QuestionRecord:
    type_params = {"exclusive": []}
    type_params.update(question.type_params)
    type_params["options"] = list(question.options)
    return QuestionRecord(
        pk=pk,
        title=question.text,
        subtitle=question.subtitle or None,
        placeholder=question.placeholder or None,
        type=question.type.value,
        type_params=type_params,
        required=question.required,
        auto_next=question.auto_next,
        internal_note=question.internal_note,
    )


def _slot_criteria(question: Question, slot: str) -> list[Criterion]:
    """Criteria to emit for one populated slot."""
    stored = list(question.edge_criteria.get(slot, []))
    marker = Criterion(SLOT_MARKERS[slot])
    if slot == NEXT_SLOT:
        return stored or [marker]
    # A branch is identified on the wire only by its boolean marker
    return [marker] + [criterion for criterion in stored if not criterion.is_boolean]


def export_records(
    graph: QuestionGraph,
    ids: IdentifierProvider | None = None,
    settings: BuilderSettings | None = None,
) -> list[dict[str, Any]]:
    """
    Flatten ``graph`` into wire records.

    Order: graph, questions, nodes, tags, labels, edges, criteria.

    Raises:
        ExportError: if the graph has no questions.
    """
    questions = graph.questions
    if not questions:
        raise ExportError("Nothing to export: the graph has no questions")

    ids = ids or UUIDProvider()
    settings = settings or BuilderSettings()
    meta = graph.meta

    graph_pk = ids.new_id()
    question_pks: dict[str, str] = {}
    node_pks: dict[str, str] = {}
    for question in questions:
        question_pks[question.id] = ids.new_id()
        node_pks[question.id] = ids.new_id()

    records: list[Any] = [
        GraphRecord(
            pk=graph_pk,
            name=meta.name if meta.name is not None else settings.graph_name,
            start=node_pks[questions[0].id],
            end=node_pks[questions[-1].id],
            category=meta.category if meta.category is not None else settings.graph_category,
            status=meta.status or settings.graph_status,
            internal_note=meta.internal_note if meta.internal_note is not None else settings.graph_note,
            variant=meta.variant or settings.graph_variant,
            variant_weighting=meta.variant_weighting or settings.graph_variant_weighting,
        )
    ]
    records.extend(_question_record(q, question_pks[q.id]) for q in questions)
    records.extend(
        NodeRecord(pk=node_pks[q.id], question=question_pks[q.id], parent_graph=graph_pk)
        for q in questions
    )
    for question in questions:
        records.extend(
            TagRecord(pk=ids.new_id(), question=question_pks[question.id], choice=tag)
            for tag in question.tags
        )
    for question in questions:
        records.extend(
            LabelRecord(pk=ids.new_id(), question=question_pks[question.id], choice=label)
            for label in question.labels
        )

    edge_pks = itertools.count(settings.edge_pk_start)
    criterion_pks = itertools.count(settings.criterion_pk_start)
    edges: list[EdgeRecord] = []
    criteria: list[CriterionRecord] = []

    for question in questions:
        for slot in (NEXT_SLOT, YES_SLOT, NO_SLOT):
            target = question.target(slot)
            if target is None:
                continue
            if target not in node_pks:
                logger.warning("Skipping %s slot of %s: target %s is not in the graph", slot, question.id, target)
                continue
            edge_pk = next(edge_pks)
            edges.append(EdgeRecord(pk=edge_pk, start=node_pks[question.id], end=node_pks[target]))
            for criterion in _slot_criteria(question, slot):
                wire = criterion.to_wire()
                criteria.append(
                    CriterionRecord(
                        pk=next(criterion_pks),
                        edge=edge_pk,
                        choice=wire["choice"],
                        config=wire["config"],
                    )
                )

    records.extend(edges)
    records.extend(criteria)
    logger.info(
        "Exported %d questions, %d edges, %d criteria",
        len(questions), len(edges), len(criteria),
    )
    return [record.to_wire() for record in records]


def export_text(
    graph: QuestionGraph,
    ids: IdentifierProvider | None = None,
    settings: BuilderSettings | None = None,
) -> str:
    return json.dumps(export_records(graph, ids=ids, settings=settings), indent=2)
