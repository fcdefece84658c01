"""
Rebuild a question graph from a flat record list.

The list only links records through synthetic primary keys, so the graph is
reconstructed in passes, each depending on the maps built before it:

1. question records -> question map
2. tag/label records -> attached to their questions
3. node records -> node map; edge records -> edge working set
4. criterion records -> attached to their edge

Every accumulated edge is then resolved to a question-to-question connection.
Whether it is linear or a yes/no branch is inferred from its criteria.

Import is lenient about references: anything that does not resolve is
dropped and reported as an ImportWarning, never raised. Only structural
problems (not a list, a required record kind missing) abort the import.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from ..criteria import (
    Criterion,
    CriterionConfigError,
    CriterionKind,
    UnknownCriterionLabel,
)
from ..graph.model import GraphMeta, Question, QuestionGraph, slot_criteria
from ..graph.types import NEXT_SLOT, NO_SLOT, YES_SLOT, QuestionType
from .wire import (
    REQUIRED_MODELS,
    CriterionRecord,
    EdgeRecord,
    GraphRecord,
    LabelRecord,
    NodeRecord,
    QuestionRecord,
    RecordDecodeError,
    TagRecord,
    decode_record,
    model_of,
)

logger = logging.getLogger(__name__)


class StructuralValidationError(ValueError):
    """The input cannot be treated as a record list at all."""


@dataclass
class ImportWarning:
    code: str
    message: str
    pk: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "pk": self.pk}


@dataclass
class ImportResult:
    graph: QuestionGraph
    warnings: list[ImportWarning] = field(default_factory=list)

    def warning_codes(self) -> list[str]:
        return [warning.code for warning in self.warnings]


@dataclass
class _PendingEdge:
    pk: Any
    start: Any
    end: Any
    criteria: list[Criterion] = field(default_factory=list)


def _key(value: Any) -> str | None:
    # pks arrive as ints or strings; references may use either form
    if value is None:
        return None
    return str(value)


def validate_structure(data: Any) -> None:
    """Reject input that is not a list or lacks a required record kind."""
    if not isinstance(data, list):
        raise StructuralValidationError("Invalid JSON format: Expected an array")
    present = {model_of(item) for item in data}
    missing = [model for model in REQUIRED_MODELS if model not in present]
    if missing:
        raise StructuralValidationError(
            f"Invalid JSON format: Missing required models: {', '.join(missing)}"
        )


class _Importer:
    def __init__(self):
        self.warnings: list[ImportWarning] = []

    def warn(self, code: str, message: str, pk: Any = None) -> None:
        logger.warning("%s: %s", code, message)
        self.warnings.append(ImportWarning(code, message, pk))

    def run(self, data: list[Any]) -> ImportResult:
        records = self._decode(data)

        questions: dict[str, Question] = {}
        for record in records:
            if isinstance(record, QuestionRecord):
                questions[_key(record.pk)] = self._question_from(record)

        for record in records:
            if isinstance(record, TagRecord):
                self._attach_tag(record, questions)

        nodes: dict[str, str] = {}
        edges: dict[str, _PendingEdge] = {}
        for record in records:
            if isinstance(record, NodeRecord):
                if record.question is None:
                    self.warn("node_without_question", f"Node {record.pk} has no question", record.pk)
                    continue
                nodes[_key(record.pk)] = _key(record.question)
            elif isinstance(record, EdgeRecord):
                edges[_key(record.pk)] = _PendingEdge(record.pk, record.start, record.end)

        for record in records:
            if isinstance(record, CriterionRecord):
                self._attach_criterion(record, edges)

        for edge in edges.values():
            self._resolve_edge(edge, nodes, questions)

        graph = QuestionGraph(questions.values(), meta=self._meta(records, nodes, questions))
        logger.info(
            "Imported %d questions, %d connections (%d warnings)",
            len(graph), len(graph.edges()), len(self.warnings),
        )
        return ImportResult(graph, self.warnings)

    # ------------------------------------------------------------------

    def _decode(self, data: list[Any]) -> list[Any]:
        records = []
        for index, item in enumerate(data):
            try:
                records.append(decode_record(item))
            except RecordDecodeError as exc:
                pk = item.get("pk") if isinstance(item, dict) else None
                self.warn("undecodable_record", f"Skipped element {index}: {exc}", pk)
        return records

    def _question_from(self, record: QuestionRecord) -> Question:
        try:
            question_type = QuestionType(record.type)
        except ValueError:
            self.warn(
                "unknown_question_type",
                f"Question {record.pk} has unknown type '{record.type}', using long_text",
                record.pk,
            )
            question_type = QuestionType.LONG_TEXT

        type_params = dict(record.type_params)
        options = type_params.pop("options", None)
        if options is None:
            options = []
        elif not isinstance(options, (list, tuple)):
            self.warn(
                "invalid_options",
                f"Question {record.pk} options are not a list, dropping them",
                record.pk,
            )
            options = []
        return Question(
            id=_key(record.pk),
            text=record.title,
            type=question_type,
            subtitle=record.subtitle or "",
            placeholder=record.placeholder or "",
            options=[str(option) for option in options],
            type_params=type_params,
            required=record.required,
            auto_next=record.auto_next,
            internal_note=record.internal_note,
        )

    def _attach_tag(self, record: TagRecord, questions: dict[str, Question]) -> None:
        question = questions.get(_key(record.question))
        kind = "label" if isinstance(record, LabelRecord) else "tag"
        if question is None:
            self.warn(
                f"orphan_{kind}",
                f"{kind.capitalize()} {record.pk} references unknown question {record.question}",
                record.pk,
            )
            return
        target = question.labels if isinstance(record, LabelRecord) else question.tags
        if record.choice and record.choice not in target:
            target.append(record.choice)

    def _attach_criterion(self, record: CriterionRecord, edges: dict[str, _PendingEdge]) -> None:
        edge = edges.get(_key(record.edge))
        if edge is None:
            self.warn(
                "orphan_criterion",
                f"Criterion {record.pk} references unknown edge {record.edge}",
                record.pk,
            )
            return
        try:
            edge.criteria.append(Criterion.from_wire(record.choice, record.config))
        except UnknownCriterionLabel:
            self.warn(
                "unknown_criterion",
                f"Criterion {record.pk} has unknown choice '{record.choice}'",
                record.pk,
            )
        except CriterionConfigError as exc:
            self.warn("invalid_criterion_config", f"Criterion {record.pk}: {exc}", record.pk)

    def _resolve_edge(
        self,
        edge: _PendingEdge,
        nodes: dict[str, str],
        questions: dict[str, Question],
    ) -> None:
        source_id = nodes.get(_key(edge.start))
        target_id = nodes.get(_key(edge.end))
        if source_id is None or target_id is None:
            self.warn("unresolved_edge", f"Edge {edge.pk} endpoints do not resolve to nodes", edge.pk)
            return
        source = questions.get(source_id)
        if source is None or target_id not in questions:
            self.warn("unresolved_edge", f"Edge {edge.pk} endpoints do not resolve to questions", edge.pk)
            return

        kinds = {criterion.kind for criterion in edge.criteria}
        has_yes = CriterionKind.BOOL_YES in kinds
        has_no = CriterionKind.BOOL_NO in kinds

        if has_yes and has_no:
            self.warn(
                "dual_boolean_edge",
                f"Edge {edge.pk} carries both yes and no markers; imported as linear",
                edge.pk,
            )

        if has_yes != has_no and source.is_boolean:
            self._attach_branch(source, YES_SLOT if has_yes else NO_SLOT, target_id, edge)
            return

        criteria = list(edge.criteria)
        if not source.is_boolean:
            criteria = slot_criteria(NEXT_SLOT, criteria)
        self._attach_linear(source, target_id, criteria, edge)

    def _attach_branch(self, source: Question, slot: str, target_id: str, edge: _PendingEdge) -> None:
        existing = source.target(slot)
        if existing is not None and existing != target_id:
            self.warn(
                "duplicate_branch_edge",
                f"Question {source.id} '{slot}' branch to {existing} replaced by edge {edge.pk}",
                edge.pk,
            )
        source.set_target(slot, target_id)
        source.edge_criteria[slot] = slot_criteria(slot, source.criteria(slot) + edge.criteria)

    def _attach_linear(
        self,
        source: Question,
        target_id: str,
        criteria: list[Criterion],
        edge: _PendingEdge,
    ) -> None:
        if source.next_question is not None:
            self.warn(
                "duplicate_linear_edge",
                f"Question {source.id} already has a successor; edge {edge.pk} dropped",
                edge.pk,
            )
            return
        if source.is_boolean:
            self.warn(
                "linear_edge_on_boolean",
                f"Boolean question {source.id} received a linear edge {edge.pk}",
                edge.pk,
            )
        source.next_question = target_id
        source.edge_criteria[NEXT_SLOT] = criteria

    def _meta(
        self,
        records: list[Any],
        nodes: dict[str, str],
        questions: dict[str, Question],
    ) -> GraphMeta:
        graphs = [record for record in records if isinstance(record, GraphRecord)]
        if not graphs:
            logger.info("No graph record found; using default graph settings")
            return GraphMeta()
        if len(graphs) > 1:
            self.warn("multiple_graph_records", "More than one graph record; using the first", graphs[1].pk)
        graph = graphs[0]

        def resolve(node_pk: Any, role: str) -> str | None:
            question_id = nodes.get(_key(node_pk))
            if question_id is None or question_id not in questions:
                if node_pk is not None:
                    self.warn("unresolved_graph_" + role, f"Graph {role} node {node_pk} does not resolve", graph.pk)
                return None
            return question_id

        return GraphMeta(
            name=graph.name,
            category=graph.category,
            status=graph.status,
            internal_note=graph.internal_note,
            variant=graph.variant,
            variant_weighting=graph.variant_weighting,
            start_question_id=resolve(graph.start, "start"),
            end_question_id=resolve(graph.end, "end"),
        )


def import_records(data: Any) -> ImportResult:
    """
    Build a QuestionGraph from a decoded record list.

    Raises:
        StructuralValidationError: if ``data`` is not a list or lacks a
            question, node or edge record. No graph is produced.
    """
    validate_structure(data)
    return _Importer().run(data)


def import_text(text: str) -> ImportResult:
    """Parse JSON text then import it."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise StructuralValidationError(f"Invalid JSON: {exc}") from exc
    return import_records(data)
