"""
Editing session over one question graph.

The session is the only thing the presentation layer writes through. Every
operation is synchronous; an import either replaces the graph completely or
leaves it exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .config import BuilderSettings
from .criteria import Criterion, CriterionKind, criteria_for_question, format_for_dropdown
from .graph.layout import Position, layout
from .graph.model import Question, QuestionGraph
from .graph.types import EdgeLabel, QuestionType
from .graph.validator import ConnectionVerdict, validate_connection
from .records.exporter import export_records, export_text
from .records.ids import IdentifierProvider, UUIDProvider
from .records.importer import ImportResult, ImportWarning, import_records, import_text

logger = logging.getLogger(__name__)


class IllegalCriterion(ValueError):
    """A criterion kind is not available on edges leaving the source question."""


class EditorSession:
    def __init__(
        self,
        graph: QuestionGraph | None = None,
        ids: IdentifierProvider | None = None,
        settings: BuilderSettings | None = None,
    ):
        self.graph = graph or QuestionGraph()
        self.ids = ids or UUIDProvider()
        self.settings = settings or BuilderSettings()
        self.last_import_warnings: list[ImportWarning] = []

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def _commit(self, result: ImportResult) -> ImportResult:
        self.graph = result.graph
        self.last_import_warnings = list(result.warnings)
        return result

    def import_text(self, text: str) -> ImportResult:
        """Replace the graph from JSON text. On failure the graph is untouched."""
        return self._commit(import_text(text))

    def import_records(self, data: Any) -> ImportResult:
        return self._commit(import_records(data))

    def export_records(self) -> list[dict[str, Any]]:
        return export_records(self.graph, ids=self.ids, settings=self.settings)

    def export_text(self) -> str:
        return export_text(self.graph, ids=self.ids, settings=self.settings)

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def add_question(
        self,
        text: str = "New Question",
        question_type: QuestionType | str = QuestionType.LONG_TEXT,
        **fields: Any,
    ) -> Question:
        return self.graph.create(self.ids.new_id(), text=text, question_type=question_type, **fields)

    def update_question(self, question_id: str, **changes: Any) -> Question:
        return self.graph.update(question_id, **changes)

    def delete_question(self, question_id: str) -> Question:
        return self.graph.delete(question_id)

    def move_question(self, question_id: str, direction: str) -> bool:
        return self.graph.move(question_id, direction)

    def copy_question(self, question_id: str) -> Question:
        return self.graph.copy(question_id, self.ids.new_id())

    def swap_titles(self, first_id: str, second_id: str) -> None:
        self.graph.swap_titles(first_id, second_id)

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def connect(self, source_id: str, target_id: str, label: EdgeLabel | str) -> ConnectionVerdict:
        """Validate a proposed edge and, if accepted, point the source slot at the target."""
        source = self.graph.get(source_id)
        target = self.graph.get(target_id)
        label = EdgeLabel(label)

        verdict = validate_connection(source, target, label, self.graph.edges())
        if not verdict.accepted:
            logger.info("Rejected %s edge %s -> %s: %s", label.value, source_id, target_id, verdict.reason)
            return verdict

        source.set_target(label.slot, target_id)
        return verdict

    def disconnect(self, source_id: str, label: EdgeLabel | str) -> None:
        self.graph.clear_connection(source_id, EdgeLabel(label).slot)

    def available_criteria(self, question_id: str) -> list[CriterionKind]:
        question = self.graph.get(question_id)
        return criteria_for_question(question.type, question.tags)

    def available_criteria_options(self, question_id: str) -> list[dict[str, str]]:
        return format_for_dropdown(self.available_criteria(question_id))

    def set_edge_criteria(
        self,
        source_id: str,
        label: EdgeLabel | str,
        criteria: Iterable[Criterion],
    ) -> list[Criterion]:
        """
        Replace the criteria of one slot, allowing only kinds legal for the source.

        Returns the criteria as stored, with the slot's implied boolean marker removed.
        """
        criteria = list(criteria)
        allowed = set(self.available_criteria(source_id))
        for criterion in criteria:
            if criterion.kind not in allowed:
                raise IllegalCriterion(
                    f"{criterion.label} is not available for question {source_id}"
                )
        slot = EdgeLabel(label).slot
        self.graph.set_criteria(source_id, slot, criteria)
        return self.graph.get_criteria(source_id, slot)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def layout(self) -> dict[str, Position]:
        edges = [(edge.source, edge.target) for edge in self.graph.edges()]
        return layout(self.graph.ids, edges)
