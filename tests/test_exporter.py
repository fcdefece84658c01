"""
Tests for flattening a question graph into wire records.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from qbuilder.config import BuilderSettings
from qbuilder.criteria import Criterion
from qbuilder.graph import QuestionGraph
from qbuilder.session import EditorSession
from qbuilder.records import (
    ExportError,
    SequenceProvider,
    export_records,
    export_text,
    import_records,
    import_text,
)

FIXTURE = Path(__file__).parent / "fixtures" / "pill_check.json"


@pytest.fixture
def graph():
    g = QuestionGraph()
    g.create("dob", "Date of birth?", "date", tags=["demographic_dob"])
    g.create("smoker", "Do you smoke?", "boolean")
    g.create("count", "How many a day?", "number")
    g.create("end", "All done", "dead_end")
    g.set_connection("dob", "next", "smoker")
    g.set_connection("smoker", "yes", "count")
    g.set_connection("smoker", "no", "end")
    g.set_connection("count", "next", "end")
    g.set_criteria("count", "next", [Criterion.of("age_gte", {"trigger_value": 18})])
    return g


def _models(records):
    return [record["model"].split(".")[1] for record in records]


def _shape(records):
    """Records with every identifier stripped out."""
    id_fields = {"start", "end", "question", "parent_graph", "edge"}
    return [
        (record["model"], {k: v for k, v in record["fields"].items() if k not in id_fields})
        for record in records
    ]


def _topology(graph):
    """Connection structure keyed by question text."""
    text = {q.id: q.text for q in graph}
    return sorted(
        (text[e.source], e.label.value, text[e.target], tuple(c.kind.value for c in e.criteria))
        for e in graph.edges()
    )


class TestRecordLayout:
    def test_record_order(self, graph):
        records = export_records(graph, ids=SequenceProvider())
        assert _models(records) == (
            ["questionnairegraph"]
            + ["question"] * 4
            + ["node"] * 4
            + ["questiontag"]
            + ["edge"] * 4
            + ["edgetriggercriteria"] * 4
        )

    def test_deterministic_ids(self, graph):
        records = export_records(graph, ids=SequenceProvider())
        graph_record = records[0]
        assert graph_record["pk"] == "id-0001"
        # question and node ids are minted in pairs
        assert [r["pk"] for r in records[1:5]] == ["id-0002", "id-0004", "id-0006", "id-0008"]
        assert [r["pk"] for r in records[5:9]] == ["id-0003", "id-0005", "id-0007", "id-0009"]
        assert graph_record["fields"]["start"] == "id-0003"
        assert graph_record["fields"]["end"] == "id-0009"

    def test_nodes_reference_questions_and_graph(self, graph):
        records = export_records(graph, ids=SequenceProvider())
        node = records[5]
        assert node["fields"] == {"question": "id-0002", "sub_graph": None, "parent_graph": "id-0001"}

    def test_edge_and_criterion_counters(self, graph):
        records = export_records(graph, ids=SequenceProvider())
        edges = [r for r in records if r["model"] == "questionnaire.edge"]
        criteria = [r for r in records if r["model"] == "questionnaire.edgetriggercriteria"]
        assert [e["pk"] for e in edges] == [2100, 2101, 2102, 2103]
        assert [c["pk"] for c in criteria] == [1800, 1801, 1802, 1803]
        assert [c["fields"]["edge"] for c in criteria] == [2100, 2101, 2102, 2103]

    def test_counter_start_from_settings(self, graph):
        settings = BuilderSettings(edge_pk_start=1, criterion_pk_start=50)
        records = export_records(graph, ids=SequenceProvider(), settings=settings)
        assert records[-1]["pk"] == 53
        assert records[-5]["pk"] == 4

    def test_counters_restart_per_call(self, graph):
        first = export_records(graph, ids=SequenceProvider())
        second = export_records(graph, ids=SequenceProvider(prefix="x"))
        assert [r["pk"] for r in first[-8:]] == [r["pk"] for r in second[-8:]]


class TestCriteriaEmission:
    def test_default_markers(self, graph):
        records = export_records(graph, ids=SequenceProvider())
        choices = [r["fields"]["choice"] for r in records if r["model"] == "questionnaire.edgetriggercriteria"]
        # dob next (default), smoker yes, smoker no, count next (stored)
        assert choices == ["Boolean yes", "Boolean yes", "Boolean no", "Age greater than or equal"]

    def test_threshold_config(self, graph):
        records = export_records(graph, ids=SequenceProvider())
        assert records[-1]["fields"]["config"] == {"trigger_value": 18.0}

    def test_branch_criteria_follow_marker(self, graph):
        graph.set_criteria("smoker", "no", [Criterion.of("gender_female")])
        records = export_records(graph, ids=SequenceProvider())
        criteria = [r for r in records if r["model"] == "questionnaire.edgetriggercriteria"]
        no_edge = criteria[2]["fields"]["edge"]
        assert [c["fields"]["choice"] for c in criteria if c["fields"]["edge"] == no_edge] == [
            "Boolean no",
            "Gender is female",
        ]

    def test_unpopulated_slots_emit_nothing(self):
        g = QuestionGraph()
        g.create("a", "Only question", "boolean")
        records = export_records(g, ids=SequenceProvider())
        assert _models(records) == ["questionnairegraph", "question", "node"]


class TestQuestionRecords:
    def test_fields(self, graph):
        graph.update("count", subtitle="Roughly", required=True)
        record = export_records(graph, ids=SequenceProvider())[3]
        assert record["fields"] == {
            "title": "How many a day?",
            "subtitle": "Roughly",
            "placeholder": None,
            "type": "number",
            "type_params": {"exclusive": [], "min": None, "max": None, "options": []},
            "required": True,
            "auto_next": False,
            "internal_note": "",
        }

    def test_options_written_into_type_params(self):
        g = QuestionGraph()
        g.create("a", "Colour?", "single_selection_list", options=["Red", "Blue"])
        fields = export_records(g, ids=SequenceProvider())[1]["fields"]
        assert fields["type_params"] == {"other": False, "exclusive": [], "options": ["Red", "Blue"]}

    def test_tags_and_labels(self, graph):
        graph.update("smoker", labels=["lifestyle"])
        records = export_records(graph, ids=SequenceProvider())
        tag = next(r for r in records if r["model"] == "questionnaire.questiontag")
        label = next(r for r in records if r["model"] == "questionnaire.questionlabel")
        assert tag["fields"] == {"question": "id-0002", "choice": "demographic_dob"}
        assert label["fields"] == {"question": "id-0004", "choice": "lifestyle"}


class TestGraphRecord:
    def test_defaults_from_settings(self, graph):
        fields = export_records(graph, ids=SequenceProvider())[0]["fields"]
        assert fields["name"] == "Survey"
        assert fields["category"] == 5
        assert fields["status"] == "active"
        assert fields["internal_note"] == "Survey Test"
        assert fields["variant"] == "A"
        assert fields["variant_weighting"] == "100"

    def test_imported_meta_written_back(self):
        graph = import_text(FIXTURE.read_text()).graph
        fields = export_records(graph, ids=SequenceProvider())[0]["fields"]
        assert fields["name"] == "Pill check"
        assert fields["category"] == 3
        assert fields["status"] == "draft"
        assert fields["variant_weighting"] == "50"


class TestRoundTrip:
    def test_reimport_is_isomorphic(self, graph):
        result = import_records(export_records(graph))
        assert result.warnings == []
        assert [q.text for q in result.graph] == [q.text for q in graph]
        assert [q.type for q in result.graph] == [q.type for q in graph]
        assert _topology(result.graph) == _topology(graph)

    def test_tags_survive(self, graph):
        result = import_records(export_records(graph))
        assert result.graph.questions[0].tags == ["demographic_dob"]

    def test_branch_criteria_survive(self, graph):
        graph.set_criteria("smoker", "yes", [Criterion.of("gender_not_female")])
        result = import_records(export_records(graph))
        smoker = result.graph.questions[1]
        assert [c.kind.value for c in smoker.edge_criteria["yes"]] == ["gender_not_female"]

    def test_fixture_round_trip(self):
        original = import_text(FIXTURE.read_text()).graph
        again = import_text(export_text(original)).graph
        assert _topology(again) == _topology(original)
        assert [q.options for q in again] == [q.options for q in original]
        assert again.questions[2].type_params == original.questions[2].type_params

    def test_reexport_has_same_shape(self, graph):
        first = export_records(graph)
        second = export_records(graph)
        assert _shape(first) == _shape(second)
        assert first[0]["pk"] != second[0]["pk"]


def test_export_text_is_json(graph):
    text = export_text(graph, ids=SequenceProvider())
    assert json.loads(text) == export_records(graph, ids=SequenceProvider())
    assert text.startswith("[\n  {")


def test_empty_graph_cannot_be_exported():
    with pytest.raises(ExportError):
        export_records(QuestionGraph())


def test_sequence_provider_values():
    ids = SequenceProvider(values=["a", "b"])
    assert ids.new_id() == "a"
    assert ids.new_id() == "b"
    with pytest.raises(RuntimeError):
        ids.new_id()


class TestExplicitBooleanCriteria:
    """Criteria a user sets explicitly must read back the same after a round trip."""

    def _round_trip(self, session):
        return import_records(session.export_records()).graph

    def test_yes_on_linear_slot(self, graph):
        session = EditorSession(graph)
        stored = session.set_edge_criteria("dob", "Next", [Criterion.of("bool_yes")])
        again = self._round_trip(session)
        assert stored == []
        assert again.questions[0].edge_criteria["next"] == stored

    def test_no_on_linear_slot(self, graph):
        session = EditorSession(graph)
        stored = session.set_edge_criteria("dob", "Next", [Criterion.of("bool_no")])
        again = self._round_trip(session)
        assert again.questions[0].edge_criteria["next"] == stored == [Criterion.of("bool_no")]

    def test_yes_on_yes_branch(self, graph):
        session = EditorSession(graph)
        stored = session.set_edge_criteria(
            "smoker", "Yes", [Criterion.of("bool_yes"), Criterion.of("list_value_set", {"options_selection": {"a": True}})]
        )
        again = self._round_trip(session)
        smoker = again.questions[1]
        assert smoker.branches.yes == again.questions[2].id
        assert smoker.edge_criteria["yes"] == stored
        assert [c.kind.value for c in stored] == ["list_value_set"]
