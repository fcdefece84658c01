"""
Tests for the rules applied to edges proposed in the live editor.
"""

import itertools
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from qbuilder.graph import EdgeLabel, GraphEdge, Question, QuestionType, validate_connection
from qbuilder.graph.validator import (
    BOOLEAN_NEXT,
    BRANCH_NEEDS_BOOLEAN,
    DUPLICATE_BRANCH,
    DUPLICATE_CONNECTION,
    SINGLE_SUCCESSOR,
)
from qbuilder.session import EditorSession

REASONS = {BOOLEAN_NEXT, DUPLICATE_BRANCH, SINGLE_SUCCESSOR, BRANCH_NEEDS_BOOLEAN, DUPLICATE_CONNECTION}


def _q(question_id, question_type="text"):
    return Question(id=question_id, text=question_id, type=QuestionType(question_type))


class TestBooleanSource:
    def test_next_rejected(self):
        verdict = validate_connection(_q("a", "boolean"), _q("b"), "Next", [])
        assert not verdict.accepted
        assert verdict.reason == "boolean questions cannot take a plain successor edge"

    def test_yes_accepted(self):
        verdict = validate_connection(_q("a", "boolean"), _q("b"), "Yes", [])
        assert verdict.accepted
        assert verdict.reason is None

    def test_second_yes_is_duplicate_branch(self):
        existing = [GraphEdge("a", "b", EdgeLabel.YES)]
        verdict = validate_connection(_q("a", "boolean"), _q("c"), EdgeLabel.YES, existing)
        assert verdict.reason == "duplicate branch"

    def test_same_yes_edge_is_duplicate_branch_first(self):
        existing = [GraphEdge("a", "b", EdgeLabel.YES)]
        verdict = validate_connection(_q("a", "boolean"), _q("b"), "Yes", existing)
        assert verdict.reason == DUPLICATE_BRANCH

    def test_no_after_yes_accepted(self):
        existing = [GraphEdge("a", "b", EdgeLabel.YES)]
        assert validate_connection(_q("a", "boolean"), _q("b"), "No", existing).accepted

    def test_edges_from_other_sources_ignored(self):
        existing = [GraphEdge("z", "b", EdgeLabel.YES)]
        assert validate_connection(_q("a", "boolean"), _q("b"), "Yes", existing).accepted


class TestLinearSource:
    def test_first_next_accepted(self):
        assert validate_connection(_q("a"), _q("b"), "Next", []).accepted

    def test_second_next_rejected(self):
        existing = [GraphEdge("a", "b", EdgeLabel.NEXT)]
        verdict = validate_connection(_q("a"), _q("c"), "Next", existing)
        assert verdict.reason == "linear questions take at most one successor"

    @pytest.mark.parametrize("label", ["Yes", "No"])
    def test_branch_label_rejected(self, label):
        verdict = validate_connection(_q("a", "number"), _q("b"), label, [])
        assert verdict.reason == "branch labels require a boolean source"

    def test_unknown_label_is_caller_error(self):
        with pytest.raises(ValueError):
            validate_connection(_q("a"), _q("b"), "Maybe", [])


def test_validator_is_total():
    """Every combination yields exactly one of accept or a single known reason."""
    targets = ["b", "c"]
    edge_options = [
        GraphEdge("a", target, label)
        for target, label in itertools.product(targets, EdgeLabel)
    ]
    for question_type in (QuestionType.BOOLEAN, QuestionType.TEXT, QuestionType.SINGLE_SELECTION_LIST):
        for count in range(3):
            for existing in itertools.combinations(edge_options, count):
                for label in EdgeLabel:
                    verdict = validate_connection(_q("a", question_type), _q("b"), label, list(existing))
                    if verdict.accepted:
                        assert verdict.reason is None
                    else:
                        assert verdict.reason in REASONS


class TestSessionScenario:
    def test_boolean_next_yes_yes(self):
        session = EditorSession()
        source = session.add_question("Over 18?", "boolean")
        target = session.add_question("Thanks", "dead_end")

        first = session.connect(source.id, target.id, "Next")
        assert first.reason == BOOLEAN_NEXT
        assert session.graph.edges() == []

        second = session.connect(source.id, target.id, "Yes")
        assert second.accepted
        assert source.branches.yes == target.id

        third = session.connect(source.id, target.id, "Yes")
        assert third.reason == DUPLICATE_BRANCH
        assert len(session.graph.edges()) == 1

    def test_rejection_makes_no_mutation(self):
        session = EditorSession()
        a = session.add_question("A", "text")
        b = session.add_question("B", "text")
        c = session.add_question("C", "text")
        session.connect(a.id, b.id, "Next")
        verdict = session.connect(a.id, c.id, "Next")
        assert verdict.reason == SINGLE_SUCCESSOR
        assert a.next_question == b.id

    def test_verdict_to_dict(self):
        session = EditorSession()
        a = session.add_question("A", "text")
        b = session.add_question("B", "text")
        assert session.connect(a.id, b.id, "Yes").to_dict() == {
            "accepted": False,
            "reason": BRANCH_NEEDS_BOOLEAN,
        }
