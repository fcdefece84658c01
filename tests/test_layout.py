"""Tests for the layered layout."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from qbuilder.graph.layout import NODE_HEIGHT, NODE_SEP, NODE_WIDTH, RANK_SEP, Position, layout, rank_nodes


def test_chain_is_one_column():
    positions = layout(["a", "b", "c"], [("a", "b"), ("b", "c")])
    assert positions == {
        "a": Position(0.0, 0),
        "b": Position(0.0, NODE_HEIGHT + RANK_SEP),
        "c": Position(0.0, 2 * (NODE_HEIGHT + RANK_SEP)),
    }


def test_branches_share_a_rank():
    ranks = rank_nodes(["root", "yes", "no"], [("root", "yes"), ("root", "no")])
    assert ranks == [["root"], ["yes", "no"]]


def test_rank_is_centred():
    positions = layout(["root", "yes", "no"], [("root", "yes"), ("root", "no")])
    spacing = NODE_WIDTH + NODE_SEP
    assert positions["yes"].x == -spacing / 2
    assert positions["no"].x == spacing / 2
    assert positions["yes"].y == positions["no"].y


def test_rank_keeps_display_order():
    ranks = rank_nodes(["root", "z", "a"], [("root", "a"), ("root", "z")])
    assert ranks[1] == ["z", "a"]


def test_cycle_members_share_rank():
    ranks = rank_nodes(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "b")])
    assert ranks == [["a"], ["b", "c"]]


def test_disconnected_nodes_start_at_top():
    positions = layout(["a", "b"], [])
    assert positions["a"].y == positions["b"].y == 0


def test_edges_to_unknown_nodes_ignored():
    positions = layout(["a"], [("a", "ghost")])
    assert list(positions) == ["a"]


def test_empty():
    assert layout([], []) == {}


def test_position_to_dict():
    assert Position(1.5, 2).to_dict() == {"x": 1.5, "y": 2}
