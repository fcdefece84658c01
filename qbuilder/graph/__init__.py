"""
Question graph model and live-edit rules.

This module provides:
- Question types and connection slots
- The in-memory question graph
- Connection validation for proposed edges
- Layered layout for display
"""

from .types import EdgeLabel, QuestionType, default_type_params, slots_for
from .model import (
    Branches,
    GraphEdge,
    GraphMeta,
    Question,
    QuestionGraph,
    QuestionNotFound,
    slot_criteria,
)
from .validator import ConnectionVerdict, validate_connection
from .layout import Position, layout

__all__ = [
    "EdgeLabel",
    "QuestionType",
    "default_type_params",
    "slots_for",
    "Branches",
    "GraphEdge",
    "GraphMeta",
    "Question",
    "QuestionGraph",
    "QuestionNotFound",
    "slot_criteria",
    "ConnectionVerdict",
    "validate_connection",
    "Position",
    "layout",
]
