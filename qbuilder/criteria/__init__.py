"""
Trigger criteria for questionnaire edges.

This module provides:
- The catalog of criterion kinds and their labels
- Tag/type rules deciding which kinds a question's edges may carry
- Typed configuration payloads for each kind
"""

from .catalog import (
    BASELINE_CRITERIA,
    BOOLEAN_KINDS,
    CRITERION_LABELS,
    TAG_CRITERIA,
    TYPE_CRITERIA,
    CriterionKind,
    QuestionTag,
    UnknownCriterionLabel,
    criteria_for_question,
    format_for_dropdown,
    kind_for_label,
    label_for,
)
from .config import (
    CONFIG_SHAPES,
    Criterion,
    CriterionConfigError,
    EmptyConfig,
    OptionSetConfig,
    ThresholdConfig,
    build_config,
)

__all__ = [
    "BASELINE_CRITERIA",
    "BOOLEAN_KINDS",
    "CRITERION_LABELS",
    "TAG_CRITERIA",
    "TYPE_CRITERIA",
    "CriterionKind",
    "QuestionTag",
    "UnknownCriterionLabel",
    "criteria_for_question",
    "format_for_dropdown",
    "kind_for_label",
    "label_for",
    "CONFIG_SHAPES",
    "Criterion",
    "CriterionConfigError",
    "EmptyConfig",
    "OptionSetConfig",
    "ThresholdConfig",
    "build_config",
]
