"""
Criterion configuration payloads.

Each criterion kind owns exactly one configuration shape:
- ThresholdConfig: a numeric trigger value (age, BMI, time passed)
- OptionSetConfig: a set of selected option labels (list values, ethnicity)
- EmptyConfig: presence checks with nothing to configure
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .catalog import CriterionKind, kind_for_label, label_for


class CriterionConfigError(ValueError):
    """A criterion payload does not match the shape its kind requires."""


@dataclass(frozen=True)
class ThresholdConfig:
    value: float

    def to_wire(self) -> dict[str, Any]:
        return {"trigger_value": self.value}


@dataclass(frozen=True)
class OptionSetConfig:
    values: tuple[str, ...] = ()
    # "options_selection" for list-value kinds, "list_values" for ethnicity kinds
    wire_key: str = "options_selection"

    def to_wire(self) -> dict[str, Any]:
        if self.wire_key == "list_values":
            return {"list_values": list(self.values)}
        return {
            "options_selection": {value: True for value in self.values},
            "other_value": None,
        }


@dataclass(frozen=True)
class EmptyConfig:
    def to_wire(self) -> dict[str, Any]:
        return {}


CriterionConfig = Union[ThresholdConfig, OptionSetConfig, EmptyConfig]

_THRESHOLD_KINDS = {
    CriterionKind.AGE_GTE,
    CriterionKind.AGE_LT,
    CriterionKind.BMI_GTE,
    CriterionKind.BMI_LT,
    CriterionKind.TIME_PASSED_GTE,
    CriterionKind.TIME_PASSED_LT,
}

_OPTION_SELECTION_KINDS = {
    CriterionKind.LIST_VALUE_SET,
    CriterionKind.LIST_VALUE_NOT_SET,
}

_LIST_VALUES_KINDS = {
    CriterionKind.ETHNICITY_SET,
    CriterionKind.ETHNICITY_NOT_SET,
}

CONFIG_SHAPES: dict[CriterionKind, type] = {
    kind: (
        ThresholdConfig if kind in _THRESHOLD_KINDS
        else OptionSetConfig if kind in _OPTION_SELECTION_KINDS | _LIST_VALUES_KINDS
        else EmptyConfig
    )
    for kind in CriterionKind
}


def _parse_threshold(kind: CriterionKind, raw: dict[str, Any]) -> ThresholdConfig:
    # Editors sometimes hold the value under "value" before it is saved
    value = raw.get("trigger_value", raw.get("value"))
    if value is None or isinstance(value, bool):
        raise CriterionConfigError(f"{kind.value} requires a numeric trigger_value")
    try:
        return ThresholdConfig(float(value))
    except (TypeError, ValueError):
        raise CriterionConfigError(
            f"{kind.value} trigger_value is not numeric: {value!r}"
        ) from None


def _parse_option_set(kind: CriterionKind, raw: dict[str, Any]) -> OptionSetConfig:
    wire_key = "list_values" if kind in _LIST_VALUES_KINDS else "options_selection"
    if "options_selection" in raw:
        selection = raw["options_selection"] or {}
        if not isinstance(selection, dict):
            raise CriterionConfigError(f"{kind.value} options_selection must be a mapping")
        values = [str(label) for label, chosen in selection.items() if chosen]
    else:
        listed = raw.get("list_values") or []
        if not isinstance(listed, (list, tuple)):
            listed = [listed]
        values = [str(label) for label in listed]
    return OptionSetConfig(tuple(dict.fromkeys(values)), wire_key=wire_key)


def build_config(kind: CriterionKind, raw: dict[str, Any] | None) -> CriterionConfig:
    """Parse a raw payload into the shape owned by ``kind``."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise CriterionConfigError(f"{kind.value} config must be an object")
    shape = CONFIG_SHAPES[kind]
    if shape is ThresholdConfig:
        return _parse_threshold(kind, raw)
    if shape is OptionSetConfig:
        return _parse_option_set(kind, raw)
    return EmptyConfig()


@dataclass(frozen=True)
class Criterion:
    """A typed trigger criterion attached to one connection slot."""
    kind: CriterionKind
    config: CriterionConfig = field(default_factory=EmptyConfig)

    def __post_init__(self):
        expected = CONFIG_SHAPES[self.kind]
        if not isinstance(self.config, expected):
            raise CriterionConfigError(
                f"{self.kind.value} expects {expected.__name__}, got {type(self.config).__name__}"
            )

    @property
    def label(self) -> str:
        return label_for(self.kind)

    @property
    def is_boolean(self) -> bool:
        return self.kind in (CriterionKind.BOOL_YES, CriterionKind.BOOL_NO)

    @classmethod
    def of(cls, kind: CriterionKind | str, config: dict[str, Any] | None = None) -> "Criterion":
        """Build from a kind value and a raw config payload."""
        kind = CriterionKind(kind)
        return cls(kind, build_config(kind, config))

    @classmethod
    def from_wire(cls, choice: str, config: dict[str, Any] | None = None) -> "Criterion":
        """Build from a criterion record's ``choice`` label and ``config``."""
        kind = kind_for_label(choice)
        return cls(kind, build_config(kind, config))

    def to_wire(self) -> dict[str, Any]:
        return {"choice": self.label, "config": self.config.to_wire()}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "label": self.label, "config": self.config.to_wire()}
