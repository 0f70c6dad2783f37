"""Selection configuration and the process-wide default."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


class SelectionConfigError(ValueError):
    """Raised when selection options cannot be turned into a config."""


class FilterStrategy(Enum):
    RANDOM = "random"
    DISTANCE = "distance"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: "str | FilterStrategy") -> "FilterStrategy":
        if isinstance(value, FilterStrategy):
            return value
        for strategy in (cls.RANDOM, cls.DISTANCE):
            if strategy.value == value:
                return strategy
        logger.warning("Unrecognized candidate filter strategy %r", value)
        return cls.UNKNOWN


@dataclass(frozen=True)
class SelectionConfig:
    """Policy knobs for alignment candidate selection."""

    # Loop-closure edge quality filtering.
    recompute_all_constraints: bool = False
    recompute_invalid_constraints: bool = True
    constraint_min_switch_variable_value: float = 0.5

    # Cardinality filtering; a negative cap disables the strategy stage.
    max_number_of_candidates: int = -1
    filter_strategy: FilterStrategy = FilterStrategy.RANDOM
    min_distance_to_next_candidate: float = 1.0
    random_seed: Optional[int] = None

    # Raw strategy string as configured, kept for error reporting.
    filter_strategy_name: Optional[str] = None

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "SelectionConfig":
        """Build a config from named options on top of the process-wide default."""

        known = {f.name for f in fields(cls)} - {"filter_strategy_name"}
        unknown = sorted(set(options) - known)
        if unknown:
            raise SelectionConfigError(f"Unknown selection option(s): {', '.join(unknown)}")

        values = dict(options)
        try:
            if "filter_strategy" in values:
                raw = values["filter_strategy"]
                values["filter_strategy"] = FilterStrategy.parse(raw)
                values["filter_strategy_name"] = raw.value if isinstance(raw, FilterStrategy) else str(raw)
            for key in ("recompute_all_constraints", "recompute_invalid_constraints"):
                if key in values and not isinstance(values[key], bool):
                    raise SelectionConfigError(f"Option '{key}' must be boolean, got {values[key]!r}")
            if "constraint_min_switch_variable_value" in values:
                values["constraint_min_switch_variable_value"] = float(values["constraint_min_switch_variable_value"])
            if "min_distance_to_next_candidate" in values:
                values["min_distance_to_next_candidate"] = float(values["min_distance_to_next_candidate"])
            if "max_number_of_candidates" in values:
                values["max_number_of_candidates"] = _as_int(values["max_number_of_candidates"], "max_number_of_candidates")
            if values.get("random_seed") is not None:
                values["random_seed"] = _as_int(values["random_seed"], "random_seed")
        except SelectionConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise SelectionConfigError(str(exc)) from exc

        return replace(get_default_selection_config(), **values)

    @property
    def strategy_label(self) -> str:
        return self.filter_strategy_name or self.filter_strategy.value


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or int(value) != value:
        raise SelectionConfigError(f"Option '{name}' must be an integer, got {value!r}")
    return int(value)


_DEFAULT_SELECTION_CONFIG = SelectionConfig()


def get_default_selection_config() -> SelectionConfig:
    return copy.deepcopy(_DEFAULT_SELECTION_CONFIG)


def set_default_selection_config(config: SelectionConfig) -> None:
    global _DEFAULT_SELECTION_CONFIG
    _DEFAULT_SELECTION_CONFIG = copy.deepcopy(config)
