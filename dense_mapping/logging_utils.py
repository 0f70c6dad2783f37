from __future__ import annotations

import dataclasses
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, cast

import numpy as np

from .candidates import AlignmentCandidatePair
from .map import PoseGraphMap

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 160
_repr.maxlist = 10
_repr.maxset = 10


def summarize(value: Any, *, max_items: int = 3, max_length: int = 400) -> str:
    """Render ``value`` compactly for DEBUG logs."""

    if isinstance(value, np.ndarray):
        parts = [f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"]
        if 0 < value.size <= 4:
            parts.append(f"values={_repr.repr(value.tolist())}")
        elif value.size:
            parts.append(f"min={float(value.min()):.6g}, max={float(value.max()):.6g}")
        return ", ".join(parts)

    if isinstance(value, PoseGraphMap):
        return f"PoseGraphMap(vertices={value.num_vertices}, edges={value.num_edges})"

    if isinstance(value, AlignmentCandidatePair):
        a, b = value.vertex_ids()
        return f"({a} <-> {b}{'' if value.is_valid() else ', invalid'})"

    if isinstance(value, list) and value and isinstance(value[0], AlignmentCandidatePair):
        shown = ", ".join(summarize(pair) for pair in value[:max_items])
        more = f", ... {len(value) - max_items} more" if len(value) > max_items else ""
        return f"[{len(value)} pair(s): {shown}{more}]"

    if isinstance(value, (set, frozenset)):
        items = sorted(value, key=str)
        shown = ", ".join(_repr.repr(item) for item in items[:max_items])
        more = ", ..." if len(items) > max_items else ""
        return "{" + shown + more + "}"

    try:
        rendered = _repr.repr(value)
    except Exception as exc:  # pragma: no cover - repr of foreign objects
        rendered = f"<repr-error {exc!r}>"
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _describe_report(report: Any) -> str:
    if dataclasses.is_dataclass(report) and not isinstance(report, type):
        fields_text = ", ".join(
            f"{f.name}={summarize(getattr(report, f.name))}" for f in dataclasses.fields(report)
        )
        return f"{type(report).__name__}({fields_text})"
    return summarize(report)


def log_stage(logger: logging.Logger, *, name: Optional[str] = None) -> Callable[[F], F]:
    """Log the candidates a filter stage receives and the report it returns, at DEBUG."""

    def decorator(func: F) -> F:
        stage = name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if logger.isEnabledFor(logging.DEBUG):
                inputs = [
                    summarize(arg)
                    for arg in list(args) + list(kwargs.values())
                    if isinstance(arg, (list, PoseGraphMap))
                ]
                logger.debug("%s <- %s", stage, "; ".join(inputs) or "no candidates")
            report = func(*args, **kwargs)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("%s -> %s", stage, _describe_report(report))
            return report

        return cast(F, wrapper)

    return decorator
