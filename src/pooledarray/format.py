# -------------------------------------
# Pooled array formatting
# -------------------------------------
"""
Text rendering of pooled arrays: the values followed by their levels.

    [b, a, NA, a]
    levels: [a, b, NA]
"""
from __future__ import annotations

from typing import Any

from . import state
from .pooled import PooledArray


def _format_value(v: Any) -> str:
    """Format a single cell; None is the missing marker."""
    if v is None:
        return state.get_na_repr()
    if isinstance(v, float) and v != v:
        return "NaN"
    return str(v)


def _format_list(values: list) -> str:
    limit = state.get_max_format_items()
    if len(values) > limit:
        head = limit // 2
        tail = limit - head
        parts = [_format_value(v) for v in values[:head]]
        parts.append("...")
        parts.extend(_format_value(v) for v in values[-tail:])
    else:
        parts = [_format_value(v) for v in values]
    return "[" + ", ".join(parts) + "]"


def format_pooled(x: PooledArray) -> str:
    """
    Render a pooled array as text.

    Cells are listed in flat (C) order; arrays of rank > 1 show their shape
    on the first line.

    Args:
        x: Pooled array

    Returns:
        Multi-line string: values, then "levels: ..."
    """
    values = list(x)
    levels = x.pool.values
    if (x.refs == 0).any():
        levels.append(None)
    lines = []
    if x.ndim != 1:
        lines.append(f"shape: {x.shape}")
    lines.append(_format_list(values))
    lines.append("levels: " + _format_list(levels))
    return "\n".join(lines)


def print_pooled(x: PooledArray) -> None:
    """Print a pooled array with its levels."""
    print(format_pooled(x))
