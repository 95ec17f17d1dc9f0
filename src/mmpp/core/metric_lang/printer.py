"""
Canonical pretty-printer for Metric trees.

Layout rules, with two spaces of indentation per level:

- Leaves are always single-line: host(h, m), role(s:r, m).
- Single-child forms (with or without one parameter) are inline when the
  node's depth is at most 2, otherwise the child and parameter go on
  their own indented lines.
- diff, divide, timeLeftForecast and group are always multi-line.
- A closing parenthesis sits at the indentation of its own node.

Structurally equal trees render identically, and rendering the result of
parsing rendered text reproduces it exactly.
"""

from __future__ import annotations

import logging

from mmpp.core.errors import InvalidMetricError
from mmpp.core.ir.metrics import (
    BinaryMetric,
    Group,
    LeafMetric,
    LinearRegression,
    Metric,
    MovingAverage,
    Offset,
    Percentile,
    Scale,
    TimeLeftForecast,
    TimeShift,
    UnaryMetric,
)

logger = logging.getLogger(__name__)

INDENT = "  "
INLINE_DEPTH = 2


def metric_depth(metric: Metric) -> int:
    """Nesting depth of a metric: 1 for leaves, 1 + deepest child otherwise.

    Raises:
        InvalidMetricError: For an empty group or an unknown node type.
    """
    if isinstance(metric, LeafMetric):
        return 1

    if isinstance(metric, UnaryMetric):
        return 1 + metric_depth(metric.metric)

    if isinstance(metric, BinaryMetric):
        return 1 + max(metric_depth(metric.left), metric_depth(metric.right))

    if isinstance(metric, Group):
        if not metric.metrics:
            raise InvalidMetricError("group() must contain at least one metric")
        return 1 + max(metric_depth(child) for child in metric.metrics)

    raise InvalidMetricError(f"Not a metric: {type(metric).__name__}")


def pretty_print(metric: Metric) -> str:
    """Render a metric in canonical form (no trailing newline)."""
    text = _render(metric, 0)
    logger.debug("Rendered %s() over %d lines", metric.function, text.count("\n") + 1)
    return text


def _parameters(metric: UnaryMetric) -> list[str]:
    """Non-metric arguments of a single-child form, in argument order."""
    if isinstance(metric, TimeLeftForecast):
        return [str(metric.duration), str(metric.factor)]
    if isinstance(metric, Percentile):
        return [str(metric.percentage)]
    if isinstance(metric, (Scale, Offset)):
        return [str(metric.factor)]
    if isinstance(metric, (TimeShift, MovingAverage, LinearRegression)):
        return [str(metric.duration)]
    return []


def _render(metric: Metric, level: int) -> str:
    """Render `metric` with its first line indented to `level`."""
    pad = INDENT * level

    if isinstance(metric, LeafMetric):
        return f"{pad}{metric}"

    if isinstance(metric, Group):
        if not metric.metrics:
            raise InvalidMetricError("group() must contain at least one metric")
        return _block(metric.function, [_render(child, level + 1) for child in metric.metrics], pad)

    if isinstance(metric, BinaryMetric):
        left = _render(metric.left, level + 1)
        right = _render(metric.right, level + 1)
        return _block(metric.function, [left, right], pad)

    if isinstance(metric, UnaryMetric):
        params = _parameters(metric)
        if not isinstance(metric, TimeLeftForecast) and metric_depth(metric) <= INLINE_DEPTH:
            args = ", ".join([_render(metric.metric, 0), *params])
            return f"{pad}{metric.function}({args})"
        child = _render(metric.metric, level + 1)
        inner = INDENT * (level + 1)
        return _block(metric.function, [child, *(inner + p for p in params)], pad)

    raise InvalidMetricError(f"Not a metric: {type(metric).__name__}")


def _block(function: str, lines: list[str], pad: str) -> str:
    """function(\\n<line>,\\n<line>\\n<pad>)"""
    body = ",\n".join(lines)
    return f"{pad}{function}(\n{body}\n{pad})"
