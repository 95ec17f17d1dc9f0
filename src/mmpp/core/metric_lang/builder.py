"""
Builds typed Metric values from the metric parse tree.

Literal parameters are validated for shape here (a factor must be a
decimal number or fraction, a duration must be <number><unit>) but are
carried as source text.
"""

from __future__ import annotations

import logging
import re

from mmpp.core.errors import InvalidMetricError, MetricShapeError, make_shape_error
from mmpp.core.ir.metrics import (
    DURATION_PATTERN,
    NUMBER_PATTERN,
    Avg,
    Diff,
    Divide,
    Double,
    Duration,
    Factor,
    Fraction,
    Group,
    Host,
    LinearRegression,
    Max,
    Metric,
    Min,
    MovingAverage,
    Offset,
    Percentage,
    Percentile,
    Product,
    Role,
    RoleSlot,
    Scale,
    Service,
    Stack,
    TimeLeftForecast,
    TimeShift,
)
from mmpp.core.metric_lang.grammar import Rule
from mmpp.core.metric_lang.parser import DEFAULT_MAX_DEPTH, ParseNode, parse_text

logger = logging.getLogger(__name__)

_DOUBLE_RE = re.compile(NUMBER_PATTERN)
_DURATION_RE = re.compile(DURATION_PATTERN)

_AGGREGATES = {
    Rule.AVG: Avg,
    Rule.MAX: Max,
    Rule.MIN: Min,
    Rule.PRODUCT: Product,
    Rule.STACK: Stack,
}
_BINARY = {Rule.DIFF: Diff, Rule.DIVIDE: Divide}
_FACTORED = {Rule.SCALE: Scale, Rule.OFFSET: Offset}
_TIMED = {
    Rule.TIME_SHIFT: TimeShift,
    Rule.MOVING_AVERAGE: MovingAverage,
    Rule.LINEAR_REGRESSION: LinearRegression,
}


class _Builder:
    """Converts ParseNodes to Metrics, reporting shape errors against the source text."""

    def __init__(self, text: str, source: str) -> None:
        self.text = text
        self.source = source

    def shape_error(self, category: str, node: ParseNode, expected: str) -> MetricShapeError:
        return make_shape_error(
            category,
            f"invalid {category}: {node.text!r} (expected {expected})",
            self.text,
            node.pos,
            self.source,
        )

    def metric(self, node: ParseNode) -> Metric:
        """Dispatch on the node's rule tag."""
        rule = node.rule
        args = node.children

        if rule == Rule.HOST:
            return Host(host_id=args[0].text, metric_name=args[1].text)

        if rule == Rule.SERVICE:
            return Service(service_name=args[0].text, metric_name=args[1].text)

        if rule in (Rule.ROLE, Rule.ROLE_SLOTS):
            service_name, role_name = (part.text for part in args[0].children)
            cls = Role if rule == Rule.ROLE else RoleSlot
            return cls(service_name=service_name, role_name=role_name, metric_name=args[1].text)

        if rule in _AGGREGATES:
            return _AGGREGATES[rule](metric=self.metric(args[0]))

        if rule in _BINARY:
            left = self.metric(args[0])
            right = self.metric(args[1])
            return _BINARY[rule](left=left, right=right)

        if rule in _FACTORED:
            return _FACTORED[rule](metric=self.metric(args[0]), factor=self.factor(args[1]))

        if rule == Rule.PERCENTILE:
            return Percentile(metric=self.metric(args[0]), percentage=self.percentage(args[1]))

        if rule in _TIMED:
            return _TIMED[rule](metric=self.metric(args[0]), duration=self.duration(args[1]))

        if rule == Rule.TIME_LEFT_FORECAST:
            return TimeLeftForecast(
                metric=self.metric(args[0]),
                duration=self.duration(args[1]),
                factor=self.factor(args[2]),
            )

        if rule == Rule.GROUP:
            return Group(metrics=[self.metric(child) for child in args])

        raise InvalidMetricError(f"Parse tree node {rule!s} is not a metric form")

    def factor(self, node: ParseNode) -> Factor:
        expected = "a decimal number or a fraction such as 1/3"
        if node.rule == Rule.FRACTION:
            numerator, denominator = node.children
            for part in (numerator, denominator):
                if not _DOUBLE_RE.fullmatch(part.text):
                    raise self.shape_error("factor", part, expected)
            return Fraction(numerator=numerator.text, denominator=denominator.text)
        if not _DOUBLE_RE.fullmatch(node.text):
            raise self.shape_error("factor", node, expected)
        return Double(value=node.text)

    def percentage(self, node: ParseNode) -> Percentage:
        if not _DOUBLE_RE.fullmatch(node.text):
            raise self.shape_error("percentage", node, "a decimal number")
        return Percentage(value=node.text)

    def duration(self, node: ParseNode) -> Duration:
        if not _DURATION_RE.fullmatch(node.text):
            raise self.shape_error("duration", node, "a number followed by a unit, such as 1d")
        return Duration(value=node.text)


def build_metric(node: ParseNode, text: str = "", source: str = "<input>") -> Metric:
    """Convert a parse tree into a Metric.

    Args:
        node: Root function node from parse_text().
        text: The parsed text, used to locate shape errors.
        source: Input name used in error locations.

    Raises:
        MetricShapeError: If a literal argument has the wrong shape.
    """
    return _Builder(text, source).metric(node)


def parse_metric(
    text: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    source: str = "<input>",
) -> Metric:
    """Parse a metric expression into a Metric tree.

    Args:
        text: Expression text, e.g. "avg(role(Blog:db, loadavg5))".
        max_depth: Maximum nesting depth of function forms, at most MAX_DEPTH_LIMIT.
        source: Input name used in error locations.

    Returns:
        Parsed Metric tree.

    Raises:
        MetricSyntaxError: If the text does not match the grammar.
        MetricShapeError: If a factor, percentage, or duration is malformed.
        NestingDepthError: If nesting exceeds `max_depth`.
    """
    tree = parse_text(text, max_depth=max_depth, source=source)
    metric = build_metric(tree, text, source)
    logger.debug("Parsed %s as %s()", source, metric.function)
    return metric
