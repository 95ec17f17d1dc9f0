"""
Grammar of the mmpp metric language.

    metric          → FUNC "(" args ")"
    identifier      → WORD | NUMBER | STRING
    role_identifier → STRING containing one ":" | identifier ":" identifier
    literal         → WORD | NUMBER
    factor          → literal ("/" literal)?

Each function name selects a fixed argument signature:

    host(identifier, identifier)
    service(identifier, identifier)
    role(role_identifier, identifier)
    roleSlots(role_identifier, identifier)
    avg | max | min | product | stack(metric)
    diff | divide(metric, metric)
    scale | offset(metric, factor)
    percentile(metric, percentage)
    timeShift | movingAverage | linearRegression(metric, duration)
    timeLeftForecast(metric, duration, factor)
    group(metric, metric, ...)

Percentage and duration positions are parsed as plain literals; their
shape is checked when the Metric tree is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Rule(StrEnum):
    """Parse tree node tags."""

    # Function forms
    HOST = "host"
    SERVICE = "service"
    ROLE = "role"
    ROLE_SLOTS = "roleSlots"
    AVG = "avg"
    MAX = "max"
    MIN = "min"
    PRODUCT = "product"
    STACK = "stack"
    DIFF = "diff"
    DIVIDE = "divide"
    SCALE = "scale"
    OFFSET = "offset"
    PERCENTILE = "percentile"
    TIME_SHIFT = "timeShift"
    MOVING_AVERAGE = "movingAverage"
    LINEAR_REGRESSION = "linearRegression"
    TIME_LEFT_FORECAST = "timeLeftForecast"
    GROUP = "group"

    # Arguments
    IDENTIFIER = "identifier"
    ROLE_IDENTIFIER = "role_identifier"
    SERVICE_NAME = "service_name"
    ROLE_NAME = "role_name"
    LITERAL = "literal"
    FRACTION = "fraction"


class ArgKind(StrEnum):
    """Kinds of argument a function position accepts."""

    IDENTIFIER = "identifier"
    ROLE_IDENTIFIER = "role identifier"
    METRIC = "metric"
    FACTOR = "factor"
    PERCENTAGE = "percentage"
    DURATION = "duration"


@dataclass(frozen=True)
class FunctionSignature:
    """
    Argument signature of one function form.

    For variadic forms `args` holds the single repeated kind and at least
    one argument is required.
    """

    rule: Rule
    args: tuple[ArgKind, ...]
    variadic: bool = False

    @property
    def name(self) -> str:
        return self.rule.value

    def describe(self) -> str:
        """Signature as written in the grammar, e.g. "scale(metric, factor)"."""
        kinds = ", ".join(kind.value for kind in self.args)
        if self.variadic:
            kinds += ", ..."
        return f"{self.name}({kinds})"


_I = ArgKind.IDENTIFIER
_R = ArgKind.ROLE_IDENTIFIER
_M = ArgKind.METRIC
_F = ArgKind.FACTOR
_D = ArgKind.DURATION

SIGNATURES: dict[str, FunctionSignature] = {
    sig.name: sig
    for sig in (
        FunctionSignature(Rule.HOST, (_I, _I)),
        FunctionSignature(Rule.SERVICE, (_I, _I)),
        FunctionSignature(Rule.ROLE, (_R, _I)),
        FunctionSignature(Rule.ROLE_SLOTS, (_R, _I)),
        FunctionSignature(Rule.AVG, (_M,)),
        FunctionSignature(Rule.MAX, (_M,)),
        FunctionSignature(Rule.MIN, (_M,)),
        FunctionSignature(Rule.PRODUCT, (_M,)),
        FunctionSignature(Rule.STACK, (_M,)),
        FunctionSignature(Rule.DIFF, (_M, _M)),
        FunctionSignature(Rule.DIVIDE, (_M, _M)),
        FunctionSignature(Rule.SCALE, (_M, _F)),
        FunctionSignature(Rule.OFFSET, (_M, _F)),
        FunctionSignature(Rule.PERCENTILE, (_M, ArgKind.PERCENTAGE)),
        FunctionSignature(Rule.TIME_SHIFT, (_M, _D)),
        FunctionSignature(Rule.MOVING_AVERAGE, (_M, _D)),
        FunctionSignature(Rule.LINEAR_REGRESSION, (_M, _D)),
        FunctionSignature(Rule.TIME_LEFT_FORECAST, (_M, _D, _F)),
        FunctionSignature(Rule.GROUP, (_M,), variadic=True),
    )
}


def function_names() -> list[str]:
    """All function names, in grammar order."""
    return list(SIGNATURES)
