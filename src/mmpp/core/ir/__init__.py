"""
mmpp Intermediate Representation.

Metric expression trees produced by the parser and consumed by the printer.
"""

from .metrics import (
    Avg,
    BinaryMetric,
    Diff,
    Divide,
    Double,
    Duration,
    Factor,
    Fraction,
    Group,
    Host,
    LeafMetric,
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
    RoleScopedMetric,
    RoleSlot,
    Scale,
    Service,
    Stack,
    TimeLeftForecast,
    TimeShift,
    UnaryMetric,
)

__all__ = [
    # Parameters
    "Double",
    "Fraction",
    "Factor",
    "Percentage",
    "Duration",
    # Leaves
    "Host",
    "Service",
    "Role",
    "RoleSlot",
    "RoleScopedMetric",
    "LeafMetric",
    # Compound
    "UnaryMetric",
    "BinaryMetric",
    "Avg",
    "Max",
    "Min",
    "Product",
    "Stack",
    "Diff",
    "Divide",
    "Scale",
    "Offset",
    "Percentile",
    "TimeShift",
    "MovingAverage",
    "LinearRegression",
    "TimeLeftForecast",
    "Group",
    "Metric",
]
