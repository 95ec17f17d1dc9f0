"""
Metric expression types for the mmpp IR.

A metric expression is a tree of function applications whose leaves name
a concrete metric series:

- Leaves: host(h, m), service(s, m), role(s:r, m), roleSlots(s:r, m)
- Aggregations: avg, max, min, product, stack (one child)
- Binary: diff, divide (ordered left/right)
- Parametrized: scale, offset, percentile, timeShift, movingAverage,
  linearRegression, timeLeftForecast
- Variadic: group(m1, m2, ...)

Numeric parameters are kept as their source text; nothing here performs
arithmetic on them.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Anchored for pydantic, which searches rather than full-matches `pattern`
NUMBER_PATTERN = r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$"
DURATION_PATTERN = r"^\d+(?:\.\d+)?[A-Za-z]+$"

# ---------------------------------------------------------------------------
# Parameter types
# ---------------------------------------------------------------------------


class Double(BaseModel):
    """A decimal literal such as 10.0, 3.140e10 or -31.4."""

    value: str = Field(pattern=NUMBER_PATTERN, description="Literal source text")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.value


class Fraction(BaseModel):
    """A ratio of two decimal literals: numerator/denominator."""

    numerator: str = Field(pattern=NUMBER_PATTERN, description="Numerator source text")
    denominator: str = Field(pattern=NUMBER_PATTERN, description="Denominator source text")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


class Percentage(BaseModel):
    """Percentile rank, e.g. 75.5."""

    value: str = Field(pattern=NUMBER_PATTERN, description="Literal source text")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.value


class Duration(BaseModel):
    """
    A duration literal: 1d, 12h, 3mo.

    The unit suffix is opaque; only the <number><unit> shape is checked.
    """

    value: str = Field(pattern=DURATION_PATTERN, description="Literal source text")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.value


Factor = Double | Fraction


# ---------------------------------------------------------------------------
# Leaf metrics
# ---------------------------------------------------------------------------


class Host(BaseModel):
    """A metric of a single host: host(hostId, metricName)."""

    function: ClassVar[str] = "host"

    host_id: str = Field(min_length=1)
    metric_name: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.function}({self.host_id}, {self.metric_name})"


class Service(BaseModel):
    """A service metric: service(serviceName, metricName)."""

    function: ClassVar[str] = "service"

    service_name: str = Field(min_length=1)
    metric_name: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.function}({self.service_name}, {self.metric_name})"


class RoleScopedMetric(BaseModel):
    """Common shape of the forms addressed by a service:role identifier."""

    function: ClassVar[str] = ""

    service_name: str = Field(min_length=1)
    role_name: str = Field(min_length=1)
    metric_name: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    @field_validator("service_name", "role_name")
    @classmethod
    def validate_role_part(cls, v: str) -> str:
        """Strip surrounding whitespace; the result must be non-empty and free of ':'."""
        v = v.strip()
        if not v:
            raise ValueError("service and role names must not be blank")
        if ":" in v:
            raise ValueError(f"service and role names must not contain ':', got: {v}")
        return v

    def __str__(self) -> str:
        return f"{self.function}({self.service_name}:{self.role_name}, {self.metric_name})"


class Role(RoleScopedMetric):
    """
    A metric of every host in a role.

    Example:
        Role(service_name="Blog", role_name="db", metric_name="loadavg5")
        → role(Blog:db, loadavg5)
    """

    function: ClassVar[str] = "role"


class RoleSlot(RoleScopedMetric):
    """Per-slot metric of a role: roleSlots(service:role, metricName)."""

    function: ClassVar[str] = "roleSlots"


# ---------------------------------------------------------------------------
# Compound metrics
# ---------------------------------------------------------------------------


class UnaryMetric(BaseModel):
    """Common shape of single-child forms."""

    function: ClassVar[str] = ""

    metric: Metric

    model_config = ConfigDict(frozen=True)


class Avg(UnaryMetric):
    function: ClassVar[str] = "avg"


class Max(UnaryMetric):
    function: ClassVar[str] = "max"


class Min(UnaryMetric):
    function: ClassVar[str] = "min"


class Product(UnaryMetric):
    function: ClassVar[str] = "product"


class Stack(UnaryMetric):
    function: ClassVar[str] = "stack"


class BinaryMetric(BaseModel):
    """Two ordered operands: the first is the minuend or dividend."""

    function: ClassVar[str] = ""

    left: Metric
    right: Metric

    model_config = ConfigDict(frozen=True)


class Diff(BinaryMetric):
    function: ClassVar[str] = "diff"


class Divide(BinaryMetric):
    function: ClassVar[str] = "divide"


class Scale(UnaryMetric):
    """Multiply a metric by a factor."""

    function: ClassVar[str] = "scale"

    factor: Factor


class Offset(UnaryMetric):
    """Add a constant factor to a metric."""

    function: ClassVar[str] = "offset"

    factor: Factor


class Percentile(UnaryMetric):
    function: ClassVar[str] = "percentile"

    percentage: Percentage


class TimeShift(UnaryMetric):
    function: ClassVar[str] = "timeShift"

    duration: Duration


class MovingAverage(UnaryMetric):
    function: ClassVar[str] = "movingAverage"

    duration: Duration


class LinearRegression(UnaryMetric):
    function: ClassVar[str] = "linearRegression"

    duration: Duration


class TimeLeftForecast(UnaryMetric):
    """Forecast when `metric` reaches `factor`, looking back over `duration`."""

    function: ClassVar[str] = "timeLeftForecast"

    duration: Duration
    factor: Factor


class Group(BaseModel):
    """An ordered collection of metrics; order is significant."""

    function: ClassVar[str] = "group"

    metrics: list[Metric] = Field(min_length=1, description="Grouped metrics, in source order")

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

LeafMetric = Host | Service | Role | RoleSlot

Metric = (
    Host
    | Service
    | Role
    | RoleSlot
    | Avg
    | Max
    | Min
    | Product
    | Stack
    | Diff
    | Divide
    | Scale
    | Offset
    | Percentile
    | TimeShift
    | MovingAverage
    | LinearRegression
    | TimeLeftForecast
    | Group
)

# Rebuild models for recursive forward references
for _model in (
    UnaryMetric,
    Avg,
    Max,
    Min,
    Product,
    Stack,
    BinaryMetric,
    Diff,
    Divide,
    Scale,
    Offset,
    Percentile,
    TimeShift,
    MovingAverage,
    LinearRegression,
    TimeLeftForecast,
    Group,
):
    _model.model_rebuild()
del _model
