"""
mmpp - metric expression parser and canonical pretty-printer.

Parses expressions such as avg(group(host(h1, loadavg5), host(h2, loadavg5)))
into a typed Metric tree and renders that tree back in a canonical,
deterministically indented form.

Usage:
    from mmpp import parse_metric, pretty_print

    metric = parse_metric("avg(role(Blog:db, loadavg5))")
    print(pretty_print(metric))
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import (
    ConfigError,
    InvalidMetricError,
    MetricParseError,
    MetricShapeError,
    MetricSyntaxError,
    MmppError,
    NestingDepthError,
)
from .core.metric_lang import metric_depth, parse_metric, pretty_print

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "parse_metric",
    "pretty_print",
    "metric_depth",
    "MmppError",
    "MetricParseError",
    "MetricSyntaxError",
    "MetricShapeError",
    "NestingDepthError",
    "InvalidMetricError",
    "ConfigError",
]
