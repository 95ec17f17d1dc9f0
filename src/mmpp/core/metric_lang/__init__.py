"""
mmpp metric language.

Tokenizer, parser, tree builder, and canonical printer.

Usage:
    from mmpp.core.metric_lang import parse_metric, pretty_print

    metric = parse_metric("scale(service(Blog, foo.bar), 1/3)")
    text = pretty_print(metric)
    # text == "scale(service(Blog, foo.bar), 1/3)"
"""

from mmpp.core.metric_lang.builder import build_metric, parse_metric
from mmpp.core.metric_lang.parser import parse_text
from mmpp.core.metric_lang.printer import metric_depth, pretty_print

__all__ = ["build_metric", "metric_depth", "parse_metric", "parse_text", "pretty_print"]
