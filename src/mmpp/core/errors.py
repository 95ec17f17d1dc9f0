"""
Error types for mmpp parsing, rendering, and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass


class MmppError(Exception):
    """Base exception for all mmpp errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class MetricParseError(MmppError):
    """
    Raised when metric expression text cannot be turned into a Metric tree.

    `pos` is the 0-based offset into the input where the problem was found.
    """

    def __init__(self, message: str, pos: int = 0, context: ErrorContext | None = None):
        self.pos = pos
        super().__init__(message, context)


class MetricSyntaxError(MetricParseError):
    """
    Raised when the input does not conform to the metric grammar.

    Examples:
    - Unknown function name
    - Wrong argument count or kind
    - Unbalanced parentheses
    - Trailing content or empty input
    """

    pass


class MetricShapeError(MetricParseError):
    """
    Raised when a literal argument is syntactically accepted but does not
    have the shape its position requires (e.g. a factor that is not a
    decimal number or fraction).
    """

    def __init__(
        self,
        category: str,
        message: str,
        pos: int = 0,
        context: ErrorContext | None = None,
    ):
        self.category = category
        super().__init__(message, pos, context)


class NestingDepthError(MetricParseError):
    """Raised when function forms are nested deeper than the configured limit."""

    pass


class InvalidMetricError(MmppError):
    """
    Raised when a Metric tree violates a structural invariant the printer
    relies on, such as a group without children.
    """

    pass


class ConfigError(MmppError):
    """Raised when configuration values cannot be loaded or are invalid."""

    pass


@dataclass
class ErrorContext:
    """
    Location of an error within the parsed text.

    Attributes:
        source: Name of the input (file path or "<stdin>")
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source line containing the error
    """

    source: str
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "<stdin>:1:10"
        """
        location = f"{self.source}:{self.line}:{self.column}"
        if self.snippet is not None:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format the source line with an error marker under the column."""
        prefix = f"{self.line:4d} | "
        marker = " " * (len(prefix) + self.column - 1) + "^"
        return f"{prefix}{self.snippet}\n{marker}"


def context_for(text: str, pos: int, source: str = "<input>") -> ErrorContext:
    """
    Build an ErrorContext pointing at offset `pos` of `text`.

    Args:
        text: Full input text
        pos: 0-based offset (clamped to the text length)
        source: Input name shown in the location prefix

    Returns:
        ErrorContext with line, column, and the offending line as snippet
    """
    pos = max(0, min(pos, len(text)))
    line = text.count("\n", 0, pos) + 1
    line_start = text.rfind("\n", 0, pos) + 1
    line_end = text.find("\n", pos)
    if line_end == -1:
        line_end = len(text)
    return ErrorContext(
        source=source,
        line=line,
        column=pos - line_start + 1,
        snippet=text[line_start:line_end],
    )


def make_syntax_error(message: str, text: str, pos: int, source: str = "<input>") -> MetricSyntaxError:
    """
    Helper to create a MetricSyntaxError with context.

    Args:
        message: Error description
        text: Full input text
        pos: 0-based offset of the error
        source: Input name

    Returns:
        MetricSyntaxError with context attached
    """
    return MetricSyntaxError(message, pos, context_for(text, pos, source))


def make_shape_error(
    category: str,
    message: str,
    text: str,
    pos: int,
    source: str = "<input>",
) -> MetricShapeError:
    """Helper to create a MetricShapeError with context."""
    return MetricShapeError(category, message, pos, context_for(text, pos, source))
