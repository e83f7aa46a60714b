"""
Error types and source location tracking for the DemoScript front end.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from demoscript.compiler.ast_nodes import SourceSlice
    from demoscript.utils.diagnostics import Diagnostic


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class DemoScriptError(Exception):
    """Base exception for all DemoScript front-end errors."""

    code = "E0201"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        span: Optional["SourceSlice"] = None,
        expected: tuple[str, ...] = (),
        code: Optional[str] = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message
        self.location = location
        self.source_line = source_line
        self.span = span
        self.expected = expected
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")

        parts.append(self.message)

        if self.source_line and self.location:
            parts.append(f"\n    {self.source_line}")
            padding = " " * (4 + self.location.column - 1)
            parts.append(f"\n{padding}^")

        return " ".join(parts) if not self.source_line else parts[0] + " " + "".join(parts[1:])

    def to_diagnostic(self, source: str, filename: Optional[str] = None) -> "Diagnostic":
        """
        Build a rich diagnostic for this error.

        Args:
            source: The source text the error was raised for
            filename: Name shown in the ``-->`` line; defaults to the
                filename recorded in the error location

        Returns:
            A Diagnostic whose primary label covers the error span.
        """
        from demoscript.utils.diagnostics import Diagnostic, DiagnosticLabel, SourceSpan

        if filename is None:
            filename = (self.location.filename if self.location else None) or "<input>"

        labels: list[DiagnosticLabel] = []
        if self.span is not None:
            span = SourceSpan.from_offsets(source, self.span.start, self.span.end, filename)
            labels.append(DiagnosticLabel(span, "", True))
        elif self.location is not None:
            span = SourceSpan.from_offsets(source, self.location.offset, self.location.offset, filename)
            labels.append(DiagnosticLabel(span, "", True))

        helps = []
        if self.expected:
            helps.append("expected one of: " + ", ".join(self.expected))

        return Diagnostic(
            code=self.code,
            message=self.message,
            labels=labels,
            helps=helps,
        )


class LexerError(DemoScriptError):
    """Raised when no terminal matches the input at the current position."""

    code = "E0208"


class ParserError(DemoScriptError):
    """Raised when the next token does not fit any expected production."""

    pass


class LiteralError(ParserError):
    """Raised when a numeric literal's text cannot be converted to a value."""

    code = "E0207"
