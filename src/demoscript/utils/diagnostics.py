"""
Rich error reports for DemoScript scripts.

Every failure in the front end is fatal, so a report always describes exactly
one error: a header with its code, the file position, the offending source
lines with the error range underlined, and optional notes and hints.

Example output:
    error[E0201]: expected identifier, found '('
      --> scene.demo:1:4
       |
     1 | fn () {}
       |    ^
       |
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


class ErrorCode:
    """Codes for the errors the lexer and parser can raise."""

    E0201 = "E0201"  # unexpected token
    E0202 = "E0202"  # unclosed delimiter
    E0203 = "E0203"  # missing token
    E0206 = "E0206"  # unterminated string
    E0207 = "E0207"  # invalid number
    E0208 = "E0208"  # unexpected character
    E0209 = "E0209"  # invalid color literal


ERROR_DESCRIPTIONS: dict[str, str] = {
    ErrorCode.E0201: "unexpected token",
    ErrorCode.E0202: "unclosed delimiter",
    ErrorCode.E0203: "missing token",
    ErrorCode.E0206: "unterminated string",
    ErrorCode.E0207: "invalid number",
    ErrorCode.E0208: "unexpected character",
    ErrorCode.E0209: "invalid color literal",
}

# ANSI escapes used when rendering with color
RED = "\033[91m"
BLUE = "\033[94m"
GREEN = "\033[92m"
BOLD = "\033[1m"
RESET = "\033[0m"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """
    A region of a source file in 1-indexed line/column coordinates.

    ``end_col`` is exclusive; a span with ``start_col == end_col`` on one
    line marks a position between two characters.
    """

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    filename: str = "<input>"

    @classmethod
    def from_offsets(
        cls, source: str, start: int, end: int, filename: str = "<input>"
    ) -> "SourceSpan":
        """Create a span from a half-open offset range into ``source``."""
        start_line, start_col = _line_and_column(source, start)
        end_line, end_col = _line_and_column(source, max(start, end))
        return cls(start_line, start_col, end_line, end_col, filename)

    def __str__(self) -> str:
        return f"{self.filename}:{self.start_line}:{self.start_col}"

    @property
    def is_multiline(self) -> bool:
        return self.start_line != self.end_line


def _line_and_column(source: str, offset: int) -> tuple[int, int]:
    offset = min(max(offset, 0), len(source))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


@dataclass(slots=True)
class DiagnosticLabel:
    """
    A marked region of source code.

    The primary label is underlined with ``^`` and names the error position;
    secondary labels use ``-`` and point at related code, such as the
    opening brace of an unclosed block.
    """

    span: SourceSpan
    message: str = ""
    is_primary: bool = True


@dataclass
class Diagnostic:
    """An error report with source context."""

    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    helps: list[str] = field(default_factory=list)

    @property
    def primary_span(self) -> Optional[SourceSpan]:
        for label in self.labels:
            if label.is_primary:
                return label.span
        return self.labels[0].span if self.labels else None

    def render(self, source_code: str, use_color: bool = True) -> str:
        """
        Render this diagnostic as a formatted string.

        Labels spanning several lines underline every line they cover.

        Args:
            source_code: The source text the spans refer to
            use_color: Whether to emit ANSI color codes

        Returns:
            The report, one output line per line of text.
        """
        paint = _painter(use_color)
        gutter = paint(BLUE, "   |")

        if self.code in ERROR_DESCRIPTIONS:
            header = paint(RED + BOLD, f"error[{self.code}]")
        else:
            header = paint(RED + BOLD, "error")
        out = [f"{header}: {paint(BOLD, self.message)}"]

        primary = self.primary_span
        if primary is not None:
            out.append(f"  {paint(BLUE, '-->')} {primary}")
            out.append(gutter)
            source_lines = source_code.split("\n")
            for label in self.labels:
                out.extend(_render_label(label, source_lines, paint))
            out.append(gutter)

        out.extend(f"   {paint(BLUE, '=')} {paint(BOLD, 'note:')} {note}" for note in self.notes)
        out.extend(f"   {paint(BLUE, '=')} {paint(GREEN, 'help:')} {hint}" for hint in self.helps)
        return "\n".join(out)


def _painter(use_color: bool):
    if not use_color:
        return lambda style, text: text
    return lambda style, text: f"{style}{text}{RESET}"


def _render_label(label: DiagnosticLabel, source_lines: list[str], paint) -> list[str]:
    span = label.span
    marker = "^" if label.is_primary else "-"
    style = RED if label.is_primary else BLUE
    out: list[str] = []

    for line_num in range(span.start_line, span.end_line + 1):
        if not 1 <= line_num <= len(source_lines):
            continue
        text = source_lines[line_num - 1]
        out.append(f"{paint(BLUE, f'{line_num:3} |')} {text}")

        first = span.start_col if line_num == span.start_line else 1
        last = span.end_col if line_num == span.end_line else len(text) + 1
        underline = " " * (first - 1) + paint(style, marker * max(1, last - first))
        if label.message and line_num == span.end_line:
            underline += " " + paint(style, label.message)
        out.append(f"{paint(BLUE, '   |')} {underline}")

    return out


class DiagnosticBuilder:
    """
    Fluent builder for diagnostics.

        emitter.error(ErrorCode.E0202, "unclosed delimiter '{'", span)
            .secondary_label(open_span, "unclosed '{' starts here")
            .help("add matching closing '}'")
            .emit()
    """

    def __init__(
        self,
        emitter: "DiagnosticEmitter",
        code: str,
        message: str,
        primary_span: Optional[SourceSpan] = None,
    ) -> None:
        self._emitter = emitter
        self._diagnostic = Diagnostic(code, message)
        if primary_span is not None:
            self._diagnostic.labels.append(DiagnosticLabel(primary_span))

    def secondary_label(self, span: SourceSpan, message: str = "") -> "DiagnosticBuilder":
        self._diagnostic.labels.append(DiagnosticLabel(span, message, is_primary=False))
        return self

    def note(self, message: str) -> "DiagnosticBuilder":
        self._diagnostic.notes.append(message)
        return self

    def help(self, message: str) -> "DiagnosticBuilder":
        self._diagnostic.helps.append(message)
        return self

    def emit(self) -> Diagnostic:
        """Record the diagnostic with the emitter and return it."""
        self._emitter.add_diagnostic(self._diagnostic)
        return self._diagnostic


class DiagnosticEmitter:
    """
    Collects the diagnostics produced while parsing one source text.

    Usage:
        emitter = DiagnosticEmitter(source, "scene.demo")
        emitter.error(ErrorCode.E0201, "unexpected token", emitter.span(3, 4)).emit()
        print(emitter.render_all())
    """

    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.diagnostics: list[Diagnostic] = []

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def error(
        self, code: str, message: str, span: Optional[SourceSpan] = None
    ) -> DiagnosticBuilder:
        return DiagnosticBuilder(self, code, message, span)

    def span(self, start: int, end: int) -> SourceSpan:
        """Convert an offset range of this emitter's source into a SourceSpan."""
        return SourceSpan.from_offsets(self.source, start, end, self.filename)

    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    def render_all(self, use_color: bool = True) -> str:
        return "\n\n".join(d.render(self.source, use_color) for d in self.diagnostics)

    def clear(self) -> None:
        self.diagnostics.clear()


# -----------------------------------------------------------------------------
# Parser diagnostics
# -----------------------------------------------------------------------------


def create_unexpected_token_diagnostic(
    emitter: DiagnosticEmitter, expected: str, found: str, span: SourceSpan
) -> Diagnostic:
    """A token that no production accepts at this position."""
    return emitter.error(ErrorCode.E0201, f"expected {expected}, found '{found}'", span).emit()


def create_missing_token_diagnostic(
    emitter: DiagnosticEmitter, expected: str, found: str, span: SourceSpan
) -> Diagnostic:
    """A required ``;`` or ``)`` is absent."""
    return (
        emitter.error(ErrorCode.E0203, f"expected {expected}, found '{found}'", span)
        .help(f"insert {expected} before this token")
        .emit()
    )


def create_unclosed_delimiter_diagnostic(
    emitter: DiagnosticEmitter,
    delimiter: str,
    open_span: SourceSpan,
    error_span: SourceSpan,
) -> Diagnostic:
    """A ``{`` or ``(`` still open at end of file."""
    closing = CLOSING_DELIMITERS.get(delimiter, delimiter)
    return (
        emitter.error(ErrorCode.E0202, f"unclosed delimiter '{delimiter}'", error_span)
        .secondary_label(open_span, f"unclosed '{delimiter}' starts here")
        .note(f"end of file reached before the matching '{closing}'")
        .help(f"add matching closing '{closing}'")
        .emit()
    )


CLOSING_DELIMITERS = {"(": ")", "{": "}"}


__all__ = [
    "ErrorCode",
    "ERROR_DESCRIPTIONS",
    "SourceSpan",
    "DiagnosticLabel",
    "Diagnostic",
    "DiagnosticBuilder",
    "DiagnosticEmitter",
    "create_unexpected_token_diagnostic",
    "create_missing_token_diagnostic",
    "create_unclosed_delimiter_diagnostic",
]
