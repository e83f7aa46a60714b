"""
DemoScript Utilities Package.

Common utilities for error handling, source locations, and diagnostics.
"""

from demoscript.utils.diagnostics import (
    ERROR_DESCRIPTIONS,
    Diagnostic,
    DiagnosticBuilder,
    DiagnosticEmitter,
    DiagnosticLabel,
    ErrorCode,
    SourceSpan,
    create_missing_token_diagnostic,
    create_unclosed_delimiter_diagnostic,
    create_unexpected_token_diagnostic,
)
from demoscript.utils.errors import (
    DemoScriptError,
    LexerError,
    LiteralError,
    ParserError,
    SourceLocation,
)

__all__ = [
    # Errors
    "DemoScriptError",
    "LexerError",
    "ParserError",
    "LiteralError",
    "SourceLocation",
    # Error codes
    "ErrorCode",
    "ERROR_DESCRIPTIONS",
    # Diagnostics
    "SourceSpan",
    "DiagnosticLabel",
    "Diagnostic",
    "DiagnosticBuilder",
    "DiagnosticEmitter",
    "create_unexpected_token_diagnostic",
    "create_missing_token_diagnostic",
    "create_unclosed_delimiter_diagnostic",
]
