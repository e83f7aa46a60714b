"""
Token definitions for the DemoScript lexer.

This module defines all token types recognized by the DemoScript language:
keywords, render-target format names, punctuation, operators and literals.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from demoscript.compiler.ast_nodes import SourceSlice
from demoscript.utils.errors import SourceLocation


class TokenType(Enum):
    """Enumeration of all token types in DemoScript."""

    # End of file
    EOF = auto()

    # Literals
    FLOAT = auto()
    STRING = auto()
    COLOR6 = auto()        # #RRGGBB
    COLOR8 = auto()        # #RRGGBBAA

    # Identifiers
    IDENTIFIER = auto()

    # Keywords
    TRUE = auto()
    FALSE = auto()
    IF = auto()
    ELSE = auto()
    RETURN = auto()
    FN = auto()
    DEFINE_RT = auto()
    DEFINE_RT_WITH_DEPTH = auto()

    # Type keywords
    TYPE_F32 = auto()

    # Render target formats
    FORMAT = auto()

    # Arithmetic operators
    PLUS = auto()          # +
    MINUS = auto()         # -
    STAR = auto()          # *
    SLASH = auto()         # /

    # Comparison operators
    EQ = auto()            # ==
    NE = auto()            # !=
    LT = auto()            # <
    GT = auto()            # >
    LE = auto()            # <=
    GE = auto()            # >=

    # Delimiters
    LPAREN = auto()        # (
    RPAREN = auto()        # )
    LBRACE = auto()        # {
    RBRACE = auto()        # }

    # Punctuation
    COMMA = auto()         # ,
    DOT = auto()           # .
    COLON = auto()         # :
    SEMICOLON = auto()     # ;
    THIN_ARROW = auto()    # ->


# Mapping of keywords to token types
KEYWORDS: dict[str, TokenType] = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
    "fn": TokenType.FN,
    "define_rt": TokenType.DEFINE_RT,
    "define_rt_with_depth": TokenType.DEFINE_RT_WITH_DEPTH,
    "f32": TokenType.TYPE_F32,
}

# Render target format keywords; the token value is the keyword text
FORMAT_KEYWORDS: frozenset[str] = frozenset({
    "SRGB8",
    "SRGBA8",
    "R8",
    "RGB8",
    "RGBA8",
    "R16",
    "R16F",
    "RGB16",
    "RGB16F",
    "RGBA16",
    "RGBA16F",
    "R32F",
    "RGB32F",
    "RGBA32F",
})

# Single character operators
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
}

# Two character operators (order matters - check these before single char)
DOUBLE_CHAR_TOKENS: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NE,
    "<=": TokenType.LE,
    ">=": TokenType.GE,
    "->": TokenType.THIN_ARROW,
}


@dataclass(slots=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The type of this token
        value: The lexeme text (for strings, the text between the quotes)
        location: Source location of the token's first character
        end: Offset one past the token's last character (a closing quote
            for strings)
    """

    type: TokenType
    value: Any
    location: SourceLocation
    end: int = 0

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.location})"
        return f"Token({self.type.name}, {self.location})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Token):
            return self.type == other.type and self.value == other.value
        if isinstance(other, TokenType):
            return self.type == other
        return NotImplemented

    @property
    def start(self) -> int:
        return self.location.offset

    @property
    def span(self) -> SourceSlice:
        """The half-open offset range this token covers, quotes included."""
        return SourceSlice(self.location.offset, self.end)

    @property
    def text_span(self) -> SourceSlice:
        """The range of the token's text; string tokens exclude their quotes."""
        if self.type == TokenType.STRING:
            return SourceSlice(self.location.offset + 1, self.end - 1)
        return self.span

    def describe(self) -> str:
        """Human-readable description used in error messages."""
        if self.type == TokenType.EOF:
            return "end of file"
        if self.type == TokenType.STRING:
            return f'"{self.value}"'
        return str(self.value)
