"""
DemoScript Lexer (Tokenizer).

Transforms DemoScript source code into a stream of tokens. Whitespace and
``//`` line comments separate tokens and never produce tokens themselves.
"""

from typing import Iterator, Optional

from demoscript.compiler.ast_nodes import SourceSlice
from demoscript.compiler.tokens import (
    DOUBLE_CHAR_TOKENS,
    FORMAT_KEYWORDS,
    KEYWORDS,
    SINGLE_CHAR_TOKENS,
    Token,
    TokenType,
)
from demoscript.utils.diagnostics import ErrorCode
from demoscript.utils.errors import LexerError, SourceLocation

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _is_ascii_digit(char: Optional[str]) -> bool:
    return char is not None and "0" <= char <= "9"


def _is_identifier_start(char: Optional[str]) -> bool:
    return char is not None and char.isascii() and char.isalpha()


def _is_identifier_char(char: Optional[str]) -> bool:
    return char is not None and char.isascii() and (char.isalnum() or char == "_")


class Lexer:
    """
    Tokenizer for DemoScript source code.

    The lexer supports:
    - Identifiers, keywords and render-target format names
    - Float literals with an optional leading minus: -1, 2.5, 3.
    - String literals without escape sequences
    - Color literals: #RRGGBB and #RRGGBBAA
    - Line comments: // ...

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
        # or iterate: for token in lexer: ...
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        """
        Initialize the lexer with source code.

        Args:
            source: The DemoScript source code to tokenize
            filename: Optional filename for error reporting
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

        # Track the start of the current line for error reporting
        self._line_start = 0

    @property
    def _current_char(self) -> Optional[str]:
        """Return the current character or None if at end."""
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    @property
    def _peek_char(self) -> Optional[str]:
        """Return the next character without consuming it."""
        peek_pos = self.pos + 1
        if peek_pos >= len(self.source):
            return None
        return self.source[peek_pos]

    def _location(self) -> SourceLocation:
        """Create a SourceLocation for the current position."""
        return SourceLocation(
            line=self.line,
            column=self.column,
            offset=self.pos,
            filename=self.filename,
        )

    def _current_line_text(self) -> str:
        """Extract the current line of source for error messages."""
        end = self.source.find("\n", self._line_start)
        if end == -1:
            end = len(self.source)
        return self.source[self._line_start:end]

    def _error(
        self,
        message: str,
        location: SourceLocation,
        code: str,
        line_text: Optional[str] = None,
    ) -> LexerError:
        return LexerError(
            message,
            location,
            line_text if line_text is not None else self._current_line_text(),
            span=SourceSlice(location.offset, max(location.offset, self.pos)),
            code=code,
        )

    def _advance(self) -> str:
        """Consume and return the current character."""
        char = self.source[self.pos]
        self.pos += 1

        if char == "\n":
            self.line += 1
            self.column = 1
            self._line_start = self.pos
        else:
            self.column += 1

        return char

    def _make_token(self, token_type: TokenType, value, start_loc: SourceLocation) -> Token:
        return Token(token_type, value, start_loc, self.pos)

    def _skip_whitespace(self) -> None:
        """Skip whitespace characters, newlines included."""
        while self._current_char is not None and self._current_char in " \t\r\n":
            self._advance()

    def _skip_line_comment(self) -> bool:
        """Skip a // comment up to the end of the line.

        Returns True if a comment was skipped.
        """
        if self._current_char == "/" and self._peek_char == "/":
            while self._current_char is not None and self._current_char != "\n":
                self._advance()
            return True
        return False

    def _read_string(self) -> Token:
        """
        Read a string literal.

        There are no escape sequences: the first closing quote ends the
        literal. The token value excludes the quotes; the token's span
        includes them.
        """
        start_loc = self._location()
        start_line = self._current_line_text()
        self._advance()  # consume opening quote

        while self._current_char != '"':
            if self._current_char is None:
                raise self._error(
                    "Unterminated string literal", start_loc, ErrorCode.E0206, start_line
                )
            self._advance()

        value = self.source[start_loc.offset + 1:self.pos]
        self._advance()  # consume closing quote
        return self._make_token(TokenType.STRING, value, start_loc)

    def _read_number(self) -> Token:
        """
        Read a float literal: ``-?[0-9]+(\\.[0-9]*)?``.

        The token value is the literal text; the parser converts it.
        """
        start_loc = self._location()

        if self._current_char == "-":
            self._advance()

        while _is_ascii_digit(self._current_char):
            self._advance()

        if self._current_char == ".":
            self._advance()
            while _is_ascii_digit(self._current_char):
                self._advance()

        value = self.source[start_loc.offset:self.pos]
        return self._make_token(TokenType.FLOAT, value, start_loc)

    def _read_color(self) -> Token:
        """Read a #RRGGBB or #RRGGBBAA color literal."""
        start_loc = self._location()
        self._advance()  # consume '#'

        while self._current_char is not None and self._current_char in HEX_DIGITS:
            self._advance()

        value = self.source[start_loc.offset:self.pos]
        digits = len(value) - 1
        if digits == 6:
            return self._make_token(TokenType.COLOR6, value, start_loc)
        if digits == 8:
            return self._make_token(TokenType.COLOR8, value, start_loc)

        raise self._error(
            f"Invalid color literal {value!r}: expected 6 or 8 hex digits, found {digits}",
            start_loc,
            ErrorCode.E0209,
        )

    def _read_identifier_or_keyword(self) -> Token:
        """
        Read an identifier or keyword.

        Identifiers start with an ASCII letter and continue with letters,
        digits and underscores.
        """
        start_loc = self._location()

        while _is_identifier_char(self._current_char):
            self._advance()

        identifier = self.source[start_loc.offset:self.pos]

        if identifier in KEYWORDS:
            return self._make_token(KEYWORDS[identifier], identifier, start_loc)
        if identifier in FORMAT_KEYWORDS:
            return self._make_token(TokenType.FORMAT, identifier, start_loc)

        return self._make_token(TokenType.IDENTIFIER, identifier, start_loc)

    def _read_operator(self) -> Optional[Token]:
        """
        Read an operator or punctuation token (single or double character).

        Returns:
            An operator token, or None if the current character is not an operator.
        """
        if self._current_char is None:
            return None

        start_loc = self._location()

        if self._peek_char is not None:
            two_char = self._current_char + self._peek_char
            if two_char in DOUBLE_CHAR_TOKENS:
                self._advance()
                self._advance()
                return self._make_token(DOUBLE_CHAR_TOKENS[two_char], two_char, start_loc)

        if self._current_char in SINGLE_CHAR_TOKENS:
            char = self._advance()
            return self._make_token(SINGLE_CHAR_TOKENS[char], char, start_loc)

        return None

    def _next_token(self) -> Token:
        """Extract the next token from the source."""
        while True:
            self._skip_whitespace()
            if self._skip_line_comment():
                continue
            break

        if self._current_char is None:
            return self._make_token(TokenType.EOF, None, self._location())

        char = self._current_char

        if char == '"':
            return self._read_string()

        if char == "#":
            return self._read_color()

        # A minus directly followed by a digit is part of the literal
        if _is_ascii_digit(char) or (char == "-" and _is_ascii_digit(self._peek_char)):
            return self._read_number()

        if _is_identifier_start(char):
            return self._read_identifier_or_keyword()

        op_token = self._read_operator()
        if op_token is not None:
            return op_token

        location = self._location()
        self._advance()
        raise self._error(f"Unexpected character: {char!r}", location, ErrorCode.E0208)

    def iter_tokens(self) -> Iterator[Token]:
        """Produce tokens on demand, ending with a single EOF token."""
        self.pos = 0
        self.line = 1
        self.column = 1
        self._line_start = 0

        while True:
            token = self._next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source code.

        Returns:
            A list of all tokens including the final EOF token.
        """
        self.tokens = list(self.iter_tokens())
        return self.tokens

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens (re-tokenizes if necessary)."""
        if not self.tokens:
            self.tokenize()
        return iter(self.tokens)


def tokenize(source: str, filename: Optional[str] = None) -> list[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: DemoScript source code
        filename: Optional filename for error reporting

    Returns:
        List of tokens
    """
    return Lexer(source, filename).tokenize()
