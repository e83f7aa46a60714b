"""
Unit tests for the DemoScript Lexer.
"""

import pytest

from demoscript.compiler.lexer import Lexer, tokenize as tokenize_source
from demoscript.compiler.tokens import TokenType
from demoscript.utils.diagnostics import ErrorCode
from demoscript.utils.errors import LexerError


def token_types(tokens):
    return [t.type for t in tokens]


class TestLexerBasics:
    """Basic lexer functionality tests."""

    def test_empty_source(self, tokenize):
        """Empty source should produce only EOF."""
        tokens = tokenize("")
        assert token_types(tokens) == [TokenType.EOF]

    def test_whitespace_only(self, tokenize):
        tokens = tokenize("  \n\t\r\n  ")
        assert token_types(tokens) == [TokenType.EOF]

    def test_single_eof_at_end(self, tokenize):
        tokens = tokenize("fn f() {}")
        assert tokens[-1].type == TokenType.EOF
        assert sum(1 for t in tokens if t.type == TokenType.EOF) == 1

    def test_module_level_tokenize(self):
        tokens = tokenize_source("x")
        assert token_types(tokens) == [TokenType.IDENTIFIER, TokenType.EOF]

    def test_iterating_lexer(self, lexer_factory):
        lexer = lexer_factory("a b")
        assert [t.value for t in lexer] == ["a", "b", None]

    def test_iter_tokens_is_lazy(self, lexer_factory):
        """Tokens are produced on demand; an error further on is not hit early."""
        stream = lexer_factory("a b @").iter_tokens()
        assert next(stream).value == "a"
        assert next(stream).value == "b"
        with pytest.raises(LexerError):
            next(stream)


class TestLexerKeywordsAndIdentifiers:
    """Tests for keywords, identifiers and format names."""

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("true", TokenType.TRUE),
            ("false", TokenType.FALSE),
            ("if", TokenType.IF),
            ("else", TokenType.ELSE),
            ("return", TokenType.RETURN),
            ("fn", TokenType.FN),
            ("define_rt", TokenType.DEFINE_RT),
            ("define_rt_with_depth", TokenType.DEFINE_RT_WITH_DEPTH),
            ("f32", TokenType.TYPE_F32),
        ],
    )
    def test_keywords(self, tokenize, source, expected):
        tokens = tokenize(source)
        assert tokens[0].type == expected
        assert tokens[0].value == source

    def test_identifier(self, tokenize):
        tokens = tokenize("draw_quad2")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "draw_quad2"

    def test_keyword_prefix_is_identifier(self, tokenize):
        """Identifiers that merely start with a keyword stay identifiers."""
        tokens = tokenize("iffy fnord returned")
        assert token_types(tokens)[:3] == [TokenType.IDENTIFIER] * 3

    @pytest.mark.parametrize("name", ["SRGB8", "RGBA8", "R16F", "RGBA32F"])
    def test_format_keywords(self, tokenize, name):
        tokens = tokenize(name)
        assert tokens[0].type == TokenType.FORMAT
        assert tokens[0].value == name

    def test_lowercase_format_is_identifier(self, tokenize):
        tokens = tokenize("rgba8")
        assert tokens[0].type == TokenType.IDENTIFIER

    def test_identifier_cannot_start_with_underscore(self, tokenize):
        with pytest.raises(LexerError):
            tokenize("_private")


class TestLexerNumbers:
    """Tests for float literal tokenization."""

    @pytest.mark.parametrize("text", ["0", "42", "2.5", "3.", "-1", "-0.25"])
    def test_float_forms(self, tokenize, text):
        tokens = tokenize(text)
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].value == text
        assert tokens[0].span.start == 0
        assert tokens[0].span.end == len(text)

    def test_minus_before_digit_joins_literal(self, tokenize):
        tokens = tokenize("a-1")
        assert token_types(tokens) == [TokenType.IDENTIFIER, TokenType.FLOAT, TokenType.EOF]
        assert tokens[1].value == "-1"

    def test_spaced_minus_is_operator(self, tokenize):
        tokens = tokenize("a - 1")
        assert token_types(tokens) == [
            TokenType.IDENTIFIER,
            TokenType.MINUS,
            TokenType.FLOAT,
            TokenType.EOF,
        ]

    def test_minus_before_paren_is_operator(self, tokenize):
        tokens = tokenize("-(x)")
        assert tokens[0].type == TokenType.MINUS


class TestLexerStrings:
    """Tests for string literal tokenization."""

    def test_string_value_excludes_quotes(self, tokenize):
        source = 'x "main" y'
        tokens = tokenize(source)
        string = tokens[1]
        assert string.type == TokenType.STRING
        assert string.value == "main"
        assert string.text_span.text(source) == "main"
        assert (string.text_span.start, string.text_span.end) == (3, 7)

    def test_string_token_covers_quotes(self, tokenize):
        source = 'x "main" y'
        string = tokenize(source)[1]
        assert string.span.text(source) == '"main"'
        assert string.location.offset == 2
        assert string.location.column == 3

    def test_empty_string(self, tokenize):
        tokens = tokenize('""')
        assert tokens[0].value == ""
        assert tokens[0].text_span.start == tokens[0].text_span.end == 1
        assert (tokens[0].span.start, tokens[0].span.end) == (0, 2)

    def test_no_escape_sequences(self, tokenize):
        """A backslash is plain text and the next quote ends the literal."""
        tokens = tokenize(r'"a\" b')
        assert tokens[0].value == "a\\"
        assert tokens[1].type == TokenType.IDENTIFIER

    def test_unterminated_string(self, tokenize):
        with pytest.raises(LexerError) as exc_info:
            tokenize('"never closed')
        assert exc_info.value.code == ErrorCode.E0206
        assert exc_info.value.location.offset == 0

    def test_unterminated_string_reports_opening_line(self, tokenize):
        """A string running to EOF across lines points at the line it opened on."""
        with pytest.raises(LexerError) as exc_info:
            tokenize('fn f() {\n  draw("open\n  more text\n')
        error = exc_info.value
        assert error.location.line == 2
        assert error.location.column == 8
        assert error.source_line == '  draw("open'
        assert str(error).endswith('  draw("open\n           ^')


class TestLexerColors:
    """Tests for color literal tokenization."""

    def test_six_digit_color(self, tokenize):
        tokens = tokenize("#FF8000")
        assert tokens[0].type == TokenType.COLOR6
        assert tokens[0].value == "#FF8000"

    def test_eight_digit_color(self, tokenize):
        tokens = tokenize("#ff800080")
        assert tokens[0].type == TokenType.COLOR8

    @pytest.mark.parametrize("text", ["#FFF", "#FFFFFFF", "#", "#FFFFFFFFFF"])
    def test_invalid_digit_count(self, tokenize, text):
        with pytest.raises(LexerError) as exc_info:
            tokenize(text)
        assert exc_info.value.code == ErrorCode.E0209


class TestLexerOperators:
    """Tests for operator and punctuation tokenization."""

    def test_double_char_operators(self, tokenize):
        tokens = tokenize("== != <= >= ->")
        assert token_types(tokens) == [
            TokenType.EQ,
            TokenType.NE,
            TokenType.LE,
            TokenType.GE,
            TokenType.THIN_ARROW,
            TokenType.EOF,
        ]

    def test_single_char_operators(self, tokenize):
        tokens = tokenize("+ * / < > ( ) { } , . : ;")
        assert token_types(tokens)[:-1] == [
            TokenType.PLUS,
            TokenType.STAR,
            TokenType.SLASH,
            TokenType.LT,
            TokenType.GT,
            TokenType.LPAREN,
            TokenType.RPAREN,
            TokenType.LBRACE,
            TokenType.RBRACE,
            TokenType.COMMA,
            TokenType.DOT,
            TokenType.COLON,
            TokenType.SEMICOLON,
        ]

    def test_lone_bang_is_error(self, tokenize):
        with pytest.raises(LexerError) as exc_info:
            tokenize("a ! b")
        assert exc_info.value.code == ErrorCode.E0208
        assert exc_info.value.location.column == 3

    def test_assignment_is_not_a_token(self, tokenize):
        with pytest.raises(LexerError):
            tokenize("a = b")


class TestLexerComments:
    """Tests for line comments."""

    def test_comment_produces_no_tokens(self, tokenize):
        tokens = tokenize("// just a comment\n")
        assert token_types(tokens) == [TokenType.EOF]

    def test_comment_at_end_of_input(self, tokenize):
        tokens = tokenize("x // trailing")
        assert token_types(tokens) == [TokenType.IDENTIFIER, TokenType.EOF]

    def test_comment_between_tokens(self, tokenize):
        tokens = tokenize("a // ignored ( } @\nb")
        assert [t.value for t in tokens[:-1]] == ["a", "b"]

    def test_single_slash_is_division(self, tokenize):
        tokens = tokenize("a / b")
        assert tokens[1].type == TokenType.SLASH


class TestLexerLocations:
    """Tests for source location tracking."""

    def test_line_and_column(self, tokenize):
        tokens = tokenize("fn\n  main")
        main = tokens[1]
        assert main.location.line == 2
        assert main.location.column == 3
        assert main.location.offset == 5

    def test_filename_recorded(self, lexer_factory):
        tokens = lexer_factory("x", "scene.demo").tokenize()
        assert tokens[0].location.filename == "scene.demo"

    def test_eof_span_is_empty_at_end(self, tokenize):
        tokens = tokenize("abc  ")
        eof = tokens[-1]
        assert eof.span.start == eof.span.end == 5

    def test_error_carries_source_line(self):
        with pytest.raises(LexerError) as exc_info:
            Lexer("fn f() {}\nfn g() { @ }").tokenize()
        error = exc_info.value
        assert error.location.line == 2
        assert error.source_line == "fn g() { @ }"
