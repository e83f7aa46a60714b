"""
Pytest configuration and shared fixtures for DemoScript tests.
"""

import pytest

from demoscript.compiler.ast_nodes import Program
from demoscript.compiler.lexer import Lexer
from demoscript.compiler.parser import Parser
from demoscript.compiler.tokens import Token


@pytest.fixture
def lexer_factory():
    """Factory fixture for creating lexers."""

    def _create_lexer(source: str, filename: str = "test.demo") -> Lexer:
        return Lexer(source, filename)

    return _create_lexer


@pytest.fixture
def parser_factory(lexer_factory):
    """Factory fixture for creating parsers from source."""

    def _create_parser(source: str) -> Parser:
        lexer = lexer_factory(source)
        tokens = lexer.tokenize()
        return Parser(tokens, source, "test.demo")

    return _create_parser


@pytest.fixture
def tokenize(lexer_factory):
    """Fixture to tokenize source code."""

    def _tokenize(source: str) -> list[Token]:
        lexer = lexer_factory(source)
        return lexer.tokenize()

    return _tokenize


@pytest.fixture
def parse(parser_factory):
    """Fixture to parse source code into AST."""

    def _parse(source: str) -> Program:
        parser = parser_factory(source)
        return parser.parse()

    return _parse


@pytest.fixture
def parse_body(parse):
    """Fixture to parse statements wrapped in a function body."""

    def _parse_body(body: str):
        source = "fn main() {\n" + body + "\n}"
        return parse(source).functions[0].body, source

    return _parse_body


@pytest.fixture
def parse_expr(parse):
    """Fixture to parse a single expression via ``return <expr>;``."""

    def _parse_expr(expr: str):
        source = f"fn f() -> f32 {{ return {expr}; }}"
        stmt = parse(source).functions[0].body[0]
        return stmt.expr, source

    return _parse_expr
