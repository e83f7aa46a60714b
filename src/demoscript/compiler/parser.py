"""
DemoScript Parser.

A recursive descent parser that transforms a token stream into an Abstract
Syntax Tree (AST). Expressions are parsed by precedence climbing over three
left-associative tiers (comparison, additive, multiplicative), below which
sit postfix property chains and primary terms.

Every parse routine records the offset of the first token it consumes and
the end offset of the last one, and attaches that range to the node it
builds. Parsing is fail-fast: the first error raises and no Program is
produced.
"""

import logging
from typing import Optional

import numpy as np

from demoscript.compiler.ast_nodes import (
    Attachment,
    BinaryOp,
    BinaryOperator,
    CallStatement,
    ColorLiteral,
    ConditionalStatement,
    DictionaryExpr,
    FloatLiteral,
    FunctionCallExpr,
    FunctionDef,
    KeyValuePair,
    Parameter,
    Program,
    PropertyOf,
    RenderTargetDef,
    RenderTargetFormat,
    ReturnStatement,
    SourceSlice,
    Stmt,
    StringLiteral,
    ValueExpr,
    ValueType,
    Var,
)
from demoscript.compiler.color import parse_color_literal
from demoscript.compiler.tokens import (
    DOUBLE_CHAR_TOKENS,
    KEYWORDS,
    SINGLE_CHAR_TOKENS,
    Token,
    TokenType,
)
from demoscript.utils.diagnostics import (
    Diagnostic,
    DiagnosticEmitter,
    ErrorCode,
    create_missing_token_diagnostic,
    create_unclosed_delimiter_diagnostic,
    create_unexpected_token_diagnostic,
)
from demoscript.utils.errors import LiteralError, ParserError

logger = logging.getLogger(__name__)


# Operator precedence levels (higher = tighter binding)
class Precedence:
    """Operator precedence levels."""

    NONE = 0
    COMPARISON = 1      # < <= > >= == !=
    ADDITIVE = 2        # + -
    MULTIPLICATIVE = 3  # * /


# Map token types to binary operators
BINARY_OP_MAP: dict[TokenType, BinaryOperator] = {
    # Arithmetic
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
    # Comparison
    TokenType.LT: BinaryOperator.LT,
    TokenType.LE: BinaryOperator.LE,
    TokenType.GT: BinaryOperator.GT,
    TokenType.GE: BinaryOperator.GE,
    TokenType.EQ: BinaryOperator.EQ,
    TokenType.NE: BinaryOperator.NE,
}

# Map token types to their precedence
PRECEDENCE_MAP: dict[TokenType, int] = {
    # Comparison (one tier, plain left associativity)
    TokenType.LT: Precedence.COMPARISON,
    TokenType.LE: Precedence.COMPARISON,
    TokenType.GT: Precedence.COMPARISON,
    TokenType.GE: Precedence.COMPARISON,
    TokenType.EQ: Precedence.COMPARISON,
    TokenType.NE: Precedence.COMPARISON,
    # Additive
    TokenType.PLUS: Precedence.ADDITIVE,
    TokenType.MINUS: Precedence.ADDITIVE,
    # Multiplicative
    TokenType.STAR: Precedence.MULTIPLICATIVE,
    TokenType.SLASH: Precedence.MULTIPLICATIVE,
}

# How expected tokens are named in error messages
TOKEN_DISPLAY: dict[TokenType, str] = {
    token_type: f"'{text}'"
    for text, token_type in {**SINGLE_CHAR_TOKENS, **DOUBLE_CHAR_TOKENS, **KEYWORDS}.items()
}
TOKEN_DISPLAY.update({
    TokenType.IDENTIFIER: "identifier",
    TokenType.FLOAT: "number",
    TokenType.STRING: "string",
    TokenType.COLOR6: "color",
    TokenType.COLOR8: "color",
    TokenType.FORMAT: "render target format",
    TokenType.EOF: "end of file",
})

# Terminators whose absence is reported as a missing token
MISSING_TOKEN_TYPES = frozenset({TokenType.SEMICOLON, TokenType.RPAREN})


class ProgramBuilder:
    """
    Accumulates top-level declarations in source order.

    No sorting, merging or uniqueness checks are performed.
    """

    def __init__(self) -> None:
        self.functions: list[FunctionDef] = []
        self.render_targets: list[RenderTargetDef] = []

    def add_function(self, function: FunctionDef) -> None:
        self.functions.append(function)

    def add_render_target(self, render_target: RenderTargetDef) -> None:
        self.render_targets.append(render_target)

    def build(self) -> Program:
        return Program(
            functions=tuple(self.functions),
            render_targets=tuple(self.render_targets),
        )


class Parser:
    """
    Recursive descent parser for DemoScript.

    Parses a list of tokens into an Abstract Syntax Tree.

    Usage:
        parser = Parser(tokens, source)
        program = parser.parse()
    """

    def __init__(self, tokens: list[Token], source: str = "",
                 filename: str = "<input>") -> None:
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer, ending with EOF
            source: Optional source code for rich diagnostics
            filename: Optional filename for error reporting
        """
        self.tokens = tokens
        self.pos = 0
        self._source = source
        self._source_lines: list[str] = source.split("\n") if source else []
        self._filename = filename
        self._emitter: Optional[DiagnosticEmitter] = None
        self.diagnostics: list[Diagnostic] = []

        if source:
            self._emitter = DiagnosticEmitter(source, filename)

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    @property
    def _current(self) -> Token:
        """Get the current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    @property
    def _previous(self) -> Token:
        """Get the previous token."""
        return self.tokens[self.pos - 1] if self.pos > 0 else self.tokens[0]

    def _peek(self, offset: int = 1) -> Token:
        """Peek at a token ahead of the current position."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _is_at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._current.type == TokenType.EOF

    def _check(self, *types: TokenType) -> bool:
        """Check if the current token is one of the given types."""
        return self._current.type in types

    def _advance(self) -> Token:
        """Consume and return the current token."""
        token = self._current
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """Consume current token if it matches one of the given types."""
        if self._check(*types):
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """Consume current token if it matches, else raise error."""
        if self._check(token_type):
            return self._advance()
        code = ErrorCode.E0203 if token_type in MISSING_TOKEN_TYPES else ErrorCode.E0201
        raise self._error_with_context(
            message,
            expected=(TOKEN_DISPLAY.get(token_type, token_type.name),),
            code=code,
        )

    def _span_from(self, start: int) -> SourceSlice:
        """Span from ``start`` to the end of the last consumed token."""
        return SourceSlice(start, max(start, self._previous.end))

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def _source_line(self, line: int) -> Optional[str]:
        if 1 <= line <= len(self._source_lines):
            return self._source_lines[line - 1]
        return None

    def _error_with_context(
        self,
        message: str,
        expected: tuple[str, ...] = (),
        code: str = ErrorCode.E0201,
    ) -> ParserError:
        """Create a parser error at the current token, with a rich diagnostic."""
        token = self._current

        if self._emitter is not None:
            span = self._emitter.span(token.start, token.end)
            if code == ErrorCode.E0203:
                diagnostic = create_missing_token_diagnostic(
                    self._emitter, " or ".join(expected), token.describe(), span
                )
            elif expected:
                diagnostic = create_unexpected_token_diagnostic(
                    self._emitter, " or ".join(expected), token.describe(), span
                )
            else:
                diagnostic = self._emitter.error(code, message, span).emit()
            self.diagnostics.append(diagnostic)

        return ParserError(
            f"{message}, found '{token.describe()}'",
            token.location,
            self._source_line(token.location.line),
            span=token.span,
            expected=expected,
            code=code,
        )

    def _error_unclosed_delimiter(self, delimiter: str, open_token: Token) -> ParserError:
        """Create an error for an unclosed delimiter with helpful context."""
        token = self._current

        if self._emitter is not None:
            diagnostic = create_unclosed_delimiter_diagnostic(
                self._emitter,
                delimiter,
                self._emitter.span(open_token.start, open_token.end),
                self._emitter.span(token.start, token.end),
            )
            self.diagnostics.append(diagnostic)

        return ParserError(
            f"Unclosed delimiter '{delimiter}'",
            token.location,
            self._source_line(token.location.line),
            span=token.span,
            expected=("')'" if delimiter == "(" else "'}'",),
            code=ErrorCode.E0202,
        )

    def get_diagnostics(self) -> list[Diagnostic]:
        """Get all rich diagnostics emitted during parsing."""
        return self.diagnostics

    def render_diagnostics(self, use_color: bool = True) -> str:
        """Render all diagnostics as formatted strings."""
        if self._emitter:
            return self._emitter.render_all(use_color)
        return ""

    # -------------------------------------------------------------------------
    # Program Parsing
    # -------------------------------------------------------------------------

    def parse(self) -> Program:
        """
        Parse the entire program.

        Returns:
            The root Program AST node.
        """
        builder = ProgramBuilder()

        while not self._is_at_end():
            if self._check(TokenType.FN):
                builder.add_function(self._parse_function_def())
            elif self._check(TokenType.DEFINE_RT, TokenType.DEFINE_RT_WITH_DEPTH):
                builder.add_render_target(self._parse_render_target())
            else:
                raise self._error_with_context(
                    "Expected a function or render target declaration",
                    expected=("'fn'", "'define_rt'", "'define_rt_with_depth'"),
                )

        return builder.build()

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def _parse_function_def(self) -> FunctionDef:
        """
        Parse a function definition.

        Handles:
            fn name() { body }
            fn name(a: f32, b: f32) -> f32 { body }
        """
        start = self._advance().start  # consume 'fn'

        name_token = self._expect(TokenType.IDENTIFIER, "Expected function name")

        self._expect(TokenType.LPAREN, "Expected '(' after function name")
        params = self._parse_parameters()
        self._expect(TokenType.RPAREN, "Expected ')' after parameters")

        return_type: Optional[ValueType] = None
        if self._match(TokenType.THIN_ARROW):
            return_type = self._parse_value_type()

        body = self._parse_block()

        logger.debug("Parsed function %r with %d statement(s)", name_token.value, len(body))
        return FunctionDef(
            name=name_token.span,
            parameters=tuple(params),
            body=body,
            return_type=return_type,
            span=self._span_from(start),
        )

    def _parse_parameters(self) -> list[Parameter]:
        """Parse function parameters: ``name: type`` pairs separated by commas."""
        params: list[Parameter] = []

        if self._check(TokenType.RPAREN):
            return params

        while True:
            name = self._expect(TokenType.IDENTIFIER, "Expected parameter name")
            self._expect(TokenType.COLON, "Expected ':' after parameter name")
            value_type = self._parse_value_type()
            params.append(
                Parameter(
                    name=name.span,
                    value_type=value_type,
                    span=self._span_from(name.start),
                )
            )

            if not self._match(TokenType.COMMA):
                break

        return params

    def _parse_value_type(self) -> ValueType:
        """Parse a type keyword."""
        token = self._expect(TokenType.TYPE_F32, "Expected type")
        return ValueType(token.value)

    def _parse_render_target(self) -> RenderTargetDef:
        """
        Parse a render target declaration.

        Handles:
            define_rt("name", width, height, {"color": RGBA8});
            define_rt_with_depth("name", width, height, {"a": RGBA8, "b": R32F});
        """
        keyword = self._advance()
        has_depth = keyword.type == TokenType.DEFINE_RT_WITH_DEPTH

        self._expect(TokenType.LPAREN, f"Expected '(' after '{keyword.value}'")
        name = self._expect(TokenType.STRING, "Expected render target name").text_span
        self._expect(TokenType.COMMA, "Expected ',' after render target name")
        width = self._parse_expression()
        self._expect(TokenType.COMMA, "Expected ',' after render target width")
        height = self._parse_expression()
        self._expect(TokenType.COMMA, "Expected ',' after render target height")

        self._expect(TokenType.LBRACE, "Expected '{' to start attachment list")
        attachments = self._parse_attachments()
        self._expect(TokenType.RBRACE, "Expected '}' after attachments")

        self._expect(TokenType.RPAREN, "Expected ')' after render target declaration")
        self._expect(TokenType.SEMICOLON, "Expected ';' after render target declaration")

        return RenderTargetDef(
            span=self._span_from(keyword.start),
            name=name,
            width=width,
            height=height,
            attachments=tuple(attachments),
            has_depth=has_depth,
        )

    def _parse_attachments(self) -> list[Attachment]:
        """Parse at least one ``"name": FORMAT`` attachment."""
        attachments: list[Attachment] = []

        while True:
            name = self._expect(TokenType.STRING, "Expected attachment name").text_span
            self._expect(TokenType.COLON, "Expected ':' after attachment name")
            fmt = self._expect(TokenType.FORMAT, "Expected render target format")
            attachments.append(Attachment(name=name, format=RenderTargetFormat(fmt.value)))

            if not self._match(TokenType.COMMA):
                break

        return attachments

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def _parse_block(self) -> tuple[Stmt, ...]:
        """
        Parse a block of statements enclosed in braces.

        Handles:
            { }
            { stmt stmt ... }
        """
        if not self._check(TokenType.LBRACE):
            raise self._error_with_context("Expected '{' to start block", expected=("'{'",))
        open_token = self._advance()

        statements: list[Stmt] = []
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            statements.append(self._parse_statement())

        if self._check(TokenType.EOF):
            raise self._error_unclosed_delimiter("{", open_token)

        self._advance()  # consume '}'
        return tuple(statements)

    def _parse_statement(self) -> Stmt:
        """Parse a single statement."""
        if self._check(TokenType.IF):
            return self._parse_if()
        if self._check(TokenType.RETURN):
            return self._parse_return()
        if self._check(TokenType.IDENTIFIER):
            call = self._parse_call()
            self._expect(TokenType.SEMICOLON, "Expected ';' after function call")
            return CallStatement(call=call)

        raise self._error_with_context(
            "Expected a statement",
            expected=("identifier", "'if'", "'return'", "'}'"),
        )

    def _parse_if(self) -> ConditionalStatement:
        """
        Parse an if statement with an optional else block.

        Handles:
            if cond { body }
            if cond { body } else { body }
        """
        start = self._advance().start  # consume 'if'

        condition = self._parse_expression()
        then_block = self._parse_block()

        else_block: Optional[tuple[Stmt, ...]] = None
        if self._match(TokenType.ELSE):
            else_block = self._parse_block()

        return ConditionalStatement(
            condition=condition,
            then_block=then_block,
            else_block=else_block,
            span=self._span_from(start),
        )

    def _parse_return(self) -> ReturnStatement:
        """Parse a return statement."""
        start = self._advance().start  # consume 'return'
        expr = self._parse_expression()
        self._expect(TokenType.SEMICOLON, "Expected ';' after return value")
        return ReturnStatement(expr=expr, span=self._span_from(start))

    # -------------------------------------------------------------------------
    # Expression Parsing (Precedence Climbing)
    # -------------------------------------------------------------------------

    def _parse_expression(self, min_precedence: int = Precedence.NONE) -> ValueExpr:
        """
        Parse an expression using precedence climbing.

        Operands of an operator are parsed at that operator's own precedence,
        which makes every tier left-associative: ``a - b - c`` is
        ``(a - b) - c`` and ``a < b < c`` is ``(a < b) < c``.
        """
        start = self._current.start
        left = self._parse_property_chain()

        while True:
            precedence = PRECEDENCE_MAP.get(self._current.type, Precedence.NONE)
            if precedence <= min_precedence:
                break

            operator = BINARY_OP_MAP[self._advance().type]
            right = self._parse_expression(precedence)
            left = BinaryOp(
                span=self._span_from(start),
                operator=operator,
                lhs=left,
                rhs=right,
            )

        return left

    def _parse_property_chain(self) -> ValueExpr:
        """Parse a term followed by zero or more ``.name`` accessors."""
        start = self._current.start
        term = self._parse_term()

        accessors: list[SourceSlice] = []
        while self._match(TokenType.DOT):
            accessors.append(
                self._expect(TokenType.IDENTIFIER, "Expected property name after '.'").span
            )

        if not accessors:
            return term
        return PropertyOf(span=self._span_from(start), owner=term, accessors=tuple(accessors))

    def _parse_term(self) -> ValueExpr:
        """Parse a primary term (literals, variables, calls, groups)."""
        token = self._current

        if self._match(TokenType.FLOAT):
            return FloatLiteral(span=token.span, value=self._convert_float(token))

        if self._match(TokenType.STRING):
            return StringLiteral(span=token.text_span)

        if self._match(TokenType.COLOR6, TokenType.COLOR8):
            return ColorLiteral(span=token.span, color=parse_color_literal(token.value))

        if self._check(TokenType.LBRACE):
            return self._parse_dictionary()

        if self._check(TokenType.IDENTIFIER):
            if self._peek().type == TokenType.LPAREN:
                return self._parse_call()
            self._advance()
            return Var(span=token.span)

        # Grouping is transparent: no node of its own
        if self._match(TokenType.LPAREN):
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        if self._check(TokenType.MINUS) and self._peek().type == TokenType.LPAREN:
            return self._parse_negation()

        raise self._error_with_context(
            "Expected an expression",
            expected=("number", "string", "color", "'{'", "identifier", "'('", "'-('"),
        )

    def _convert_float(self, token: Token) -> float:
        """Convert float literal text to the nearest float32 value."""
        try:
            return float(np.float32(token.value))
        except (TypeError, ValueError) as e:
            raise LiteralError(
                f"Invalid number literal {token.value!r}",
                token.location,
                self._source_line(token.location.line),
                span=token.span,
                expected=("number",),
            ) from e

    def _parse_negation(self) -> FunctionCallExpr:
        """
        Parse ``-(expr)`` as a call to the function named ``-``.

        The function name span covers only the minus sign.
        """
        minus = self._advance()
        self._advance()  # consume '('
        operand = self._parse_expression()
        self._expect(TokenType.RPAREN, "Expected ')' after negated expression")
        return FunctionCallExpr(
            span=self._span_from(minus.start),
            function_name=minus.span,
            args=(operand,),
        )

    def _parse_call(self) -> FunctionCallExpr:
        """Parse ``name(arg, ...)``; the argument list may be empty."""
        name = self._expect(TokenType.IDENTIFIER, "Expected function name")
        open_token = self._expect(TokenType.LPAREN, "Expected '(' after function name")
        args = self._parse_arguments()
        if self._check(TokenType.EOF):
            raise self._error_unclosed_delimiter("(", open_token)
        self._expect(TokenType.RPAREN, "Expected ')' after arguments")
        return FunctionCallExpr(
            span=self._span_from(name.start),
            function_name=name.span,
            args=tuple(args),
        )

    def _parse_arguments(self) -> list[ValueExpr]:
        """Parse comma-separated call arguments."""
        args: list[ValueExpr] = []

        if self._check(TokenType.RPAREN):
            return args

        while True:
            args.append(self._parse_expression())
            if not self._match(TokenType.COMMA):
                break

        return args

    def _parse_dictionary(self) -> DictionaryExpr:
        """
        Parse a dictionary literal with at least one entry.

        Handles:
            {"key": expr}
            {"a": expr, "b": expr, "a": expr}
        """
        start = self._advance().start  # consume '{'

        entries: list[KeyValuePair] = []
        while True:
            key = self._expect(TokenType.STRING, "Expected string key in dictionary").text_span
            self._expect(TokenType.COLON, "Expected ':' after dictionary key")
            value = self._parse_expression()
            entries.append(KeyValuePair(key=key, value=value))

            if not self._match(TokenType.COMMA):
                break

        self._expect(TokenType.RBRACE, "Expected '}' after dictionary entries")
        return DictionaryExpr(span=self._span_from(start), entries=tuple(entries))
