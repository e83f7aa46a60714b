"""
DemoScript Compiler Package.

This package contains the front-end components:
- Lexer: Tokenizes DemoScript source code
- Parser: Produces an Abstract Syntax Tree from tokens
- AST: Node definitions for the syntax tree
- Color: sRGB/linear conversion applied to color literals
- SyncTracks: Discovers the timeline tracks a script reads
"""

from __future__ import annotations

import logging
from pathlib import Path

from demoscript.compiler.ast_nodes import (
    ASTNode,
    ASTVisitor,
    Attachment,
    BaseASTVisitor,
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
from demoscript.compiler.color import (
    LinearColor,
    SrgbColor,
    linear_to_srgb,
    parse_color_literal,
    srgb_to_linear,
)
from demoscript.compiler.lexer import Lexer, tokenize
from demoscript.compiler.parser import Parser, Precedence, ProgramBuilder
from demoscript.compiler.sync_tracks import SyncTrackCollector, collect_sync_tracks
from demoscript.compiler.tokens import Token, TokenType
from demoscript.utils.errors import DemoScriptError

logger = logging.getLogger(__name__)


def parse_source(source: str, filename: str = "<input>") -> Program:
    """
    Parse DemoScript source code into a Program.

    Args:
        source: DemoScript source code string
        filename: Name used in error locations and diagnostics

    Returns:
        The parsed Program; functions and render targets in source order

    Raises:
        LexerError: If the source contains text no token matches
        ParserError: If the token stream does not form a valid program
    """
    logger.debug("Parsing %s (%d characters)", filename, len(source))
    try:
        tokens = Lexer(source, filename).tokenize()
        program = Parser(tokens, source, filename).parse()
    except DemoScriptError as e:
        logger.debug("Parsing %s failed: %s", filename, e.message)
        raise

    logger.debug(
        "Parsed %s: %d function(s), %d render target(s)",
        filename,
        len(program.functions),
        len(program.render_targets),
    )
    return program


def parse_file(path: Path | str) -> Program:
    """
    Read a UTF-8 DemoScript file and parse it.

    Args:
        path: Path to the script

    Returns:
        The parsed Program
    """
    path = Path(path)
    logger.info("Loading script %s", path)
    source = path.read_text(encoding="utf-8")
    return parse_source(source, filename=str(path))


__all__ = [
    # Entry points
    "parse_source",
    "parse_file",
    # Lexer
    "Lexer",
    "tokenize",
    "Token",
    "TokenType",
    # Parser
    "Parser",
    "Precedence",
    "ProgramBuilder",
    # AST
    "ASTNode",
    "ASTVisitor",
    "BaseASTVisitor",
    "SourceSlice",
    "Program",
    "FunctionDef",
    "Parameter",
    "RenderTargetDef",
    "Attachment",
    "RenderTargetFormat",
    "ValueType",
    "Stmt",
    "CallStatement",
    "ReturnStatement",
    "ConditionalStatement",
    "ValueExpr",
    "FloatLiteral",
    "StringLiteral",
    "ColorLiteral",
    "DictionaryExpr",
    "KeyValuePair",
    "Var",
    "FunctionCallExpr",
    "PropertyOf",
    "BinaryOp",
    "BinaryOperator",
    # Color
    "LinearColor",
    "SrgbColor",
    "srgb_to_linear",
    "linear_to_srgb",
    "parse_color_literal",
    # Sync tracks
    "SyncTrackCollector",
    "collect_sync_tracks",
]
