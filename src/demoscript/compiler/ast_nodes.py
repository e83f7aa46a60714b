"""
Abstract Syntax Tree (AST) node definitions for DemoScript.

This module defines all AST node types representing the structure of a
DemoScript program after parsing. Nodes are immutable and refer back to the
source text through SourceSlice offsets instead of holding copies of it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from demoscript.compiler.color import LinearColor


@dataclass(frozen=True, slots=True)
class SourceSlice:
    """
    A half-open ``[start, end)`` offset range into the source text.

    The slice does not hold a reference to the source; use ``text()`` with
    the original source to recover the covered characters.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"SourceSlice start {self.start} is after end {self.end}")

    def text(self, source: str) -> str:
        return source[self.start:self.end]

    def contains(self, other: "SourceSlice") -> bool:
        return self.start <= other.start and other.end <= self.end


class ASTNode(ABC):
    """Base class for all AST nodes."""

    span: SourceSlice

    @abstractmethod
    def accept(self, visitor: "ASTVisitor") -> Any:
        """Accept a visitor for tree traversal."""
        pass


class ASTVisitor(ABC):
    """
    Visitor pattern base class for AST traversal.

    Implement this to create custom AST processors (the interpreter's
    bytecode compiler, sync-track discovery, etc.).
    """

    def visit(self, node: ASTNode) -> Any:
        """Dispatch to the appropriate visit method."""
        return node.accept(self)


# -----------------------------------------------------------------------------
# Enumerations
# -----------------------------------------------------------------------------


class BinaryOperator(Enum):
    """Binary operator types. All are left-associative."""

    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    # Comparison
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "=="
    NE = "!="


class ValueType(Enum):
    """Declared parameter and return types."""

    FLOAT32 = "f32"


class RenderTargetFormat(Enum):
    """Texture formats a render target attachment can be created with."""

    # sRGB
    SRGB8 = "SRGB8"
    SRGBA8 = "SRGBA8"

    # linear formats (8 bit)
    R8 = "R8"
    RGB8 = "RGB8"
    RGBA8 = "RGBA8"

    # linear formats (16 bit)
    R16 = "R16"
    R16F = "R16F"
    RGB16 = "RGB16"
    RGB16F = "RGB16F"
    RGBA16 = "RGBA16"
    RGBA16F = "RGBA16F"

    # linear formats (32 bit)
    R32F = "R32F"
    RGB32F = "RGB32F"
    RGBA32F = "RGBA32F"


# -----------------------------------------------------------------------------
# Value Expressions
# -----------------------------------------------------------------------------


class ValueExpr(ASTNode):
    """Base class for all value expressions."""

    def as_dictionary(self) -> Optional["DictionaryExpr"]:
        """Return this node if it is a dictionary literal, else None."""
        return self if isinstance(self, DictionaryExpr) else None

    def as_string(self, source: str) -> Optional[str]:
        """Return the literal text if this node is a string literal, else None."""
        if isinstance(self, StringLiteral):
            return self.span.text(source)
        return None


@dataclass(frozen=True, slots=True)
class FloatLiteral(ValueExpr):
    """
    A 32-bit floating-point literal.

    ``value`` holds the literal rounded to float32. A leading minus sign
    belongs to the literal and is covered by the span.
    """

    span: SourceSlice
    value: float

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_float_literal(self)


@dataclass(frozen=True, slots=True)
class StringLiteral(ValueExpr):
    """A string literal. The span covers the text between the quotes."""

    span: SourceSlice

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_string_literal(self)


@dataclass(frozen=True, slots=True)
class ColorLiteral(ValueExpr):
    """
    A color literal, already converted to linear space.

    Example:
        #FF8000, #FF800080
    """

    span: SourceSlice
    color: LinearColor

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_color_literal(self)


@dataclass(frozen=True, slots=True)
class KeyValuePair:
    """One ``"key": value`` entry of a dictionary literal."""

    key: SourceSlice
    value: ValueExpr

    @property
    def span(self) -> SourceSlice:
        return SourceSlice(self.key.start, self.value.span.end)


@dataclass(frozen=True, slots=True)
class DictionaryExpr(ValueExpr):
    """
    A dictionary literal. Entries keep source order and duplicate keys.

    Example:
        {"color": #FFFFFF, "scale": 2.0}
    """

    span: SourceSlice
    entries: tuple[KeyValuePair, ...]

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_dictionary(self)


@dataclass(frozen=True, slots=True)
class Var(ValueExpr):
    """A reference to a variable or parameter by name."""

    span: SourceSlice

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_var(self)


@dataclass(frozen=True, slots=True)
class FunctionCallExpr(ValueExpr):
    """
    A function call.

    ``-(x)`` is represented as a call whose ``function_name`` covers only
    the ``-`` character, so negation goes through the same builtin dispatch
    as ordinary calls.

    Example:
        draw_quad(), mix(a, b, 0.5), -(x)
    """

    span: SourceSlice
    function_name: SourceSlice
    args: tuple[ValueExpr, ...] = ()

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_function_call(self)


@dataclass(frozen=True, slots=True)
class PropertyOf(ValueExpr):
    """
    A chain of property accesses flattened into one node.

    Example:
        sync.camera.x  ->  owner Var(sync), accessors [camera, x]
    """

    span: SourceSlice
    owner: ValueExpr
    accessors: tuple[SourceSlice, ...]

    def __post_init__(self) -> None:
        if not self.accessors:
            raise ValueError("PropertyOf requires at least one accessor")

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_property_of(self)


@dataclass(frozen=True, slots=True)
class BinaryOp(ValueExpr):
    """
    A binary operation expression.

    Example:
        a + b, time * 0.5, x < 1
    """

    span: SourceSlice
    operator: BinaryOperator
    lhs: ValueExpr
    rhs: ValueExpr

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_binary_op(self)


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


class Stmt(ASTNode):
    """Base class for all statements."""

    pass


@dataclass(frozen=True, slots=True)
class CallStatement(Stmt):
    """A function call evaluated for its effect: ``draw(x);``."""

    call: FunctionCallExpr

    @property
    def span(self) -> SourceSlice:
        return self.call.span

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_call_statement(self)


@dataclass(frozen=True, slots=True)
class ReturnStatement(Stmt):
    """A return statement: ``return expr;``."""

    expr: ValueExpr
    span: SourceSlice

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_return_statement(self)


@dataclass(frozen=True, slots=True)
class ConditionalStatement(Stmt):
    """
    An if statement with an optional else block.

    Example:
        if time < 10 { intro(); } else { outro(); }
    """

    condition: ValueExpr
    then_block: tuple[Stmt, ...]
    else_block: Optional[tuple[Stmt, ...]]
    span: SourceSlice

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_conditional_statement(self)


# -----------------------------------------------------------------------------
# Declarations
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Parameter:
    """A typed function parameter: ``name: f32``."""

    name: SourceSlice
    value_type: ValueType
    span: SourceSlice


@dataclass(frozen=True, slots=True)
class FunctionDef(ASTNode):
    """
    A function definition.

    Example:
        fn add(a: f32, b: f32) -> f32 {
            return a + b;
        }
    """

    name: SourceSlice
    parameters: tuple[Parameter, ...]
    body: tuple[Stmt, ...]
    return_type: Optional[ValueType]
    span: SourceSlice

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_function_def(self)


@dataclass(frozen=True, slots=True)
class Attachment:
    """A named color attachment of a render target: ``"color": RGBA8``."""

    name: SourceSlice
    format: RenderTargetFormat


@dataclass(frozen=True, slots=True)
class RenderTargetDef(ASTNode):
    """
    A render target declaration.

    Example:
        define_rt("main", width, height, {"color": RGBA8});
        define_rt_with_depth("gbuffer", 1920, 1080, {"albedo": SRGBA8, "normal": RGBA16F});
    """

    span: SourceSlice
    name: SourceSlice
    width: ValueExpr
    height: ValueExpr
    attachments: tuple[Attachment, ...]
    has_depth: bool = False

    def __post_init__(self) -> None:
        if not self.attachments:
            raise ValueError("RenderTargetDef requires at least one attachment")

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_render_target_def(self)


# -----------------------------------------------------------------------------
# Program (Root Node)
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Program(ASTNode):
    """
    The root node of a DemoScript program.

    Functions and render targets are kept in source order. Duplicate names
    are passed through untouched.
    """

    functions: tuple[FunctionDef, ...] = ()
    render_targets: tuple[RenderTargetDef, ...] = ()

    @property
    def span(self) -> SourceSlice:
        nodes = [*self.functions, *self.render_targets]
        if not nodes:
            return SourceSlice(0, 0)
        return SourceSlice(min(n.span.start for n in nodes), max(n.span.end for n in nodes))

    def accept(self, visitor: ASTVisitor) -> Any:
        return visitor.visit_program(self)


# -----------------------------------------------------------------------------
# Visitor with default implementations
# -----------------------------------------------------------------------------


class BaseASTVisitor(ASTVisitor):
    """
    Base visitor with default implementations that traverse children.

    Subclass this and override specific visit_* methods as needed.
    """

    def visit_program(self, node: Program) -> Any:
        for target in node.render_targets:
            self.visit(target)
        for function in node.functions:
            self.visit(function)

    def visit_render_target_def(self, node: RenderTargetDef) -> Any:
        self.visit(node.width)
        self.visit(node.height)

    def visit_function_def(self, node: FunctionDef) -> Any:
        self.visit_block(node.body)

    def visit_block(self, statements: tuple[Stmt, ...]) -> Any:
        for stmt in statements:
            self.visit(stmt)

    # Statements
    def visit_call_statement(self, node: CallStatement) -> Any:
        self.visit(node.call)

    def visit_return_statement(self, node: ReturnStatement) -> Any:
        self.visit(node.expr)

    def visit_conditional_statement(self, node: ConditionalStatement) -> Any:
        self.visit(node.condition)
        self.visit_block(node.then_block)
        if node.else_block is not None:
            self.visit_block(node.else_block)

    # Literals
    def visit_float_literal(self, node: FloatLiteral) -> Any:
        pass

    def visit_string_literal(self, node: StringLiteral) -> Any:
        pass

    def visit_color_literal(self, node: ColorLiteral) -> Any:
        pass

    def visit_dictionary(self, node: DictionaryExpr) -> Any:
        for entry in node.entries:
            self.visit(entry.value)

    # Expressions
    def visit_var(self, node: Var) -> Any:
        pass

    def visit_function_call(self, node: FunctionCallExpr) -> Any:
        for arg in node.args:
            self.visit(arg)

    def visit_property_of(self, node: PropertyOf) -> Any:
        self.visit(node.owner)

    def visit_binary_op(self, node: BinaryOp) -> Any:
        self.visit(node.lhs)
        self.visit(node.rhs)
