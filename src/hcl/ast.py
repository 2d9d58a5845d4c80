"""
Abstract Syntax Tree (AST) node definitions for HCL.

The tree is produced outside this package (by a parser or by the host) and
consumed by the resolver and the interpreter.

All nodes compare and hash by identity (``eq=False``): the resolver's
distance map is keyed by the node object itself, and two structurally equal
references at different places in a program must stay distinct.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Union, Any
from abc import ABC
from .tokens import SourceSpan, TokenType, UNKNOWN_SPAN


# =============================================================================
# Base Classes
# =============================================================================

@dataclass(eq=False)
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan = field(default=UNKNOWN_SPAN, kw_only=True)

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(eq=False)
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass(eq=False)
class Literal(Expression):
    """A literal value: nil (None), bool, number (float) or string."""
    value: Union[None, bool, float, str]


@dataclass(eq=False)
class Identifier(Expression):
    """A variable reference."""
    name: str


@dataclass(eq=False)
class Grouping(Expression):
    """A parenthesized expression."""
    expression: Expression


@dataclass(eq=False)
class UnaryOp(Expression):
    """A unary operation (!x, -n)."""
    operator: TokenType  # BANG or MINUS
    operand: Expression


@dataclass(eq=False)
class BinaryOp(Expression):
    """An arithmetic, comparison or equality operation."""
    left: Expression
    operator: TokenType
    right: Expression


@dataclass(eq=False)
class LogicalOp(Expression):
    """A short-circuit logical operation (a and b, a or b)."""
    left: Expression
    operator: TokenType  # AND or OR
    right: Expression


@dataclass(eq=False)
class Assignment(Expression):
    """Assignment to an existing variable (x = value)."""
    name: str
    value: Expression


@dataclass(eq=False)
class FunctionCall(Expression):
    """A call of a function, bound method, native function or class."""
    callee: Expression
    arguments: List[Expression] = field(default_factory=list)


@dataclass(eq=False)
class MemberAccess(Expression):
    """Property read (object.name)."""
    object: Expression
    name: str


@dataclass(eq=False)
class MemberAssignment(Expression):
    """Property write (object.name = value)."""
    object: Expression
    name: str
    value: Expression


@dataclass(eq=False)
class SelfExpr(Expression):
    """The current receiver ('self')."""
    pass


@dataclass(eq=False)
class SuperAccess(Expression):
    """Superclass method lookup (super.method)."""
    method: str


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(eq=False)
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass(eq=False)
class ExpressionStatement(Statement):
    """An expression evaluated for its side effects."""
    expression: Expression


@dataclass(eq=False)
class PrintStatement(Statement):
    """Write the canonical text of a value to standard output."""
    expression: Expression


@dataclass(eq=False)
class LetStatement(Statement):
    """A variable declaration (let name = initializer;)."""
    name: str
    initializer: Optional[Expression] = None


@dataclass(eq=False)
class Block(Statement):
    """A braced block of statements with its own scope."""
    statements: List[Statement] = field(default_factory=list)


@dataclass(eq=False)
class IfStatement(Statement):
    """An if statement with an optional else branch."""
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None


@dataclass(eq=False)
class LoopStatement(Statement):
    """An unconditional loop, left only through break or return."""
    body: Statement


@dataclass(eq=False)
class BreakStatement(Statement):
    """Leave the innermost enclosing loop."""
    pass


@dataclass(eq=False)
class ReturnStatement(Statement):
    """A return statement."""
    value: Optional[Expression] = None


@dataclass(eq=False)
class FunctionDef(Statement):
    """A function or method declaration.

    Syntax:
        fn name(a, b) { ... }
    """
    name: str
    parameters: List[str] = field(default_factory=list)
    body: List[Statement] = field(default_factory=list)


@dataclass(eq=False)
class ClassDef(Statement):
    """A class declaration.

    Syntax:
        class Name < Super {
            _init(a) { ... }          # initializer
            method() { ... }
            class create() { ... }    # class-level method
        }
    """
    name: str
    superclass: Optional[Identifier] = None
    methods: List[FunctionDef] = field(default_factory=list)
    class_methods: List[FunctionDef] = field(default_factory=list)


@dataclass(eq=False)
class ImportStatement(Statement):
    """An import statement.

    Syntax:
        import "shapes";        # source module next to the program
        import std "Math";      # standard module
    """
    module: Expression
    is_std: bool = False

