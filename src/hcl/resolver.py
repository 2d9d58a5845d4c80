"""
Static scope resolver for HCL.

Walks the AST once before execution and tells the interpreter, for every
local variable reference, how many environments separate the reference from
the one holding the binding. Names that are not found in any local scope are
left unresolved and looked up in globals at runtime.

Scopes are opened exactly where the interpreter creates environments:
a block, a function call (parameters and body share one frame), the
'super' layer of a subclass, and the 'self' binding of a method.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, List, Sequence

from .ast import (
    AstVisitor, Expression, Statement,
    Literal, Identifier, Grouping, UnaryOp, BinaryOp, LogicalOp,
    Assignment, FunctionCall, MemberAccess, MemberAssignment, SelfExpr, SuperAccess,
    ExpressionStatement, PrintStatement, LetStatement, Block, IfStatement,
    LoopStatement, BreakStatement, ReturnStatement, FunctionDef, ClassDef,
    ImportStatement,
)
from .errors import (
    Diagnostic, DiagnosticCollector, ResolveError,
    error_read_in_own_initializer, error_top_level_return,
    error_self_outside_class, error_invalid_super,
    error_self_inheritance, error_break_outside_loop,
)
from .tokens import SELF_NAME, SUPER_NAME, INITIALIZER_NAME

if TYPE_CHECKING:
    from .runtime.interpreter import Interpreter


logger = logging.getLogger(__name__)


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()
    CLASS_METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


@dataclass
class ResolveResult:
    """Result of resolving a batch of statements."""
    diagnostics: List[Diagnostic]
    has_errors: bool
    stopped_early: bool = False   # max_errors reached before the end of the batch


class Resolver(AstVisitor):
    """
    Computes scope distances and reports static scoping errors.

    Errors are collected rather than raised, so one pass reports every
    problem in the batch, up to max_errors. A batch with errors must not be
    executed.
    """

    def __init__(self, interpreter: "Interpreter", max_errors: int = 20):
        self.interpreter = interpreter
        self.diagnostics = DiagnosticCollector(max_errors)
        self._scopes: List[Dict[str, bool]] = []
        self._function = FunctionType.NONE
        self._class = ClassType.NONE
        self._loop_depth = 0

    def resolve(self, statements: Sequence[Statement]) -> ResolveResult:
        """Resolve a complete batch of top-level statements."""
        for statement in statements:
            if self.diagnostics.should_stop:
                break
            statement.accept(self)
        logger.debug("resolved %d statements, %d error(s)",
                     len(statements), self.diagnostics.error_count)
        return ResolveResult(
            diagnostics=list(self.diagnostics.diagnostics),
            has_errors=self.diagnostics.has_errors,
            stopped_early=self.diagnostics.should_stop,
        )

    # =========================================================================
    # Scope helpers
    # =========================================================================

    def _error(self, error: ResolveError) -> None:
        if not self.diagnostics.should_stop:
            self.diagnostics.add_error(error)

    def _begin_scope(self) -> None:
        self._scopes.append({})

    def _end_scope(self) -> None:
        self._scopes.pop()

    def _declare(self, name: str) -> None:
        if self._scopes:
            self._scopes[-1][name] = False

    def _define(self, name: str) -> None:
        if self._scopes:
            self._scopes[-1][name] = True

    def _resolve_local(self, expr: Expression, name: str) -> None:
        for i in range(len(self._scopes) - 1, -1, -1):
            if name in self._scopes[i]:
                self.interpreter.resolve(expr, len(self._scopes) - 1 - i)
                return
        # Not found: global

    def _resolve_statements(self, statements: Sequence[Statement]) -> None:
        for statement in statements:
            statement.accept(self)

    def _resolve_function(self, function: FunctionDef, kind: FunctionType) -> None:
        enclosing_function = self._function
        enclosing_loops = self._loop_depth
        self._function = kind
        self._loop_depth = 0

        self._begin_scope()
        for param in function.parameters:
            self._declare(param)
            self._define(param)
        self._resolve_statements(function.body)
        self._end_scope()

        self._function = enclosing_function
        self._loop_depth = enclosing_loops

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_Block(self, stmt: Block) -> None:
        self._begin_scope()
        self._resolve_statements(stmt.statements)
        self._end_scope()

    def visit_ExpressionStatement(self, stmt: ExpressionStatement) -> None:
        stmt.expression.accept(self)

    def visit_PrintStatement(self, stmt: PrintStatement) -> None:
        stmt.expression.accept(self)

    def visit_LetStatement(self, stmt: LetStatement) -> None:
        self._declare(stmt.name)
        if stmt.initializer is not None:
            stmt.initializer.accept(self)
        self._define(stmt.name)

    def visit_IfStatement(self, stmt: IfStatement) -> None:
        stmt.condition.accept(self)
        stmt.then_branch.accept(self)
        if stmt.else_branch is not None:
            stmt.else_branch.accept(self)

    def visit_LoopStatement(self, stmt: LoopStatement) -> None:
        self._loop_depth += 1
        stmt.body.accept(self)
        self._loop_depth -= 1

    def visit_BreakStatement(self, stmt: BreakStatement) -> None:
        if self._loop_depth == 0:
            self._error(error_break_outside_loop(stmt.span))

    def visit_ReturnStatement(self, stmt: ReturnStatement) -> None:
        if self._function is FunctionType.NONE:
            self._error(error_top_level_return(stmt.span))
        if stmt.value is not None:
            stmt.value.accept(self)

    def visit_FunctionDef(self, stmt: FunctionDef) -> None:
        # Defined before the body so the function can recurse
        self._declare(stmt.name)
        self._define(stmt.name)
        self._resolve_function(stmt, FunctionType.FUNCTION)

    def visit_ClassDef(self, stmt: ClassDef) -> None:
        enclosing_class = self._class
        self._class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name == stmt.name:
                self._error(error_self_inheritance(stmt.name, stmt.superclass.span))
            self._class = ClassType.SUBCLASS
            stmt.superclass.accept(self)

            self._begin_scope()
            self._scopes[-1][SUPER_NAME] = True

        self._begin_scope()
        self._scopes[-1][SELF_NAME] = True

        for method in stmt.methods:
            kind = FunctionType.METHOD
            if method.name == INITIALIZER_NAME:
                kind = FunctionType.INITIALIZER
            self._resolve_function(method, kind)

        for method in stmt.class_methods:
            self._resolve_function(method, FunctionType.CLASS_METHOD)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self._class = enclosing_class

    def visit_ImportStatement(self, stmt: ImportStatement) -> None:
        stmt.module.accept(self)

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_Literal(self, expr: Literal) -> None:
        pass

    def visit_Grouping(self, expr: Grouping) -> None:
        expr.expression.accept(self)

    def visit_UnaryOp(self, expr: UnaryOp) -> None:
        expr.operand.accept(self)

    def visit_BinaryOp(self, expr: BinaryOp) -> None:
        expr.left.accept(self)
        expr.right.accept(self)

    def visit_LogicalOp(self, expr: LogicalOp) -> None:
        expr.left.accept(self)
        expr.right.accept(self)

    def visit_Identifier(self, expr: Identifier) -> None:
        if self._scopes and self._scopes[-1].get(expr.name) is False:
            self._error(error_read_in_own_initializer(expr.name, expr.span))
        self._resolve_local(expr, expr.name)

    def visit_Assignment(self, expr: Assignment) -> None:
        expr.value.accept(self)
        self._resolve_local(expr, expr.name)

    def visit_FunctionCall(self, expr: FunctionCall) -> None:
        expr.callee.accept(self)
        for argument in expr.arguments:
            argument.accept(self)

    def visit_MemberAccess(self, expr: MemberAccess) -> None:
        expr.object.accept(self)

    def visit_MemberAssignment(self, expr: MemberAssignment) -> None:
        expr.value.accept(self)
        expr.object.accept(self)

    def visit_SelfExpr(self, expr: SelfExpr) -> None:
        if self._class is ClassType.NONE:
            self._error(error_self_outside_class(expr.span))
            return
        self._resolve_local(expr, SELF_NAME)

    def visit_SuperAccess(self, expr: SuperAccess) -> None:
        if self._class is ClassType.NONE:
            self._error(error_invalid_super(expr.span, has_class=False))
            return
        if self._class is not ClassType.SUBCLASS:
            self._error(error_invalid_super(expr.span, has_class=True))
            return
        self._resolve_local(expr, SUPER_NAME)
