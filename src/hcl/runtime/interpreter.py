"""
Tree-walking interpreter for HCL.

Executes statements and evaluates expressions by dispatching on node class
(see AstNode.accept). Variable references use the scope distances recorded
through resolve(); references without a distance are looked up in globals.

Statement execution returns a Completion: None when the statement finished
normally, or a ReturnSignal / BREAK while unwinding. Only call activations
consume ReturnSignal and only loops consume BREAK.
"""

import logging
import math
import sys
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TextIO

from .callables import HclCallable, HclClass, HclFunction, HclInstance
from .console import LineScanner
from .control import BREAK, BreakSignal, Completion, ReturnSignal
from .environment import Environment
from .modules import ImportLedger, ModuleKind, ModuleRegistry, get_module_registry
from .values import (
    MAX_TEXT_LENGTH, ValueKind, is_equal, is_truthy, kind_of, repeat_count, stringify,
)
from ..ast import (
    AstVisitor, Expression, Statement,
    Literal, Identifier, Grouping, UnaryOp, BinaryOp, LogicalOp,
    Assignment, FunctionCall, MemberAccess, MemberAssignment, SelfExpr, SuperAccess,
    ExpressionStatement, PrintStatement, LetStatement, Block, IfStatement,
    LoopStatement, BreakStatement, ReturnStatement, FunctionDef, ClassDef,
    ImportStatement,
)
from ..config import Settings
from ..errors import (
    DiagnosticCollector, HclRuntimeError, InternalError,
    error_operand_must_be_number, error_operands_must_be_numbers,
    error_invalid_plus_operands, error_invalid_star_operands,
    error_invalid_repeat_count, error_repeat_too_long,
    error_not_callable, error_no_properties,
    error_no_fields, error_superclass_not_class, error_module_name_not_string,
    error_undefined_property, error_arity_mismatch,
    error_module_already_imported, error_unknown_std_module,
    error_module_unreadable, error_no_source_loader,
    error_module_resolution_failed,
)
from ..resolver import Resolver
from ..tokens import (
    INITIALIZER_NAME, SELF_NAME, SOURCE_SUFFIX, SUPER_NAME,
    SourceSpan, TokenType, operator_symbol,
)


logger = logging.getLogger(__name__)


# Parses (and only parses) a source module; resolution and execution are ours
SourceLoader = Callable[[Path], Sequence[Statement]]

_NUMERIC_OPERATORS = {
    TokenType.GT, TokenType.GE, TokenType.LT, TokenType.LE,
    TokenType.MINUS, TokenType.SLASH, TokenType.CARET,
}


def _divide(left: float, right: float) -> float:
    """IEEE-754 division: x/0 is a signed infinity, 0/0 is NaN."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _power(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and exponent.is_integer() and int(exponent) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        # 0 ** negative, negative ** fractional
        if base == 0:
            return math.inf
        return math.nan


class Interpreter(AstVisitor):
    """
    Tree-walking interpreter for HCL programs.

    Usage:
        interpreter = Interpreter()
        Resolver(interpreter).resolve(statements)
        ok = interpreter.interpret(statements)
    """

    def __init__(
        self,
        registry: Optional[ModuleRegistry] = None,
        loader: Optional[SourceLoader] = None,
        settings: Optional[Settings] = None,
        stdout: Optional[TextIO] = None,
        stdin: Optional[TextIO] = None,
        base_dir: Optional[Path] = None,
    ):
        """
        Initialize the interpreter.

        Args:
            registry: Importable modules (default: the process-wide registry)
            loader: Parses a source module file into statements
            settings: Runtime settings (default: read from the environment)
            stdout: Stream written by print (default: sys.stdout)
            stdin: Stream behind the line scanner (default: sys.stdin)
            base_dir: Directory holding bare-imported modules (default: cwd)
        """
        self.settings = settings or Settings()
        self.registry = registry if registry is not None else get_module_registry()
        self.registry.freeze()
        self.loader = loader
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self._stdout = stdout
        self.stdin = LineScanner(stdin)

        self.globals = Environment(name="global")
        self.environment = self.globals
        self.locals: Dict[Expression, int] = {}
        self.imports = ImportLedger()
        self.diagnostics = DiagnosticCollector()
        self._lock = threading.RLock()

        for factory in self.registry.prelude:
            self.globals.import_module(factory(self))

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    # =========================================================================
    # Entry points
    # =========================================================================

    def resolve(self, expr: Expression, depth: int) -> None:
        """Record the scope distance of a variable-referencing expression."""
        self.locals[expr] = depth

    def interpret(self, statements: Sequence[Statement]) -> bool:
        """
        Execute a batch of top-level statements.

        Stops at the first runtime error, reports it once and returns False.
        Side effects of statements that already ran are kept.
        """
        with self._lock:
            try:
                for statement in statements:
                    signal = self.execute(statement)
                    if signal is not None:
                        raise InternalError(f"{signal!r} escaped to top level")
            except HclRuntimeError as error:
                self._report(error)
                return False
        return True

    def evaluate_expression(self, expr: Expression) -> Optional[str]:
        """Evaluate one expression and return its canonical text (None on error)."""
        with self._lock:
            try:
                return stringify(self.evaluate(expr))
            except HclRuntimeError as error:
                self._report(error)
                return None

    def _report(self, error: HclRuntimeError) -> None:
        self.diagnostics.add_error(error)
        logger.error("%s", error.diagnostic.format())

    # =========================================================================
    # Dispatch
    # =========================================================================

    def evaluate(self, expr: Expression) -> Any:
        return expr.accept(self)

    def execute(self, stmt: Statement) -> Completion:
        return stmt.accept(self)

    @contextmanager
    def new_scope(self, environment: Environment) -> Iterator[Environment]:
        """Make `environment` current, restoring the previous one on every exit path."""
        previous = self.environment
        self.environment = environment
        try:
            yield environment
        finally:
            self.environment = previous

    def execute_block(self, statements: Sequence[Statement], environment: Environment) -> Completion:
        """Execute statements in `environment`, stopping at the first signal."""
        with self.new_scope(environment):
            for statement in statements:
                signal = self.execute(statement)
                if signal is not None:
                    return signal
        return None

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_ExpressionStatement(self, stmt: ExpressionStatement) -> Completion:
        self.evaluate(stmt.expression)
        return None

    def visit_PrintStatement(self, stmt: PrintStatement) -> Completion:
        value = self.evaluate(stmt.expression)
        self.stdout.write(stringify(value))
        return None

    def visit_LetStatement(self, stmt: LetStatement) -> Completion:
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)
        self.environment.define(stmt.name, value)
        return None

    def visit_Block(self, stmt: Block) -> Completion:
        return self.execute_block(stmt.statements, Environment(self.environment, name="block"))

    def visit_IfStatement(self, stmt: IfStatement) -> Completion:
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        if stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def visit_LoopStatement(self, stmt: LoopStatement) -> Completion:
        while True:
            signal = self.execute(stmt.body)
            if isinstance(signal, BreakSignal):
                return None
            if signal is not None:
                return signal

    def visit_BreakStatement(self, stmt: BreakStatement) -> Completion:
        return BREAK

    def visit_ReturnStatement(self, stmt: ReturnStatement) -> Completion:
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return ReturnSignal(value)

    def visit_FunctionDef(self, stmt: FunctionDef) -> Completion:
        self.environment.define(stmt.name, HclFunction(stmt, self.environment))
        return None

    def visit_ClassDef(self, stmt: ClassDef) -> Completion:
        superclass: Optional[HclClass] = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if kind_of(superclass) is not ValueKind.CLASS:
                raise error_superclass_not_class(stmt.superclass.span)

        # Pre-declare so method bodies can refer to the class by name
        self.environment.define(stmt.name, None)

        method_env = self.environment
        if superclass is not None:
            method_env = Environment(self.environment, name=f"class {stmt.name}")
            method_env.define(SUPER_NAME, superclass)

        class_methods = {
            method.name: HclFunction(method, method_env)
            for method in stmt.class_methods
        }
        metaclass = HclClass(
            None,
            f"{stmt.name} metaclass",
            superclass.klass if superclass is not None else None,
            class_methods,
        )

        methods = {
            method.name: HclFunction(method, method_env, method.name == INITIALIZER_NAME)
            for method in stmt.methods
        }
        klass = HclClass(metaclass, stmt.name, superclass, methods)

        self.environment.assign(stmt.name, klass, stmt.span)
        return None

    def visit_ImportStatement(self, stmt: ImportStatement) -> Completion:
        name = self.evaluate(stmt.module)
        if kind_of(name) is not ValueKind.TEXT:
            raise error_module_name_not_string(stmt.module.span)

        loaded = self.imports.loaded_kind(name)
        if loaded is not None:
            raise error_module_already_imported(name, loaded is not ModuleKind.SOURCE, stmt.span)

        if not stmt.is_std:
            self._run_source_module(name, self.base_dir / f"{name}{SOURCE_SUFFIX}", stmt.span)
            self.imports.record(name, ModuleKind.SOURCE)
            logger.info("imported module %s", name)
            return None

        kind = self.registry.kind_of_std(name)
        logger.debug("import std %s dispatches to %s", name, kind)
        if kind is ModuleKind.NATIVE:
            self.globals.import_module(self.registry.get_native(name)(self))
        elif kind is ModuleKind.LINKED:
            self.globals.define(name, self.registry.get_linked(name)(self))
        elif kind is ModuleKind.STD_SOURCE:
            self._run_source_module(name, self.settings.std_module_path(name), stmt.span)
        else:
            raise error_unknown_std_module(name, stmt.span)

        self.imports.record(name, kind)
        logger.info("imported %s module %s", kind.value, name)
        return None

    def _run_source_module(self, name: str, path: Path, span: SourceSpan) -> None:
        """Load, resolve and execute a source module in the global environment."""
        if self.loader is None:
            raise error_no_source_loader(name, span)

        try:
            statements = self.loader(path)
        except OSError as exc:
            raise error_module_unreadable(str(path), exc.strerror or str(exc), span) from exc

        result = Resolver(self).resolve(statements)
        if result.has_errors:
            raise error_module_resolution_failed(name, result.diagnostics, span)

        signal = self.execute_block(statements, self.globals)
        if signal is not None:
            raise InternalError(f"{signal!r} escaped module {name}")

    # =========================================================================
    # Expressions
    # =========================================================================

    def visit_Literal(self, expr: Literal) -> Any:
        return expr.value

    def visit_Grouping(self, expr: Grouping) -> Any:
        return self.evaluate(expr.expression)

    def visit_LogicalOp(self, expr: LogicalOp) -> Any:
        left = self.evaluate(expr.left)

        if expr.operator == TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def visit_UnaryOp(self, expr: UnaryOp) -> Any:
        operand = self.evaluate(expr.operand)

        if expr.operator == TokenType.BANG:
            return not is_truthy(operand)
        if expr.operator == TokenType.MINUS:
            if kind_of(operand) is not ValueKind.NUMBER:
                raise error_operand_must_be_number(operator_symbol(expr.operator), expr.span)
            return -float(operand)
        raise InternalError(f"unknown unary operator {expr.operator}")

    def visit_BinaryOp(self, expr: BinaryOp) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op = expr.operator

        if op in _NUMERIC_OPERATORS:
            if kind_of(left) is not ValueKind.NUMBER or kind_of(right) is not ValueKind.NUMBER:
                raise error_operands_must_be_numbers(operator_symbol(op), expr.span)
            left, right = float(left), float(right)
            if op == TokenType.GT:
                return left > right
            if op == TokenType.GE:
                return left >= right
            if op == TokenType.LT:
                return left < right
            if op == TokenType.LE:
                return left <= right
            if op == TokenType.MINUS:
                return left - right
            if op == TokenType.SLASH:
                return _divide(left, right)
            return _power(left, right)

        if op == TokenType.PLUS:
            return self._add(left, right, expr.span)
        if op == TokenType.STAR:
            return self._multiply(left, right, expr.span)
        if op == TokenType.EQ:
            return is_equal(left, right)
        if op == TokenType.NE:
            return not is_equal(left, right)

        raise InternalError(f"unknown binary operator {op}")

    def _add(self, left: Any, right: Any, span: SourceSpan) -> Any:
        left_kind, right_kind = kind_of(left), kind_of(right)
        if left_kind is ValueKind.NUMBER and right_kind is ValueKind.NUMBER:
            return float(left) + float(right)
        if left_kind is ValueKind.TEXT and right_kind is ValueKind.TEXT:
            return left + right
        if left_kind is ValueKind.TEXT and right_kind is ValueKind.NUMBER:
            return left + stringify(right)
        if left_kind is ValueKind.NUMBER and right_kind is ValueKind.TEXT:
            return stringify(left) + right
        raise error_invalid_plus_operands(span)

    def _multiply(self, left: Any, right: Any, span: SourceSpan) -> Any:
        left_kind, right_kind = kind_of(left), kind_of(right)
        if left_kind is ValueKind.NUMBER and right_kind is ValueKind.NUMBER:
            return float(left) * float(right)
        if left_kind is ValueKind.TEXT and right_kind is ValueKind.NUMBER:
            return self._repeat(left, right, span)
        if left_kind is ValueKind.NUMBER and right_kind is ValueKind.TEXT:
            return self._repeat(right, left, span)
        raise error_invalid_star_operands(span)

    def _repeat(self, text: str, count: float, span: SourceSpan) -> str:
        times = repeat_count(count)
        if times < 0:
            raise error_invalid_repeat_count(count, span)
        if not text:
            return text
        if len(text) * times > MAX_TEXT_LENGTH:
            raise error_repeat_too_long(MAX_TEXT_LENGTH, span)
        return text * times

    def visit_Assignment(self, expr: Assignment) -> Any:
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name, value, expr.span)
        else:
            self.globals.assign(expr.name, value, expr.span)
        return value

    def visit_Identifier(self, expr: Identifier) -> Any:
        return self._look_up_variable(expr.name, expr)

    def visit_SelfExpr(self, expr: SelfExpr) -> Any:
        return self._look_up_variable(SELF_NAME, expr)

    def _look_up_variable(self, name: str, expr: Expression) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name, expr.span)
        return self.globals.get(name, expr.span)

    def visit_MemberAccess(self, expr: MemberAccess) -> Any:
        obj = self.evaluate(expr.object)
        if kind_of(obj) not in (ValueKind.INSTANCE, ValueKind.CLASS):
            raise error_no_properties(expr.span)
        return obj.get(expr.name, expr.span)

    def visit_MemberAssignment(self, expr: MemberAssignment) -> Any:
        obj = self.evaluate(expr.object)
        if kind_of(obj) not in (ValueKind.INSTANCE, ValueKind.CLASS):
            raise error_no_fields(expr.span)

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value

    def visit_SuperAccess(self, expr: SuperAccess) -> Any:
        distance = self.locals.get(expr)
        if distance is None:
            raise InternalError("'super' expression was never resolved")

        superclass: HclClass = self.environment.get_at(distance, SUPER_NAME, expr.span)
        receiver: HclInstance = self.environment.get_at(distance - 1, SELF_NAME, expr.span)

        # In a class-level method the receiver is the class itself
        lookup = superclass
        if kind_of(receiver) is ValueKind.CLASS and superclass.klass is not None:
            lookup = superclass.klass

        method = lookup.find_method(expr.method)
        if method is None:
            raise error_undefined_property(expr.method, expr.span)
        return method.bind(receiver)

    def visit_FunctionCall(self, expr: FunctionCall) -> Any:
        callee = self.evaluate(expr.callee)
        arguments: List[Any] = [self.evaluate(argument) for argument in expr.arguments]

        if kind_of(callee) not in (ValueKind.CALLABLE, ValueKind.CLASS):
            raise error_not_callable(expr.span)

        function: HclCallable = callee
        if not function.is_variadic and len(arguments) != function.arity():
            raise error_arity_mismatch(function.arity(), len(arguments), expr.span)
        return function.call(self, arguments)
