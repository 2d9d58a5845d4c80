"""
HCL runtime exceptions and diagnostics.

Error code ranges:
- E3xx: Resolver (static scope) errors
- E4xx: Runtime errors

InternalError is deliberately not an HclError: it signals a defect in the
runtime itself (an escaped control-flow signal, a mis-resolved distance) and
is never reported as a language error.
"""

from dataclasses import dataclass, field
from typing import Optional, List
from .tokens import SourceSpan, UNKNOWN_SPAN


@dataclass
class Diagnostic:
    """A single error diagnostic."""
    code: str                       # E301, E401, etc.
    message: str                    # Human-readable message
    span: SourceSpan
    hints: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format the diagnostic for display."""
        parts = [f"{self.span.start}: error[{self.code}]: {self.message}"]
        for hint in self.hints:
            parts.append(f"    = hint: {hint}")
        return "\n".join(parts)


class HclError(Exception):
    """Base exception for HCL language errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def span(self) -> SourceSpan:
        return self.diagnostic.span

    def __str__(self) -> str:
        return self.diagnostic.format()


class ResolveError(HclError):
    """Error during static scope resolution (E3xx)."""
    pass


class HclRuntimeError(HclError):
    """Error during evaluation (E4xx)."""
    pass


class HclTypeError(HclRuntimeError):
    """Operand, callee or superclass of the wrong kind (E401)."""
    pass


class UndefinedVariableError(HclRuntimeError):
    """Read or assignment of an unbound name (E402)."""
    pass


class UndefinedPropertyError(HclRuntimeError):
    """Property or super-method lookup miss (E403)."""
    pass


class ArityError(HclRuntimeError):
    """Call argument count mismatch (E404)."""
    pass


class HclImportError(HclRuntimeError):
    """Duplicate, unknown or unloadable module (E405)."""
    pass


class InternalError(Exception):
    """Defect in the runtime core; never a user-facing language error."""
    pass


def _runtime_diagnostic(code: str, message: str, span: Optional[SourceSpan],
                        hints: Optional[List[str]] = None) -> Diagnostic:
    return Diagnostic(
        code=code,
        message=message,
        span=span or UNKNOWN_SPAN,
        hints=hints or [],
    )


# --- Resolver error codes ---

def error_read_in_own_initializer(name: str, span: SourceSpan) -> ResolveError:
    """E301: Local variable read in its own initializer."""
    diag = Diagnostic(
        code="E301",
        message=f"can't read local variable '{name}' in its own initializer",
        span=span,
    )
    return ResolveError(diag)


def error_top_level_return(span: SourceSpan) -> ResolveError:
    """E302: Return outside of any function."""
    diag = Diagnostic(
        code="E302",
        message="can't return from top-level code",
        span=span,
    )
    return ResolveError(diag)


def error_self_outside_class(span: SourceSpan) -> ResolveError:
    """E303: 'self' used outside of a class body."""
    diag = Diagnostic(
        code="E303",
        message="can't use 'self' outside of a class",
        span=span,
    )
    return ResolveError(diag)


def error_invalid_super(span: SourceSpan, has_class: bool) -> ResolveError:
    """E304: 'super' outside a class or in a class without a superclass."""
    if has_class:
        message = "can't use 'super' in a class with no superclass"
    else:
        message = "can't use 'super' outside of a class"
    diag = Diagnostic(
        code="E304",
        message=message,
        span=span,
    )
    return ResolveError(diag)


def error_self_inheritance(name: str, span: SourceSpan) -> ResolveError:
    """E305: A class naming itself as its superclass."""
    diag = Diagnostic(
        code="E305",
        message=f"class '{name}' can't inherit from itself",
        span=span,
    )
    return ResolveError(diag)


def error_break_outside_loop(span: SourceSpan) -> ResolveError:
    """E306: Break with no enclosing loop."""
    diag = Diagnostic(
        code="E306",
        message="can't use 'break' outside of a loop",
        span=span,
    )
    return ResolveError(diag)


# --- Runtime error codes ---

def error_operand_must_be_number(operator: str, span: Optional[SourceSpan]) -> HclTypeError:
    """E401: Unary operand is not a number."""
    return HclTypeError(_runtime_diagnostic(
        "E401", f"operand of '{operator}' must be a number", span))


def error_operands_must_be_numbers(operator: str, span: Optional[SourceSpan]) -> HclTypeError:
    """E401: Binary operands are not both numbers."""
    return HclTypeError(_runtime_diagnostic(
        "E401", f"operands of '{operator}' must be numbers", span))


def error_invalid_plus_operands(span: Optional[SourceSpan]) -> HclTypeError:
    """E401: '+' applied to anything but numbers and strings."""
    return HclTypeError(_runtime_diagnostic(
        "E401", "operands must be two numbers or two strings", span,
        hints=["a string and a number are concatenated using the number's text form"]))


def error_invalid_star_operands(span: Optional[SourceSpan]) -> HclTypeError:
    """E401: '*' applied to anything but numbers or a string and a number."""
    return HclTypeError(_runtime_diagnostic(
        "E401", "operands must be two numbers or a string and a number", span))


def error_invalid_repeat_count(count: float, span: Optional[SourceSpan]) -> HclTypeError:
    """E401: String repetition count negative or not finite."""
    return HclTypeError(_runtime_diagnostic(
        "E401", f"string repeat count must be a finite non-negative number, got {count!r}", span))


def error_repeat_too_long(limit: int, span: Optional[SourceSpan]) -> HclTypeError:
    """E401: String repetition result longer than the runtime allows."""
    return HclTypeError(_runtime_diagnostic(
        "E401", f"string repeat result is too long (limit {limit} characters)", span))


def error_not_callable(span: Optional[SourceSpan]) -> HclTypeError:
    """E401: Call of a value that is neither a function nor a class."""
    return HclTypeError(_runtime_diagnostic(
        "E401", "can only call functions and classes", span))


def error_no_properties(span: Optional[SourceSpan]) -> HclTypeError:
    """E401: Property read on a non-instance."""
    return HclTypeError(_runtime_diagnostic(
        "E401", "only instances have properties", span))


def error_no_fields(span: Optional[SourceSpan]) -> HclTypeError:
    """E401: Field write on a non-instance."""
    return HclTypeError(_runtime_diagnostic(
        "E401", "only instances have fields", span))


def error_superclass_not_class(span: Optional[SourceSpan]) -> HclTypeError:
    """E401: Superclass expression evaluated to something other than a class."""
    return HclTypeError(_runtime_diagnostic(
        "E401", "superclass must be a class", span))


def error_module_name_not_string(span: Optional[SourceSpan]) -> HclTypeError:
    """E401: Import of a non-string module name."""
    return HclTypeError(_runtime_diagnostic(
        "E401", "module name must be a string", span))


def error_undefined_variable(name: str, span: Optional[SourceSpan]) -> UndefinedVariableError:
    """E402: Undefined variable."""
    return UndefinedVariableError(_runtime_diagnostic(
        "E402", f"undefined variable '{name}'", span))


def error_undefined_property(name: str, span: Optional[SourceSpan]) -> UndefinedPropertyError:
    """E403: Undefined property."""
    return UndefinedPropertyError(_runtime_diagnostic(
        "E403", f"undefined property '{name}'", span))


def error_arity_mismatch(expected: int, got: int, span: Optional[SourceSpan]) -> ArityError:
    """E404: Wrong number of call arguments."""
    return ArityError(_runtime_diagnostic(
        "E404", f"expected {expected} arguments but got {got}", span))


def error_module_already_imported(name: str, std: bool, span: Optional[SourceSpan]) -> HclImportError:
    """E405: Module imported twice."""
    if std:
        message = f"standard module {name} is already imported"
    else:
        message = f"module {name} is already imported"
    return HclImportError(_runtime_diagnostic("E405", message, span))


def error_unknown_std_module(name: str, span: Optional[SourceSpan]) -> HclImportError:
    """E405: No registry knows the requested standard module."""
    return HclImportError(_runtime_diagnostic(
        "E405", f"can't import standard module {name}", span))


def error_module_unreadable(path: str, reason: str, span: Optional[SourceSpan]) -> HclImportError:
    """E405: Module source could not be read."""
    return HclImportError(_runtime_diagnostic(
        "E405", f"can't read module file {path}: {reason}", span))


def error_no_source_loader(name: str, span: Optional[SourceSpan]) -> HclImportError:
    """E405: Source module requested but the host supplied no loader."""
    return HclImportError(_runtime_diagnostic(
        "E405", f"can't import {name}: no source loader configured", span,
        hints=["pass loader=... to Interpreter to enable source imports"]))


def error_module_resolution_failed(name: str, diagnostics: List[Diagnostic],
                                   span: Optional[SourceSpan]) -> HclImportError:
    """E405: Imported module source failed static resolution."""
    return HclImportError(_runtime_diagnostic(
        "E405", f"module {name} failed to resolve", span,
        hints=[d.format() for d in diagnostics]))


class DiagnosticCollector:
    """Collects diagnostics during resolution and execution."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors

    def add_error(self, error: HclError) -> None:
        """Add an error exception as a diagnostic."""
        self.diagnostics.append(error.diagnostic)

    @property
    def error_count(self) -> int:
        return len(self.diagnostics)

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return len(self.diagnostics) >= self.max_errors
