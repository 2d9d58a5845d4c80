"""
HCL interpreter core.

This package provides:
- AST node definitions consumed by the runtime
- Resolver: static scope pass computing variable distances
- Interpreter: tree-walking evaluator with classes, closures and imports
- Module registry: native, linked and standard-library modules

Usage:
    from hcl import Interpreter, Resolver, ast

    program = [
        ast.LetStatement("greeting", ast.Literal("hello")),
        ast.PrintStatement(ast.Identifier("greeting")),
    ]

    interpreter = Interpreter()
    result = Resolver(interpreter).resolve(program)
    if result.has_errors:
        for diag in result.diagnostics:
            print(diag.format())
    else:
        interpreter.interpret(program)
"""

from importlib.metadata import PackageNotFoundError, version

from . import ast

from .tokens import (
    TokenType,
    SourceLocation,
    SourceSpan,
    span_at,
)

from .errors import (
    Diagnostic,
    DiagnosticCollector,
    HclError,
    ResolveError,
    HclRuntimeError,
    HclTypeError,
    UndefinedVariableError,
    UndefinedPropertyError,
    ArityError,
    HclImportError,
    InternalError,
)

from .config import Settings, configure_logging

from .resolver import Resolver, ResolveResult

from .runtime import (
    Interpreter,
    ModuleRegistry,
    ModuleNamespace,
    NativeFunction,
    get_module_registry,
    stringify,
)


try:
    __version__ = version("hcl-runtime")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"


__all__ = [
    "ast",
    "TokenType",
    "SourceLocation",
    "SourceSpan",
    "span_at",
    "Diagnostic",
    "DiagnosticCollector",
    "HclError",
    "ResolveError",
    "HclRuntimeError",
    "HclTypeError",
    "UndefinedVariableError",
    "UndefinedPropertyError",
    "ArityError",
    "HclImportError",
    "InternalError",
    "Settings",
    "configure_logging",
    "Resolver",
    "ResolveResult",
    "Interpreter",
    "ModuleRegistry",
    "ModuleNamespace",
    "NativeFunction",
    "get_module_registry",
    "stringify",
]
