"""
HCL runtime: values, environments, callables, the interpreter and the
module registry.
"""

from .values import (
    ValueKind,
    kind_of,
    is_truthy,
    is_equal,
    stringify,
)

from .environment import Environment

from .callables import (
    HclCallable,
    HclFunction,
    NativeFunction,
    HclInstance,
    HclClass,
    ModuleNamespace,
)

from .control import (
    ReturnSignal,
    BreakSignal,
    BREAK,
    Completion,
)

from .console import LineScanner

from .modules import (
    ModuleKind,
    ModuleRegistry,
    ImportLedger,
    get_module_registry,
)

from .interpreter import (
    Interpreter,
    SourceLoader,
)


__all__ = [
    "ValueKind",
    "kind_of",
    "is_truthy",
    "is_equal",
    "stringify",
    "Environment",
    "HclCallable",
    "HclFunction",
    "NativeFunction",
    "HclInstance",
    "HclClass",
    "ModuleNamespace",
    "ReturnSignal",
    "BreakSignal",
    "BREAK",
    "Completion",
    "LineScanner",
    "ModuleKind",
    "ModuleRegistry",
    "ImportLedger",
    "get_module_registry",
    "Interpreter",
    "SourceLoader",
]
