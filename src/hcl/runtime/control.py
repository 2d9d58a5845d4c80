"""
Non-local control-flow signals.

Statement execution returns None when a statement completes normally, or
one of these signals while unwinding. Each signal is consumed at exactly one
kind of boundary: ReturnSignal by a call activation, BREAK by the innermost
loop. Neither is an exception.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class ReturnSignal:
    """Unwinding to the nearest call activation with a result value."""
    value: Any = None


class BreakSignal:
    """Unwinding to the nearest enclosing loop."""

    def __repr__(self) -> str:
        return "BREAK"


BREAK = BreakSignal()

Signal = Union[ReturnSignal, BreakSignal]
Completion = Optional[Signal]
