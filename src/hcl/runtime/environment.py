"""
Environment chain for the HCL interpreter.

One Environment is created per block, per call activation, per bound
method and per class body with a superclass (to hold 'super'). Closures keep
their defining Environment alive after the block that created it exits.
"""

from typing import Any, Dict, Mapping, Optional

from ..errors import InternalError, error_undefined_variable
from ..tokens import SourceSpan


class Environment:
    """
    A single scope frame with an optional link to its enclosing frame.

    Names may be re-defined in the same frame (later definitions overwrite);
    assignment only updates a name that already exists somewhere in the chain.
    """

    def __init__(self, enclosing: Optional["Environment"] = None, name: str = "anonymous"):
        self.values: Dict[str, Any] = {}
        self.enclosing = enclosing
        self.name = name  # For debugging

    def __repr__(self) -> str:
        return f"Environment({self.name!r}, {sorted(self.values)!r})"

    def define(self, name: str, value: Any) -> None:
        """Bind a name in this frame, overwriting any existing binding."""
        self.values[name] = value

    def get(self, name: str, span: Optional[SourceSpan] = None) -> Any:
        """Look up a name in this frame or any enclosing frame."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.enclosing
        raise error_undefined_variable(name, span)

    def assign(self, name: str, value: Any, span: Optional[SourceSpan] = None) -> None:
        """Update the nearest existing binding of a name."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.enclosing
        raise error_undefined_variable(name, span)

    def ancestor(self, distance: int) -> "Environment":
        """The frame exactly `distance` links up the chain."""
        env = self
        for _ in range(distance):
            if env.enclosing is None:
                raise InternalError(
                    f"scope distance {distance} exceeds environment chain depth"
                )
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str, span: Optional[SourceSpan] = None) -> Any:
        """Look up a name directly in the frame at a resolved distance."""
        frame = self.ancestor(distance)
        if name not in frame.values:
            raise error_undefined_variable(name, span)
        return frame.values[name]

    def assign_at(self, distance: int, name: str, value: Any,
                  span: Optional[SourceSpan] = None) -> None:
        """Update a name directly in the frame at a resolved distance."""
        frame = self.ancestor(distance)
        if name not in frame.values:
            raise error_undefined_variable(name, span)
        frame.values[name] = value

    def import_module(self, table: Mapping[str, Any]) -> None:
        """Merge a native capability table into this frame."""
        for name, value in table.items():
            self.define(name, value)
