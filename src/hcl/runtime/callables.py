"""
Callable protocol and the class/instance/method model.

A class is an instance of its metaclass: class-level methods live in the
metaclass method table and are found by ordinary property lookup on the
class object, with the class bound as the receiver.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional

from .control import BreakSignal, ReturnSignal
from .environment import Environment
from ..ast import FunctionDef
from ..errors import InternalError, error_undefined_property
from ..tokens import INITIALIZER_NAME, SELF_NAME, SourceSpan

if TYPE_CHECKING:
    from .interpreter import Interpreter


class HclCallable(ABC):
    """Anything a call expression can invoke."""

    @abstractmethod
    def arity(self) -> int:
        """Number of arguments expected (ignored when variadic)."""

    @property
    def is_variadic(self) -> bool:
        return False

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        """Invoke with already-evaluated arguments."""


class HclFunction(HclCallable):
    """A user function or method paired with its defining environment."""

    def __init__(self, declaration: FunctionDef, closure: Environment,
                 is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name

    def bind(self, instance: "HclInstance") -> "HclFunction":
        """Return this function with 'self' bound to `instance`."""
        env = Environment(self.closure, name=f"bound {self.name}")
        env.define(SELF_NAME, instance)
        return HclFunction(self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.parameters)

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        env = Environment(self.closure, name=f"call {self.name}")
        for param, arg in zip(self.declaration.parameters, arguments):
            env.define(param, arg)

        signal = interpreter.execute_block(self.declaration.body, env)
        if isinstance(signal, BreakSignal):
            raise InternalError(f"break escaped the body of function '{self.name}'")

        # An initializer always yields its receiver, whatever it returned
        if self.is_initializer:
            return self.closure.get_at(0, SELF_NAME)
        if isinstance(signal, ReturnSignal):
            return signal.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.name}>"


class NativeFunction(HclCallable):
    """A host-implemented function exposed to HCL code."""

    def __init__(self, name: str, arity: int, implementation: Callable[..., Any],
                 variadic: bool = False):
        self.name = name
        self._arity = arity
        self.implementation = implementation
        self._variadic = variadic

    def arity(self) -> int:
        return self._arity

    @property
    def is_variadic(self) -> bool:
        return self._variadic

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        return self.implementation(*arguments)

    def __str__(self) -> str:
        return f"<native fn {self.name}>"


class HclInstance:
    """An object: a class back-reference plus a lazily populated field table."""

    def __init__(self, klass: Optional["HclClass"]):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: str, span: Optional[SourceSpan] = None) -> Any:
        """Field first, then a method bound to this instance."""
        if name in self.fields:
            return self.fields[name]

        if self.klass is not None:
            method = self.klass.find_method(name)
            if method is not None:
                return method.bind(self)

        raise error_undefined_property(name, span)

    def set(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def __str__(self) -> str:
        return f"<{self.klass.name} instance>"


class HclClass(HclInstance, HclCallable):
    """
    A class: method table, optional superclass, and a metaclass of which the
    class itself is an instance. Calling a class constructs an instance.
    """

    def __init__(self, metaclass: Optional["HclClass"], name: str,
                 superclass: Optional["HclClass"], methods: Dict[str, HclFunction]):
        super().__init__(metaclass)
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name: str) -> Optional[HclFunction]:
        klass: Optional[HclClass] = self
        while klass is not None:
            method = klass.methods.get(name)
            if method is not None:
                return method
            klass = klass.superclass
        return None

    @property
    def initializer(self) -> Optional[HclFunction]:
        return self.find_method(INITIALIZER_NAME)

    def arity(self) -> int:
        initializer = self.initializer
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        instance = HclInstance(self)
        initializer = self.initializer
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name


class ModuleNamespace(HclInstance):
    """A statically linked module, accessed as Name.member."""

    def __init__(self, name: str, members: Mapping[str, Any]):
        super().__init__(None)
        self.name = name
        self.fields.update(members)

    def __str__(self) -> str:
        return f"<module {self.name}>"
