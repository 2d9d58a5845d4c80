"""
Module registry and import ledger.

The host registers three kinds of importable modules:

- native:  name -> factory(interpreter) returning a name -> value table that
           is merged straight into the global environment;
- linked:  name -> factory(interpreter) returning a ModuleNamespace that is
           bound in globals under the module's own name;
- std:     names of standard-library source modules, loaded from
           <home>/std/<name>.hcl.

Prelude factories are imported into every new interpreter's globals.

`import std "X"` tries native, then linked, then std source, in that order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Set

from .callables import ModuleNamespace

if TYPE_CHECKING:
    from .interpreter import Interpreter


NativeFactory = Callable[["Interpreter"], Mapping[str, Any]]
LinkedFactory = Callable[["Interpreter"], ModuleNamespace]


class ModuleKind(Enum):
    """Where an imported module came from."""
    SOURCE = "source"       # bare import of a file next to the program
    NATIVE = "native"
    LINKED = "linked"
    STD_SOURCE = "std"


class ModuleRegistry:
    """
    Registry of importable modules.

    Registration happens at startup; freeze() makes the registry read-only,
    which Interpreter does on construction.
    """

    def __init__(self):
        self._native: Dict[str, NativeFactory] = {}
        self._linked: Dict[str, LinkedFactory] = {}
        self._std: Set[str] = set()
        self._prelude: List[NativeFactory] = []
        self._frozen = False

    def freeze(self) -> None:
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ValueError("module registry is frozen; register modules before creating interpreters")

    def register_native(self, name: str, factory: NativeFactory) -> None:
        """Register a module whose members are merged into globals."""
        self._check_mutable()
        self._native[name] = factory

    def register_linked(self, name: str, factory: LinkedFactory) -> None:
        """Register a module bound in globals as a namespace object."""
        self._check_mutable()
        self._linked[name] = factory

    def register_std(self, name: str) -> None:
        """Register a standard-library source module name."""
        self._check_mutable()
        self._std.add(name)

    def register_prelude(self, factory: NativeFactory) -> None:
        """Register a table imported into globals of every interpreter."""
        self._check_mutable()
        self._prelude.append(factory)

    def get_native(self, name: str) -> Optional[NativeFactory]:
        return self._native.get(name)

    def get_linked(self, name: str) -> Optional[LinkedFactory]:
        return self._linked.get(name)

    @property
    def prelude(self) -> List[NativeFactory]:
        return list(self._prelude)

    def kind_of_std(self, name: str) -> Optional[ModuleKind]:
        """The kind `import std name` would dispatch to, in precedence order."""
        if name in self._native:
            return ModuleKind.NATIVE
        if name in self._linked:
            return ModuleKind.LINKED
        if name in self._std:
            return ModuleKind.STD_SOURCE
        return None


@dataclass
class ImportLedger:
    """Modules already imported by one interpreter, bare and std tracked apart."""
    bare: Dict[str, ModuleKind] = field(default_factory=dict)
    std: Dict[str, ModuleKind] = field(default_factory=dict)

    def loaded_kind(self, name: str) -> Optional[ModuleKind]:
        if name in self.bare:
            return self.bare[name]
        return self.std.get(name)

    def record(self, name: str, kind: ModuleKind) -> None:
        if kind is ModuleKind.SOURCE:
            self.bare[name] = kind
        else:
            self.std[name] = kind


# Global singleton registry
_registry: Optional[ModuleRegistry] = None


def get_module_registry() -> ModuleRegistry:
    """Get the process-wide module registry."""
    global _registry
    if _registry is None:
        _registry = ModuleRegistry()
    return _registry
