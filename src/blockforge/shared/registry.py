"""
Module Registry Pattern

Generic, explicitly owned registry for keyed components. Used for the
per-language generator tables and anything else keyed by block type.

Usage:
    generators = ModuleRegistry("javascript")

    # Register via decorator
    @generators.register("math_remainder")
    def math_remainder(block, generator):
        ...

    # Or register directly
    generators.register_component("math_number", math_number)

    # Look up
    fn = generators.get("math_remainder")

Registries are plain objects handed to whoever needs them; there is no
module-level table.
"""
from typing import Dict, Optional, List, Any, TypeVar, Generic, Callable
import threading

from blockforge.utils.message import Log


T = TypeVar('T')  # Component type


def _component_name(component: Any) -> str:
    return getattr(component, "__name__", type(component).__name__)


class ModuleRegistry(Generic[T]):
    """
    Generic registry for component registration.

    Thread-safe and supports decorator-based registration.

    Attributes:
        name: Registry name for logging and identification
    """

    def __init__(self, name: str):
        self._name = name
        self._components: Dict[str, T] = {}
        self._lock = threading.Lock()
        Log.debug(f"ModuleRegistry: Created '{name}' registry")

    @property
    def name(self) -> str:
        """Get registry name."""
        return self._name

    def register(self, key: str) -> Callable[[T], T]:
        """
        Decorator to register a component.

        Example:
            @registry.register("math_number")
            def math_number(block, generator):
                ...
        """
        def decorator(component: T) -> T:
            self.register_component(key, component)
            return component
        return decorator

    def register_component(self, key: str, component: T) -> None:
        """
        Register a component directly.

        Raises:
            ValueError: If key is already registered with a different component
        """
        with self._lock:
            if key in self._components:
                existing = self._components[key]
                # Same object again happens on module reloads
                if existing is not component:
                    raise ValueError(
                        f"ModuleRegistry '{self._name}': Key '{key}' already registered "
                        f"with {_component_name(existing)}. "
                        f"Cannot register {_component_name(component)}."
                    )
                return

            self._components[key] = component
            Log.debug(f"ModuleRegistry '{self._name}': Registered '{key}' -> {_component_name(component)}")

    def get(self, key: str) -> Optional[T]:
        """Get a component by key, or None if not found."""
        with self._lock:
            return self._components.get(key)

    def list_keys(self) -> List[str]:
        with self._lock:
            return list(self._components.keys())

    def is_registered(self, key: str) -> bool:
        with self._lock:
            return key in self._components

