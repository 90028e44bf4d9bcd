"""
Task Registry

Declarative store of build tasks (names, descriptions, handlers and how
they depend on each other). The runner and the CLI query the registry to
discover and execute tasks.

A task is one of:
    - a handler, optionally preceded by dependencies that run in parallel
    - a group of dependencies only (parallel join point)
    - a series of other tasks run one after another
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from blockforge.utils.message import Log


TaskHandler = Callable[[Any], Any]


class UnknownTaskError(Exception):
    """Raised when a task name is not registered"""

    def __init__(self, name: str, known: Optional[List[str]] = None):
        self.name = name
        message = f"Task '{name}' is not in your task registry"
        if known:
            message += f" (known tasks: {', '.join(known)})"
        super().__init__(message)


@dataclass
class TaskDefinition:
    """Describe a single task entry."""
    name: str
    handler: Optional[TaskHandler] = None
    description: str = ""
    depends_on: List[str] = field(default_factory=list)
    series: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Task name cannot be empty")
        if self.series and (self.handler or self.depends_on):
            raise ValueError(f"Task '{self.name}': a series task cannot also have a handler or dependencies")
        if not (self.handler or self.depends_on or self.series):
            raise ValueError(f"Task '{self.name}' needs a handler, dependencies or a series")

    @property
    def kind(self) -> str:
        if self.series:
            return "series"
        if self.handler is None:
            return "parallel"
        return "task"


class TaskRegistry:
    """Registry of task definitions and lookup helpers."""

    def __init__(self):
        self._definitions: Dict[str, TaskDefinition] = {}

    def register(self, definition: TaskDefinition) -> TaskDefinition:
        if definition.name in self._definitions:
            Log.warning(f"TaskRegistry: Overwriting existing task: {definition.name}")
        self._definitions[definition.name] = definition
        Log.debug(f"TaskRegistry: Registered {definition.kind} '{definition.name}'")
        return definition

    def task(self, name: str, description: str = "", depends_on: Optional[List[str]] = None):
        """
        Decorator registering a handler as a task.

        Example:
            @registry.task("package-media", "Copy media assets")
            def package_media(context):
                ...
        """
        def decorator(handler: TaskHandler) -> TaskHandler:
            self.register(TaskDefinition(
                name=name,
                handler=handler,
                description=description,
                depends_on=list(depends_on or []),
            ))
            return handler
        return decorator

    def series(self, name: str, tasks: List[str], description: str = "") -> TaskDefinition:
        """Register a task that runs other tasks one after another."""
        return self.register(TaskDefinition(name=name, description=description, series=list(tasks)))

    def get(self, name: str) -> TaskDefinition:
        """
        Lookup a task definition by name.

        Raises:
            UnknownTaskError: If no task has this name
        """
        definition = self._definitions.get(name)
        if definition is None:
            raise UnknownTaskError(name, self.names())
        return definition

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> List[str]:
        return list(self._definitions.keys())

    def list_tasks(self) -> List[TaskDefinition]:
        """Return all definitions sorted by name."""
        return sorted(self._definitions.values(), key=lambda d: d.name)

    def validate(self) -> List[str]:
        """Names referenced by tasks but never registered."""
        missing = []
        for definition in self._definitions.values():
            for child in definition.depends_on + definition.series:
                if child not in self._definitions and child not in missing:
                    missing.append(child)
        return missing
