"""
Task Runner

Executes registered tasks in dependency order.

For a requested task the runner collects its transitive dependencies and
orders them with Kahn's algorithm into waves: every task in a wave only
depends on tasks of earlier waves, so a wave runs in parallel on a thread
pool. Series tasks run their children one after another, each with its own
dependencies. A task runs at most once per run() call: the first caller
claims it and any other caller waits for that outcome.

Any failure aborts the chain: tasks already running in the failing wave are
allowed to finish, nothing else starts.
"""
import threading
import time
from collections import deque
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Set

from blockforge.packaging.task_registry import TaskRegistry
from blockforge.shared.result_types import CommandResult
from blockforge.utils.message import Log


class CyclicDependencyError(Exception):
    """Exception raised when tasks have circular dependencies"""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")


class TaskFailedError(Exception):
    """Raised when a task's handler fails"""

    def __init__(self, task_name: str, cause: BaseException):
        self.task_name = task_name
        self.cause = cause
        super().__init__(f"Task '{task_name}' failed: {cause}")


def resolve_waves(registry: TaskRegistry, name: str) -> List[List[str]]:
    """
    Order a task and its transitive dependencies into parallel waves.

    Args:
        registry: Task registry
        name: Task to run last

    Returns:
        List of waves; the requested task is alone in the last wave

    Raises:
        UnknownTaskError: If a referenced task is not registered
        CyclicDependencyError: If dependencies or series children form a cycle
    """
    cycle = _find_cycle(registry, name)
    if cycle:
        raise CyclicDependencyError(cycle)

    # Collect the dependency closure
    nodes: List[str] = []
    stack = [name]
    while stack:
        current = stack.pop()
        if current in nodes:
            continue
        nodes.append(current)
        stack.extend(registry.get(current).depends_on)

    # incoming_count[task] = number of dependencies that must finish first
    incoming_count: Dict[str, int] = {node: 0 for node in nodes}
    # dependents[task] = tasks waiting on it
    dependents: Dict[str, List[str]] = {node: [] for node in nodes}
    for node in nodes:
        for dependency in registry.get(node).depends_on:
            incoming_count[node] += 1
            dependents[dependency].append(node)

    order = {task: index for index, task in enumerate(registry.names())}
    waves: List[List[str]] = []
    ready = deque(sorted((n for n, count in incoming_count.items() if count == 0), key=order.get))

    while ready:
        wave = list(ready)
        ready.clear()
        waves.append(wave)
        released = []
        for task in wave:
            for dependent in dependents[task]:
                incoming_count[dependent] -= 1
                if incoming_count[dependent] == 0:
                    released.append(dependent)
        ready.extend(sorted(released, key=order.get))

    return waves


def _find_cycle(registry: TaskRegistry, start: str) -> Optional[List[str]]:
    """DFS along dependency and series edges; returns one cycle or None."""
    path: List[str] = []
    visited: Set[str] = set()

    def dfs(task: str) -> Optional[List[str]]:
        if task in path:
            return path[path.index(task):] + [task]
        if task in visited:
            return None
        visited.add(task)
        path.append(task)
        definition = registry.get(task)
        for child in definition.depends_on + definition.series:
            cycle = dfs(child)
            if cycle:
                return cycle
        path.pop()
        return None

    return dfs(start)


class TaskRunner:
    """
    Runs tasks from a TaskRegistry against a shared context object.

    The context is handed to every handler unchanged (for build tasks it is
    a BuildContext).
    """

    def __init__(self, registry: TaskRegistry, context: Any = None, max_workers: int = 8):
        self.registry = registry
        self.context = context
        self.max_workers = max(1, max_workers)
        self._lock = threading.Lock()
        self._claims: Dict[str, Future] = {}
        self._executed: List[str] = []

    def run(self, names: List[str]) -> CommandResult[List[str]]:
        """
        Run tasks in the given order.

        Returns:
            CommandResult whose data lists the tasks executed, in completion order
        """
        self._claims = {}
        self._executed = []
        start = time.perf_counter()

        try:
            for name in names:
                self._run_task(name)
        except TaskFailedError as e:
            Log.error(f"TaskRunner: {e}")
            return CommandResult.error_result(
                message=str(e),
                errors=[
                    f"Failed task: '{e.task_name}'",
                    f"Error: {e.cause}",
                    f"Completed before failure: {', '.join(self._executed) or '(none)'}",
                ],
            )
        except Exception as e:
            # Unknown task names and dependency cycles are caught before anything runs
            Log.error(f"TaskRunner: {e}")
            return CommandResult.error_result(message=str(e), errors=[str(e)])

        elapsed = time.perf_counter() - start
        Log.info(f"TaskRunner: Finished {', '.join(names)} after {elapsed:.2f}s")
        return CommandResult.success_result(
            message=f"Finished {len(self._executed)} task(s)",
            data=list(self._executed),
        )

    def _run_task(self, name: str) -> None:
        for wave in resolve_waves(self.registry, name):
            pending = [task for task in wave if not self._finished(task)]
            if not pending:
                continue
            if len(pending) == 1:
                self._execute(pending[0])
            else:
                self._execute_parallel(pending)

    def _finished(self, name: str) -> bool:
        with self._lock:
            claim = self._claims.get(name)
        return claim is not None and claim.done() and claim.exception() is None

    def _execute_parallel(self, tasks: List[str]) -> None:
        Log.debug(f"TaskRunner: Running in parallel: {', '.join(tasks)}")
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(tasks))) as executor:
            futures = [executor.submit(self._execute, task) for task in tasks]
            _done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            for future in not_done:
                future.cancel()
        # Raise the first failure in submission order
        for future in futures:
            if not future.cancelled() and future.exception() is not None:
                raise future.exception()

    def _execute(self, name: str) -> None:
        with self._lock:
            claim = self._claims.get(name)
            owner = claim is None
            if owner:
                claim = self._claims[name] = Future()
        if not owner:
            # Another caller is running or ran it; share its outcome
            claim.result()
            return

        definition = self.registry.get(name)
        Log.info(f"TaskRunner: Starting '{name}'...")
        start = time.perf_counter()

        try:
            for child in definition.series:
                self._run_task(child)
            if definition.handler is not None:
                definition.handler(self.context)
        except TaskFailedError as e:
            claim.set_exception(e)
            raise
        except Exception as e:
            failure = TaskFailedError(name, e)
            claim.set_exception(failure)
            raise failure from e

        with self._lock:
            self._executed.append(name)
        claim.set_result(None)
        Log.info(f"TaskRunner: Finished '{name}' after {time.perf_counter() - start:.2f}s")
