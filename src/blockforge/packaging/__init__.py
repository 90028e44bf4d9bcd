"""
Build and packaging tasks.

Usage:
    from blockforge.packaging import BuildContext, TaskRunner, create_blockly_task_registry

    registry = create_blockly_task_registry()
    result = TaskRunner(registry, BuildContext(root)).run(["package"])
"""
from blockforge.packaging.blockly_tasks import create_blockly_task_registry, register_blockly_tasks
from blockforge.packaging.context import BuildContext
from blockforge.packaging.task_registry import TaskDefinition, TaskRegistry, UnknownTaskError
from blockforge.packaging.task_runner import CyclicDependencyError, TaskFailedError, TaskRunner

__all__ = [
    'create_blockly_task_registry',
    'register_blockly_tasks',
    'BuildContext',
    'TaskDefinition',
    'TaskRegistry',
    'UnknownTaskError',
    'CyclicDependencyError',
    'TaskFailedError',
    'TaskRunner',
]
