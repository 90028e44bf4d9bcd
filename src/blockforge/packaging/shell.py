"""
External command execution for build tasks.

Commands inherit the console so the tools' own output reaches the user.
"""
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from blockforge.utils.message import Log


class BuildCommandError(Exception):
    """Raised when an external build command fails"""

    def __init__(self, args: Sequence[str], returncode: int, message: Optional[str] = None):
        self.command = list(args)
        self.returncode = returncode
        super().__init__(message or f"Command failed with exit code {returncode}: {' '.join(self.command)}")


def run_command(args: Union[str, List[str]], cwd: Union[str, Path, None] = None) -> None:
    """
    Run an external command and wait for it.

    Args:
        args: Command and arguments; a string is split on whitespace
        cwd: Working directory

    Raises:
        BuildCommandError: If the command exits non-zero or cannot be started
    """
    if isinstance(args, str):
        args = args.split()
    args = [str(arg) for arg in args]

    Log.command(f"{' '.join(args)} (cwd={cwd or '.'})")
    try:
        completed = subprocess.run(args, cwd=cwd, check=False)
    except FileNotFoundError as e:
        raise BuildCommandError(args, 127, f"Command not found: {args[0]}") from e

    if completed.returncode != 0:
        raise BuildCommandError(args, completed.returncode)
