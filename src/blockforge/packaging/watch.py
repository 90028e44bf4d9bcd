"""
File watcher for rebuild-on-change.

Polls the matched files' modification times and sizes. A change starts a
quiet period; once no further change has been seen for the debounce delay
the callback runs once.
"""
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple

from blockforge.packaging.stream import expand_patterns
from blockforge.utils.message import Log


Snapshot = Dict[str, Tuple[float, int]]


class Watcher:
    """
    Polling watcher.

    Args:
        root: Directory patterns are resolved against
        patterns: Glob patterns to watch
        on_change: Called after changes settle
        debounce_seconds: Quiet period before on_change runs
        poll_interval: Seconds between snapshots in run()
    """

    def __init__(
        self,
        root: Path,
        patterns: Iterable[str],
        on_change: Callable[[], object],
        debounce_seconds: float = 2.0,
        poll_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.root = Path(root)
        self.patterns = list(patterns)
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep
        self._last_snapshot: Snapshot = self.snapshot()
        self._changed_at: Optional[float] = None
        self.trigger_count = 0

    def snapshot(self) -> Snapshot:
        result: Snapshot = {}
        for path, _base in expand_patterns(self.root, self.patterns):
            try:
                stat = path.stat()
            except FileNotFoundError:
                continue  # deleted between glob and stat
            result[str(path)] = (stat.st_mtime, stat.st_size)
        return result

    def poll_once(self) -> bool:
        """
        Take one snapshot and fire on_change if changes have settled.

        Returns:
            True if on_change ran during this poll
        """
        current = self.snapshot()
        now = self._clock()

        if current != self._last_snapshot:
            changed = sorted(set(current.items()) ^ set(self._last_snapshot.items()))
            Log.debug(f"Watcher: {len({path for path, _ in changed})} file(s) changed")
            self._last_snapshot = current
            self._changed_at = now
            return False

        if self._changed_at is not None and now - self._changed_at >= self.debounce_seconds:
            self._changed_at = None
            self._trigger()
            return True

        return False

    def _trigger(self) -> None:
        self.trigger_count += 1
        Log.info("Watcher: Changes settled, rebuilding")
        try:
            self.on_change()
        except Exception as e:
            # A failed rebuild is reported; watching continues
            Log.error(f"Watcher: Rebuild failed: {e}")

    def run(self, max_polls: Optional[int] = None) -> None:
        """Poll until interrupted (or max_polls snapshots have been taken)."""
        Log.info(f"Watcher: Watching {', '.join(self.patterns)} in {self.root}")
        polls = 0
        try:
            while max_polls is None or polls < max_polls:
                self.poll_once()
                polls += 1
                self._sleep(self.poll_interval)
        except KeyboardInterrupt:
            Log.info("Watcher: Stopped")
