"""
File system watcher that triggers a re-lint when contract files change.

This module provides:
- Watchdog-based monitoring of the entry directory
- Filtering to document and config files
- Debouncing of editor save bursts
"""

import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

# Opened/closed events fire on every read, including our own re-lint
CONTENT_EVENT_TYPES = {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}


class ContractEventHandler(FileSystemEventHandler):
    """
    Collects changed paths and reports them once the tree is quiet.

    Events arrive on the observer thread; flush_pending() is called from the
    main loop.
    """

    RELEVANT_EXTENSIONS = {".yaml", ".yml", ".json", ".toml"}
    DEBOUNCE_SECONDS = 0.5

    def __init__(self, base_dir: Path):
        super().__init__()
        self.base_dir = base_dir
        self.changed: set[str] = set()
        self.last_change = 0.0
        self._lock = threading.Lock()

    def is_relevant(self, path: str) -> bool:
        """Check if the file can affect lint results."""
        p = Path(path)
        try:
            rel = p.relative_to(self.base_dir)
        except ValueError:
            rel = p

        # Skip hidden files and directories
        if any(part.startswith(".") and part != ".oaslint.toml" for part in rel.parts):
            return False

        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in CONTENT_EVENT_TYPES:
            return

        paths = [event.src_path, getattr(event, "dest_path", "") or ""]
        relevant = [str(p) for p in paths if p and self.is_relevant(str(p))]
        if not relevant:
            return

        with self._lock:
            self.changed.update(relevant)
            self.last_change = time.monotonic()

    def flush_pending(self, now: float | None = None) -> list[str]:
        """Return changed paths once the debounce window has passed."""
        now = time.monotonic() if now is None else now
        with self._lock:
            if not self.changed or now - self.last_change < self.DEBOUNCE_SECONDS:
                return []
            changed = sorted(self.changed)
            self.changed.clear()
        return changed


def watch_tree(base_dir: Path, recursive: bool = True) -> tuple[Observer, ContractEventHandler]:
    """
    Start watching a directory tree.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ContractEventHandler(base_dir)

    observer = Observer()
    observer.schedule(handler, str(base_dir), recursive=recursive)
    observer.start()

    return observer, handler


def run_watch_loop(
    base_dir: Path,
    on_change: Callable[[list[str]], None],
    poll_interval: float = 0.25,
) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function; `on_change` receives the changed paths after
    each quiet period.
    """
    observer, handler = watch_tree(base_dir)

    try:
        while True:
            time.sleep(poll_interval)
            changed = handler.flush_pending()
            if changed:
                on_change(changed)
    finally:
        observer.stop()
        observer.join()
