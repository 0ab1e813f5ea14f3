"""Single-file watcher that re-runs an action after a fixed debounce delay."""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from mermaid_inline.errors import MermaidInlineError, WatchError

logger = logging.getLogger(__name__)

# Events that mean the file's content may have changed. Opens and read-only
# closes are excluded, otherwise reading the file to render it would retrigger.
_CHANGE_EVENTS = {"modified", "created", "moved", "closed"}


class _FileEventHandler(FileSystemEventHandler):
    """Forwards change events for one file into a queue."""

    def __init__(self, target: Path, events: queue.Queue[str]) -> None:
        super().__init__()
        self._target = target
        self._events = events

    def _matches(self, raw: str | bytes) -> bool:
        if not raw:
            return False
        return Path(os.path.realpath(os.fsdecode(raw))) == self._target

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        dest = getattr(event, "dest_path", "")
        if self._matches(event.src_path) or self._matches(dest):
            self._events.put(event.event_type)


class WatchLoop:
    """Watches one file and calls ``action`` when it changes.

    ``action`` runs once unconditionally on entry, then once per burst of
    change events: after the first event of a burst the loop sleeps a fixed
    ``debounce_seconds``, discards whatever arrived meanwhile, and runs the
    action. Errors raised by ``action`` are logged and the loop keeps going;
    only a failure of the watcher itself raises WatchError.
    """

    def __init__(
        self,
        path: Path | str,
        action: Callable[[], object],
        debounce_seconds: float = 0.15,
        observer_factory: Callable[[], Observer] = Observer,
        poll_interval: float = 0.5,
    ) -> None:
        self.path = Path(os.path.realpath(path))
        self.debounce_seconds = debounce_seconds
        self._action = action
        self._observer_factory = observer_factory
        self._poll_interval = poll_interval
        self._events: queue.Queue[str] = queue.Queue()
        self._stop = threading.Event()
        self.renders = 0

    def stop(self) -> None:
        """Ask a running loop to return."""
        self._stop.set()

    def run(self) -> None:
        """Block, re-running the action on every change until stopped."""
        observer = self._observer_factory()
        handler = _FileEventHandler(self.path, self._events)
        try:
            observer.schedule(handler, str(self.path.parent), recursive=False)
            observer.start()
        except OSError as e:
            raise WatchError(f"watch {self.path}", e) from e
        logger.info("Watching %s for changes", self.path)

        try:
            self._run_action()
            while not self._stop.is_set():
                try:
                    self._events.get(timeout=self._poll_interval)
                except queue.Empty:
                    if not observer.is_alive():
                        raise WatchError(f"watch {self.path}", "file watcher stopped unexpectedly")
                    continue

                time.sleep(self.debounce_seconds)
                self._drain()
                if self._stop.is_set():
                    break
                self._run_action()
        finally:
            observer.stop()
            if observer.is_alive():
                observer.join(timeout=5)
            logger.info("Stopped watching %s", self.path)

    def _drain(self) -> None:
        while True:
            try:
                self._events.get_nowait()
            except queue.Empty:
                return

    def _run_action(self) -> None:
        self.renders += 1
        try:
            self._action()
        except MermaidInlineError as e:
            logger.warning("render failed for %s: %s", self.path, e)
        except Exception:
            logger.exception("render failed for %s", self.path)
