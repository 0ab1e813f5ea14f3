"""Tests for the single-file watch loop."""

from __future__ import annotations

import queue
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from watchdog.events import FileModifiedEvent, FileMovedEvent

from mermaid_inline.errors import RenderError, WatchError
from mermaid_inline.watch import WatchLoop
from mermaid_inline.watch.watcher import _FileEventHandler


# ── Helpers ──────────────────────────────────────────────────────────


class FakeObserver:
    """Observer stand-in that lets tests inject events by hand."""

    def __init__(self, fail_on_start: bool = False) -> None:
        self.handler = None
        self.scheduled: tuple[str, bool] | None = None
        self.alive = False
        self._fail_on_start = fail_on_start

    def schedule(self, handler, path, recursive=False):
        self.handler = handler
        self.scheduled = (path, recursive)

    def start(self):
        if self._fail_on_start:
            raise OSError(28, "inotify watch limit reached")
        self.alive = True

    def stop(self):
        self.alive = False

    def join(self, timeout=None):
        pass

    def is_alive(self):
        return self.alive


def _wait_for(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return False


def _start(loop: WatchLoop) -> tuple[threading.Thread, list[BaseException]]:
    errors: list[BaseException] = []

    def target():
        try:
            loop.run()
        except BaseException as e:  # noqa: BLE001
            errors.append(e)

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, errors


@pytest.fixture
def watched_file(tmp_path: Path) -> Path:
    path = tmp_path / "doc.md"
    path.write_text("```mermaid\nA-->B\n```\n")
    return path


# ── _FileEventHandler ────────────────────────────────────────────────


class TestFileEventHandler:
    def test_forwards_modification_of_target(self, watched_file):
        events: queue.Queue[str] = queue.Queue()
        handler = _FileEventHandler(watched_file.resolve(), events)
        handler.dispatch(FileModifiedEvent(str(watched_file)))
        assert events.get_nowait() == "modified"

    def test_ignores_sibling_files(self, watched_file):
        events: queue.Queue[str] = queue.Queue()
        handler = _FileEventHandler(watched_file.resolve(), events)
        handler.dispatch(FileModifiedEvent(str(watched_file.parent / "other.md")))
        assert events.empty()

    def test_rename_onto_target_counts(self, watched_file):
        events: queue.Queue[str] = queue.Queue()
        handler = _FileEventHandler(watched_file.resolve(), events)
        handler.dispatch(FileMovedEvent(str(watched_file.parent / ".doc.md.swp"), str(watched_file)))
        assert events.get_nowait() == "moved"

    def test_ignores_read_only_events(self, watched_file):
        events: queue.Queue[str] = queue.Queue()
        handler = _FileEventHandler(watched_file.resolve(), events)
        for event_type in ("opened", "closed_no_write"):
            event = MagicMock(is_directory=False, event_type=event_type, src_path=str(watched_file))
            handler.on_any_event(event)
        assert events.empty()


# ── WatchLoop ────────────────────────────────────────────────────────


class TestWatchLoop:
    def test_schedules_parent_non_recursive(self, watched_file):
        observer = FakeObserver()
        loop = WatchLoop(watched_file, lambda: None, observer_factory=lambda: observer, poll_interval=0.05)
        thread, errors = _start(loop)
        try:
            assert _wait_for(lambda: loop.renders == 1)
            assert observer.scheduled == (str(watched_file.resolve().parent), False)
        finally:
            loop.stop()
            thread.join(timeout=2)
        assert errors == []
        assert not observer.alive

    def test_burst_of_events_renders_once(self, watched_file):
        observer = FakeObserver()
        calls: list[float] = []
        loop = WatchLoop(
            watched_file,
            lambda: calls.append(time.monotonic()),
            debounce_seconds=0.2,
            observer_factory=lambda: observer,
            poll_interval=0.05,
        )
        thread, errors = _start(loop)
        try:
            assert _wait_for(lambda: len(calls) == 1)
            for _ in range(5):
                observer.handler.dispatch(FileModifiedEvent(str(watched_file)))
            assert _wait_for(lambda: len(calls) == 2)
            time.sleep(0.4)
            assert len(calls) == 2
        finally:
            loop.stop()
            thread.join(timeout=2)
        assert errors == []

    def test_render_errors_do_not_stop_the_loop(self, watched_file):
        observer = FakeObserver()
        attempts: list[int] = []

        def action():
            attempts.append(1)
            if len(attempts) <= 2:
                raise RenderError(1, "Parse error")

        loop = WatchLoop(
            watched_file, action, debounce_seconds=0.01, observer_factory=lambda: observer, poll_interval=0.05
        )
        thread, errors = _start(loop)
        try:
            assert _wait_for(lambda: len(attempts) == 1)
            observer.handler.dispatch(FileModifiedEvent(str(watched_file)))
            assert _wait_for(lambda: len(attempts) == 2)
            observer.handler.dispatch(FileModifiedEvent(str(watched_file)))
            assert _wait_for(lambda: len(attempts) == 3)
            assert thread.is_alive()
        finally:
            loop.stop()
            thread.join(timeout=2)
        assert errors == []

    def test_unexpected_errors_are_logged(self, watched_file, caplog):
        observer = FakeObserver()

        def action():
            raise KeyError("boom")

        loop = WatchLoop(watched_file, action, observer_factory=lambda: observer, poll_interval=0.05)
        thread, errors = _start(loop)
        try:
            assert _wait_for(lambda: loop.renders == 1)
            assert _wait_for(lambda: "render failed" in caplog.text)
        finally:
            loop.stop()
            thread.join(timeout=2)
        assert errors == []

    def test_observer_start_failure_raises(self, watched_file):
        loop = WatchLoop(watched_file, lambda: None, observer_factory=lambda: FakeObserver(fail_on_start=True))
        with pytest.raises(WatchError, match="inotify"):
            loop.run()
        assert loop.renders == 0

    def test_dead_observer_raises(self, watched_file):
        observer = FakeObserver()
        loop = WatchLoop(watched_file, lambda: None, observer_factory=lambda: observer, poll_interval=0.05)
        thread, errors = _start(loop)
        assert _wait_for(lambda: loop.renders == 1)
        observer.alive = False
        thread.join(timeout=2)
        assert not thread.is_alive()
        assert len(errors) == 1
        assert isinstance(errors[0], WatchError)

    def test_real_observer_detects_write(self, watched_file):
        """End-to-end with watchdog: writing the file triggers a re-render."""
        calls: list[int] = []
        loop = WatchLoop(watched_file, lambda: calls.append(1), debounce_seconds=0.05, poll_interval=0.05)
        thread, errors = _start(loop)
        try:
            assert _wait_for(lambda: len(calls) == 1)
            time.sleep(0.3)
            watched_file.write_text("```mermaid\nA-->C\n```\n")
            assert _wait_for(lambda: len(calls) >= 2), f"no re-render; calls = {calls}"
        finally:
            loop.stop()
            thread.join(timeout=3)
        assert errors == []

    def test_real_observer_ignores_other_files(self, watched_file):
        calls: list[int] = []
        loop = WatchLoop(watched_file, lambda: calls.append(1), debounce_seconds=0.05, poll_interval=0.05)
        thread, errors = _start(loop)
        try:
            assert _wait_for(lambda: len(calls) == 1)
            time.sleep(0.3)
            (watched_file.parent / "unrelated.md").write_text("hello")
            time.sleep(0.5)
            assert len(calls) == 1
        finally:
            loop.stop()
            thread.join(timeout=3)
        assert errors == []
