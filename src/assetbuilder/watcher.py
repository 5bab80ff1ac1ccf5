from __future__ import annotations

import logging
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Callable
from typing import Iterable

from watchdog.events import EVENT_TYPE_CREATED
from watchdog.events import EVENT_TYPE_DELETED
from watchdog.events import EVENT_TYPE_MODIFIED
from watchdog.events import EVENT_TYPE_MOVED
from watchdog.events import FileSystemEvent
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer


logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.1
REBUILD_EVENT_TYPES = frozenset(
    {
        EVENT_TYPE_CREATED,
        EVENT_TYPE_DELETED,
        EVENT_TYPE_MODIFIED,
        EVENT_TYPE_MOVED,
    }
)


class WatchState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    WRITING = "writing"


class RebuildDebouncer:
    """Coalesce bursts of change notifications into single rebuilds.

    Starts in WRITING because the first build runs before any watching
    begins. ``notify`` moves to PENDING and (re)arms a timer; when the timer
    fires the rebuild runs under a lock so at most one is ever in flight.
    Notifications that arrive during a rebuild arm a fresh timer and produce
    exactly one follow-up rebuild.

    A rebuild that fails on a timer thread is kept in ``error`` so the
    watching thread can re-raise it.
    """

    def __init__(self, rebuild: Callable[[], None], delay: float = DEBOUNCE_SECONDS) -> None:
        self._rebuild = rebuild
        self.delay = delay
        self._lock = threading.Lock()
        self._build_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        # timers that fired and are waiting on _build_lock
        self._queued = 0
        self.state = WatchState.WRITING
        self.rebuild_count = 0
        self.error: Exception | None = None

    def _set_state(self, state: WatchState) -> None:
        self.state = state
        logger.debug("watch state -> %s", state.value)

    def _has_pending(self) -> bool:
        return self._timer is not None or self._queued > 0

    def run_now(self) -> None:
        self._run(queued=False)

    def _run(self, queued: bool) -> None:
        with self._build_lock:
            with self._lock:
                if queued:
                    self._queued -= 1
                self._set_state(WatchState.WRITING)
            try:
                self._rebuild()
            finally:
                with self._lock:
                    self.rebuild_count += 1
                    self._set_state(WatchState.PENDING if self._has_pending() else WatchState.IDLE)

    def notify(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._set_state(WatchState.PENDING)
            self._timer = threading.Timer(self.delay, self._on_timer)
            self._timer.daemon = True
            self._timer.start()

    def _on_timer(self) -> None:
        with self._lock:
            # cancel() can lose the race against a timer that already fired
            if self._timer is not threading.current_thread():
                return
            self._timer = None
            self._queued += 1
        try:
            self._run(queued=True)
        except Exception as exc:
            logger.error("rebuild failed: %s", exc)
            with self._lock:
                if self.error is None:
                    self.error = exc

    def raise_if_failed(self) -> None:
        with self._lock:
            error = self.error
        if error is not None:
            raise error

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self.state is WatchState.PENDING and not self._has_pending():
                self._set_state(WatchState.IDLE)


def is_hidden_path(path: Path, root: Path) -> bool:
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part.startswith(".") and part not in (".", "..") for part in parts)


class AssetChangeHandler(FileSystemEventHandler):
    def __init__(self, root: Path, debouncer: RebuildDebouncer, ignored_paths: Iterable[Path] = ()) -> None:
        super().__init__()
        self.root = root.resolve()
        self.debouncer = debouncer
        self.ignored_paths = {path.resolve() for path in ignored_paths}

    def is_relevant_path(self, raw_path: str | bytes) -> bool:
        if not raw_path:
            return False
        path = Path(os.fsdecode(raw_path)).resolve()
        if path in self.ignored_paths:
            return False
        return not is_hidden_path(path, self.root)

    def is_relevant(self, event: FileSystemEvent) -> bool:
        if event.event_type not in REBUILD_EVENT_TYPES:
            return False
        # Writing a file also reports its parent directory as modified.
        if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
            return False
        candidates = [event.src_path, getattr(event, "dest_path", "")]
        return any(self.is_relevant_path(candidate) for candidate in candidates)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if not self.is_relevant(event):
            return
        logger.debug("change detected: %s %s", event.event_type, os.fsdecode(event.src_path))
        self.debouncer.notify()


def watch_assets(
    assets_dir: Path,
    rebuild: Callable[[], None],
    ignored_paths: Iterable[Path] = (),
    delay: float = DEBOUNCE_SECONDS,
    poll_interval: float = 1.0,
    stop: threading.Event | None = None,
) -> None:
    """Build once, then rebuild on every change under ``assets_dir``.

    Runs until interrupted or until ``stop`` is set. A failed rebuild stops
    the observer and is re-raised here.
    """
    if stop is None:
        stop = threading.Event()

    debouncer = RebuildDebouncer(rebuild, delay=delay)
    debouncer.run_now()

    observer = Observer()
    handler = AssetChangeHandler(assets_dir, debouncer, ignored_paths)
    observer.schedule(handler, str(assets_dir), recursive=True)
    observer.start()
    logger.info("Watching %s for changes", assets_dir)
    try:
        while observer.is_alive() and not stop.wait(poll_interval):
            debouncer.raise_if_failed()
    finally:
        observer.stop()
        observer.join()
        debouncer.cancel()
    debouncer.raise_if_failed()
