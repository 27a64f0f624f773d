"""
Per-target watch loop: a watchdog observer feeds file changes into an
asyncio queue, and each change triggers one rebuild cycle.
"""
import asyncio
import logging
import time
from contextlib import suppress
from pathlib import Path
from typing import Awaitable, Callable, FrozenSet, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..bundler.bundler import BundleResult
from ..core.enums import BuildEventType
from ..core.exceptions import FatalWarningError
from ..core.models import BuildEvent, BuildTarget


CHANGE_EVENT_TYPES = {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}


class _ChangeHandler(FileSystemEventHandler):
    """Runs on the observer thread; hands changes to the watcher"""

    def __init__(self, watcher: 'TargetWatcher'):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event):
        if event.is_directory or event.event_type not in CHANGE_EVENT_TYPES:
            return
        self.watcher.notify_change(event.src_path)
        dest_path = getattr(event, 'dest_path', None)
        if dest_path:
            self.watcher.notify_change(dest_path)


class TargetWatcher:
    """Rebuilds one target whenever a file of its dependency set changes"""

    def __init__(self, target: BuildTarget, build: Callable[[], Awaitable[BundleResult]],
                 events: asyncio.Queue, debounce_seconds: float = 0.1,
                 observer_factory: Optional[Callable[[], Observer]] = Observer,
                 logger: Optional[logging.Logger] = None):
        self.target = target
        self.build = build
        self.events = events
        self.debounce_seconds = debounce_seconds
        self.observer_factory = observer_factory
        self.logger = logger or logging.getLogger(__name__)
        self.watch_files: FrozenSet[Path] = frozenset({target.input_path.resolve()})
        self._handler = _ChangeHandler(self)
        self._observer = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._changes: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start observing and schedule the initial build; must run inside the event loop"""
        self._loop = asyncio.get_running_loop()
        self._changes = asyncio.Queue()
        if self.observer_factory is not None:
            self._observer = self.observer_factory()
            self._schedule()
            self._observer.start()
        self._task = asyncio.create_task(self._run())

    def notify_change(self, path: str) -> None:
        """Report a changed path; safe to call from any thread"""
        if Path(path).resolve() not in self.watch_files:
            return
        self.logger.debug(f"[{self.target.name}] change detected: {path}")
        self._loop.call_soon_threadsafe(self._changes.put_nowait, path)

    def _schedule(self) -> None:
        self._observer.unschedule_all()
        for directory in sorted({path.parent for path in self.watch_files}):
            if directory.is_dir():
                self._observer.schedule(self._handler, str(directory), recursive=False)

    async def _run(self) -> None:
        await self.run_cycle()
        while True:
            await self._changes.get()
            await asyncio.sleep(self.debounce_seconds)
            # coalesce a burst of changes into one rebuild
            while not self._changes.empty():
                self._changes.get_nowait()
            await self.run_cycle()

    async def run_cycle(self) -> Optional[BundleResult]:
        """Run one build cycle and emit its lifecycle events"""
        await self.events.put(BuildEvent(type=BuildEventType.STARTED, target=self.target))
        started = time.monotonic()
        try:
            result = await self.build()
        except FatalWarningError:
            raise
        except Exception as e:
            self.logger.debug(f"[{self.target.name}] build failed: {e}")
            await self.events.put(BuildEvent(type=BuildEventType.FAILED, target=self.target, error=e))
            return None

        if result.watch_files and result.watch_files != self.watch_files:
            self.watch_files = frozenset(result.watch_files)
            if self._observer is not None:
                self._schedule()

        await self.events.put(BuildEvent(
            type=BuildEventType.COMPLETED,
            target=self.target,
            duration_ms=(time.monotonic() - started) * 1000,
        ))
        return result

    async def wait(self) -> None:
        """Wait for the watch loop; returns only if it is stopped or raises"""
        if self._task is not None:
            await self._task

    async def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            await self._loop.run_in_executor(None, self._observer.join)
            self._observer = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
