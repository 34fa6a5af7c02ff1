from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from watchfiles import Change, DefaultFilter, awatch

from biome_rules.core.languages import is_source_file

logger = logging.getLogger(__name__)

OnChange = Callable[[set[Path]], Coroutine[Any, Any, None]]


class TypeScriptFilter(DefaultFilter):
    """Pass TypeScript sources, skipping dependencies and build output."""

    ignore_dirs = (*DefaultFilter.ignore_dirs, ".next", "dist", "build")

    def __call__(self, change: Change, path: str) -> bool:
        return is_source_file(Path(path)) and super().__call__(change, path)


class WatchfilesWatcher:
    """Re-run a callback for each batch of TypeScript changes under a directory.

    Implements ``FileWatcherPort``. Batches are handed to the callback one at
    a time; changes arriving meanwhile are delivered in the next batch.
    """

    def __init__(self, directory: str | Path, on_change: OnChange, debounce_ms: int = 300) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._debounce_ms = debounce_ms
        self._filter = TypeScriptFilter()
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._watch())
            logger.info("Watching %s", self._directory)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Stopped watching %s", self._directory)

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _watch(self) -> None:
        batches = awatch(self._directory, watch_filter=self._filter, debounce=self._debounce_ms)
        async for changes in batches:
            paths = {Path(path) for _, path in changes}
            logger.debug("%d TypeScript file(s) changed", len(paths))
            try:
                await self._on_change(paths)
            except Exception:
                logger.exception("Re-check after file change failed")
