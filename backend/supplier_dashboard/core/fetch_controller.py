# backend/supplier_dashboard/core/fetch_controller.py
"""
Fetch-with-fallback controller shared by every page-level data loader.

A controller owns one (data, loading, error) triple. Each refetch() is tagged
with a generation number; a run commits state only while its generation is
still the newest one issued, so the last-issued request wins even when an
older request resolves later. In-flight coroutines are never cancelled, their
results are simply dropped on arrival.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, Set, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[], Awaitable[Optional[T]]]
Fallback = Callable[[], Union[T, Awaitable[T]]]


@dataclass(frozen=True)
class FetchOutcome(Generic[T]):
    data: Optional[T]
    loading: bool
    error: Optional[BaseException]


def has_usable_data(value: Any) -> bool:
    """
    Decide whether a fetcher result can be shown as-is.
    - None -> unusable
    - lists/tuples/sets -> usable when non-empty
    - mappings -> usable when they have at least one key
    - bare numeric zero -> unusable (bools are not treated as numbers)
    - anything else (strings, models, non-zero numbers) -> usable
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, Mapping):
        return len(value) > 0
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) > 0
    return True


def _deps_changed(old: Sequence[Any], new: Sequence[Any]) -> bool:
    if len(old) != len(new):
        return True
    return any(not (a is b or a == b) for a, b in zip(old, new))


class FallbackFetchController(Generic[T]):
    def __init__(
        self,
        fetcher: Fetcher,
        fallback: Fallback,
        deps: Sequence[Any] = (),
        initial_data: Optional[T] = None,
        name: Optional[str] = None,
    ):
        self._fetcher = fetcher
        self._fallback = fallback
        self._deps = tuple(deps)
        self.name = name or getattr(fetcher, "__name__", "fetch")

        self.data: Optional[T] = initial_data
        self.loading: bool = True
        self.error: Optional[BaseException] = None

        self._generation = 0
        self._mounted = False
        self._tasks: Set[asyncio.Task] = set()

    # ---- read side ----
    @property
    def generation(self) -> int:
        return self._generation

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def outcome(self) -> FetchOutcome[T]:
        return FetchOutcome(data=self.data, loading=self.loading, error=self.error)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    # ---- lifecycle ----
    def mount(self) -> "asyncio.Task[None]":
        self._mounted = True
        return self.refetch()

    def close(self) -> None:
        """Unmount: every in-flight run becomes stale."""
        self._mounted = False
        self._generation += 1

    def update(
        self,
        fetcher: Optional[Fetcher] = None,
        fallback: Optional[Fallback] = None,
        deps: Optional[Sequence[Any]] = None,
    ) -> Optional["asyncio.Task[None]"]:
        """Swap producers/deps; re-run only when something actually changed."""
        changed = False
        if fetcher is not None and fetcher is not self._fetcher:
            self._fetcher = fetcher
            changed = True
        if fallback is not None and fallback is not self._fallback:
            self._fallback = fallback
            changed = True
        if deps is not None and _deps_changed(self._deps, tuple(deps)):
            self._deps = tuple(deps)
            changed = True
        if changed and self._mounted:
            return self.refetch()
        return None

    def refetch(self) -> "asyncio.Task[None]":
        """Issue a new generation. Must be called with a running event loop."""
        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None
        task = loop.create_task(self._run(generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def set_data(self, value: Union[Optional[T], Callable[[Optional[T]], Optional[T]]]) -> None:
        """
        Optimistic local write. Takes a value or an updater of the previous
        value. Invalidates any in-flight generation so a late fetch cannot
        overwrite it.
        """
        if callable(value):
            value = value(self.data)
        self._generation += 1
        self.data = value
        self.loading = False

    async def load(self) -> FetchOutcome[T]:
        await self.mount()
        return self.outcome

    async def join(self) -> None:
        """Wait until every run issued so far (stale ones included) has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ---- run routine ----
    async def _run(self, generation: int) -> None:
        try:
            result = await self._fetcher()
        except Exception as exc:
            if not self._is_current(generation):
                logger.debug("%s: dropping stale failure from generation %d", self.name, generation)
                return
            logger.warning("%s: fetch failed (%s); using fallback", self.name, exc)
            self.error = exc
            await self._apply_fallback(generation)
        else:
            if not self._is_current(generation):
                logger.debug("%s: dropping stale result from generation %d", self.name, generation)
                return
            if has_usable_data(result):
                self.data = result
            else:
                logger.info("%s: fetch returned no usable data; using fallback", self.name)
                await self._apply_fallback(generation)
        finally:
            if self._is_current(generation):
                self.loading = False

    async def _apply_fallback(self, generation: int) -> None:
        try:
            value = self._fallback()
            if inspect.isawaitable(value):
                value = await value
        except Exception as exc:
            if not self._is_current(generation):
                return
            logger.error("%s: fallback failed: %s", self.name, exc)
            self.error = exc
            self.data = None
            return
        if not self._is_current(generation):
            logger.debug("%s: dropping stale fallback from generation %d", self.name, generation)
            return
        self.data = value
