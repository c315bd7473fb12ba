"""
Location tracker: the single consumer of raw position fixes.

The first fix always centers the map. Later fixes center it only while
auto-center is on; otherwise just the user marker moves. Every fix is then
forwarded to the registered consumers (nearest-attraction lookup, marker
layers, ...). Source failures are one-shot notifications and never stop the
tracker.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Callable
from dataclasses import dataclass
from typing import Protocol

from ..attractions.directory import DirectoryStore
from ..attractions.models import ActiveCategorySet, Attraction
from ..attractions.search import nearest_to
from ..errors import LocationUnavailable, NoLocation
from .models import LocationFailure, Position

logger = logging.getLogger(__name__)

PositionConsumer = Callable[[Position], None]
ErrorListener = Callable[[LocationUnavailable], None]


class MapRenderer(Protocol):
    def center_view(self, position: Position) -> None: ...

    def update_marker(self, position: Position) -> None: ...


@dataclass(frozen=True)
class TrackerState:
    last_known_position: Position | None
    has_centered_once: bool
    auto_center_enabled: bool


class LocationTracker:
    def __init__(self, renderer: MapRenderer | None = None, auto_center: bool = False) -> None:
        self._renderer = renderer
        self._last_known: Position | None = None
        self._has_centered_once = False
        self._auto_center = auto_center
        self._consumers: list[PositionConsumer] = []
        self._error_listeners: list[ErrorListener] = []

    @property
    def state(self) -> TrackerState:
        return TrackerState(
            last_known_position=self._last_known,
            has_centered_once=self._has_centered_once,
            auto_center_enabled=self._auto_center,
        )

    @property
    def last_known_position(self) -> Position | None:
        return self._last_known

    def add_consumer(self, consumer: PositionConsumer) -> None:
        self._consumers.append(consumer)

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def _center(self, position: Position) -> None:
        if self._renderer is not None:
            self._renderer.center_view(position)
        self._has_centered_once = True

    def handle_fix(self, position: Position) -> bool:
        """Process one fix. Returns whether a center-view command was issued."""
        self._last_known = position

        centered = False
        if not self._has_centered_once or self._auto_center:
            self._center(position)
            centered = True
        if self._renderer is not None:
            self._renderer.update_marker(position)

        for consumer in self._consumers:
            try:
                consumer(position)
            except Exception:
                logger.exception("Position consumer %r failed", consumer)
        return centered

    def handle_error(self, failure: LocationFailure | str) -> LocationUnavailable:
        """Report a source failure. The last known position is kept."""
        if isinstance(failure, str):
            failure = LocationFailure(reason=failure)
        error = LocationUnavailable(f"{failure.code}: {failure.reason}")
        logger.warning("Location source failure: %s", error.message)
        for listener in self._error_listeners:
            listener(error)
        return error

    def toggle_auto_center(self) -> bool:
        self._auto_center = not self._auto_center
        return self._auto_center

    def center_on_demand(self) -> Position:
        if self._last_known is None:
            raise NoLocation("No location received yet")
        self._center(self._last_known)
        return self._last_known

    def watch(self, source: AsyncIterable[Position | LocationFailure]) -> Subscription:
        """Start consuming ``source`` in a task on the running event loop."""
        return Subscription(self, source)


class Subscription:
    """Cancellable watch over a position stream.

    Items are processed one at a time in arrival order. After ``cancel`` no
    further item reaches the tracker.
    """

    def __init__(self, tracker: LocationTracker, source: AsyncIterable[Position | LocationFailure]) -> None:
        self._tracker = tracker
        self._source = source
        self._cancelled = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._task.done()

    async def _run(self) -> None:
        try:
            async for item in self._source:
                if self._cancelled:
                    break
                try:
                    if isinstance(item, LocationFailure):
                        self._tracker.handle_error(item)
                    else:
                        self._tracker.handle_fix(item)
                except Exception:
                    logger.exception("Position consumer failed, continuing to watch")
        except Exception as exc:
            self._tracker.handle_error(LocationFailure(reason=str(exc) or type(exc).__name__, code="source_error"))

    def cancel(self) -> None:
        """Clear the watch. A ``QueueSource`` is closed along with it."""
        if not self._cancelled:
            self._cancelled = True
            self._task.cancel()
            if isinstance(self._source, QueueSource):
                self._source.close()

    async def wait(self) -> None:
        """Wait until the source is exhausted or the watch is cancelled."""
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._cancelled:
                raise


class QueueSource:
    """Push-based position source backed by an ``asyncio.Queue``.

    Platform adapters call ``push``/``fail`` from their callbacks; ``close``
    ends the stream. Anything pushed after ``close`` is dropped.
    """

    _CLOSED = object()

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, position: Position) -> None:
        if not self._closed:
            self._queue.put_nowait(position)

    def fail(self, reason: str, code: str = "unavailable") -> None:
        if not self._closed:
            self._queue.put_nowait(LocationFailure(reason=reason, code=code))

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(self._CLOSED)

    def __aiter__(self) -> QueueSource:
        return self

    async def __anext__(self) -> Position | LocationFailure:
        item = await self._queue.get()
        if item is self._CLOSED:
            raise StopAsyncIteration
        return item


class NearestFinder:
    """Consumer that keeps the attraction nearest to the latest fix."""

    def __init__(
        self,
        directory: DirectoryStore,
        active: ActiveCategorySet,
        on_change: Callable[[Attraction | None], None] | None = None,
    ) -> None:
        self._directory = directory
        self.active = active
        self._on_change = on_change
        self.nearest: Attraction | None = None

    def __call__(self, position: Position) -> None:
        nearest = nearest_to(position, self.active, self._directory)
        if nearest != self.nearest:
            self.nearest = nearest
            if self._on_change is not None:
                self._on_change(nearest)
