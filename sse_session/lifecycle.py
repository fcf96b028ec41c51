"""Single-shot lifecycle signals (``connected`` / ``disconnected``)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class LifecycleSignal:
    """A named notification that fires at most once.

    Listeners are plain callables invoked synchronously, in subscription
    order, when the signal fires. Coroutines can ``await signal.wait()``
    instead. Subscribing after the signal fired does not replay it.
    """

    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Listener] = []
        self._fired = asyncio.Event()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_set(self) -> bool:
        return self._fired.is_set()

    async def wait(self) -> None:
        await self._fired.wait()

    def fire(self) -> bool:
        """Notify listeners. Returns False if the signal already fired."""
        if self._fired.is_set():
            return False
        self._fired.set()
        logger.debug("Lifecycle signal %s fired (%d listeners)", self.name, len(self._listeners))
        for listener in list(self._listeners):
            listener()
        return True

    def __repr__(self) -> str:
        return f"LifecycleSignal({self.name!r}, fired={self.is_set()})"
