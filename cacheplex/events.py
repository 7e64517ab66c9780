"""Synchronous event emitter used to surface cache errors."""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventEmitter:
    """Minimal event emitter.

    Listeners are called in registration order. A failing listener is logged
    and does not stop delivery to the others.
    """

    def __init__(self):
        self._listeners: dict[str, list[tuple[Listener, bool]]] = {}

    def on(self, event: str, listener: Listener) -> Listener:
        """Register a listener for an event."""
        self._listeners.setdefault(event, []).append((listener, False))
        return listener

    add_listener = on

    def once(self, event: str, listener: Listener) -> Listener:
        """Register a listener that is removed after its first call."""
        self._listeners.setdefault(event, []).append((listener, True))
        return listener

    def remove_listener(self, event: str, listener: Listener) -> None:
        """Remove the first registration of a listener for an event."""
        entries = self._listeners.get(event, [])
        for idx, (fn, _) in enumerate(entries):
            if fn == listener:
                del entries[idx]
                break
        if not entries:
            self._listeners.pop(event, None)

    off = remove_listener

    def remove_all_listeners(self, event: str | None = None) -> None:
        """Remove every listener, or every listener of one event."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def listeners(self, event: str) -> list[Listener]:
        """Return the listeners registered for an event."""
        return [fn for fn, _ in self._listeners.get(event, [])]

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of an event. Returns True if any were registered."""
        entries = self._listeners.get(event)
        if not entries:
            return False

        for entry in list(entries):
            listener, once = entry
            if once:
                try:
                    entries.remove(entry)
                except ValueError:
                    pass
            try:
                listener(*args)
            except Exception as e:
                logger.exception(f"Listener for '{event}' failed: {e}")

        if not entries:
            self._listeners.pop(event, None)
        return True


# Process-wide emitter shared by the registry and its backends
emitter = EventEmitter()
