from __future__ import annotations

import logging
import threading
import weakref
from typing import Any, Callable

from tips.core.events import Action


Handler = Callable[[], None]

LOG = logging.getLogger("tips.binder")


class CallbackBinder:
    """Keyed side storage for zero-argument handlers.

    Emitters only know how to call a fixed `action(sender)` per event. The
    binder keeps the real handler off to the side, keyed by emitter identity,
    and registers one trampoline per event name that forwards to `dispatch`.
    A finalizer drops an emitter's handlers when the emitter is collected.
    Emitters must support `add_target(event, action)` and
    `remove_target(event, action)`.
    """

    def __init__(self) -> None:
        self._handlers: dict[int, dict[str, Handler]] = {}
        self._finalizers: dict[int, weakref.finalize] = {}
        self._trampolines: dict[str, Action] = {}
        self._lock = threading.RLock()

    def _trampoline(self, event_name: str) -> Action:
        # Reuse one object per event so the emitter's dedup makes rebinding idempotent.
        trampoline = self._trampolines.get(event_name)
        if trampoline is None:

            def forward(sender: Any) -> None:
                self.dispatch(sender, event_name)

            trampoline = self._trampolines[event_name] = forward
        return trampoline

    def _forget(self, key: int) -> None:
        with self._lock:
            self._handlers.pop(key, None)
            finalizer = self._finalizers.pop(key, None)
        if finalizer is not None:
            finalizer.detach()

    def bind(self, emitter: Any, event_name: str, handler: Handler | None) -> None:
        """Make `handler` the only handler for (emitter, event_name)."""
        if handler is None:
            self.unbind(emitter, event_name)
            return
        key = id(emitter)
        with self._lock:
            new_finalizer = None
            if key not in self._finalizers:
                # Raises TypeError for emitters without weakref support.
                new_finalizer = weakref.finalize(emitter, self._forget, key)
                new_finalizer.atexit = False
            try:
                emitter.add_target(event_name, self._trampoline(event_name))
            except Exception:
                if new_finalizer is not None:
                    new_finalizer.detach()
                raise
            if new_finalizer is not None:
                self._finalizers[key] = new_finalizer
            slots = self._handlers.setdefault(key, {})
            replaced = event_name in slots
            slots[event_name] = handler
        LOG.debug("bound %s on %s (replaced=%s)", event_name, type(emitter).__name__, replaced)

    def unbind(self, emitter: Any, event_name: str) -> None:
        key = id(emitter)
        with self._lock:
            slots = self._handlers.get(key)
            if slots is None:
                return
            slots.pop(event_name, None)
            trampoline = self._trampolines.get(event_name)
            if trampoline is not None:
                emitter.remove_target(event_name, trampoline)
            if not slots:
                self._forget(key)
        LOG.debug("unbound %s on %s", event_name, type(emitter).__name__)

    def handler_for(self, emitter: Any, event_name: str) -> Handler | None:
        with self._lock:
            slots = self._handlers.get(id(emitter))
            if slots is None:
                return None
            return slots.get(event_name)

    def dispatch(self, emitter: Any, event_name: str) -> None:
        """Invoke the bound handler, if any. Unbound pairs are a no-op."""
        handler = self.handler_for(emitter, event_name)
        if handler is None:
            return
        # Called outside the lock so a handler may rebind its own emitter.
        handler()

    def bound_count(self) -> int:
        """Number of live emitters with at least one handler."""
        with self._lock:
            return len(self._handlers)


default_binder = CallbackBinder()
