from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict


Action = Callable[[Any], None]


class EventSource:
    """Target/action registration for objects that emit named events.

    Actions have a fixed signature: they receive the sender and nothing else.
    Registering the same action twice for one event is a no-op.
    """

    def __init__(self) -> None:
        self._actions: DefaultDict[str, list[Action]] = defaultdict(list)

    def add_target(self, event: str, action: Action) -> None:
        actions = self._actions[event]
        if action not in actions:
            actions.append(action)

    def remove_target(self, event: str, action: Action) -> None:
        actions = self._actions.get(event)
        if not actions or action not in actions:
            return
        actions.remove(action)
        if not actions:
            del self._actions[event]

    def actions_for(self, event: str) -> list[Action]:
        return list(self._actions.get(event, []))

    def send_actions(self, event: str) -> None:
        # Snapshot: actions may (de)register while we deliver.
        for action in list(self._actions.get(event, [])):
            action(self)
