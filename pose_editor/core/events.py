from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List


@dataclass
class PoseChangedEvent:
    action: str
    revision: int


@dataclass
class NoticeEvent:
    level: str
    message: str


class EventBus:
    def __init__(self):
        self._subs: Dict[str, List[Callable]] = {}

    def subscribe(self, event_name: str, callback: Callable) -> None:
        self._subs.setdefault(event_name, []).append(callback)

    def publish(self, event_name: str, payload) -> None:
        for callback in list(self._subs.get(event_name, [])):
            callback(payload)
