from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from pose_editor.core.constraints import ConstraintStore
from pose_editor.core.skeleton import Keypoints

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoseSnapshot:
    keypoints: Keypoints
    constraints: ConstraintStore = field(default_factory=ConstraintStore)

    def frozen_copy(self) -> "PoseSnapshot":
        return PoseSnapshot(tuple(self.keypoints), self.constraints.copy())


class HistoryManager:
    """Linear undo/redo over full pose snapshots.

    ``past`` runs oldest -> newest, ``future`` runs next-redo -> furthest-redo.
    """

    def __init__(self, max_history: int = 0):
        self.max_history = max(0, int(max_history))
        self._past: list[PoseSnapshot] = []
        self._future: list[PoseSnapshot] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def depth(self) -> tuple[int, int]:
        return len(self._past), len(self._future)

    def record(self, current: PoseSnapshot) -> None:
        self._past.append(current.frozen_copy())
        self._future.clear()
        if self.max_history and len(self._past) > self.max_history:
            self._past = self._past[-self.max_history :]
        logger.debug("[History] recorded, past=%d", len(self._past))

    def undo(self, current: PoseSnapshot) -> Optional[PoseSnapshot]:
        if not self._past:
            return None
        previous = self._past.pop()
        self._future.insert(0, current.frozen_copy())
        return previous.frozen_copy()

    def redo(self, current: PoseSnapshot) -> Optional[PoseSnapshot]:
        if not self._future:
            return None
        upcoming = self._future.pop(0)
        self._past.append(current.frozen_copy())
        return upcoming.frozen_copy()

    def discard_last(self) -> bool:
        """Drop the newest undo entry without applying it."""
        if not self._past:
            return False
        self._past.pop()
        return True

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
