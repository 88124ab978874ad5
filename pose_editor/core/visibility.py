from __future__ import annotations

from collections import deque
from dataclasses import replace
from typing import Sequence

from pose_editor.core.constants import POSE_HIERARCHY
from pose_editor.core.skeleton import Joint, Keypoints


def descendants(joint_id: int) -> set[int]:
    seen: set[int] = set()
    queue = deque([int(joint_id)])
    while queue:
        current = queue.popleft()
        for child in POSE_HIERARCHY.get(current, ()):
            if child not in seen and child != joint_id:
                seen.add(child)
                queue.append(child)
    return seen


def toggle_visibility(keypoints: Sequence[Joint], joint_id: int) -> Keypoints:
    """Hiding cascades to every hierarchy descendant; showing touches only the joint."""
    target = keypoints[joint_id]
    if target.visible:
        hidden = descendants(joint_id) | {target.id}
        return tuple(
            replace(kp, visible=False) if kp.id in hidden else kp for kp in keypoints
        )
    return tuple(
        replace(kp, visible=True) if kp.id == target.id else kp for kp in keypoints
    )


def toggle_all_visibility(keypoints: Sequence[Joint]) -> Keypoints:
    show = not all(kp.visible for kp in keypoints)
    return tuple(replace(kp, visible=show) for kp in keypoints)


def toggle_flag(keypoints: Sequence[Joint], joint_id: int, flag: str) -> Keypoints:
    return tuple(
        replace(kp, **{flag: not getattr(kp, flag)}) if kp.id == joint_id else kp
        for kp in keypoints
    )


def toggle_all_locked(keypoints: Sequence[Joint]) -> Keypoints:
    lock = not all(kp.locked for kp in keypoints)
    return tuple(replace(kp, locked=lock) for kp in keypoints)
