from __future__ import annotations

from collections import deque
from typing import Literal, Sequence

import numpy as np

from pose_editor.core.constraints import ConstraintStore
from pose_editor.core.skeleton import Joint, Keypoints

DragMode = Literal["translate", "constraint"]
DRAG_MODES = ("translate", "constraint")


def connected_component(constraints: ConstraintStore, joint_id: int) -> set[int]:
    seen = {int(joint_id)}
    queue = deque([int(joint_id)])
    while queue:
        current = queue.popleft()
        for neighbor in constraints.neighbors(current):
            if neighbor not in seen:
                seen.add(neighbor)
                queue.append(neighbor)
    return seen


def translate_all(keypoints: Sequence[Joint], dx: float, dy: float) -> Keypoints:
    return tuple(kp.moved_to(kp.x + dx, kp.y + dy) for kp in keypoints)


def _translate_component(
    keypoints: Sequence[Joint],
    constraints: ConstraintStore,
    joint_id: int,
    x: float,
    y: float,
) -> Keypoints:
    source = keypoints[joint_id]
    dx = float(x) - source.x
    dy = float(y) - source.y
    group = connected_component(constraints, joint_id)
    return tuple(
        kp.moved_to(kp.x + dx, kp.y + dy) if kp.id in group else kp
        for kp in keypoints
    )


def resolve_constrained_position(
    keypoints: Sequence[Joint],
    constraints: ConstraintStore,
    joint_id: int,
    x: float,
    y: float,
) -> np.ndarray:
    target = np.array([float(x), float(y)], dtype=float)
    candidates = []
    for partner_id, target_dist in constraints.touching(joint_id):
        anchor = keypoints[partner_id].xy
        vec = target - anchor
        dist = float(np.linalg.norm(vec))
        if dist <= 0.0:
            # Coincident with the partner: this constraint cannot suggest a direction.
            continue
        candidates.append(anchor + (vec / dist) * float(target_dist))
    if not candidates:
        return target
    return np.mean(np.array(candidates), axis=0)


def drag_joint(
    keypoints: Sequence[Joint],
    constraints: ConstraintStore,
    joint_id: int,
    x: float,
    y: float,
    mode: DragMode = "translate",
) -> Keypoints:
    """Move ``joint_id`` toward ``(x, y)``.

    ``translate`` moves the dragged joint's whole constraint-connected group by the
    same offset. ``constraint`` moves only the dragged joint, projecting the target
    onto the circle of each constraint partner and averaging the candidates in a
    single pass; partners never move.
    """
    if mode == "translate":
        return _translate_component(keypoints, constraints, joint_id, x, y)
    if mode != "constraint":
        raise ValueError(f"unknown drag mode: {mode}")
    nx, ny = resolve_constrained_position(keypoints, constraints, joint_id, x, y)
    return tuple(kp.moved_to(nx, ny) if kp.id == joint_id else kp for kp in keypoints)
