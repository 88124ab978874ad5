from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal, Optional, Sequence

import numpy as np

from pose_editor.core.constants import MIRROR_PAIRS, NECK, NOSE
from pose_editor.core.constraints import ConstraintStore
from pose_editor.core.skeleton import CanvasSize, Joint, Keypoints, positions, with_positions

MirrorSource = Literal["left", "right"]


def pose_center(keypoints: Sequence[Joint]) -> Optional[np.ndarray]:
    """Center of the bounding box of visible joints, or None when nothing is visible."""
    visible = [kp for kp in keypoints if kp.visible]
    if not visible:
        return None
    xy = positions(visible)
    return (xy.min(axis=0) + xy.max(axis=0)) / 2.0


def pivot(keypoints: Sequence[Joint], canvas: CanvasSize) -> np.ndarray:
    anchors = [kp for kp in keypoints if kp.anchored]
    if anchors:
        return positions(anchors).mean(axis=0)
    center = pose_center(keypoints)
    if center is None:
        return canvas.center
    return center


def scale(
    keypoints: Sequence[Joint],
    constraints: ConstraintStore,
    factor: float,
    origin: np.ndarray,
) -> tuple[Keypoints, ConstraintStore]:
    factor = float(factor)
    xy = origin + (positions(keypoints) - origin) * factor
    return with_positions(keypoints, xy), constraints.scaled(factor)


def spin(
    keypoints: Sequence[Joint],
    angle_deg: float,
    width_factor: float,
    origin: np.ndarray,
) -> Keypoints:
    """Width-scale offsets along x, then rotate them by ``angle_deg`` about ``origin``."""
    rad = math.radians(float(angle_deg))
    offsets = positions(keypoints) - origin
    offsets[:, 0] *= float(width_factor)
    rot = np.array(
        [[math.cos(rad), -math.sin(rad)], [math.sin(rad), math.cos(rad)]],
        dtype=float,
    )
    xy = origin + offsets @ rot.T
    return with_positions(keypoints, xy)


def flip_horizontal(keypoints: Sequence[Joint], canvas: CanvasSize) -> Keypoints:
    center = pose_center(keypoints)
    axis = float(center[0]) if center is not None else canvas.width / 2.0
    return tuple(kp.moved_to(axis + (axis - kp.x), kp.y) for kp in keypoints)


def flip_vertical(keypoints: Sequence[Joint], canvas: CanvasSize) -> Keypoints:
    center = pose_center(keypoints)
    axis = float(center[1]) if center is not None else canvas.height / 2.0
    return tuple(kp.moved_to(kp.x, axis + (axis - kp.y)) for kp in keypoints)


def mirror_axis(keypoints: Sequence[Joint], canvas: CanvasSize) -> float:
    if keypoints[NECK].visible:
        return float(keypoints[NECK].x)
    if keypoints[NOSE].visible:
        return float(keypoints[NOSE].x)
    return canvas.width / 2.0


def mirror(
    keypoints: Sequence[Joint], canvas: CanvasSize, source: MirrorSource
) -> Keypoints:
    """Copy one side onto the other, reflecting x about the body axis."""
    if source not in ("left", "right"):
        raise ValueError(f"unknown mirror source: {source}")
    axis = mirror_axis(keypoints, canvas)
    out = list(keypoints)
    for right_id, left_id in MIRROR_PAIRS:
        src_id, dst_id = (left_id, right_id) if source == "left" else (right_id, left_id)
        src = keypoints[src_id]
        out[dst_id] = replace(
            out[dst_id],
            x=axis + (axis - src.x),
            y=src.y,
            visible=src.visible,
        )
    return tuple(out)


@dataclass(frozen=True)
class GestureBase:
    keypoints: Keypoints
    constraints: ConstraintStore
    origin: np.ndarray


class TransformGesture:
    """Idle -> Active -> Idle lifecycle for continuous scale / spin gestures.

    Every update is a pure function of the base captured at ``start`` and the live
    parameter, so replaying a parameter value always yields the same pose.
    """

    def __init__(self):
        self._base: Optional[GestureBase] = None

    @property
    def active(self) -> bool:
        return self._base is not None

    @property
    def base(self) -> Optional[GestureBase]:
        return self._base

    def start(
        self,
        keypoints: Sequence[Joint],
        constraints: ConstraintStore,
        canvas: CanvasSize,
    ) -> None:
        kps = tuple(keypoints)
        self._base = GestureBase(
            keypoints=kps,
            constraints=constraints.copy(),
            origin=pivot(kps, canvas),
        )

    def update_scale(self, factor: float) -> Optional[tuple[Keypoints, ConstraintStore]]:
        if self._base is None:
            return None
        return scale(self._base.keypoints, self._base.constraints, factor, self._base.origin)

    def update_spin(self, angle_deg: float, width_factor: float) -> Optional[Keypoints]:
        if self._base is None:
            return None
        return spin(self._base.keypoints, angle_deg, width_factor, self._base.origin)

    def end(
        self, keypoints: Sequence[Joint], constraints: ConstraintStore
    ) -> Optional[ConstraintStore]:
        if self._base is None:
            return None
        self._base = None
        return constraints.recomputed(keypoints)

    def cancel(self) -> None:
        self._base = None
