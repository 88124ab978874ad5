from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Sequence, Tuple

import numpy as np

from pose_editor.core.constants import (
    DEFAULT_POSE_COORDS,
    JOINT_COLORS_RGB,
    KEYPOINT_NAMES,
    LIMB_COLORS_RGB,
    LIMB_PAIRS,
    NUM_JOINTS,
)
from pose_editor.core.errors import UnknownJointError


def rgb_to_hex(rgb: Sequence[int]) -> str:
    return "#" + "".join(f"{int(c):02x}" for c in rgb)


@dataclass(frozen=True)
class Joint:
    id: int
    name: str
    x: float
    y: float
    visible: bool = True
    locked: bool = False
    anchored: bool = False
    rgb: Tuple[int, int, int] = (255, 255, 255)

    @property
    def color(self) -> str:
        return rgb_to_hex(self.rgb)

    @property
    def xy(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def moved_to(self, x: float, y: float) -> "Joint":
        return replace(self, x=float(x), y=float(y))

    def to_payload(self) -> dict:
        return {
            "id": int(self.id),
            "name": self.name,
            "x": float(self.x),
            "y": float(self.y),
            "visible": bool(self.visible),
            "locked": bool(self.locked),
            "anchored": bool(self.anchored),
            "color": self.color,
            "rgb": list(self.rgb),
        }


@dataclass(frozen=True)
class Limb:
    p1: int
    p2: int
    rgb: Tuple[int, int, int]

    @property
    def color(self) -> str:
        return rgb_to_hex(self.rgb)


@dataclass(frozen=True)
class CanvasSize:
    width: float = 512.0
    height: float = 512.0

    @property
    def center(self) -> np.ndarray:
        return np.array([self.width / 2.0, self.height / 2.0], dtype=float)

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        return (
            min(max(float(x), 0.0), float(self.width)),
            min(max(float(y), 0.0), float(self.height)),
        )


Keypoints = Tuple[Joint, ...]

CONNECTIONS: Tuple[Limb, ...] = tuple(
    Limb(p1=a, p2=b, rgb=LIMB_COLORS_RGB[i % len(LIMB_COLORS_RGB)])
    for i, (a, b) in enumerate(LIMB_PAIRS)
)

def check_joint_id(joint_id: int) -> int:
    joint_id = int(joint_id)
    if joint_id < 0 or joint_id >= NUM_JOINTS:
        raise UnknownJointError(joint_id)
    return joint_id


def initial_keypoints() -> Keypoints:
    return tuple(
        Joint(id=i, name=name, x=0.0, y=0.0, rgb=JOINT_COLORS_RGB[i])
        for i, name in enumerate(KEYPOINT_NAMES)
    )


def fitted_keypoints(width: float, height: float, fill: float = 0.75) -> Keypoints:
    """Default standing pose scaled to ``fill`` of the canvas height and centered."""
    ref = np.array(DEFAULT_POSE_COORDS, dtype=float)
    lo = ref.min(axis=0)
    hi = ref.max(axis=0)
    ref_center = (lo + hi) / 2.0
    ref_height = float(hi[1] - lo[1])
    factor = (float(height) * float(fill)) / ref_height
    canvas_center = np.array([float(width) / 2.0, float(height) / 2.0])
    placed = (ref - ref_center) * factor + canvas_center
    return tuple(
        joint.moved_to(px, py) for joint, (px, py) in zip(initial_keypoints(), placed)
    )


def positions(keypoints: Sequence[Joint]) -> np.ndarray:
    return np.array([[kp.x, kp.y] for kp in keypoints], dtype=float)


def with_positions(keypoints: Sequence[Joint], xy: np.ndarray) -> Keypoints:
    return tuple(kp.moved_to(p[0], p[1]) for kp, p in zip(keypoints, xy))


def update_joints(
    keypoints: Sequence[Joint], joint_ids: Iterable[int], **changes
) -> Keypoints:
    targets = set(joint_ids)
    return tuple(
        replace(kp, **changes) if kp.id in targets else kp for kp in keypoints
    )


def distance(a: Joint, b: Joint) -> float:
    return float(np.linalg.norm(a.xy - b.xy))
