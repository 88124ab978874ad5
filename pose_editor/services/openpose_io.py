from __future__ import annotations

import math
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence

from pose_editor.core.constants import BODY25_TO_COCO18, NUM_JOINTS
from pose_editor.core.errors import PoseFormatError
from pose_editor.core.skeleton import CanvasSize, Joint, Keypoints
from pose_editor.services.state_io import load_json, save_json_atomic

COCO18_LEN = NUM_JOINTS * 3
BODY25_LEN = 25 * 3


@dataclass
class ImportedPose:
    keypoints: Keypoints
    canvas: Optional[CanvasSize]
    layout: str


def _triplet(values: Sequence[float], idx: int) -> tuple[float, float, float]:
    base = idx * 3
    return float(values[base]), float(values[base + 1]), float(values[base + 2])


def _read_canvas(payload: dict) -> Optional[CanvasSize]:
    canvas = payload.get("canvas_config")
    if not isinstance(canvas, dict):
        return None
    width = canvas.get("width")
    height = canvas.get("height")
    if not width or not height:
        return None
    try:
        width, height = float(width), float(height)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        return None
    return CanvasSize(width=width, height=height)


def parse_openpose(payload: object, template: Sequence[Joint]) -> ImportedPose:
    """Read ``people[0].pose_keypoints_2d`` onto ``template`` joints.

    54 values are COCO-18 in order; 75 values are BODY-25 and get remapped.
    Joints at exactly (0, 0) are treated as missing.
    """
    if not isinstance(payload, dict):
        raise PoseFormatError("payload must be a JSON object")
    people = payload.get("people")
    if not isinstance(people, list):
        raise PoseFormatError("'people' array missing")
    if not people:
        raise PoseFormatError("no people found")
    person = people[0]
    values = person.get("pose_keypoints_2d") if isinstance(person, dict) else None
    if not isinstance(values, list):
        raise PoseFormatError("no 2D keypoints found")

    if len(values) == BODY25_LEN:
        mapping = BODY25_TO_COCO18
        layout = "body25"
    elif len(values) == COCO18_LEN:
        mapping = tuple(range(NUM_JOINTS))
        layout = "coco18"
    else:
        raise PoseFormatError(
            f"pose_keypoints_2d must hold {COCO18_LEN} or {BODY25_LEN} values, got {len(values)}"
        )

    try:
        triplets = [_triplet(values, src_idx) for src_idx in mapping]
    except (TypeError, ValueError) as exc:
        raise PoseFormatError(f"non-numeric keypoint value: {exc}") from exc
    if not all(math.isfinite(x) and math.isfinite(y) for x, y, _c in triplets):
        raise PoseFormatError("non-finite keypoint value")

    keypoints = tuple(
        replace(kp, x=x, y=y, visible=(x != 0.0 or y != 0.0))
        for kp, (x, y, _c) in zip(template, triplets)
    )
    return ImportedPose(keypoints=keypoints, canvas=_read_canvas(payload), layout=layout)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_openpose(keypoints: Sequence[Joint], canvas: CanvasSize) -> dict:
    flat: list[float] = []
    for kp in keypoints:
        flat.extend([_round_half_up(kp.x), _round_half_up(kp.y), 1 if kp.visible else 0])
    return {
        "version": 1.3,
        "people": [{"pose_keypoints_2d": flat}],
        "canvas_config": {
            "width": _round_half_up(canvas.width),
            "height": _round_half_up(canvas.height),
        },
        "keypoints_details": [
            {
                "id": int(kp.id),
                "name": kp.name,
                "x": _round_half_up(kp.x),
                "y": _round_half_up(kp.y),
                "visible": bool(kp.visible),
            }
            for kp in keypoints
        ],
    }


def save_openpose(path: str | Path, keypoints: Sequence[Joint], canvas: CanvasSize) -> Path:
    out = Path(path)
    save_json_atomic(out, build_openpose(keypoints, canvas))
    return out


def load_openpose(path: str | Path, template: Sequence[Joint]) -> ImportedPose:
    payload = load_json(path, default=None)
    if payload is None:
        raise PoseFormatError(f"unreadable pose file: {path}")
    return parse_openpose(payload, template)
