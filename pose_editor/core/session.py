from __future__ import annotations

import logging
import math
import threading
from dataclasses import replace
from typing import Callable, Optional, Sequence, Tuple

from pose_editor.core import drag, transforms, visibility
from pose_editor.core.constants import NUM_JOINTS
from pose_editor.core.constraints import ConstraintStore
from pose_editor.core.errors import DetectionError, JointLockedError, PoseFormatError
from pose_editor.core.events import EventBus, NoticeEvent, PoseChangedEvent
from pose_editor.core.history import HistoryManager, PoseSnapshot
from pose_editor.core.skeleton import (
    CONNECTIONS,
    CanvasSize,
    check_joint_id,
    distance,
    fitted_keypoints,
)
from pose_editor.core.transforms import TransformGesture
from pose_editor.models.config import AppConfig
from pose_editor.services.openpose_io import build_openpose, parse_openpose

logger = logging.getLogger(__name__)

Detector = Callable[[bytes, float, float], Optional[Sequence[Tuple[float, float]]]]


class EditorSession:
    """Single writer over the current pose, its history and in-flight gestures.

    Every discrete gesture records exactly one history entry when it begins;
    intermediate move/update events never do.
    """

    def __init__(
        self,
        cfg: AppConfig,
        event_bus: Optional[EventBus] = None,
        detector: Optional[Detector] = None,
    ):
        self.cfg = cfg
        self.event_bus = event_bus or EventBus()
        self.detector = detector
        self.canvas = CanvasSize(float(cfg.canvas.width), float(cfg.canvas.height))
        self.drag_mode: drag.DragMode = cfg.editor.drag_mode
        self.history = HistoryManager(max_history=cfg.editor.max_history)
        self.gesture = TransformGesture()
        self.pose = PoseSnapshot(
            fitted_keypoints(self.canvas.width, self.canvas.height, cfg.canvas.pose_fill),
            ConstraintStore(),
        )
        self.revision = 0
        self._dragging_id: Optional[int] = None
        self._dragging_skeleton = False
        self._lock = threading.RLock()

    def _record(self) -> None:
        self.history.record(self.pose)

    def _apply(self, action: str, keypoints=None, constraints=None) -> None:
        self.pose = PoseSnapshot(
            tuple(keypoints) if keypoints is not None else self.pose.keypoints,
            constraints if constraints is not None else self.pose.constraints,
        )
        self.revision += 1
        self.event_bus.publish("pose", PoseChangedEvent(action=action, revision=self.revision))

    @staticmethod
    def _finite(*values: float) -> bool:
        return all(math.isfinite(float(v)) for v in values)

    def _notice(self, message: str, level: str = "warning") -> None:
        logger.warning("[Session] %s", message)
        self.event_bus.publish("notice", NoticeEvent(level=level, message=message))

    @property
    def keypoints(self):
        return self.pose.keypoints

    @property
    def constraints(self) -> ConstraintStore:
        return self.pose.constraints

    @property
    def transforming(self) -> bool:
        return self.gesture.active

    def begin_drag(self, joint_id: int) -> bool:
        with self._lock:
            joint_id = check_joint_id(joint_id)
            if self.gesture.active:
                return False
            if self.pose.keypoints[joint_id].locked:
                self._notice(f"joint {joint_id} is locked")
                raise JointLockedError(joint_id)
            self._record()
            self._dragging_id = joint_id
            self._dragging_skeleton = False
            return True

    def drag_joint(self, joint_id: int, x: float, y: float) -> bool:
        with self._lock:
            joint_id = check_joint_id(joint_id)
            if self._dragging_id != joint_id:
                return False
            if not self._finite(x, y):
                logger.warning("[Session] ignoring non-finite drag target (%s, %s)", x, y)
                return False
            cx, cy = self.canvas.clamp(x, y)
            moved = drag.drag_joint(
                self.pose.keypoints,
                self.pose.constraints,
                joint_id,
                cx,
                cy,
                mode=self.drag_mode,
            )
            self._apply("drag", keypoints=moved)
            return True

    def end_drag(self) -> None:
        with self._lock:
            self._dragging_id = None
            self._dragging_skeleton = False

    def begin_skeleton_drag(self) -> bool:
        with self._lock:
            if self.gesture.active:
                return False
            self._record()
            self._dragging_skeleton = True
            self._dragging_id = None
            return True

    def drag_skeleton(self, dx: float, dy: float) -> bool:
        with self._lock:
            if not self._dragging_skeleton:
                return False
            if not self._finite(dx, dy):
                logger.warning("[Session] ignoring non-finite skeleton offset (%s, %s)", dx, dy)
                return False
            self._apply("skeleton_drag", keypoints=drag.translate_all(self.pose.keypoints, dx, dy))
            return True

    def set_drag_mode(self, mode: str) -> None:
        with self._lock:
            if mode not in drag.DRAG_MODES:
                raise ValueError(f"unknown drag mode: {mode}")
            self.drag_mode = mode

    def toggle_constraint(self, p1: int, p2: int) -> bool:
        """Lock or unlock the length between two joints; returns the new locked state."""
        with self._lock:
            p1, p2 = check_joint_id(p1), check_joint_id(p2)
            if p1 == p2:
                raise ValueError("constraint endpoints must differ")
            self._record()
            store = self.pose.constraints.copy()
            if store.get(p1, p2) is not None:
                store.remove(p1, p2)
                locked = False
            else:
                kps = self.pose.keypoints
                store.set(p1, p2, distance(kps[p1], kps[p2]))
                locked = True
            self._apply("constraint", constraints=store)
            return locked

    def toggle_visibility(self, joint_id: int) -> None:
        with self._lock:
            joint_id = check_joint_id(joint_id)
            self._record()
            self._apply("visibility", keypoints=visibility.toggle_visibility(self.pose.keypoints, joint_id))

    def toggle_lock(self, joint_id: int) -> None:
        with self._lock:
            joint_id = check_joint_id(joint_id)
            self._record()
            self._apply("lock", keypoints=visibility.toggle_flag(self.pose.keypoints, joint_id, "locked"))

    def toggle_anchor(self, joint_id: int) -> None:
        with self._lock:
            joint_id = check_joint_id(joint_id)
            self._record()
            self._apply("anchor", keypoints=visibility.toggle_flag(self.pose.keypoints, joint_id, "anchored"))

    def toggle_all_lock(self) -> None:
        with self._lock:
            self._record()
            self._apply("lock_all", keypoints=visibility.toggle_all_locked(self.pose.keypoints))

    def toggle_all_visibility(self) -> None:
        with self._lock:
            self._record()
            self._apply("visibility_all", keypoints=visibility.toggle_all_visibility(self.pose.keypoints))

    def resize_canvas(self, width: float, height: float) -> None:
        with self._lock:
            self.canvas = CanvasSize(float(width), float(height))

    def reset(self) -> None:
        with self._lock:
            self._record()
            self._apply(
                "reset",
                keypoints=fitted_keypoints(self.canvas.width, self.canvas.height, self.cfg.canvas.pose_fill),
                constraints=ConstraintStore(),
            )

    def factory_reset(self) -> None:
        with self._lock:
            self.canvas = CanvasSize(float(self.cfg.canvas.width), float(self.cfg.canvas.height))
            self.drag_mode = self.cfg.editor.drag_mode
            self.gesture.cancel()
            self._dragging_id = None
            self._dragging_skeleton = False
            self.history.clear()
            self._apply(
                "factory_reset",
                keypoints=fitted_keypoints(self.canvas.width, self.canvas.height, self.cfg.canvas.pose_fill),
                constraints=ConstraintStore(),
            )

    def scale_start(self) -> None:
        with self._lock:
            self._record()
            self._dragging_id = None
            self._dragging_skeleton = False
            self.gesture.start(self.pose.keypoints, self.pose.constraints, self.canvas)

    def scale(self, factor: float) -> bool:
        with self._lock:
            if not self._finite(factor):
                logger.warning("[Session] ignoring non-finite scale factor %s", factor)
                return False
            out = self.gesture.update_scale(factor)
            if out is None:
                return False
            keypoints, constraints = out
            self._apply("scale", keypoints=keypoints, constraints=constraints)
            return True

    def transform_start(self) -> None:
        with self._lock:
            self._record()
            self._dragging_id = None
            self._dragging_skeleton = False
            self.gesture.start(self.pose.keypoints, self.pose.constraints, self.canvas)

    def transform(self, rotate_deg: float, width_factor: float) -> bool:
        with self._lock:
            if not self._finite(rotate_deg, width_factor):
                logger.warning("[Session] ignoring non-finite transform (%s, %s)", rotate_deg, width_factor)
                return False
            keypoints = self.gesture.update_spin(rotate_deg, width_factor)
            if keypoints is None:
                return False
            self._apply("transform", keypoints=keypoints)
            return True

    def transform_end(self) -> bool:
        with self._lock:
            constraints = self.gesture.end(self.pose.keypoints, self.pose.constraints)
            if constraints is None:
                return False
            self._apply("transform_end", constraints=constraints)
            return True

    scale_end = transform_end

    def flip_horizontal(self) -> None:
        with self._lock:
            self._record()
            self._apply("flip_horizontal", keypoints=transforms.flip_horizontal(self.pose.keypoints, self.canvas))

    def flip_vertical(self) -> None:
        with self._lock:
            self._record()
            self._apply("flip_vertical", keypoints=transforms.flip_vertical(self.pose.keypoints, self.canvas))

    def mirror_left_to_right(self) -> None:
        with self._lock:
            self._record()
            self._apply("mirror", keypoints=transforms.mirror(self.pose.keypoints, self.canvas, "left"))

    def mirror_right_to_left(self) -> None:
        with self._lock:
            self._record()
            self._apply("mirror", keypoints=transforms.mirror(self.pose.keypoints, self.canvas, "right"))

    def undo(self) -> bool:
        with self._lock:
            previous = self.history.undo(self.pose)
            if previous is None:
                return False
            self.gesture.cancel()
            self._dragging_id = None
            self._dragging_skeleton = False
            self._apply("undo", keypoints=previous.keypoints, constraints=previous.constraints)
            return True

    def redo(self) -> bool:
        with self._lock:
            upcoming = self.history.redo(self.pose)
            if upcoming is None:
                return False
            self.gesture.cancel()
            self._dragging_id = None
            self._dragging_skeleton = False
            self._apply("redo", keypoints=upcoming.keypoints, constraints=upcoming.constraints)
            return True

    def import_pose(self, payload: object) -> str:
        with self._lock:
            try:
                imported = parse_openpose(payload, self.pose.keypoints)
            except PoseFormatError as exc:
                self._notice(f"import failed: {exc}", level="error")
                raise
            self._record()
            if imported.canvas is not None:
                self.canvas = imported.canvas
            self._apply("import", keypoints=imported.keypoints, constraints=ConstraintStore())
            logger.info("[Import] loaded %s pose", imported.layout)
            return imported.layout

    def export_pose(self) -> dict:
        with self._lock:
            return build_openpose(self.pose.keypoints, self.canvas)

    def auto_detect(self, image: bytes) -> None:
        with self._lock:
            if self.detector is None:
                raise DetectionError("no pose detector configured")
            self._record()
            try:
                points = self.detector(image, self.canvas.width, self.canvas.height)
            except Exception as exc:  # noqa: BLE001
                logger.warning("[Detect] detector raised: %s", exc)
                points = None
            if not points or len(points) != NUM_JOINTS:
                if self.cfg.editor.rollback_failed_detection:
                    self.history.discard_last()
                self._notice("could not detect a valid pose", level="error")
                raise DetectionError("could not detect a valid pose")
            keypoints = tuple(
                replace(kp, x=float(px), y=float(py), visible=True)
                for kp, (px, py) in zip(self.pose.keypoints, points)
            )
            self._apply("detect", keypoints=keypoints, constraints=ConstraintStore())

    def status(self) -> dict:
        with self._lock:
            past, future = self.history.depth
            return {
                "revision": self.revision,
                "canvas": {"width": self.canvas.width, "height": self.canvas.height},
                "drag_mode": self.drag_mode,
                "transforming": self.gesture.active,
                "keypoints": [kp.to_payload() for kp in self.pose.keypoints],
                "constraints": self.pose.constraints.to_dict(),
                "can_undo": self.history.can_undo,
                "can_redo": self.history.can_redo,
                "history": {"past": past, "future": future},
            }

    @staticmethod
    def skeleton_layout() -> dict:
        return {
            "connections": [
                {"p1": limb.p1, "p2": limb.p2, "color": limb.color, "rgb": list(limb.rgb)}
                for limb in CONNECTIONS
            ],
        }
