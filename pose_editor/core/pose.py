from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np
from ultralytics import YOLO

from pose_editor.core.constants import (
    COCO17_LEFT_SHOULDER,
    COCO17_RIGHT_SHOULDER,
    COCO17_TO_COCO18,
    NUM_JOINTS,
)
from pose_editor.models.config import ModelConfig

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


def decode_image(payload: bytes) -> Optional[np.ndarray]:
    np_bytes = np.frombuffer(payload, dtype=np.uint8)
    return cv2.imdecode(np_bytes, cv2.IMREAD_COLOR)


def coco17_to_coco18(xy: np.ndarray) -> List[Point]:
    """Reorder a (17, 2) detector array into the 18-joint editor order."""
    neck = (xy[COCO17_LEFT_SHOULDER] + xy[COCO17_RIGHT_SHOULDER]) / 2.0
    out: List[Point] = []
    for src_idx in COCO17_TO_COCO18:
        point = neck if src_idx is None else xy[src_idx]
        out.append((float(point[0]), float(point[1])))
    return out


class PoseEstimator:
    def __init__(self, cfg: ModelConfig, model=None):
        self.path = cfg.path
        self._model = model
        self.conf = cfg.conf
        self.iou = cfg.iou
        self.device = cfg.device

    def _best_person(self, frame: np.ndarray) -> Optional[np.ndarray]:
        if self._model is None:
            logger.info("[Detect] loading model %s", self.path)
            self._model = YOLO(self.path)
        results = self._model(
            frame,
            conf=self.conf,
            iou=self.iou,
            device=self.device,
            verbose=False,
        )
        if not results:
            return None

        kpts = results[0].keypoints
        if kpts is None or kpts.xy is None:
            return None

        xy = kpts.xy.cpu().numpy()
        if xy.size == 0:
            return None

        if kpts.conf is None:
            conf = np.ones((xy.shape[0], xy.shape[1]), dtype=np.float32)
        else:
            conf = kpts.conf.cpu().numpy()

        person_idx = int(np.argmax(conf.mean(axis=1)))
        return xy[person_idx]

    def detect(self, frame: np.ndarray, width: float, height: float) -> Optional[List[Point]]:
        """Return 18 canvas-space points for the most confident person, or None."""
        person_xy = self._best_person(frame)
        if person_xy is None or person_xy.shape[0] < 17:
            logger.warning("[Detect] no person found")
            return None
        if not np.all(np.isfinite(person_xy[:17])):
            logger.warning("[Detect] non-finite keypoints")
            return None

        img_h, img_w = frame.shape[:2]
        sx = float(width) / float(img_w)
        sy = float(height) / float(img_h)
        points = [(x * sx, y * sy) for x, y in coco17_to_coco18(person_xy[:17])]
        if len(points) != NUM_JOINTS:
            return None
        return points

    def detect_bytes(self, payload: bytes, width: float, height: float) -> Optional[List[Point]]:
        frame = decode_image(payload)
        if frame is None:
            logger.warning("[Detect] image decode failed")
            return None
        return self.detect(frame, width, height)
