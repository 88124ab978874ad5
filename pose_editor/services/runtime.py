from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pose_editor.core.events import EventBus
from pose_editor.core.session import Detector, EditorSession
from pose_editor.services.config_store import ConfigStore


@dataclass
class RuntimeContext:
    config_store: ConfigStore
    event_bus: EventBus
    session: EditorSession


def _default_detector(store: ConfigStore) -> Detector:
    estimator = None

    def _detect(image: bytes, width: float, height: float):
        nonlocal estimator
        if estimator is None:
            from pose_editor.core.pose import PoseEstimator

            estimator = PoseEstimator(store.config.model)
        return estimator.detect_bytes(image, width, height)

    return _detect


def build_runtime(config_path: Path, detector: Optional[Detector] = None) -> RuntimeContext:
    config_store = ConfigStore(config_path)
    cfg = config_store.config
    event_bus = EventBus()
    session = EditorSession(
        cfg,
        event_bus=event_bus,
        detector=detector or _default_detector(config_store),
    )
    return RuntimeContext(
        config_store=config_store,
        event_bus=event_bus,
        session=session,
    )
