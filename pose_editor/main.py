from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI

from pose_editor.api.rest import router as rest_router
from pose_editor.services.runtime import build_runtime


def create_app(config_path: Path | None = None) -> FastAPI:
    logging.basicConfig(
        level=os.environ.get("POSE_EDITOR_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Pose Editor", version="0.1.0")
    runtime = build_runtime(config_path or Path("configs/default.yaml"))
    app.state.runtime = runtime
    app.include_router(rest_router)
    return app
