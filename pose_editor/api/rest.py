from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Body, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from pose_editor.api.auth import require_http_token
from pose_editor.core.errors import (
    DetectionError,
    JointLockedError,
    PoseFormatError,
    UnknownJointError,
)
from pose_editor.models.api import (
    ActionResponse,
    CanvasResizeRequest,
    ConstraintToggleRequest,
    DragModeRequest,
    DragMoveRequest,
    DragStartRequest,
    ScaleUpdateRequest,
    SkeletonMoveRequest,
    TransformUpdateRequest,
)
from pose_editor.models.config import ConfigUpdate
from pose_editor.services.openpose_io import save_openpose

router = APIRouter(prefix="/api")


def _runtime(request: Request):
    return request.app.state.runtime


def _session(request: Request):
    runtime = _runtime(request)
    require_http_token(request, runtime.config_store.config.server.token)
    return runtime.session


def _joint_call(fn, *args):
    try:
        return fn(*args)
    except UnknownJointError as exc:
        raise HTTPException(status_code=404, detail="unknown_joint") from exc


@router.get("/config")
def get_config(request: Request):
    runtime = _runtime(request)
    require_http_token(request, runtime.config_store.config.server.token)
    return runtime.config_store.config.maybe_masked_dump(mask_token=True)


@router.put("/config")
def put_config(request: Request, payload: ConfigUpdate):
    runtime = _runtime(request)
    require_http_token(request, runtime.config_store.config.server.token)
    cfg = runtime.config_store.update(payload)
    runtime.session.cfg = cfg
    runtime.session.history.max_history = max(0, int(cfg.editor.max_history))
    return cfg.maybe_masked_dump(mask_token=True)


@router.get("/skeleton")
def skeleton(request: Request):
    return _session(request).skeleton_layout()


@router.get("/pose")
def pose_status(request: Request):
    return _session(request).status()


@router.post("/pose/drag/start")
def drag_start(request: Request, payload: DragStartRequest):
    session = _session(request)
    try:
        started = _joint_call(session.begin_drag, payload.joint_id)
    except JointLockedError as exc:
        raise HTTPException(status_code=409, detail="joint_locked") from exc
    if not started:
        raise HTTPException(status_code=409, detail="transform_in_progress")
    return session.status()


@router.post("/pose/drag/move")
def drag_move(request: Request, payload: DragMoveRequest):
    session = _session(request)
    _joint_call(session.drag_joint, payload.joint_id, payload.x, payload.y)
    return session.status()


@router.post("/pose/drag/end", response_model=ActionResponse)
def drag_end(request: Request):
    _session(request).end_drag()
    return ActionResponse(ok=True, message="drag_ended")


@router.post("/pose/skeleton/start")
def skeleton_start(request: Request):
    session = _session(request)
    if not session.begin_skeleton_drag():
        raise HTTPException(status_code=409, detail="transform_in_progress")
    return session.status()


@router.post("/pose/skeleton/move")
def skeleton_move(request: Request, payload: SkeletonMoveRequest):
    session = _session(request)
    session.drag_skeleton(payload.dx, payload.dy)
    return session.status()


@router.post("/pose/joints/{joint_id}/visibility")
def toggle_visibility(request: Request, joint_id: int):
    session = _session(request)
    _joint_call(session.toggle_visibility, joint_id)
    return session.status()


@router.post("/pose/joints/{joint_id}/lock")
def toggle_lock(request: Request, joint_id: int):
    session = _session(request)
    _joint_call(session.toggle_lock, joint_id)
    return session.status()


@router.post("/pose/joints/{joint_id}/anchor")
def toggle_anchor(request: Request, joint_id: int):
    session = _session(request)
    _joint_call(session.toggle_anchor, joint_id)
    return session.status()


@router.post("/pose/joints/lock-all")
def toggle_all_lock(request: Request):
    session = _session(request)
    session.toggle_all_lock()
    return session.status()


@router.post("/pose/joints/visibility-all")
def toggle_all_visibility(request: Request):
    session = _session(request)
    session.toggle_all_visibility()
    return session.status()


@router.post("/pose/constraints")
def toggle_constraint(request: Request, payload: ConstraintToggleRequest):
    session = _session(request)
    try:
        _joint_call(session.toggle_constraint, payload.p1, payload.p2)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return session.status()


@router.post("/pose/drag-mode")
def set_drag_mode(request: Request, payload: DragModeRequest):
    session = _session(request)
    session.set_drag_mode(payload.mode)
    return session.status()


@router.post("/pose/canvas")
def resize_canvas(request: Request, payload: CanvasResizeRequest):
    session = _session(request)
    session.resize_canvas(payload.width, payload.height)
    return session.status()


@router.post("/pose/reset")
def reset_pose(request: Request):
    session = _session(request)
    session.reset()
    return session.status()


@router.post("/pose/factory-reset")
def factory_reset(request: Request):
    session = _session(request)
    session.factory_reset()
    return session.status()


@router.post("/pose/scale/start")
def scale_start(request: Request):
    session = _session(request)
    session.scale_start()
    return session.status()


@router.post("/pose/scale/update")
def scale_update(request: Request, payload: ScaleUpdateRequest):
    session = _session(request)
    session.scale(payload.factor)
    return session.status()


@router.post("/pose/scale/end")
def scale_end(request: Request):
    session = _session(request)
    session.scale_end()
    return session.status()


@router.post("/pose/transform/start")
def transform_start(request: Request):
    session = _session(request)
    session.transform_start()
    return session.status()


@router.post("/pose/transform/update")
def transform_update(request: Request, payload: TransformUpdateRequest):
    session = _session(request)
    session.transform(payload.rotate_deg, payload.width_factor)
    return session.status()


@router.post("/pose/transform/end")
def transform_end(request: Request):
    session = _session(request)
    session.transform_end()
    return session.status()


@router.post("/pose/flip/{axis}")
def flip(request: Request, axis: Literal["horizontal", "vertical"]):
    session = _session(request)
    if axis == "horizontal":
        session.flip_horizontal()
    else:
        session.flip_vertical()
    return session.status()


@router.post("/pose/mirror/{direction}")
def mirror(request: Request, direction: Literal["left-to-right", "right-to-left"]):
    session = _session(request)
    if direction == "left-to-right":
        session.mirror_left_to_right()
    else:
        session.mirror_right_to_left()
    return session.status()


@router.post("/pose/undo")
def undo(request: Request):
    session = _session(request)
    session.undo()
    return session.status()


@router.post("/pose/redo")
def redo(request: Request):
    session = _session(request)
    session.redo()
    return session.status()


@router.post("/pose/import")
def import_pose(request: Request, payload: Any = Body(...)):
    session = _session(request)
    try:
        layout = session.import_pose(payload)
    except PoseFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    out = session.status()
    out["layout"] = layout
    return out


@router.get("/pose/export")
def export_pose(request: Request):
    return _session(request).export_pose()


@router.post("/pose/export/save", response_model=ActionResponse)
def save_pose(request: Request):
    runtime = _runtime(request)
    session = _session(request)
    path = save_openpose(
        runtime.config_store.config.export.pose_json_path,
        session.keypoints,
        session.canvas,
    )
    return ActionResponse(ok=True, message=str(path).replace("\\", "/"))


@router.post("/pose/detect")
async def detect_pose(request: Request):
    session = _session(request)
    image = await request.body()
    if not image:
        raise HTTPException(status_code=400, detail="empty_image")
    try:
        await run_in_threadpool(session.auto_detect, image)
    except DetectionError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return session.status()
