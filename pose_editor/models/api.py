from typing import Literal

from pydantic import BaseModel, Field


class ActionResponse(BaseModel):
    ok: bool
    message: str


class DragStartRequest(BaseModel):
    joint_id: int


class DragMoveRequest(BaseModel):
    joint_id: int
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)


class SkeletonMoveRequest(BaseModel):
    dx: float = Field(allow_inf_nan=False)
    dy: float = Field(allow_inf_nan=False)


class ConstraintToggleRequest(BaseModel):
    p1: int
    p2: int


class DragModeRequest(BaseModel):
    mode: Literal["translate", "constraint"]


class CanvasResizeRequest(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class ScaleUpdateRequest(BaseModel):
    factor: float = Field(allow_inf_nan=False)


class TransformUpdateRequest(BaseModel):
    rotate_deg: float = Field(0.0, allow_inf_nan=False)
    width_factor: float = Field(1.0, allow_inf_nan=False)
