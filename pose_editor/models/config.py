from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    token: str = "change-me"


class CanvasConfig(BaseModel):
    width: int = 512
    height: int = 512
    pose_fill: float = 0.75

    @field_validator("width", "height")
    @classmethod
    def _validate_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("canvas dimensions must be positive")
        return value

    @field_validator("pose_fill")
    @classmethod
    def _validate_fill(cls, value: float) -> float:
        if not 0.0 < value <= 1.0:
            raise ValueError("pose_fill must be in (0, 1]")
        return value


class EditorConfig(BaseModel):
    drag_mode: Literal["translate", "constraint"] = "translate"
    max_history: int = 200
    rollback_failed_detection: bool = False


class ModelConfig(BaseModel):
    path: str = "yolo11n-pose.pt"
    conf: float = 0.25
    iou: float = 0.45
    device: str = "cpu"


class ExportConfig(BaseModel):
    pose_json_path: str = "data/exports/openpose_data.json"


class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    def maybe_masked_dump(self, mask_token: bool = True) -> dict:
        data = self.model_dump()
        if mask_token:
            token = data["server"].get("token", "")
            if token:
                data["server"]["token"] = "*" * max(4, len(token))
        return data


class ConfigUpdate(BaseModel):
    server: Optional[ServerConfig] = None
    canvas: Optional[CanvasConfig] = None
    editor: Optional[EditorConfig] = None
    model: Optional[ModelConfig] = None
    export: Optional[ExportConfig] = None
