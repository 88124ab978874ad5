from __future__ import annotations


class PoseEditorError(Exception):
    pass


class PoseFormatError(PoseEditorError):
    """Malformed or unsupported pose file payload."""


class DetectionError(PoseEditorError):
    """Pose detector returned nothing usable."""


class JointLockedError(PoseEditorError):
    def __init__(self, joint_id: int):
        super().__init__(f"joint_locked: {joint_id}")
        self.joint_id = joint_id


class UnknownJointError(PoseEditorError):
    def __init__(self, joint_id: int):
        super().__init__(f"unknown_joint: {joint_id}")
        self.joint_id = joint_id
