from types import MappingProxyType

# OpenPose COCO-18 ordering.
KEYPOINT_NAMES = (
    "Nose",
    "Neck",
    "R_Shoulder",
    "R_Elbow",
    "R_Wrist",
    "L_Shoulder",
    "L_Elbow",
    "L_Wrist",
    "R_Hip",
    "R_Knee",
    "R_Ankle",
    "L_Hip",
    "L_Knee",
    "L_Ankle",
    "R_Eye",
    "L_Eye",
    "R_Ear",
    "L_Ear",
)

NUM_JOINTS = len(KEYPOINT_NAMES)
NECK = 1
NOSE = 0

JOINT_COLORS_RGB = (
    (255, 0, 0),
    (255, 85, 0),
    (255, 170, 0),
    (255, 255, 0),
    (170, 255, 0),
    (85, 255, 0),
    (0, 255, 0),
    (0, 255, 85),
    (0, 255, 170),
    (0, 255, 255),
    (0, 170, 255),
    (0, 85, 255),
    (0, 0, 255),
    (85, 0, 255),
    (170, 0, 255),
    (255, 0, 255),
    (255, 0, 170),
    (255, 0, 85),
)

LIMB_PAIRS = (
    (1, 2),
    (1, 5),
    (2, 3),
    (3, 4),
    (5, 6),
    (6, 7),
    (1, 8),
    (8, 9),
    (9, 10),
    (1, 11),
    (11, 12),
    (12, 13),
    (1, 0),
    (0, 14),
    (14, 16),
    (0, 15),
    (15, 17),
)

LIMB_COLORS_RGB = (
    (255, 85, 0),
    (0, 255, 0),
    (255, 170, 0),
    (255, 255, 0),
    (85, 255, 0),
    (0, 255, 85),
    (0, 255, 170),
    (0, 255, 255),
    (0, 170, 255),
    (0, 85, 255),
    (0, 0, 255),
    (85, 0, 255),
    (170, 0, 255),
    (255, 0, 255),
    (255, 0, 170),
    (255, 0, 85),
    (255, 255, 0),
)

# Parent -> direct children, used only for cascading hide.
POSE_HIERARCHY = MappingProxyType(
    {
        1: (0, 2, 5, 8, 11),
        0: (14, 15),
        2: (3,),
        3: (4,),
        5: (6,),
        6: (7,),
        8: (9,),
        9: (10,),
        11: (12,),
        12: (13,),
        14: (16,),
        15: (17,),
    }
)

# (right, left) symmetric pairs for mirroring.
MIRROR_PAIRS = (
    (2, 5),
    (3, 6),
    (4, 7),
    (8, 11),
    (9, 12),
    (10, 13),
    (14, 15),
    (16, 17),
)

# Reference standing pose on a 512x512 canvas.
DEFAULT_POSE_COORDS = (
    (256.0, 55.0),
    (256.0, 115.0),
    (206.0, 115.0),
    (186.0, 195.0),
    (166.0, 255.0),
    (306.0, 115.0),
    (326.0, 195.0),
    (346.0, 255.0),
    (226.0, 255.0),
    (226.0, 355.0),
    (226.0, 455.0),
    (286.0, 255.0),
    (286.0, 355.0),
    (286.0, 455.0),
    (246.0, 45.0),
    (266.0, 45.0),
    (226.0, 50.0),
    (286.0, 50.0),
)

# COCO-18 joint index -> BODY-25 source index (BODY-25 MidHip and feet are dropped).
BODY25_TO_COCO18 = (0, 1, 2, 3, 4, 5, 6, 7, 9, 10, 11, 12, 13, 14, 15, 16, 17, 18)

# COCO-18 joint index -> COCO-17 detector index; Neck is synthesized from the shoulders.
COCO17_TO_COCO18 = (0, None, 6, 8, 10, 5, 7, 9, 12, 14, 16, 11, 13, 15, 2, 1, 4, 3)
COCO17_LEFT_SHOULDER = 5
COCO17_RIGHT_SHOULDER = 6
