#!/usr/bin/env python3
"""
Skeleton topology for the BlazePose 33-landmark body model.

Holds the fixed joint roles (radius and colour class per landmark) and the bone
connections between them. The table is built once at import time and is never
mutated afterwards; ingestion uses it to bound landmark indices and the render
loop uses it to iterate joints and bones.
"""

from dataclasses import dataclass
from typing import Tuple

from .enums import PoseLandmark, RadiusClass


JOINT_COUNT = 33

# Render-space sizes (same units as the incoming landmarks)
FINE_JOINT_RADIUS = 0.008
STANDARD_JOINT_RADIUS = 0.018
BONE_RADIUS = 0.006

# RGB colours per class
JOINT_COLORS = {
    RadiusClass.FINE: (1.0, 0.45, 0.45),
    RadiusClass.STANDARD: (1.0, 0.0, 0.0),
}
BONE_COLOR = (0.0, 1.0, 0.0)

# Face (0..10) and hand (17..22) landmarks are drawn with the fine class
FINE_LANDMARKS = frozenset(list(range(0, 11)) + list(range(17, 23)))


class TopologyError(ValueError):
    """Raised when a skeleton topology is inconsistent (fatal at startup)"""


@dataclass(frozen=True)
class JointRole:
    landmark: PoseLandmark
    radius_class: RadiusClass

    @property
    def index(self) -> int:
        return self.landmark.value

    @property
    def radius(self) -> float:
        if self.radius_class == RadiusClass.FINE:
            return FINE_JOINT_RADIUS
        return STANDARD_JOINT_RADIUS

    @property
    def color(self) -> Tuple[float, float, float]:
        return JOINT_COLORS[self.radius_class]


# BlazePose connections using enum values for clarity
L = PoseLandmark  # Shorthand for readability
POSE_CONNECTIONS: Tuple[Tuple[int, int], ...] = (
    # Face
    (L.NOSE.value, L.LEFT_EYE_INNER.value),
    (L.LEFT_EYE_INNER.value, L.LEFT_EYE.value),
    (L.LEFT_EYE.value, L.LEFT_EYE_OUTER.value),
    (L.LEFT_EYE_OUTER.value, L.LEFT_EAR.value),
    (L.NOSE.value, L.RIGHT_EYE_INNER.value),
    (L.RIGHT_EYE_INNER.value, L.RIGHT_EYE.value),
    (L.RIGHT_EYE.value, L.RIGHT_EYE_OUTER.value),
    (L.RIGHT_EYE_OUTER.value, L.RIGHT_EAR.value),
    (L.MOUTH_LEFT.value, L.MOUTH_RIGHT.value),

    # Torso
    (L.LEFT_SHOULDER.value, L.RIGHT_SHOULDER.value),
    (L.LEFT_SHOULDER.value, L.LEFT_HIP.value),
    (L.RIGHT_SHOULDER.value, L.RIGHT_HIP.value),
    (L.LEFT_HIP.value, L.RIGHT_HIP.value),

    # Left arm and hand
    (L.LEFT_SHOULDER.value, L.LEFT_ELBOW.value),
    (L.LEFT_ELBOW.value, L.LEFT_WRIST.value),
    (L.LEFT_WRIST.value, L.LEFT_PINKY.value),
    (L.LEFT_WRIST.value, L.LEFT_INDEX.value),
    (L.LEFT_WRIST.value, L.LEFT_THUMB.value),
    (L.LEFT_PINKY.value, L.LEFT_INDEX.value),

    # Right arm and hand
    (L.RIGHT_SHOULDER.value, L.RIGHT_ELBOW.value),
    (L.RIGHT_ELBOW.value, L.RIGHT_WRIST.value),
    (L.RIGHT_WRIST.value, L.RIGHT_PINKY.value),
    (L.RIGHT_WRIST.value, L.RIGHT_INDEX.value),
    (L.RIGHT_WRIST.value, L.RIGHT_THUMB.value),
    (L.RIGHT_PINKY.value, L.RIGHT_INDEX.value),

    # Left leg
    (L.LEFT_HIP.value, L.LEFT_KNEE.value),
    (L.LEFT_KNEE.value, L.LEFT_ANKLE.value),
    (L.LEFT_ANKLE.value, L.LEFT_HEEL.value),
    (L.LEFT_HEEL.value, L.LEFT_FOOT_INDEX.value),
    (L.LEFT_ANKLE.value, L.LEFT_FOOT_INDEX.value),

    # Right leg
    (L.RIGHT_HIP.value, L.RIGHT_KNEE.value),
    (L.RIGHT_KNEE.value, L.RIGHT_ANKLE.value),
    (L.RIGHT_ANKLE.value, L.RIGHT_HEEL.value),
    (L.RIGHT_HEEL.value, L.RIGHT_FOOT_INDEX.value),
    (L.RIGHT_ANKLE.value, L.RIGHT_FOOT_INDEX.value),
)
del L


@dataclass(frozen=True)
class SkeletonTopology:
    """Ordered joint roles plus ordered bone endpoint pairs"""
    joints: Tuple[JointRole, ...]
    bones: Tuple[Tuple[int, int], ...]
    bone_radius: float = BONE_RADIUS

    @property
    def joint_count(self) -> int:
        return len(self.joints)

    @property
    def bone_count(self) -> int:
        return len(self.bones)

    def validate(self, expected_joints: int = JOINT_COUNT) -> "SkeletonTopology":
        """Check counts and indices, raising TopologyError on any mismatch.

        Returns self so construction and validation can be chained.
        """
        if len(self.joints) != expected_joints:
            raise TopologyError(
                f"Topology has {len(self.joints)} joints, expected {expected_joints}")

        for i, role in enumerate(self.joints):
            if role.index != i:
                raise TopologyError(
                    f"Joint role {role.landmark.name} sits at slot {i}, expected {role.index}")

        for b, (a, c) in enumerate(self.bones):
            if not (0 <= a < expected_joints and 0 <= c < expected_joints):
                raise TopologyError(f"Bone {b} references joint outside [0, {expected_joints}): ({a}, {c})")
            if a == c:
                raise TopologyError(f"Bone {b} connects joint {a} to itself")
        return self


def build_default_topology() -> SkeletonTopology:
    joints = tuple(
        JointRole(
            landmark=lm,
            radius_class=RadiusClass.FINE if lm.value in FINE_LANDMARKS else RadiusClass.STANDARD,
        )
        for lm in PoseLandmark
    )
    return SkeletonTopology(joints=joints, bones=POSE_CONNECTIONS).validate()


DEFAULT_TOPOLOGY = build_default_topology()
