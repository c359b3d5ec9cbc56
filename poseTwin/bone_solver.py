#!/usr/bin/env python3
"""
Bone Solver

Derives the placement, length and orientation of a bone segment from its two
endpoint joints. A bone is drawn as a primitive aligned with a reference axis
(Y up by default), so the orientation is the shortest-arc rotation taking that
axis onto the joint-to-joint direction.
"""

from typing import Optional

import numpy as np

from .protocol import BoneTransform, FrameSnapshot, Position, Quaternion, IDENTITY
from .topology import DEFAULT_TOPOLOGY, SkeletonTopology
from .vecMathHelper import UP, _to_numpy, rotation_from_vector_to_vector


def solve(a, b, reference_axis=UP) -> BoneTransform:
    """Solve the transform of the bone running from joint a to joint b.

    Args:
        a: first endpoint in render space (Position, list or numpy array)
        b: second endpoint in render space
        reference_axis: axis of the undeformed bone primitive

    Returns:
        BoneTransform. Coincident endpoints, or endpoints so far apart that
        the length overflows, give a degenerate transform with length 0 and
        identity orientation instead of an undefined rotation.
    """
    pa = _to_numpy(a)
    pb = _to_numpy(b)

    with np.errstate(over="ignore", invalid="ignore"):
        direction = pb - pa
        length = float(np.linalg.norm(direction))
    # halves first so the midpoint of finite points stays finite
    placement = 0.5 * pa + 0.5 * pb

    if length == 0.0 or not np.isfinite(length):
        return BoneTransform(
            placement=Position(*placement.tolist()),
            length=0.0,
            orientation=IDENTITY,
            degenerate=True,
        )

    quat = rotation_from_vector_to_vector(reference_axis, direction)
    return BoneTransform(
        placement=Position(*placement.tolist()),
        length=length,
        orientation=Quaternion(*quat.tolist()),
    )


def solve_bone(snapshot: FrameSnapshot, bone_index: int,
               topology: SkeletonTopology = DEFAULT_TOPOLOGY) -> Optional[BoneTransform]:
    """Solve one topology bone against a snapshot.

    Returns None when either endpoint is unknown in the snapshot.
    """
    i, j = topology.bones[bone_index]
    a = snapshot.get(i)
    b = snapshot.get(j)
    if a is None or b is None:
        return None
    return solve(a, b)
