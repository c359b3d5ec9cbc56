#!/usr/bin/env python3
"""
Vector Math Helper - 3D vector and quaternion utilities for the skeleton core

Accepts numpy arrays, plain lists/tuples and protocol Position objects.
Quaternions are numpy arrays in [x, y, z, w] order (the scipy convention).
"""

import numpy as np
from typing import Tuple
from scipy.spatial.transform import Rotation as R


UP = np.array([0.0, 1.0, 0.0])
X_AXIS = np.array([1.0, 0.0, 0.0])

# Below this, 1 + dot(from, to) counts as exactly opposite vectors
OPPOSITE_EPSILON = 1e-12


def _to_numpy(vec) -> np.ndarray:
    """Convert Position, list or tuple to numpy array."""
    if hasattr(vec, 'x') and hasattr(vec, 'y') and hasattr(vec, 'z'):
        return np.array([vec.x, vec.y, vec.z], dtype=np.float64)
    return np.asarray(vec, dtype=np.float64)


# -----------------------------------------------------------------------------
# Coordinate transform (detector space -> render space)
# -----------------------------------------------------------------------------

def to_render_space(point) -> np.ndarray:
    """Map a detector-space point into render space.

    Detector space has Y growing downward; render space has Y growing upward.
    All three axes are negated, which flips up/down and also mirrors left/right
    so the figure behaves like a mirror image of the person in front of the
    camera. Applying the transform twice returns the original point.

    Non-finite values are propagated unchanged (callers decide what to do
    with them).

    Args:
        point: (x, y, z) in detector space (numpy array, list or Position)

    Returns:
        numpy array (x, y, z) in render space

    Example:
        >>> to_render_space([1.0, 1.0, 0.0])
        array([-1., -1., -0.])
    """
    return -_to_numpy(point)


def to_render_space_array(points) -> np.ndarray:
    """Vectorised to_render_space for an Nx3 array of points."""
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"Expected an Nx3 array, got shape {pts.shape}")
    return -pts


def is_finite_point(point) -> bool:
    """True if every coordinate of the point is a finite number."""
    return bool(np.all(np.isfinite(_to_numpy(point))))


# -----------------------------------------------------------------------------
# Basic vector helpers
# -----------------------------------------------------------------------------

def normalize(vec) -> np.ndarray:
    """Normalize a vector to unit length.

    Raises:
        ValueError: for a zero-length vector
    """
    vec = _to_numpy(vec)
    length = np.linalg.norm(vec)
    if length == 0.0:
        raise ValueError("Cannot normalize zero vector")
    return vec / length


# -----------------------------------------------------------------------------
# Quaternions
# -----------------------------------------------------------------------------

def perpendicular_axis(vec) -> np.ndarray:
    """Deterministic unit axis perpendicular to vec.

    Uses X × vec, or Y × vec when vec is too close to the X axis.
    For the up vector (0, 1, 0) this is +Z.
    """
    v = normalize(vec)
    helper = X_AXIS
    if abs(v[0]) > 0.9:  # vec is too aligned with X
        helper = UP
    return normalize(np.cross(helper, v))


def rotation_from_vector_to_vector(from_vec, to_vec) -> np.ndarray:
    """Shortest-arc quaternion that rotates from_vec onto to_vec.

    Both vectors are normalized internally. When the vectors point in exactly
    opposite directions the rotation is 180° about perpendicular_axis(from_vec),
    so repeated calls always give the same answer.

    Args:
        from_vec: source direction
        to_vec: target direction

    Returns:
        Unit quaternion [x, y, z, w]

    Raises:
        ValueError: if either vector has zero length
    """
    f = normalize(from_vec)
    t = normalize(to_vec)

    dot = float(np.dot(f, t))
    if 1.0 + dot < OPPOSITE_EPSILON:
        axis = perpendicular_axis(f)
        return np.array([axis[0], axis[1], axis[2], 0.0])

    # q = [f × t, 1 + f·t] normalized is the half-angle form of the shortest arc
    cross = np.cross(f, t)
    quat = np.array([cross[0], cross[1], cross[2], 1.0 + dot])
    return quat / np.linalg.norm(quat)


def rotate_vector(quat, vec) -> np.ndarray:
    """Rotate vec by quaternion [x, y, z, w]."""
    return R.from_quat(_quat_array(quat)).apply(_to_numpy(vec))


def quat_angle_between(quat1, quat2) -> float:
    """Angle in radians of the relative rotation taking quat1 to quat2."""
    r1 = R.from_quat(_quat_array(quat1))
    r2 = R.from_quat(_quat_array(quat2))
    return float((r2 * r1.inv()).magnitude())


def quat_to_axis_angle(quat) -> Tuple[float, np.ndarray]:
    """Convert quaternion to (angle in degrees, unit axis) for glRotatef."""
    rotvec = R.from_quat(_quat_array(quat)).as_rotvec()
    angle = float(np.linalg.norm(rotvec))
    if angle == 0.0:
        return 0.0, UP.copy()
    return float(np.degrees(angle)), rotvec / angle


def _quat_array(quat) -> np.ndarray:
    if hasattr(quat, 'w'):
        return np.array([quat.x, quat.y, quat.z, quat.w], dtype=np.float64)
    return np.asarray(quat, dtype=np.float64)
