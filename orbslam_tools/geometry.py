"""Rigid-body helpers: homogeneous transforms, quaternions and the SO(3) exponential."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

_EXP_EPS = 1e-4


def to_descriptor_vector(descriptors) -> list[np.ndarray]:
    """Split a descriptor matrix into a list of its rows."""
    matrix = np.atleast_2d(np.asarray(descriptors))
    return [row.copy() for row in matrix]


def split_pose(transform) -> tuple[np.ndarray, np.ndarray]:
    """Return the 3x3 rotation and 3-vector translation of a 4x4 (or 3x4) transform."""
    matrix = np.asarray(transform, dtype=np.float64)
    if matrix.shape[0] < 3 or matrix.shape[1] != 4:
        raise ValueError(f"expected a 3x4 or 4x4 transform, got shape {matrix.shape}")
    return matrix[:3, :3].copy(), matrix[:3, 3].copy()


def to_se3(rotation, translation) -> np.ndarray:
    """Build a 4x4 single-precision homogeneous transform from R and t."""
    rot = np.asarray(rotation, dtype=np.float64)
    trans = np.asarray(translation, dtype=np.float64).reshape(-1)
    if rot.shape != (3, 3):
        raise ValueError(f"rotation must be 3x3, got shape {rot.shape}")
    if trans.shape != (3,):
        raise ValueError(f"translation must have 3 elements, got {trans.size}")
    result = np.eye(4, dtype=np.float32)
    result[:3, :3] = rot
    result[:3, 3] = trans
    return result


def sim3_to_matrix(rotation, translation, scale: float) -> np.ndarray:
    """Build a 4x4 transform for a similarity: the rotation block is scaled by ``scale``."""
    return to_se3(float(scale) * np.asarray(rotation, dtype=np.float64), translation)


def to_quaternion(rotation) -> list[float]:
    """Convert a rotation matrix to a quaternion ordered ``[x, y, z, w]``."""
    m = np.asarray(rotation, dtype=np.float64)[:3, :3]
    if m.shape != (3, 3):
        raise ValueError(f"rotation must be 3x3, got shape {m.shape}")
    q = [0.0, 0.0, 0.0]
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0.0:
        t = math.sqrt(trace + 1.0)
        w = 0.5 * t
        t = 0.5 / t
        q = [(m[2, 1] - m[1, 2]) * t, (m[0, 2] - m[2, 0]) * t, (m[1, 0] - m[0, 1]) * t]
    else:
        i = 0
        if m[1, 1] > m[0, 0]:
            i = 1
        if m[2, 2] > m[i, i]:
            i = 2
        j = (i + 1) % 3
        k = (j + 1) % 3
        t = math.sqrt(m[i, i] - m[j, j] - m[k, k] + 1.0)
        q[i] = 0.5 * t
        t = 0.5 / t
        w = (m[k, j] - m[j, k]) * t
        q[j] = (m[j, i] + m[i, j]) * t
        q[k] = (m[k, i] + m[i, k]) * t
    return [float(q[0]), float(q[1]), float(q[2]), float(w)]


def exp_so3(x: float, y: float, z: float) -> np.ndarray:
    """Rodrigues' formula: the rotation matrix for the axis-angle vector (x, y, z)."""
    identity = np.eye(3, dtype=np.float32)
    d2 = x * x + y * y + z * z
    d = math.sqrt(d2)
    w = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]], dtype=np.float32)
    if d < _EXP_EPS:
        return identity + w + 0.5 * (w @ w)
    return (identity + w * (math.sin(d) / d) + (w @ w) * ((1.0 - math.cos(d)) / d2)).astype(
        np.float32
    )


def exp_so3_vector(vector: Sequence[float]) -> np.ndarray:
    """Rodrigues' formula applied to a 3-element vector."""
    flat = np.asarray(vector, dtype=np.float64).reshape(-1)
    if flat.size < 3:
        raise ValueError("vector must have 3 elements")
    return exp_so3(float(flat[0]), float(flat[1]), float(flat[2]))