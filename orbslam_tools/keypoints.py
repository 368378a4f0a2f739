"""Keypoints, scale pyramids, camera intrinsics and lens undistortion."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

_UNDISTORT_ITERATIONS = 5
_SUPPORTED_COEFFICIENTS = (0, 4, 5, 8)


@dataclass(frozen=True)
class KeyPoint:
    """An image feature location with its pyramid level."""

    x: float
    y: float
    octave: int = 0
    size: float = 0.0
    angle: float = -1.0
    response: float = 0.0

    @property
    def pt(self) -> tuple[float, float]:
        """The location as an (x, y) pair."""
        return self.x, self.y


@dataclass(frozen=True)
class ScalePyramid:
    """Geometric image pyramid: level ``i`` is scaled by ``scale_factor ** i``."""

    levels: int = 8
    scale_factor: float = 1.2

    def __post_init__(self) -> None:
        if self.levels < 1:
            raise ValueError(f"a pyramid needs at least one level, got {self.levels}")
        if self.scale_factor <= 0:
            raise ValueError(f"scale factor must be positive, got {self.scale_factor}")

    @property
    def log_scale_factor(self) -> float:
        """Natural logarithm of the scale factor."""
        return math.log(self.scale_factor)

    @property
    def scale_factors(self) -> list[float]:
        """Scale of every level, starting at 1."""
        factors = [1.0]
        for _ in range(1, self.levels):
            factors.append(factors[-1] * self.scale_factor)
        return factors

    @property
    def inv_scale_factors(self) -> list[float]:
        """Reciprocal of every level's scale."""
        return [1.0 / factor for factor in self.scale_factors]

    @property
    def level_sigma2(self) -> list[float]:
        """Squared scale of every level."""
        return [factor * factor for factor in self.scale_factors]

    @property
    def inv_level_sigma2(self) -> list[float]:
        """Reciprocal of every level's squared scale."""
        return [1.0 / sigma2 for sigma2 in self.level_sigma2]


@dataclass(frozen=True)
class Calibration:
    """Pinhole camera intrinsics."""

    fx: float
    fy: float
    cx: float
    cy: float

    def __post_init__(self) -> None:
        if self.fx == 0 or self.fy == 0:
            raise ValueError("focal lengths must be non-zero")

    @classmethod
    def from_matrix(cls, camera_matrix) -> "Calibration":
        """Read fx, fy, cx and cy from a 3x3 camera matrix."""
        k = np.asarray(camera_matrix, dtype=np.float64)
        if k.shape != (3, 3):
            raise ValueError(f"camera matrix must be 3x3, got shape {k.shape}")
        return cls(fx=float(k[0, 0]), fy=float(k[1, 1]), cx=float(k[0, 2]), cy=float(k[1, 2]))

    @property
    def invfx(self) -> float:
        return 1.0 / self.fx

    @property
    def invfy(self) -> float:
        return 1.0 / self.fy


def descriptor_distance(a, b) -> int:
    """Hamming distance between two binary descriptors given as byte arrays."""
    first = np.asarray(a, dtype=np.uint8).reshape(-1)
    second = np.asarray(b, dtype=np.uint8).reshape(-1)
    if first.shape != second.shape:
        raise ValueError(
            f"descriptors differ in length: {first.size} and {second.size} bytes"
        )
    return int(np.unpackbits(np.bitwise_xor(first, second)).sum())


def _coefficients(dist_coef) -> np.ndarray:
    coeffs = np.asarray(dist_coef, dtype=np.float64).reshape(-1)
    if coeffs.size not in _SUPPORTED_COEFFICIENTS:
        raise ValueError(
            f"expected 4, 5 or 8 distortion coefficients, got {coeffs.size}"
        )
    return coeffs


def undistort_points(points, camera_matrix, dist_coef) -> np.ndarray:
    """Remove lens distortion from pixel points, keeping the same camera matrix.

    ``points`` is N x 2; coefficients are ``k1 k2 p1 p2 [k3 [k4 k5 k6]]``.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    k = np.asarray(camera_matrix, dtype=np.float64)
    if k.shape != (3, 3):
        raise ValueError(f"camera matrix must be 3x3, got shape {k.shape}")
    coeffs = _coefficients(dist_coef)
    full = np.zeros(8)
    full[: coeffs.size] = coeffs
    k1, k2, p1, p2, k3, k4, k5, k6 = full
    fx, fy, cx, cy = k[0, 0], k[1, 1], k[0, 2], k[1, 2]

    x0 = (pts[:, 0] - cx) / fx
    y0 = (pts[:, 1] - cy) / fy
    x, y = x0.copy(), y0.copy()
    for _ in range(_UNDISTORT_ITERATIONS):
        r2 = x * x + y * y
        icdist = (1 + ((k6 * r2 + k5) * r2 + k4) * r2) / (1 + ((k3 * r2 + k2) * r2 + k1) * r2)
        delta_x = 2 * p1 * x * y + p2 * (r2 + 2 * x * x)
        delta_y = p1 * (r2 + 2 * y * y) + 2 * p2 * x * y
        x = (x0 - delta_x) * icdist
        y = (y0 - delta_y) * icdist
    return np.column_stack((x * fx + cx, y * fy + cy))


def compute_image_bounds(width, height, camera_matrix, dist_coef) -> tuple[float, float, float, float]:
    """Undistorted image bounds as ``(min_x, max_x, min_y, max_y)``.

    Corners are undistorted only when the first coefficient ``k1`` is non-zero.
    """
    coeffs = _coefficients(dist_coef)
    if coeffs.size and coeffs[0] != 0.0:
        corners = np.array(
            [[0.0, 0.0], [width, 0.0], [0.0, height], [width, height]], dtype=np.float64
        )
        u = undistort_points(corners, camera_matrix, coeffs)
        return (
            float(min(u[0, 0], u[2, 0])),
            float(max(u[1, 0], u[3, 0])),
            float(min(u[0, 1], u[1, 1])),
            float(max(u[2, 1], u[3, 1])),
        )
    return 0.0, float(width), 0.0, float(height)