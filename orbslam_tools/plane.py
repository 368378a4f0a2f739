"""Planes fitted to map points for placing virtual objects, and viewer state."""

from __future__ import annotations

import math
import random
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from orbslam_tools.geometry import exp_so3_vector

_MIN_POINTS = 50
_MIN_OBSERVATIONS = 5
_UP = np.array([0.0, 1.0, 0.0])

_STATUS_TEXT = {
    False: {
        1: ("SLAM NOT INITIALIZED", (255, 0, 0)),
        2: ("SLAM ON", (0, 255, 0)),
        3: ("SLAM LOST", (255, 0, 0)),
    },
    True: {
        1: ("SLAM NOT INITIALIZED", (255, 0, 0)),
        2: ("LOCALIZATION ON", (0, 255, 0)),
        3: ("LOCALIZATION LOST", (255, 0, 0)),
    },
}


@dataclass
class PlanePoint:
    """A map point as seen by plane fitting: position, observation count and bad flag."""

    world_pos: np.ndarray
    observations: int = 0
    is_bad: bool = False

    def __post_init__(self) -> None:
        self.world_pos = np.asarray(self.world_pos, dtype=np.float64).reshape(3)


def _random_angle(rng: random.Random) -> float:
    return -3.14 / 2 + rng.random() * 3.14


def _orientation(normal: np.ndarray, rang: float) -> np.ndarray:
    """Rotation taking the y axis onto ``normal``, after a spin of ``rang`` about y."""
    v = np.cross(_UP, normal)
    sa = float(np.linalg.norm(v))
    ca = float(_UP @ normal)
    if sa < 1e-12:
        axis = np.zeros(3) if ca >= 0 else np.array([math.pi, 0.0, 0.0])
    else:
        axis = v * (math.atan2(sa, ca) / sa)
    align = exp_so3_vector(axis).astype(np.float64)
    spin = exp_so3_vector(_UP * rang).astype(np.float64)
    return align @ spin


class Plane:
    """A plane through map points, with a world-to-plane transform.

    The normal is oriented away from the camera that first observed the plane.
    """

    def __init__(self, map_points: Sequence[PlanePoint], tcw, rng: Optional[random.Random] = None):
        generator = rng if rng is not None else random.Random()
        self.map_points = list(map_points)
        self.tcw = np.array(tcw, dtype=np.float64)
        self.xc: Optional[np.ndarray] = None
        self.rang = _random_angle(generator)
        self.normal = np.zeros(3)
        self.origin = np.zeros(3)
        self.tpw = np.eye(4)
        self.recompute()

    @classmethod
    def from_normal(cls, normal, origin, rng: Optional[random.Random] = None) -> "Plane":
        """A plane given directly by its normal and origin."""
        generator = rng if rng is not None else random.Random()
        plane = cls.__new__(cls)
        plane.map_points = []
        plane.tcw = None
        plane.xc = None
        plane.normal = np.asarray(normal, dtype=np.float64).reshape(3).copy()
        plane.origin = np.asarray(origin, dtype=np.float64).reshape(3).copy()
        plane.rang = _random_angle(generator)
        plane.tpw = np.eye(4)
        plane.tpw[:3, :3] = _orientation(plane.normal, plane.rang)
        plane.tpw[:3, 3] = plane.origin
        return plane

    def recompute(self) -> None:
        """Refit the plane to all of its points that are not bad."""
        if self.tcw is None:
            raise ValueError("a plane given by its normal has no points to refit")
        good = np.array([p.world_pos for p in self.map_points if not p.is_bad], dtype=np.float64)
        if good.size == 0:
            raise ValueError("no valid points to fit a plane to")
        good = good.reshape(-1, 3)
        matrix = np.column_stack((good, np.ones(len(good))))
        _, _, vt = np.linalg.svd(matrix, full_matrices=True)
        a, b, c = vt[3, 0], vt[3, 1], vt[3, 2]

        origin = good.mean(axis=0)
        f = 1.0 / math.sqrt(a * a + b * b + c * c)

        if self.xc is None:
            rotation = self.tcw[:3, :3]
            camera_center = -rotation.T @ self.tcw[:3, 3]
            self.xc = camera_center - origin

        if self.xc @ np.array([a, b, c]) > 0:
            a, b, c = -a, -b, -c

        self.normal = np.array([a * f, b * f, c * f])
        self.origin = origin
        self.tpw = np.eye(4)
        self.tpw[:3, :3] = _orientation(self.normal, self.rang)
        self.tpw[:3, 3] = origin

    def gl_matrix(self) -> list[float]:
        """The world-to-plane transform as 16 floats in column-major order."""
        return [float(value) for value in self.tpw.T.reshape(-1)]


def detect_plane(
    points: Sequence[PlanePoint],
    tcw,
    iterations: int = 50,
    rng: Optional[random.Random] = None,
) -> Optional[Plane]:
    """Fit a plane by RANSAC to well-observed points; None if there are too few."""
    generator = rng if rng is not None else random.Random()
    candidates = [p for p in points if p is not None and p.observations > _MIN_OBSERVATIONS]
    n = len(candidates)
    if n < _MIN_POINTS:
        return None
    positions = np.array([p.world_pos for p in candidates], dtype=np.float64)

    best_dist = 1e10
    best_distances: Optional[np.ndarray] = None
    for _ in range(iterations):
        available = list(range(n))
        sample = []
        for _ in range(3):
            pick = generator.randint(0, len(available) - 1)
            sample.append(available[pick])
            available[pick] = available[-1]
            available.pop()

        matrix = np.column_stack((positions[sample], np.ones(3)))
        _, _, vt = np.linalg.svd(matrix, full_matrices=True)
        a, b, c, d = vt[3]
        f = 1.0 / math.sqrt(a * a + b * b + c * c + d * d)
        distances = np.abs(positions @ np.array([a, b, c]) + d) * f

        nth = max(int(0.2 * n), 20)
        median = float(np.sort(distances)[nth])
        if median < best_dist:
            best_dist = median
            best_distances = distances

    if best_distances is None:
        return None
    threshold = 1.4 * best_dist
    inliers = [p for p, dist in zip(candidates, best_distances) if dist < threshold]
    return Plane(inliers, tcw, generator)


def status_text(status: int, localization_mode: bool) -> Optional[tuple[str, tuple[int, int, int]]]:
    """Caption and (r, g, b) colour for a tracking status, or None for other states."""
    return _STATUS_TEXT[bool(localization_mode)].get(status)


class ViewerState:
    """The last image, pose and tracked points handed over by the tracker."""

    def __init__(self, fx: float = 0.0, fy: float = 0.0, cx: float = 0.0, cy: float = 0.0):
        self.fx = fx
        self.fy = fy
        self.cx = cx
        self.cy = cy
        self.fps: Optional[float] = None
        self.period_ms: Optional[float] = None
        self._lock = threading.Lock()
        self._image = None
        self._tcw = None
        self._status = 0
        self._keypoints: list = []
        self._map_points: list = []

    def set_fps(self, fps: float) -> None:
        """Set the frame rate and the frame period in milliseconds."""
        if fps <= 0:
            raise ValueError(f"frame rate must be positive, got {fps}")
        self.fps = float(fps)
        self.period_ms = 1e3 / fps

    def set_image_pose(self, image, tcw, status: int, keypoints, map_points) -> None:
        """Store copies of the image, pose, status, keypoints and map points."""
        with self._lock:
            self._image = None if image is None else np.array(image, copy=True)
            self._tcw = None if tcw is None else np.array(tcw, copy=True)
            self._status = status
            self._keypoints = list(keypoints)
            self._map_points = list(map_points)

    def get_image_pose(self):
        """Copies of ``(image, tcw, status, keypoints, map_points)``."""
        with self._lock:
            image = None if self._image is None else self._image.copy()
            tcw = None if self._tcw is None else self._tcw.copy()
            return image, tcw, self._status, list(self._keypoints), list(self._map_points)