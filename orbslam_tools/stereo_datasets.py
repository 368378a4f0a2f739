"""Loading of stereo and RGB-D sequences and stereo rectification settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator, Mapping

import numpy as np

from orbslam_tools.datasets import _kitti_timestamps, _leading_float, _non_empty_lines

_MATRIX_KEYS = (
    "LEFT.K",
    "RIGHT.K",
    "LEFT.P",
    "RIGHT.P",
    "LEFT.R",
    "RIGHT.R",
    "LEFT.D",
    "RIGHT.D",
)
_SIZE_KEYS = ("LEFT.height", "LEFT.width", "RIGHT.height", "RIGHT.width")


@dataclass
class StereoSequence:
    """Left and right image file names with their timestamps in seconds."""

    left: list[str] = field(default_factory=list)
    right: list[str] = field(default_factory=list)
    timestamps: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.left)

    def __iter__(self) -> Iterator[tuple[str, str, float]]:
        return iter(zip(self.left, self.right, self.timestamps))


@dataclass
class RGBDSequence:
    """Colour and depth image file names with the colour timestamps in seconds."""

    rgb: list[str] = field(default_factory=list)
    depth: list[str] = field(default_factory=list)
    timestamps: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rgb)

    def __iter__(self) -> Iterator[tuple[str, str, float]]:
        return iter(zip(self.rgb, self.depth, self.timestamps))


@dataclass(frozen=True)
class RectificationParameters:
    """Calibration needed to rectify a stereo pair."""

    k_left: np.ndarray
    k_right: np.ndarray
    p_left: np.ndarray
    p_right: np.ndarray
    r_left: np.ndarray
    r_right: np.ndarray
    d_left: np.ndarray
    d_right: np.ndarray
    rows_left: int
    cols_left: int
    rows_right: int
    cols_right: int

    @property
    def new_camera_matrix_left(self) -> np.ndarray:
        """The 3x3 block of the left projection matrix."""
        return self.p_left[:3, :3].copy()

    @property
    def new_camera_matrix_right(self) -> np.ndarray:
        """The 3x3 block of the right projection matrix."""
        return self.p_right[:3, :3].copy()

    @property
    def size_left(self) -> tuple[int, int]:
        """Left image size as (width, height)."""
        return self.cols_left, self.rows_left

    @property
    def size_right(self) -> tuple[int, int]:
        """Right image size as (width, height)."""
        return self.cols_right, self.rows_right


def load_tum_rgbd(association_path) -> RGBDSequence:
    """Read a TUM association file of lines ``t_rgb rgb_file t_depth depth_file``.

    File names are returned as written in the file, relative to the sequence folder.
    """
    sequence = RGBDSequence()
    for line in _non_empty_lines(association_path):
        tokens = line.split()
        if len(tokens) < 4:
            raise ValueError(
                f"{association_path}: expected 't_rgb rgb t_depth depth', got {line!r}"
            )
        sequence.timestamps.append(_leading_float(line, association_path))
        sequence.rgb.append(tokens[1])
        sequence.depth.append(tokens[3])
    return sequence


def load_euroc_stereo(left_path, right_path, times_path) -> StereoSequence:
    """Read a EuRoC times file; each line names ``<folder>/<line>.png`` in nanoseconds."""
    left_prefix = os.fspath(left_path)
    right_prefix = os.fspath(right_path)
    sequence = StereoSequence()
    for line in _non_empty_lines(times_path):
        sequence.left.append(f"{left_prefix}/{line}.png")
        sequence.right.append(f"{right_prefix}/{line}.png")
        sequence.timestamps.append(_leading_float(line, times_path) / 1e9)
    return sequence


def load_kitti_stereo(sequence_path) -> StereoSequence:
    """Read a KITTI sequence: ``times.txt`` with ``image_0`` and ``image_1`` pairs."""
    timestamps = _kitti_timestamps(sequence_path)
    root = os.fspath(sequence_path)
    names = [f"{i:06d}.png" for i in range(len(timestamps))]
    return StereoSequence(
        left=[f"{root}/image_0/{name}" for name in names],
        right=[f"{root}/image_1/{name}" for name in names],
        timestamps=timestamps,
    )


def _as_int(value) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def check_rectification(settings: Mapping) -> RectificationParameters:
    """Collect stereo rectification parameters from a settings mapping.

    Raises ``ValueError`` when any matrix is missing or empty, or any image size is zero.
    """
    matrices = {}
    for key in _MATRIX_KEYS:
        value = settings.get(key)
        array = None if value is None else np.asarray(value, dtype=np.float64)
        if array is None or array.size == 0:
            raise ValueError("Calibration parameters to rectify stereo are missing!")
        matrices[key] = np.atleast_2d(array)
    sizes = {key: _as_int(settings.get(key)) for key in _SIZE_KEYS}
    if any(size == 0 for size in sizes.values()):
        raise ValueError("Calibration parameters to rectify stereo are missing!")
    return RectificationParameters(
        k_left=matrices["LEFT.K"],
        k_right=matrices["RIGHT.K"],
        p_left=matrices["LEFT.P"],
        p_right=matrices["RIGHT.P"],
        r_left=matrices["LEFT.R"],
        r_right=matrices["RIGHT.R"],
        d_left=matrices["LEFT.D"],
        d_right=matrices["RIGHT.D"],
        rows_left=sizes["LEFT.height"],
        cols_left=sizes["LEFT.width"],
        rows_right=sizes["RIGHT.height"],
        cols_right=sizes["RIGHT.width"],
    )