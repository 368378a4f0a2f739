"""Loading of monocular image sequences and per-frame timing helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator, Sequence


@dataclass
class ImageSequence:
    """Image file names with their timestamps in seconds."""

    filenames: list[str] = field(default_factory=list)
    timestamps: list[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.filenames)

    def __iter__(self) -> Iterator[tuple[str, float]]:
        return iter(zip(self.filenames, self.timestamps))


@dataclass(frozen=True)
class TrackingStatistics:
    """Median and mean of per-frame tracking times."""

    median: float
    mean: float


def _non_empty_lines(path, skip: int = 0) -> Iterator[str]:
    with open(path, encoding="utf-8") as handle:
        for number, raw in enumerate(handle):
            if number < skip:
                continue
            line = raw.rstrip("\n")
            if line:
                yield line


def _leading_float(line: str, path) -> float:
    tokens = line.split()
    if not tokens:
        raise ValueError(f"{path}: blank line where a timestamp was expected")
    try:
        return float(tokens[0])
    except ValueError as exc:
        raise ValueError(f"{path}: bad timestamp {tokens[0]!r}") from exc


def load_euroc_mono(image_path, times_path) -> ImageSequence:
    """Read a EuRoC times file; each line names ``<image_path>/<line>.png`` in nanoseconds."""
    prefix = os.fspath(image_path)
    sequence = ImageSequence()
    for line in _non_empty_lines(times_path):
        sequence.filenames.append(f"{prefix}/{line}.png")
        sequence.timestamps.append(_leading_float(line, times_path) / 1e9)
    return sequence


def _kitti_timestamps(sequence_path) -> list[float]:
    times_file = f"{os.fspath(sequence_path)}/times.txt"
    return [_leading_float(line, times_file) for line in _non_empty_lines(times_file)]


def load_kitti_mono(sequence_path) -> ImageSequence:
    """Read a KITTI sequence: ``times.txt`` and left images ``image_0/NNNNNN.png``."""
    timestamps = _kitti_timestamps(sequence_path)
    prefix = f"{os.fspath(sequence_path)}/image_0/"
    filenames = [f"{prefix}{i:06d}.png" for i in range(len(timestamps))]
    return ImageSequence(filenames, timestamps)


def load_tum_mono(sequence_path) -> ImageSequence:
    """Read a TUM ``rgb.txt``; the first three lines are a header.

    File names are returned joined to ``sequence_path``.
    """
    root = os.fspath(sequence_path)
    list_file = f"{root}/rgb.txt"
    sequence = ImageSequence()
    for line in _non_empty_lines(list_file, skip=3):
        tokens = line.split()
        if len(tokens) < 2:
            raise ValueError(f"{list_file}: expected 'timestamp filename', got {line!r}")
        sequence.timestamps.append(_leading_float(line, list_file))
        sequence.filenames.append(f"{root}/{tokens[1]}")
    return sequence


def tracking_statistics(times: Sequence[float]) -> TrackingStatistics:
    """Median (upper middle element) and mean of tracking times."""
    ordered = sorted(times)
    if not ordered:
        raise ValueError("no tracking times given")
    return TrackingStatistics(median=ordered[len(ordered) // 2], mean=sum(ordered) / len(ordered))


def frame_wait(timestamps: Sequence[float], index: int, elapsed: float) -> float:
    """Seconds to wait after frame ``index`` so playback keeps the recorded rate."""
    count = len(timestamps)
    if not 0 <= index < count:
        raise IndexError(f"frame index {index} out of range for {count} frames")
    if index < count - 1:
        period = timestamps[index + 1] - timestamps[index]
    elif index > 0:
        period = timestamps[index] - timestamps[index - 1]
    else:
        period = 0.0
    return period - elapsed if elapsed < period else 0.0