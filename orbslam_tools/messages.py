"""Pose-array messages carrying camera poses and map points, and publisher settings."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from orbslam_tools.geometry import to_quaternion

DEFAULT_IMAGE_TOPIC = "/remove_distort_image0"
USAGE = (
    "Usage: monopub path_to_vocabulary path_to_settings "
    "path_to_sequence/camera_id/-1 <image_topic>"
)

_INTEGER = re.compile(r"[+-]?[0-9]+")
_ATOI = re.compile(r"\s*([+-]?[0-9]+)")


@dataclass
class Pose:
    """A position with an orientation quaternion."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    qx: float = 0.0
    qy: float = 0.0
    qz: float = 0.0
    qw: float = 0.0


@dataclass
class KeyFrameView:
    """What is published of a keyframe: id, rotation, centre and observed points.

    Points that are missing or bad are given as None.
    """

    id: int
    rotation: np.ndarray
    camera_center: np.ndarray
    points: list = field(default_factory=list)
    is_bad: bool = False


class ImageSource(enum.Enum):
    CAMERA = "camera"
    TOPIC = "topic"
    SEQUENCE = "sequence"


@dataclass
class PublisherParams:
    """Command-line settings of the publisher."""

    vocabulary: str
    settings: str
    source: ImageSource
    camera_id: Optional[int] = None
    sequence_path: Optional[str] = None
    image_topic: str = DEFAULT_IMAGE_TOPIC
    all_pts_pub_gap: int = 0


class PublishScheduler:
    """Decides when to publish every keyframe rather than just the tracked points."""

    def __init__(self, all_pts_pub_gap: int = 0) -> None:
        self.all_pts_pub_gap = all_pts_pub_gap
        self.pub_count = 0
        self.pub_all_pts = False

    def should_publish_all(self, loop_detected: bool) -> bool:
        """True when the whole map is due, either by the keyframe gap or a loop closure."""
        if self.all_pts_pub_gap > 0 and self.pub_count >= self.all_pts_pub_gap:
            self.pub_all_pts = True
            self.pub_count = 0
        if self.pub_all_pts or loop_detected:
            self.pub_all_pts = False
            return True
        return False

    def record_keyframe(self) -> None:
        """Count a keyframe whose tracked points were published."""
        self.pub_count += 1


def is_integer(text: str) -> bool:
    """True if the whole string is a decimal integer with an optional sign."""
    return _INTEGER.fullmatch(text) is not None


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def parse_publisher_params(argv: Sequence[str]) -> PublisherParams:
    """Parse ``vocabulary settings source [topic-or-gap]``.

    A non-negative integer source selects a camera, a negative one a topic,
    anything else a sequence folder.
    """
    args = list(argv)
    if len(args) < 3:
        raise ValueError(USAGE)
    vocabulary, settings, source = args[0], args[1], args[2]
    params = PublisherParams(vocabulary, settings, ImageSource.SEQUENCE)
    if is_integer(source):
        camera_id = int(source)
        if camera_id >= 0:
            params.source = ImageSource.CAMERA
            params.camera_id = camera_id
        else:
            params.source = ImageSource.TOPIC
            if len(args) > 3:
                params.image_topic = args[3]
    else:
        params.sequence_path = source
    if len(args) >= 4:
        params.all_pts_pub_gap = _atoi(args[3])
    return params


def _count_pose(count: int) -> Pose:
    return Pose(x=float(count), y=float(count), z=float(count))


def _point_pose(point) -> Optional[Pose]:
    if point is None:
        return None
    flat = np.asarray(point, dtype=np.float64).reshape(-1)
    if flat.size == 0:
        return None
    return Pose(x=float(flat[0]), y=float(flat[1]), z=float(flat[2]))


def pack_all_keyframes(keyframes: Sequence[KeyFrameView]) -> list[Pose]:
    """Pack every good keyframe and its points.

    Layout: keyframe count, then per keyframe its pose, its point count and its points.
    Counts are stored in x, y and z alike.
    """
    poses = [Pose()]
    n_kf = 0
    for keyframe in sorted(keyframes, key=lambda kf: kf.id):
        if keyframe.is_bad:
            continue
        q = to_quaternion(np.asarray(keyframe.rotation, dtype=np.float64).T)
        center = np.asarray(keyframe.camera_center, dtype=np.float64).reshape(-1)
        poses.append(
            Pose(float(center[0]), float(center[1]), float(center[2]), q[0], q[1], q[2], q[3])
        )
        count_index = len(poses)
        poses.append(Pose())
        n_pts = 0
        for point in keyframe.points:
            pose = _point_pose(point)
            if pose is None:
                continue
            poses.append(pose)
            n_pts += 1
        poses[count_index] = _count_pose(n_pts)
        n_kf += 1
    poses[0] = _count_pose(n_kf)
    return poses


def pack_tracked_points(camera_pose: Pose, points: Sequence) -> list[Pose]:
    """The camera pose followed by every tracked point that exists."""
    poses = [camera_pose]
    for point in points:
        pose = _point_pose(point)
        if pose is not None:
            poses.append(pose)
    return poses


def camera_pose_from_transform(tcw) -> Pose:
    """Camera centre and camera-to-world orientation from a world-to-camera transform."""
    matrix = np.asarray(tcw, dtype=np.float64)
    rwc = matrix[:3, :3].T
    twc = -rwc @ matrix[:3, 3]
    q = to_quaternion(rwc)
    return Pose(float(twc[0]), float(twc[1]), float(twc[2]), q[0], q[1], q[2], q[3])