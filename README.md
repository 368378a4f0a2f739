# orbslam_tools

Helpers for feature-based visual SLAM pipelines, written in plain Python on
top of NumPy.

## What is inside

| Module | Purpose |
| --- | --- |
| `orbslam_tools.geometry` | Splitting and building 4x4 transforms (`split_pose`, `to_se3`, `sim3_to_matrix`), rotation to quaternion (`to_quaternion`, ordered x, y, z, w), the SO(3) exponential (`exp_so3`, `exp_so3_vector`), descriptor rows (`to_descriptor_vector`) |
| `orbslam_tools.datasets` | Monocular loaders `load_euroc_mono`, `load_kitti_mono`, `load_tum_mono` returning an `ImageSequence`; `tracking_statistics` (median and mean); `frame_wait` for real-time playback pacing |
| `orbslam_tools.stereo_datasets` | `load_tum_rgbd` (an `RGBDSequence`), `load_euroc_stereo` and `load_kitti_stereo` (a `StereoSequence`), and `check_rectification`, which collects `RectificationParameters` from a settings mapping or raises `ValueError` when any are missing |
| `orbslam_tools.keypoints` | `KeyPoint`, `ScalePyramid`, `Calibration`, Hamming `descriptor_distance`, iterative `undistort_points` and `compute_image_bounds` |
| `orbslam_tools.messages` | Flat pose-array packing of keyframes and tracked map points (`pack_all_keyframes`, `pack_tracked_points`, `camera_pose_from_transform`), a `PublishScheduler` deciding when to send the whole map, and `parse_publisher_params` for publisher arguments |
| `orbslam_tools.plane` | RANSAC plane fitting to map points (`detect_plane`, `Plane`), tracking-status captions (`status_text`) and a thread-safe `ViewerState` |

## Examples

Load a KITTI monocular sequence and summarise tracking times:

```python
from orbslam_tools.datasets import load_kitti_mono, tracking_statistics

sequence = load_kitti_mono("/data/kitti/sequences/00")
for filename, timestamp in sequence:
    ...

stats = tracking_statistics([0.031, 0.028, 0.035, 0.030])
print(stats.median, stats.mean)  # median is the upper middle value: 0.031
```

Work with rotations:

```python
import numpy as np
from orbslam_tools.geometry import exp_so3, to_quaternion

rotation = exp_so3(0.0, np.pi / 2, 0.0)
print(to_quaternion(rotation))  # [x, y, z, w]
```

Compare two binary descriptors:

```python
import numpy as np
from orbslam_tools.keypoints import descriptor_distance

a = np.zeros(32, dtype=np.uint8)
b = np.full(32, 0xFF, dtype=np.uint8)
print(descriptor_distance(a, b))  # 256
```

Pack map points for publishing:

```python
import numpy as np
from orbslam_tools.messages import camera_pose_from_transform, pack_tracked_points

pose = camera_pose_from_transform(np.eye(4))
poses = pack_tracked_points(pose, [[1.0, 2.0, 3.0], None])
print(len(poses))  # 2: the camera pose and the one point that exists
```

## What this package does not do

It has no tracking pipeline: it does not extract features, match stereo
pairs, hold frames with a feature grid, or build occupancy grid maps. It reads
no images and provides no command-line programs; it supplies the pieces
listed above for use in your own code.

## Tests

The test suite uses pytest and lives in `tests/`:

```
pip install -e .[test]
pytest
```