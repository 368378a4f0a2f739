"""Visual SLAM helpers: pose geometry, dataset loaders, keypoints, map-point messages and planes."""

__version__ = "0.1.0"