[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "orbslam-tools"
version = "0.1.0"
description = "Visual SLAM helpers: pose geometry, dataset loaders, keypoint utilities, map-point messages and plane detection"
requires-python = ">=3.10"
keywords = [
    "slam",
    "visual-odometry",
    "stereo",
    "rgbd",
    "computer-vision",
    "kitti",
    "euroc",
    "tum",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["orbslam_tools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
