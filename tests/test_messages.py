import numpy as np
import pytest

from orbslam_tools.messages import (
    DEFAULT_IMAGE_TOPIC,
    ImageSource,
    KeyFrameView,
    Pose,
    PublishScheduler,
    camera_pose_from_transform,
    is_integer,
    pack_all_keyframes,
    pack_tracked_points,
    parse_publisher_params,
)


@pytest.mark.parametrize(
    "text, expected",
    [("12", True), ("-1", True), ("+3", True), ("", False), ("abc", False),
     ("12a", False), ("+", False), (" 1", False)],
)
def test_is_integer(text, expected):
    assert is_integer(text) is expected


def test_parse_camera():
    params = parse_publisher_params(["voc", "set", "0"])
    assert params.source is ImageSource.CAMERA
    assert params.camera_id == 0
    assert params.all_pts_pub_gap == 0


def test_parse_topic_default_and_custom():
    params = parse_publisher_params(["voc", "set", "-1"])
    assert params.source is ImageSource.TOPIC
    assert params.image_topic == DEFAULT_IMAGE_TOPIC
    custom = parse_publisher_params(["voc", "set", "-1", "/images"])
    assert custom.image_topic == "/images"
    assert custom.all_pts_pub_gap == 0


def test_parse_sequence_with_gap():
    params = parse_publisher_params(["voc", "set", "/data/seq", "5"])
    assert params.source is ImageSource.SEQUENCE
    assert params.sequence_path == "/data/seq"
    assert params.all_pts_pub_gap == 5
    assert params.vocabulary == "voc"


def test_parse_too_few_arguments():
    with pytest.raises(ValueError):
        parse_publisher_params(["voc", "set"])


def test_scheduler_gap():
    scheduler = PublishScheduler(2)
    assert scheduler.should_publish_all(False) is False
    scheduler.record_keyframe()
    scheduler.record_keyframe()
    assert scheduler.should_publish_all(False) is True
    assert scheduler.pub_count == 0
    assert scheduler.should_publish_all(False) is False


def test_scheduler_loop_and_no_gap():
    scheduler = PublishScheduler(0)
    for _ in range(10):
        scheduler.record_keyframe()
    assert scheduler.should_publish_all(False) is False
    assert scheduler.should_publish_all(True) is True


def test_camera_pose_from_transform():
    tcw = np.eye(4)
    tcw[:3, 3] = [1.0, 2.0, 3.0]
    pose = camera_pose_from_transform(tcw)
    assert (pose.x, pose.y, pose.z) == pytest.approx((-1.0, -2.0, -3.0))
    assert (pose.qx, pose.qy, pose.qz, pose.qw) == pytest.approx((0.0, 0.0, 0.0, 1.0))


def test_pack_tracked_points_skips_missing():
    camera = Pose(x=1.0)
    poses = pack_tracked_points(camera, [np.array([1.0, 2.0, 3.0]), None, np.array([]), [4.0, 5.0, 6.0]])
    assert poses[0] is camera
    assert len(poses) == 3
    assert (poses[2].x, poses[2].y, poses[2].z) == (4.0, 5.0, 6.0)


def test_pack_all_keyframes_layout():
    kf_late = KeyFrameView(5, np.eye(3), np.array([1.0, 0.0, 0.0]), [np.array([7.0, 8.0, 9.0])])
    kf_early = KeyFrameView(1, np.eye(3), np.array([0.0, 0.0, 0.0]), [None, [1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])
    kf_bad = KeyFrameView(3, np.eye(3), np.zeros(3), [[0.0, 0.0, 0.0]], is_bad=True)
    poses = pack_all_keyframes([kf_late, kf_bad, kf_early])
    assert (poses[0].x, poses[0].y, poses[0].z) == (2.0, 2.0, 2.0)
    assert poses[1].x == 0.0 and poses[1].qw == pytest.approx(1.0)
    assert poses[2].x == 2.0
    assert poses[5].x == 1.0
    assert poses[6].x == 1.0
    assert poses[7].x == 7.0
    assert len(poses) == 8


def test_pack_all_keyframes_empty():
    poses = pack_all_keyframes([])
    assert len(poses) == 1
    assert poses[0].x == 0.0