import math

import numpy as np
import pytest

from orbslam_tools.geometry import (
    exp_so3,
    exp_so3_vector,
    sim3_to_matrix,
    split_pose,
    to_descriptor_vector,
    to_quaternion,
    to_se3,
)


def test_descriptor_vector_rows():
    desc = np.arange(12, dtype=np.uint8).reshape(3, 4)
    rows = to_descriptor_vector(desc)
    assert len(rows) == 3
    for i, row in enumerate(rows):
        assert np.array_equal(row, desc[i])


def test_se3_round_trip():
    rot = exp_so3(0.1, -0.2, 0.3)
    trans = np.array([1.0, 2.0, 3.0])
    transform = to_se3(rot, trans)
    assert transform.shape == (4, 4)
    assert transform.dtype == np.float32
    assert np.allclose(transform[3], [0, 0, 0, 1])
    r2, t2 = split_pose(transform)
    assert np.allclose(r2, rot, atol=1e-6)
    assert np.allclose(t2, trans)


def test_split_pose_rejects_bad_shape():
    with pytest.raises(ValueError):
        split_pose(np.eye(3))


def test_to_se3_rejects_bad_rotation():
    with pytest.raises(ValueError):
        to_se3(np.eye(2), [0, 0, 0])


def test_sim3_scales_rotation_only():
    rot = exp_so3(0.0, 0.5, 0.0)
    trans = [4.0, 5.0, 6.0]
    m = sim3_to_matrix(rot, trans, 2.5)
    assert np.allclose(m[:3, :3], 2.5 * rot, atol=1e-6)
    assert np.allclose(m[:3, 3], trans)
    assert np.allclose(m[3], [0, 0, 0, 1])


def test_identity_quaternion():
    assert to_quaternion(np.eye(3)) == pytest.approx([0.0, 0.0, 0.0, 1.0])


@pytest.mark.parametrize("vec", [(0.0, 0.0, 0.7), (0.3, -0.4, 0.2), (0.0, 2.5, 0.0)])
def test_quaternion_matches_rotation_angle(vec):
    q = to_quaternion(exp_so3(*vec))
    assert math.isclose(sum(c * c for c in q), 1.0, rel_tol=1e-5)
    angle = math.sqrt(sum(v * v for v in vec))
    xyz = math.sqrt(q[0] ** 2 + q[1] ** 2 + q[2] ** 2)
    assert 2 * math.atan2(xyz, abs(q[3])) == pytest.approx(angle, abs=1e-4)
    # axis direction agrees with the rotation vector
    sign = 1.0 if q[3] >= 0 else -1.0
    axis = [sign * c / xyz for c in q[:3]]
    assert axis == pytest.approx([v / angle for v in vec], abs=1e-4)


def test_half_turn_quaternion_uses_diagonal_branch():
    q = to_quaternion(exp_so3(math.pi, 0.0, 0.0))
    assert abs(q[0]) == pytest.approx(1.0, abs=1e-5)
    assert q[1] == pytest.approx(0.0, abs=1e-5)
    assert q[2] == pytest.approx(0.0, abs=1e-5)
    assert q[3] == pytest.approx(0.0, abs=1e-3)


def test_exp_so3_zero_is_identity():
    assert np.allclose(exp_so3(0.0, 0.0, 0.0), np.eye(3))


@pytest.mark.parametrize("vec", [(1e-6, 0.0, 2e-6), (0.4, 0.1, -0.9), (3.0, 0.0, 0.0)])
def test_exp_so3_is_rotation(vec):
    r = exp_so3(*vec)
    assert np.allclose(r @ r.T, np.eye(3), atol=1e-5)
    assert np.linalg.det(r) == pytest.approx(1.0, abs=1e-5)
    # the rotation axis is fixed by the rotation
    assert np.allclose(r @ np.array(vec), np.array(vec), atol=1e-5)


def test_exp_so3_vector_matches_scalar_form():
    assert np.allclose(exp_so3_vector([0.2, 0.3, -0.1]), exp_so3(0.2, 0.3, -0.1))
    with pytest.raises(ValueError):
        exp_so3_vector([1.0, 2.0])