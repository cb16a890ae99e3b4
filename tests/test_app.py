import math

import numpy as np
import pytest

from gizmos.app import circle_vertices, main, perspective, translation


def test_circle_vertices_shape_and_radius():
    points = circle_vertices(0.7, 100)
    assert points.shape == (101, 3)
    np.testing.assert_allclose(np.linalg.norm(points, axis=1), (0.7 + 0.05) * 1.5)
    np.testing.assert_allclose(points[:, 2], 0.0)


def test_circle_vertices_closes_on_itself():
    points = circle_vertices(0.7, 100)
    np.testing.assert_allclose(points[0], [(0.7 + 0.05) * 1.5, 0.0, 0.0])
    np.testing.assert_allclose(points[-1], points[0], atol=1e-4)


def _ndc(matrix, point):
    clip = matrix @ np.append(point, 1.0)
    return clip[:3] / clip[3]


def test_perspective_maps_near_and_far_planes():
    projection = perspective(math.radians(45.0), 1.5, 0.1, 100.0)
    assert _ndc(projection, [0.0, 0.0, -0.1])[2] == pytest.approx(-1.0)
    assert _ndc(projection, [0.0, 0.0, -100.0])[2] == pytest.approx(1.0)


def test_perspective_field_of_view_edge():
    fovy = math.radians(60.0)
    projection = perspective(fovy, 2.0, 0.5, 50.0)
    depth = 10.0
    top = depth * math.tan(fovy / 2.0)
    right = top * 2.0
    ndc = _ndc(projection, [right, top, -depth])
    np.testing.assert_allclose(ndc[:2], [1.0, 1.0])


def test_translation_moves_points_not_directions():
    m = translation((1.0, -2.0, 3.0))
    np.testing.assert_allclose(m @ [0.5, 0.5, 0.5, 1.0], [1.5, -1.5, 3.5, 1.0])
    np.testing.assert_allclose(m @ [0.5, 0.5, 0.5, 0.0], [0.5, 0.5, 0.5, 0.0])


def test_translation_inverse_round_trip():
    offset = (4.0, 5.0, -6.0)
    np.testing.assert_allclose(
        translation(offset) @ translation(np.negative(offset)), np.eye(4)
    )


def test_main_help_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
    assert "--shaders" in capsys.readouterr().out


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit) as excinfo:
        main(["--no-such-option"])
    assert excinfo.value.code == 2