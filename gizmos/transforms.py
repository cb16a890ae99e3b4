"""Matrix and ray helpers used by the gizmo.

Matrices are 4x4 numpy arrays in the usual mathematical convention:
points are column vectors, the translation sits in the last column.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

FLT_EPSILON = float(np.finfo(np.float32).eps)


def _as_array(value, length: int | None = None) -> np.ndarray:
    array = np.asarray(value, dtype=float)
    if length is not None and array.shape != (length,):
        raise ValueError(f"expected a vector of length {length}, got shape {array.shape}")
    return array


def _as_matrix(value) -> np.ndarray:
    matrix = np.asarray(value, dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {matrix.shape}")
    return matrix


def _quat_from_rotation(r: np.ndarray) -> tuple[float, float, float, float]:
    """Quaternion (w, x, y, z) from a pure 3x3 rotation matrix."""

    def m(col: int, row: int) -> float:
        return float(r[row, col])

    four_w = m(0, 0) + m(1, 1) + m(2, 2)
    four_x = m(0, 0) - m(1, 1) - m(2, 2)
    four_y = m(1, 1) - m(0, 0) - m(2, 2)
    four_z = m(2, 2) - m(0, 0) - m(1, 1)

    candidates = [four_w, four_x, four_y, four_z]
    biggest_index = max(range(4), key=lambda i: (candidates[i], -i))
    biggest = math.sqrt(candidates[biggest_index] + 1.0) * 0.5
    mult = 0.25 / biggest

    if biggest_index == 0:
        return (
            biggest,
            (m(1, 2) - m(2, 1)) * mult,
            (m(2, 0) - m(0, 2)) * mult,
            (m(0, 1) - m(1, 0)) * mult,
        )
    if biggest_index == 1:
        return (
            (m(1, 2) - m(2, 1)) * mult,
            biggest,
            (m(0, 1) + m(1, 0)) * mult,
            (m(2, 0) + m(0, 2)) * mult,
        )
    if biggest_index == 2:
        return (
            (m(2, 0) - m(0, 2)) * mult,
            (m(0, 1) + m(1, 0)) * mult,
            biggest,
            (m(1, 2) + m(2, 1)) * mult,
        )
    return (
        (m(0, 1) - m(1, 0)) * mult,
        (m(2, 0) + m(0, 2)) * mult,
        (m(1, 2) + m(2, 1)) * mult,
        biggest,
    )


def _euler_from_quat(w: float, x: float, y: float, z: float) -> np.ndarray:
    """Pitch, yaw and roll in radians."""
    py = 2.0 * (y * z + w * x)
    px = w * w - x * x - y * y + z * z
    if abs(py) < FLT_EPSILON and abs(px) < FLT_EPSILON:
        pitch = 2.0 * math.atan2(x, w)
    else:
        pitch = math.atan2(py, px)
    yaw = math.asin(min(max(-2.0 * (x * z - w * y), -1.0), 1.0))
    roll = math.atan2(2.0 * (x * y + w * z), w * w + x * x - y * y - z * z)
    return np.array([pitch, yaw, roll])


def decompose_transform(matrix) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Split a model matrix into translation, Euler rotation in degrees and scale."""
    m = _as_matrix(matrix)
    translation = m[:3, 3].copy()
    scale = np.linalg.norm(m[:3, :3], axis=0)
    rotation_matrix = m[:3, :3] / scale
    rotation = np.degrees(_euler_from_quat(*_quat_from_rotation(rotation_matrix)))
    return translation, rotation, scale


def transform_vector(matrix, vector) -> np.ndarray:
    """Apply only the rotation and scale part of ``matrix`` to a 4-vector."""
    m = _as_matrix(matrix)
    v = _as_array(vector, 4)
    return m[:, :3] @ v[:3]


def world_to_screen(world_pos, mvp, window_size) -> np.ndarray:
    """Project a world point to window pixels, y growing downwards.

    Returns a 4-vector (x, y, 0, 0).
    """
    p = _as_array(world_pos, 3)
    clip = _as_matrix(mvp) @ np.append(p, 1.0)
    ndc = clip[:3] / clip[3]
    width, height = _as_array(window_size, 2)
    return np.array(
        [
            (ndc[0] + 1.0) * 0.5 * width,
            (1.0 - ndc[1]) * 0.5 * height,
            0.0,
            0.0,
        ]
    )


def compute_camera_ray(
    view, projection, mouse_x: float, mouse_y: float, width: float, height: float
) -> tuple[np.ndarray, np.ndarray]:
    """World-space ray under the mouse: (origin, unit direction) as 4-vectors."""
    inverse = np.linalg.inv(_as_matrix(projection) @ _as_matrix(view))
    mox = (mouse_x / width) * 2.0 - 1.0
    moy = (1.0 - (mouse_y / height)) * 2.0 - 1.0
    z_near = 0.0
    z_far = 1.0 - FLT_EPSILON

    origin = inverse @ np.array([mox, moy, z_near, 1.0])
    origin = origin / origin[3]
    end = inverse @ np.array([mox, moy, z_far, 1.0])
    end = end / end[3]

    direction = end - origin
    return origin, direction / np.linalg.norm(direction)


def intersect_ray_plane(origin, direction, plane: Sequence[float]) -> float:
    """Distance along the ray to the plane ``n . p = d`` given as (nx, ny, nz, d).

    Returns -1.0 when the ray runs parallel to the plane.
    """
    o = _as_array(origin)
    v = _as_array(direction)
    pl = _as_array(plane, 4)
    numer = float(np.dot(pl[:3], o[:3])) - pl[3]
    denom = float(np.dot(pl[:3], v[:3]))
    if abs(denom) < FLT_EPSILON:
        return -1.0
    return -(numer / denom)