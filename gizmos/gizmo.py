"""Rotation gizmo: picking, dragging and drawing the three axis rings."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from gizmos.gl_objects import IndexBuffer, VertexArray, VertexBuffer, gl
from gizmos.layout import BufferAttribute, BufferLayout, ShaderDataType
from gizmos.transforms import (
    FLT_EPSILON,
    compute_camera_ray,
    intersect_ray_plane,
    transform_vector,
)

PI = 3.14159
RING_RADIUS = 0.65
RING_SEGMENTS = 100
RING_SCALE = 1.5
PICK_THRESHOLD = 15.0
MOUSE_BUTTON_LEFT = 1

AXIS_COLORS = ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))
HIGHLIGHT_COLOR = (1.0, 0.5, 0.0)

GL_FALSE = 0
GL_LINES = 0x0001
GL_UNSIGNED_INT = 0x1405
GL_DEPTH_TEST = 0x0B71


def half_ring_vertices(start_angle: float, radius: float, segments: int) -> np.ndarray:
    """Points of a half circle in the xy plane, shape ``(segments + 1, 3)``."""
    angles = start_angle + np.arange(segments + 1) / segments * PI
    return np.column_stack(
        (radius * np.cos(angles), radius * np.sin(angles), np.zeros(segments + 1))
    )


def line_indices(segments: int) -> list[int]:
    """Index pairs joining consecutive points of a polyline into line segments."""
    return [index for i in range(segments) for index in (i, i + 1)]


def _normalize(vector: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore", divide="ignore"):
        return vector / np.linalg.norm(vector)


def _plane(normal: np.ndarray, point: np.ndarray) -> np.ndarray:
    n = _normalize(normal)
    return np.array([n[0], n[1], n[2], float(np.dot(n, point))])


def _rotation(angle: float, axis: np.ndarray) -> np.ndarray:
    a = _normalize(np.asarray(axis[:3], dtype=float))
    x, y, z = a
    c, s = math.cos(angle), math.sin(angle)
    cross = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])
    r = np.eye(4)
    r[:3, :3] = c * np.eye(3) + (1.0 - c) * np.outer(a, a) + s * cross
    return r


def _signed_angle(local: np.ndarray, source: np.ndarray, plane: np.ndarray) -> float:
    perpendicular = _normalize(np.append(np.cross(source[:3], plane[:3]), 0.0))
    cos_angle = float(np.clip(np.dot(_normalize(local), source), -1.0, 1.0))
    angle = math.acos(cos_angle) if not math.isnan(cos_angle) else math.nan
    return angle if float(np.dot(local, perpendicular)) < 0.0 else -angle


@dataclass
class GizmoContext:
    """Per-frame and per-drag state of the rotation gizmo."""

    width: int = 1200
    height: int = 800
    view: np.ndarray = field(default_factory=lambda: np.eye(4))
    projection: np.ndarray = field(default_factory=lambda: np.eye(4))
    model: np.ndarray = field(default_factory=lambda: np.eye(4))
    model_source: np.ndarray = field(default_factory=lambda: np.eye(4))
    mvp: np.ndarray = field(default_factory=lambda: np.eye(4))
    camera_eye: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))
    gizmo_center: np.ndarray = field(default_factory=lambda: np.zeros(4))
    ray_origin: np.ndarray = field(default_factory=lambda: np.zeros(4))
    ray_vector: np.ndarray = field(default_factory=lambda: np.zeros(4))
    rotation_angle_origin: float = 0.0
    rotation_angle: float = 0.0
    translation_plane: np.ndarray = field(default_factory=lambda: np.zeros(4))
    rotation_vector_source: np.ndarray = field(default_factory=lambda: np.zeros(4))
    hover_type: int = 0
    main_type: int = 0
    using: bool = False


class RotationGizmo:
    """Picks and drags one of three rings to rotate a model matrix.

    Ring 1 rotates about the model's z axis, ring 2 about y, ring 3 about x.
    """

    def __init__(self, width: int = 1200, height: int = 800) -> None:
        self.context = GizmoContext(width=width, height=height)

    def set_up_context(self, view, projection, model, mouse_x: float, mouse_y: float) -> None:
        """Store the frame's matrices and compute the camera ray under the mouse."""
        ctx = self.context
        ctx.view = np.array(view, dtype=float)
        ctx.projection = np.array(projection, dtype=float)
        ctx.model = np.array(model, dtype=float)
        ctx.mvp = ctx.projection @ ctx.view @ ctx.model
        ctx.camera_eye = np.linalg.inv(ctx.view)[:, 3].copy()

        center = ctx.mvp @ np.array([0.0, 0.0, 0.0, 1.0])
        center = center * (0.5 / center[3])
        center[0] += 0.5
        center[1] = 1.0 - (center[1] + 0.5)
        center[0] *= ctx.width
        center[1] *= ctx.height
        ctx.gizmo_center = center

        ctx.ray_origin, ctx.ray_vector = compute_camera_ray(
            ctx.view, ctx.projection, mouse_x, mouse_y, ctx.width, ctx.height
        )

    def _hovered_ring(self, mouse_x: float, mouse_y: float) -> int:
        ctx = self.context
        model = ctx.model
        normals = (model[:, 2], model[:, 1], model[:, 0])
        model_view_pos = ctx.view @ model[:, 3]
        inverse_model = np.linalg.inv(model)
        mouse = np.array([mouse_x, ctx.height - mouse_y])
        hovered = 0
        for ring, normal in enumerate(normals, start=1):
            plane = _plane(normal, model[:, 3])
            length = intersect_ray_plane(ctx.ray_origin, ctx.ray_vector, plane)
            world = ctx.ray_origin + ctx.ray_vector * length
            view_pos = ctx.view @ world
            if abs(model_view_pos[2]) - abs(view_pos[2]) < -FLT_EPSILON:
                continue

            ideal = transform_vector(inverse_model, _normalize(world - model[:, 3]))
            clip = ctx.mvp @ np.append(ideal[:3], 1.0)
            with np.errstate(invalid="ignore", divide="ignore"):
                ndc = clip[:3] / clip[3]
            screen = np.array(
                [(ndc[0] * 0.5 + 0.5) * ctx.width, (ndc[1] * 0.5 + 0.5) * ctx.height]
            )
            if float(np.linalg.norm(screen - mouse)) < PICK_THRESHOLD:
                hovered = ring
        return hovered

    def manipulate(self, view, projection, model, input_state) -> np.ndarray:
        """Run one frame of picking and dragging; return the updated model matrix."""
        mouse_x, mouse_y = input_state.mouse_position()
        self.set_up_context(view, projection, model, mouse_x, mouse_y)
        ctx = self.context
        ctx.hover_type = self._hovered_ring(mouse_x, mouse_y)

        if not ctx.using:
            ctx.main_type = ctx.hover_type
            if ctx.main_type != 0 and input_state.is_mouse_button_pressed(MOUSE_BUTTON_LEFT):
                ctx.using = True
                normals = (ctx.model[:, 2], ctx.model[:, 1], ctx.model[:, 0])
                ctx.translation_plane = _plane(normals[ctx.main_type - 1], ctx.model[:, 3])
                length = intersect_ray_plane(
                    ctx.ray_origin, ctx.ray_vector, ctx.translation_plane
                )
                local = ctx.ray_origin + ctx.ray_vector * length - ctx.model[:, 3]
                ctx.rotation_vector_source = _normalize(local)
                ctx.rotation_angle_origin = _signed_angle(
                    local, ctx.rotation_vector_source, ctx.translation_plane
                )
                ctx.model_source = ctx.model.copy()

        if ctx.using:
            length = intersect_ray_plane(ctx.ray_origin, ctx.ray_vector, ctx.translation_plane)
            local = ctx.ray_origin + ctx.ray_vector * length - ctx.model_source[:, 3]
            ctx.rotation_angle = _signed_angle(
                local, ctx.rotation_vector_source, ctx.translation_plane
            )
            axis = transform_vector(
                np.linalg.inv(ctx.model_source), np.append(ctx.translation_plane[:3], 0.0)
            )
            axis = _normalize(axis)
            delta = ctx.rotation_angle - ctx.rotation_angle_origin
            rotated = ctx.model @ _rotation(delta, axis)
            rotated[:, 3] = ctx.model_source[:, 3]
            ctx.model = rotated
            ctx.rotation_angle_origin = ctx.rotation_angle

            if input_state.is_mouse_button_released(MOUSE_BUTTON_LEFT):
                ctx.using = False
                ctx.hover_type = 0

        return ctx.model.copy()

    def ring_vertices(self) -> list[np.ndarray]:
        """Model-space points of the three half rings, each turned towards the camera."""
        ctx = self.context
        to_model = _normalize(ctx.model[:, 3] - ctx.camera_eye)
        to_model = transform_vector(np.linalg.inv(ctx.model), to_model)
        rings = []
        for axis in range(3):
            start = math.atan2(to_model[(4 - axis) % 3], to_model[(3 - axis) % 3]) + PI * 0.5
            ring = half_ring_vertices(start, RING_RADIUS, RING_SEGMENTS)
            order = [(axis + k) % 3 for k in range(3)]
            rings.append(ring[:, order] * RING_SCALE)
        return rings

    def axis_colors(self) -> list[tuple[float, float, float]]:
        """RGB colour of each ring, the active one highlighted."""
        colors = list(AXIS_COLORS)
        if self.context.main_type:
            colors[self.context.main_type - 1] = HIGHLIGHT_COLOR
        return colors


def _matrix_argument(matrix):
    values = np.asarray(matrix, dtype=float).T.ravel()
    return (gl.GLfloat * 16)(*values)


class GizmoRenderer:
    """Owns the GPU buffers of the three rings and draws a gizmo with them."""

    def __init__(self, shader) -> None:
        self.shader = shader
        indices = line_indices(RING_SEGMENTS)
        self._rings: list[VertexArray] = []
        for _ in range(3):
            vertex_buffer = VertexBuffer(half_ring_vertices(0.0, RING_RADIUS, RING_SEGMENTS))
            vertex_buffer.layout = BufferLayout([BufferAttribute(ShaderDataType.FLOAT3)])
            vertex_array = VertexArray()
            vertex_array.add_vertex_buffer(vertex_buffer)
            vertex_array.set_index_buffer(IndexBuffer(indices))
            vertex_array.unbind()
            self._rings.append(vertex_array)

    def draw(self, gizmo: RotationGizmo) -> None:
        """Draw the three rings of ``gizmo`` on top of the scene."""
        ctx = gizmo.context
        for vertex_array, ring, color in zip(
            self._rings, gizmo.ring_vertices(), gizmo.axis_colors()
        ):
            gl.glDisable(GL_DEPTH_TEST)
            self.shader.use()
            vertex_array.bind()
            vertex_array.vertex_buffers[0].set_data(ring)

            gl.glUniformMatrix4fv(
                self.shader.uniform_location("V"), 1, GL_FALSE, _matrix_argument(ctx.view)
            )
            gl.glUniformMatrix4fv(
                self.shader.uniform_location("P"), 1, GL_FALSE, _matrix_argument(ctx.projection)
            )
            gl.glUniform3f(self.shader.uniform_location("color"), *color)
            gl.glUniformMatrix4fv(
                self.shader.uniform_location("M"), 1, GL_FALSE, _matrix_argument(ctx.model)
            )
            gl.glLineWidth(5.0)
            gl.glDrawElements(GL_LINES, vertex_array.index_buffer.count(), GL_UNSIGNED_INT, None)
            gl.glEnable(GL_DEPTH_TEST)

    def delete(self) -> None:
        """Release every buffer and vertex array."""
        for vertex_array in self._rings:
            for vertex_buffer in vertex_array.vertex_buffers:
                vertex_buffer.delete()
            if vertex_array.index_buffer is not None:
                vertex_array.index_buffer.delete()
            vertex_array.delete()
        self._rings.clear()