"""Interactive window showing a box that a rotation gizmo turns."""

from __future__ import annotations

import argparse
import math
import sys
import time
from pathlib import Path

import numpy as np

from gizmos.gizmo import GizmoRenderer, RotationGizmo, line_indices
from gizmos.gl_objects import IndexBuffer, VertexArray, VertexBuffer, gl
from gizmos.input import Input
from gizmos.layout import BufferAttribute, BufferLayout, ShaderDataType
from gizmos.shader import ShaderError, ShaderProgram

PI = 3.14159
WINDOW_WIDTH = 1200
WINDOW_HEIGHT = 800

GL_FALSE = 0
GL_LINES = 0x0001
GL_TRIANGLES = 0x0004
GL_UNSIGNED_INT = 0x1405
GL_DEPTH_TEST = 0x0B71
GL_FRONT_AND_BACK = 0x0408
GL_FILL = 0x1B02

BOX_VERTICES = (
    (-0.5, -0.5, 0.5),
    (0.5, -0.5, 0.5),
    (0.5, 0.5, 0.5),
    (-0.5, 0.5, 0.5),
    (-0.5, -0.5, -0.5),
    (0.5, -0.5, -0.5),
    (0.5, 0.5, -0.5),
    (-0.5, 0.5, -0.5),
)

BOX_INDICES = (
    0, 1, 2, 2, 3, 0,
    1, 5, 6, 6, 2, 1,
    5, 4, 7, 7, 6, 5,
    4, 0, 3, 3, 7, 4,
    3, 2, 6, 6, 7, 3,
    4, 5, 1, 1, 0, 4,
)


def circle_vertices(radius: float, segments: int) -> np.ndarray:
    """Points of the full guide circle drawn around the model, shape ``(segments + 1, 3)``."""
    angles = np.arange(segments + 1) / segments * 2.0 * PI
    r = radius + 0.05
    return np.column_stack(
        (r * np.cos(angles) * 1.5, r * np.sin(angles) * 1.5, np.zeros(segments + 1))
    )


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection to clip space with depth in [-1, 1]."""
    f = 1.0 / math.tan(fovy / 2.0)
    m = np.zeros((4, 4))
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = -(far + near) / (far - near)
    m[2, 3] = -(2.0 * far * near) / (far - near)
    m[3, 2] = -1.0
    return m


def translation(offset) -> np.ndarray:
    """4x4 matrix moving points by ``offset``."""
    m = np.eye(4)
    m[:3, 3] = np.asarray(offset, dtype=float)
    return m


def _matrix_argument(matrix):
    values = np.asarray(matrix, dtype=float).T.ravel()
    return (gl.GLfloat * 16)(*values)


def _mesh(vertices, indices) -> VertexArray:
    vertex_buffer = VertexBuffer(np.asarray(vertices, dtype=float))
    vertex_buffer.layout = BufferLayout([BufferAttribute(ShaderDataType.FLOAT3)])
    vertex_array = VertexArray()
    vertex_array.add_vertex_buffer(vertex_buffer)
    vertex_array.set_index_buffer(IndexBuffer(indices))
    vertex_array.unbind()
    return vertex_array


def _delete_mesh(vertex_array: VertexArray) -> None:
    for vertex_buffer in vertex_array.vertex_buffers:
        vertex_buffer.delete()
    if vertex_array.index_buffer is not None:
        vertex_array.index_buffer.delete()
    vertex_array.delete()


class _Scene:
    """Everything drawn each frame, and the state that carries between frames."""

    def __init__(self, window, shaders: Path) -> None:
        import pyglet

        self.window = window
        self.input = Input()
        self.input.attach(window)

        self.default_shader = ShaderProgram(shaders / "v_default.glsl", shaders / "f_default.glsl")
        self.grid_shader = ShaderProgram(shaders / "v_grid.glsl", shaders / "f_grid.glsl")

        self.gizmo = RotationGizmo(window.width, window.height)
        self.renderer = GizmoRenderer(self.default_shader)

        segments = 100
        self.circle = _mesh(circle_vertices(0.7, segments), line_indices(segments))
        self.box = _mesh(BOX_VERTICES, BOX_INDICES)

        self.camera_pos = np.array([0.0, 0.0, -5.0])
        self.object_pos = np.array([1.0, 0.0, 0.0])
        self.model = translation(self.object_pos)

        self.start = time.perf_counter()
        self.last_frame = self.start
        self.label = pyglet.text.Label(
            "", x=10, y=window.height - 20, multiline=True, width=400
        )

    def _set_matrix(self, name: str, matrix) -> None:
        gl.glUniformMatrix4fv(
            self.default_shader.uniform_location(name), 1, GL_FALSE, _matrix_argument(matrix)
        )

    def draw(self) -> None:
        gl.glClearColor(35.0 / 255.0, 35.0 / 255.0, 35.0 / 255.0, 1.0)
        self.window.clear()

        view = translation(self.camera_pos)
        projection = perspective(
            math.radians(45.0), self.window.width / self.window.height, 0.1, 100.0
        )

        self.default_shader.use()
        self._set_matrix("V", view)
        self._set_matrix("P", projection)

        gl.glDisable(GL_DEPTH_TEST)
        self.circle.bind()
        gl.glUniform3f(self.default_shader.uniform_location("color"), 0.5, 0.5, 0.5)
        self._set_matrix("M", translation(self.object_pos))
        gl.glDrawElements(GL_LINES, self.circle.index_buffer.count(), GL_UNSIGNED_INT, None)
        gl.glEnable(GL_DEPTH_TEST)

        self.model = self.gizmo.manipulate(view, projection, self.model, self.input)

        gl.glPolygonMode(GL_FRONT_AND_BACK, GL_FILL)
        self.default_shader.use()
        self._set_matrix("M", self.model)
        grey = 149.0 / 250.0
        gl.glUniform3f(self.default_shader.uniform_location("color"), grey, grey, grey)
        self.box.bind()
        gl.glDrawElements(GL_TRIANGLES, self.box.index_buffer.count(), GL_UNSIGNED_INT, None)

        self.renderer.draw(self.gizmo)

        now = time.perf_counter()
        elapsed = now - self.last_frame
        fps = int(1.0 / elapsed) if elapsed > 0 else 0
        self.last_frame = now
        self.label.text = f"time = {now - self.start:.3f}\nFPS: {fps}"
        self.label.draw()

    def close(self) -> None:
        self.renderer.delete()
        _delete_mesh(self.circle)
        _delete_mesh(self.box)
        self.default_shader.delete()
        self.grid_shader.delete()


def main(argv=None) -> int:
    """Open the demo window and run until it is closed."""
    parser = argparse.ArgumentParser(
        prog="gizmos", description="Rotate a box with an interactive rotation gizmo."
    )
    parser.add_argument(
        "--shaders",
        type=Path,
        default=Path("shaders"),
        help="directory holding the GLSL shader sources (default: ./shaders)",
    )
    args = parser.parse_args(argv)

    import pyglet

    try:
        window = pyglet.window.Window(
            WINDOW_WIDTH, WINDOW_HEIGHT, "OpenGL-Gizmos", vsync=False
        )
    except Exception as exc:
        print(f"Failed to create window: {exc}", file=sys.stderr)
        return -1

    print(f"OpenGL Version: {pyglet.gl.gl_info.get_version_string()}")

    try:
        scene = _Scene(window, args.shaders)
    except ShaderError as exc:
        print(exc, file=sys.stderr)
        window.close()
        return -1

    @window.event
    def on_draw():
        scene.draw()

    def _tick(dt: float) -> None:
        pass

    pyglet.clock.schedule(_tick)
    try:
        pyglet.app.run()
    finally:
        pyglet.clock.unschedule(_tick)
        scene.close()
    return 0