# gizmos

An interactive rotation gizmo for 3D scenes rendered with OpenGL through
pyglet. Three coloured half-rings are drawn around an object, one for each
of its local axes. Hover over a ring to highlight it, then hold the left
mouse button and drag to rotate the object about that axis.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Running the demo

```
gizmos --shaders path/to/shaders
```

The demo opens a 1200×800 window with a grey box, a guide circle and the
rotation gizmo. The frame time and frames per second are shown in the
top-left corner.

`--shaders` names the directory holding the GLSL sources; it defaults to
`./shaders`. The directory must contain `v_default.glsl`, `f_default.glsl`,
`v_grid.glsl` and `f_grid.glsl`. The default shader is expected to take the
uniforms `M`, `V`, `P` (4×4 matrices) and `color` (a vec3), with the vertex
position at attribute 0. If a file cannot be read the command prints the
error and exits with status -1.

## What is not included

The package ships no shader files. You have to supply the GLSL sources
listed above yourself; without them the demo does not start. The grid
shader is loaded but nothing is drawn with it. The gizmo only rotates:
there is no translation or scaling handle.

## Modules

### `gizmos.transforms`

Pure numpy helpers that need no OpenGL context. Matrices are 4×4 arrays
with the translation in the last column.

- `decompose_transform(matrix)` returns `(translation, rotation, scale)`,
  the rotation as Euler angles in degrees.
- `transform_vector(matrix, vector)` applies only the rotation and scale part
  of a matrix to a 4-vector and returns a 3-vector.
- `world_to_screen(world_pos, mvp, window_size)` projects a point to window
  pixels, y growing downwards, returned as `(x, y, 0, 0)`.
- `compute_camera_ray(view, projection, mouse_x, mouse_y, width, height)`
  returns the world-space origin and unit direction of the ray under the mouse.
- `intersect_ray_plane(origin, direction, plane)` returns the distance along
  the ray to the plane `(nx, ny, nz, d)`, or `-1.0` when the ray runs
  parallel to it.

### `gizmos.gizmo`

`RotationGizmo(width, height)` holds the picking and dragging state in a
`GizmoContext`. Each frame, `manipulate(view, projection, model, input_state)`
returns the updated model matrix. Ring 1 turns about the model's z axis,
ring 2 about y and ring 3 about x.

```python
import numpy as np

from gizmos.app import perspective, translation
from gizmos.gizmo import RotationGizmo
from gizmos.input import Input

gizmo = RotationGizmo(1200, 800)
input_state = Input()
view = translation([0.0, 0.0, -5.0])
projection = perspective(np.radians(45.0), 1200 / 800, 0.1, 100.0)
model = translation([1.0, 0.0, 0.0])
model = gizmo.manipulate(view, projection, model, input_state)
```

`ring_vertices()` gives the model-space points of the three rings, each
turned towards the camera, and `axis_colors()` their colours, with the active
ring in orange. `half_ring_vertices` and `line_indices` build the ring
geometry.

`GizmoRenderer(shader)` keeps the GPU buffers of the rings and draws a gizmo
with `draw(gizmo)`; `delete()` releases them. It needs a current OpenGL
context.

### `gizmos.input`

`Input` tracks pressed keys, pressed mouse buttons and the cursor from
pyglet-style window events. `attach(window)` registers it as an event
handler. `mouse_position()` reports the cursor from the top-left corner.

### `gizmos.layout`

`ShaderDataType` knows the byte size, OpenGL type and component count of
each attribute type. `BufferLayout` places a list of `BufferAttribute`s one
after another and reports their offsets and the `stride()`.

### `gizmos.gl_objects`

`VertexBuffer`, `IndexBuffer` and `VertexArray` wrap OpenGL buffer and
vertex array objects. Each has `bind()`, `unbind()` and `delete()` and can be
used as a context manager that deletes it on exit.
`VertexArray.add_vertex_buffer` supports float attributes only and raises
`ValueError` for integer ones. `VertexBuffer.set_data` raises `ValueError`
when the data does not fit.

### `gizmos.shader`

`ShaderProgram(vertex_path, fragment_path)` compiles and links a program,
printing any compile or link log. More stages can be added with
`add_shader` and the program relinked with `link()`. `ComputeShaderProgram`
holds a single compute shader and can reload it with `update_shader`.
`read_shader_source` raises `ShaderError` when a file cannot be read.
`check_gl_error(message)` prints every pending OpenGL error and returns the
error codes.

### `gizmos.app`

The demo command. Besides `main`, it provides `circle_vertices`,
`perspective` (a right-handed projection with depth in [-1, 1]) and
`translation`.