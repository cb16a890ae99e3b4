import numpy as np
import pytest

from gizmos import gl_objects
from gizmos.gl_objects import (
    GL_ARRAY_BUFFER,
    GL_DYNAMIC_DRAW,
    GL_ELEMENT_ARRAY_BUFFER,
    GL_FALSE,
    GL_TRUE,
    IndexBuffer,
    VertexArray,
    VertexBuffer,
)
from gizmos.layout import BufferAttribute, BufferLayout, ShaderDataType


class FakeGL:
    def __init__(self):
        self.calls = []
        self._next = 1

    def _new(self):
        handle = self._next
        self._next += 1
        return handle

    def gen_buffer(self):
        return self._new()

    def gen_vertex_array(self):
        return self._new()

    def buffer_data(self, target, size, data, usage):
        payload = None if data is None else data.tobytes()
        self.calls.append(("buffer_data", target, size, payload, usage))

    def buffer_sub_data(self, target, offset, data):
        self.calls.append(("buffer_sub_data", target, offset, data.tobytes()))

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, *args))

        return record

    def named(self, name):
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def fake_gl(monkeypatch):
    fake = FakeGL()
    monkeypatch.setattr(gl_objects, "gl", fake)
    return fake


def test_vertex_buffer_from_size_allocates_empty_storage(fake_gl):
    buffer = VertexBuffer(64)
    assert buffer.size == 64
    assert fake_gl.named("buffer_data") == [
        ("buffer_data", GL_ARRAY_BUFFER, 64, None, GL_DYNAMIC_DRAW)
    ]
    assert ("bind_buffer", GL_ARRAY_BUFFER, buffer.id) in fake_gl.calls
    assert fake_gl.calls[-1] == ("bind_buffer", GL_ARRAY_BUFFER, 0)


def test_vertex_buffer_uploads_float_data(fake_gl):
    vertices = [-0.5, -0.5, 0.5, 0.5, 0.25, 0.0]
    buffer = VertexBuffer(vertices)
    expected = np.array(vertices, dtype=np.float32)
    (call,) = fake_gl.named("buffer_data")
    assert call[2] == expected.nbytes == buffer.size
    assert np.frombuffer(call[3], dtype=np.float32).tolist() == expected.tolist()


def test_vertex_buffer_rejects_negative_size(fake_gl):
    with pytest.raises(ValueError):
        VertexBuffer(-1)


def test_vertex_buffer_set_data_with_offset(fake_gl):
    buffer = VertexBuffer(32)
    written = buffer.set_data([1.0, 2.0], 8)
    assert written == 8
    (call,) = fake_gl.named("buffer_sub_data")
    assert call[1] == GL_ARRAY_BUFFER
    assert call[2] == 8
    assert np.frombuffer(call[3], dtype=np.float32).tolist() == [1.0, 2.0]


def test_vertex_buffer_set_data_out_of_range(fake_gl):
    buffer = VertexBuffer(8)
    with pytest.raises(ValueError):
        buffer.set_data([1.0, 2.0], 4)
    assert fake_gl.named("buffer_sub_data") == []


def test_vertex_buffer_layout_defaults_empty_and_is_assignable(fake_gl):
    buffer = VertexBuffer(12)
    assert len(buffer.layout) == 0
    layout = BufferLayout([BufferAttribute(ShaderDataType.FLOAT3)])
    buffer.layout = layout
    assert buffer.layout is layout


def test_vertex_buffer_delete_is_idempotent(fake_gl):
    buffer = VertexBuffer(4)
    handle = buffer.id
    buffer.delete()
    buffer.delete()
    assert fake_gl.named("delete_buffer") == [("delete_buffer", handle)]


def test_vertex_buffer_context_manager_deletes(fake_gl):
    with VertexBuffer(4) as buffer:
        handle = buffer.id
    assert fake_gl.named("delete_buffer") == [("delete_buffer", handle)]


def test_index_buffer_counts_indices_and_uploads_them(fake_gl):
    indices = [0, 1, 2, 2, 3, 0]
    buffer = IndexBuffer(indices)
    assert buffer.count() == len(indices)
    (call,) = fake_gl.named("buffer_data")
    assert np.frombuffer(call[3], dtype=np.uint32).tolist() == indices


def test_index_buffer_binds_element_target(fake_gl):
    buffer = IndexBuffer([0, 1])
    buffer.bind()
    assert fake_gl.calls[-1] == ("bind_buffer", GL_ELEMENT_ARRAY_BUFFER, buffer.id)
    buffer.unbind()
    assert fake_gl.calls[-1] == ("bind_buffer", GL_ELEMENT_ARRAY_BUFFER, 0)


def test_vertex_array_sets_attribute_pointers_from_layout(fake_gl):
    layout = BufferLayout(
        [
            BufferAttribute(ShaderDataType.FLOAT3),
            BufferAttribute(ShaderDataType.FLOAT2, normalized=True),
        ]
    )
    buffer = VertexBuffer(40)
    buffer.layout = layout
    array = VertexArray()
    array.add_vertex_buffer(buffer)

    pointers = fake_gl.named("vertex_attrib_pointer")
    expected = [
        (
            "vertex_attrib_pointer",
            index,
            attribute.component_count,
            attribute.type.gl_type(),
            GL_TRUE if attribute.normalized else GL_FALSE,
            layout.stride(),
            attribute.offset,
        )
        for index, attribute in enumerate(layout)
    ]
    assert pointers == expected
    assert array.vertex_buffers == (buffer,)


def test_vertex_array_attribute_indices_continue_across_buffers(fake_gl):
    first = VertexBuffer(12)
    first.layout = BufferLayout([BufferAttribute(ShaderDataType.FLOAT3)])
    second = VertexBuffer(8)
    second.layout = BufferLayout([BufferAttribute(ShaderDataType.FLOAT2)])
    array = VertexArray()
    array.add_vertex_buffer(first)
    array.add_vertex_buffer(second)
    enabled = [call[1] for call in fake_gl.named("enable_vertex_attrib_array")]
    assert enabled == [0, 1]
    assert array.vertex_buffers == (first, second)


def test_vertex_array_rejects_integer_attributes(fake_gl):
    buffer = VertexBuffer(4)
    buffer.layout = BufferLayout([BufferAttribute(ShaderDataType.INT)])
    array = VertexArray()
    with pytest.raises(ValueError):
        array.add_vertex_buffer(buffer)
    assert array.vertex_buffers == ()
    assert fake_gl.named("vertex_attrib_pointer") == []


def test_vertex_array_set_index_buffer(fake_gl):
    indices = IndexBuffer([0, 1, 2])
    array = VertexArray()
    array.set_index_buffer(indices)
    assert array.index_buffer is indices
    assert fake_gl.calls[-2:] == [
        ("bind_vertex_array", array.id),
        ("bind_buffer", GL_ELEMENT_ARRAY_BUFFER, indices.id),
    ]


def test_vertex_array_delete_is_idempotent(fake_gl):
    array = VertexArray()
    handle = array.id
    array.delete()
    array.delete()
    assert fake_gl.named("delete_vertex_array") == [("delete_vertex_array", handle)]