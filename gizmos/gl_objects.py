"""OpenGL vertex buffers, index buffers and vertex array objects."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from gizmos.layout import BufferLayout, ShaderDataType

GL_FALSE = 0
GL_TRUE = 1
GL_ARRAY_BUFFER = 0x8892
GL_ELEMENT_ARRAY_BUFFER = 0x8893
GL_DYNAMIC_DRAW = 0x88E8

_FLOAT_TYPES = frozenset(
    {ShaderDataType.FLOAT, ShaderDataType.FLOAT2, ShaderDataType.FLOAT3}
)


def _address(array: np.ndarray | None) -> int | None:
    """Memory address of a contiguous array's data, or None for no data."""
    if array is None:
        return None
    return array.__array_interface__["data"][0]


class _PygletGL:
    """Adapts plain Python values to pyglet's OpenGL bindings."""

    @staticmethod
    def _api():
        from pyglet import gl as api

        return api

    def gen_buffer(self) -> int:
        api = self._api()
        handle = api.GLuint(0)
        api.glGenBuffers(1, handle)
        return handle.value

    def gen_vertex_array(self) -> int:
        api = self._api()
        handle = api.GLuint(0)
        api.glGenVertexArrays(1, handle)
        return handle.value

    def delete_buffer(self, handle: int) -> None:
        api = self._api()
        api.glDeleteBuffers(1, api.GLuint(handle))

    def delete_vertex_array(self, handle: int) -> None:
        api = self._api()
        api.glDeleteVertexArrays(1, api.GLuint(handle))

    def bind_buffer(self, target: int, handle: int) -> None:
        self._api().glBindBuffer(target, handle)

    def bind_vertex_array(self, handle: int) -> None:
        self._api().glBindVertexArray(handle)

    def buffer_data(self, target: int, size: int, data: np.ndarray | None, usage: int) -> None:
        self._api().glBufferData(target, size, _address(data), usage)

    def buffer_sub_data(self, target: int, offset: int, data: np.ndarray) -> None:
        self._api().glBufferSubData(target, offset, data.nbytes, _address(data))

    def enable_vertex_attrib_array(self, index: int) -> None:
        self._api().glEnableVertexAttribArray(index)

    def vertex_attrib_pointer(
        self, index: int, size: int, gl_type: int, normalized: int, stride: int, offset: int
    ) -> None:
        self._api().glVertexAttribPointer(index, size, gl_type, normalized, stride, offset)


gl = _PygletGL()


def _as_array(data, dtype) -> np.ndarray:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(bytes(data), dtype=np.uint8)
    return np.ascontiguousarray(data, dtype=dtype)


class VertexBuffer:
    """A GPU buffer holding vertex data, with the layout describing it.

    Built either from a byte size (storage left uninitialised) or from
    vertex data, which is uploaded as 32-bit floats.
    """

    def __init__(self, data_or_size) -> None:
        self.layout = BufferLayout()
        if isinstance(data_or_size, int) and not isinstance(data_or_size, bool):
            if data_or_size < 0:
                raise ValueError("buffer size must not be negative")
            array = None
            size = data_or_size
        else:
            array = _as_array(data_or_size, np.float32)
            size = array.nbytes
        self.size = size
        self.id = gl.gen_buffer()
        gl.bind_buffer(GL_ARRAY_BUFFER, self.id)
        gl.buffer_data(GL_ARRAY_BUFFER, size, array, GL_DYNAMIC_DRAW)
        gl.bind_buffer(GL_ARRAY_BUFFER, 0)

    def bind(self) -> None:
        gl.bind_buffer(GL_ARRAY_BUFFER, self.id)

    def unbind(self) -> None:
        gl.bind_buffer(GL_ARRAY_BUFFER, 0)

    def set_data(self, data, offset: int = 0) -> int:
        """Overwrite part of the buffer starting ``offset`` bytes in.

        Returns the number of bytes written.
        """
        array = _as_array(data, np.float32)
        if offset < 0 or offset + array.nbytes > self.size:
            raise ValueError(
                f"{array.nbytes} bytes at offset {offset} do not fit "
                f"in a buffer of {self.size} bytes"
            )
        gl.bind_buffer(GL_ARRAY_BUFFER, self.id)
        gl.buffer_sub_data(GL_ARRAY_BUFFER, offset, array)
        return array.nbytes

    def delete(self) -> None:
        """Release the GPU buffer; later calls do nothing."""
        if self.id:
            gl.delete_buffer(self.id)
            self.id = 0

    def __enter__(self) -> VertexBuffer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()


class IndexBuffer:
    """A GPU buffer of unsigned 32-bit vertex indices."""

    def __init__(self, indices: Iterable[int]) -> None:
        array = np.ascontiguousarray(list(indices), dtype=np.uint32)
        self._count = int(array.size)
        self.id = gl.gen_buffer()
        # Uploaded through the array target so that no bound vertex array
        # picks this buffer up as its element buffer by accident.
        gl.bind_buffer(GL_ARRAY_BUFFER, self.id)
        gl.buffer_data(GL_ARRAY_BUFFER, array.nbytes, array, GL_DYNAMIC_DRAW)
        gl.bind_buffer(GL_ARRAY_BUFFER, 0)

    def bind(self) -> None:
        gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, self.id)

    def unbind(self) -> None:
        gl.bind_buffer(GL_ELEMENT_ARRAY_BUFFER, 0)

    def count(self) -> int:
        """Number of indices held."""
        return self._count

    def delete(self) -> None:
        """Release the GPU buffer; later calls do nothing."""
        if self.id:
            gl.delete_buffer(self.id)
            self.id = 0

    def __enter__(self) -> IndexBuffer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()


class VertexArray:
    """A vertex array object tying vertex buffers and an index buffer together."""

    def __init__(self) -> None:
        self.id = gl.gen_vertex_array()
        self._next_attribute = 0
        self._vertex_buffers: list[VertexBuffer] = []
        self.index_buffer: IndexBuffer | None = None

    @property
    def vertex_buffers(self) -> tuple[VertexBuffer, ...]:
        return tuple(self._vertex_buffers)

    def bind(self) -> None:
        gl.bind_vertex_array(self.id)

    def unbind(self) -> None:
        gl.bind_vertex_array(0)

    def add_vertex_buffer(self, vertex_buffer: VertexBuffer) -> None:
        """Attach a buffer, enabling one attribute slot per layout attribute.

        Only float attributes are supported; integer ones raise ValueError.
        """
        layout = vertex_buffer.layout
        for attribute in layout:
            if attribute.type not in _FLOAT_TYPES:
                raise ValueError(f"Unsupported ShaderDataType: {attribute.type.name}")

        gl.bind_vertex_array(self.id)
        vertex_buffer.bind()
        stride = layout.stride()
        for attribute in layout:
            gl.enable_vertex_attrib_array(self._next_attribute)
            gl.vertex_attrib_pointer(
                self._next_attribute,
                attribute.component_count,
                attribute.type.gl_type(),
                GL_TRUE if attribute.normalized else GL_FALSE,
                stride,
                attribute.offset,
            )
            self._next_attribute += 1
        self._vertex_buffers.append(vertex_buffer)

    def set_index_buffer(self, index_buffer: IndexBuffer) -> None:
        gl.bind_vertex_array(self.id)
        index_buffer.bind()
        self.index_buffer = index_buffer

    def delete(self) -> None:
        """Release the vertex array object; later calls do nothing."""
        if self.id:
            gl.delete_vertex_array(self.id)
            self.id = 0

    def __enter__(self) -> VertexArray:
        return self

    def __exit__(self, *exc_info) -> None:
        self.delete()