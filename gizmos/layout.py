"""Vertex attribute types and interleaved buffer layouts."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Iterable, Iterator

GL_INT = 0x1404
GL_FLOAT = 0x1406


class ShaderDataType(IntEnum):
    """Scalar and vector types a vertex attribute may hold."""

    NONE = 0
    FLOAT = 1
    FLOAT2 = 2
    FLOAT3 = 3
    INT = 4
    INT2 = 5
    INT3 = 6

    def _info(self) -> tuple[int, int, int]:
        try:
            return _TYPE_INFO[self]
        except KeyError:
            raise ValueError(f"Unknown ShaderDataType: {self.name}") from None

    def size(self) -> int:
        """Size of one value of this type in bytes."""
        return self._info()[0]

    def gl_type(self) -> int:
        """The OpenGL component type enum for this type."""
        return self._info()[1]

    def component_count(self) -> int:
        """Number of scalar components in one value of this type."""
        return self._info()[2]


_TYPE_INFO: dict[ShaderDataType, tuple[int, int, int]] = {
    ShaderDataType.FLOAT: (4, GL_FLOAT, 1),
    ShaderDataType.FLOAT2: (8, GL_FLOAT, 2),
    ShaderDataType.FLOAT3: (12, GL_FLOAT, 3),
    ShaderDataType.INT: (4, GL_INT, 1),
    ShaderDataType.INT2: (8, GL_INT, 2),
    ShaderDataType.INT3: (12, GL_INT, 3),
}


@dataclass(frozen=True)
class BufferAttribute:
    """One attribute inside an interleaved vertex buffer."""

    type: ShaderDataType
    normalized: bool = False
    offset: int = 0

    def __post_init__(self) -> None:
        # Rejects NONE and anything else without a known size.
        self.type.size()

    @property
    def size(self) -> int:
        return self.type.size()

    @property
    def component_count(self) -> int:
        return self.type.component_count()


class BufferLayout:
    """An ordered set of attributes with their offsets and the total stride."""

    def __init__(self, attributes: Iterable[BufferAttribute] = ()) -> None:
        placed = []
        offset = 0
        for attribute in attributes:
            placed.append(replace(attribute, offset=offset))
            offset += attribute.size
        self._attributes: tuple[BufferAttribute, ...] = tuple(placed)
        self._stride = offset

    def stride(self) -> int:
        """Bytes between the starts of two consecutive vertices."""
        return self._stride

    @property
    def elements(self) -> tuple[BufferAttribute, ...]:
        return self._attributes

    def __iter__(self) -> Iterator[BufferAttribute]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __repr__(self) -> str:
        return f"BufferLayout({list(self._attributes)!r})"