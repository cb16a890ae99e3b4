import pytest

from gizmos.layout import BufferAttribute, BufferLayout, ShaderDataType


@pytest.mark.parametrize(
    "data_type, size, count",
    [
        (ShaderDataType.FLOAT, 4, 1),
        (ShaderDataType.FLOAT2, 8, 2),
        (ShaderDataType.FLOAT3, 12, 3),
        (ShaderDataType.INT, 4, 1),
        (ShaderDataType.INT2, 8, 2),
        (ShaderDataType.INT3, 12, 3),
    ],
)
def test_sizes_and_component_counts(data_type, size, count):
    assert data_type.size() == size
    assert data_type.component_count() == count


def test_gl_types_split_float_and_int():
    float_types = {t.gl_type() for t in (ShaderDataType.FLOAT, ShaderDataType.FLOAT2, ShaderDataType.FLOAT3)}
    int_types = {t.gl_type() for t in (ShaderDataType.INT, ShaderDataType.INT2, ShaderDataType.INT3)}
    assert float_types == {0x1406}
    assert int_types == {0x1404}


def test_none_type_is_rejected():
    with pytest.raises(ValueError):
        ShaderDataType.NONE.size()
    with pytest.raises(ValueError):
        ShaderDataType.NONE.gl_type()
    with pytest.raises(ValueError):
        ShaderDataType.NONE.component_count()


def test_attribute_with_none_type_is_rejected():
    with pytest.raises(ValueError):
        BufferAttribute(ShaderDataType.NONE)


def test_attribute_size_follows_type():
    attribute = BufferAttribute(ShaderDataType.FLOAT2, normalized=True)
    assert attribute.size == ShaderDataType.FLOAT2.size()
    assert attribute.component_count == 2
    assert attribute.normalized is True


def test_empty_layout():
    layout = BufferLayout()
    assert len(layout) == 0
    assert layout.stride() == 0
    assert list(layout) == []


def test_single_attribute_layout():
    layout = BufferLayout([BufferAttribute(ShaderDataType.FLOAT3)])
    assert len(layout) == 1
    assert layout.stride() == ShaderDataType.FLOAT3.size()
    assert next(iter(layout)).offset == 0


def test_offsets_are_cumulative_and_stride_is_sum():
    types = [ShaderDataType.FLOAT3, ShaderDataType.FLOAT2, ShaderDataType.INT]
    layout = BufferLayout(BufferAttribute(t) for t in types)
    attributes = list(layout)
    assert [a.type for a in attributes] == types
    assert attributes[0].offset == 0
    for previous, current in zip(attributes, attributes[1:]):
        assert current.offset == previous.offset + previous.size
    assert layout.stride() == sum(t.size() for t in types)
    assert layout.elements == tuple(attributes)


def test_layout_ignores_given_offsets():
    layout = BufferLayout([BufferAttribute(ShaderDataType.FLOAT, offset=99)])
    assert [a.offset for a in layout] == [0]