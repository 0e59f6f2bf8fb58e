"""Extraction of property values from the element a reader has loaded."""

from __future__ import annotations

from collections.abc import Sequence

from .elements import PLYProperty
from .plytypes import PLYError, PropertyType, convert_value
from .reader import PLYReader
from .triangulate import triangulate_polygon


def _check_dest(dest_type: PropertyType) -> PropertyType:
    dest_type = PropertyType(dest_type)
    if dest_type is PropertyType.NONE:
        raise PLYError("destination type must not be NONE")
    return dest_type


def _list_property(reader: PLYReader, prop_idx: int | None) -> PLYProperty | None:
    if not reader.has_element() or prop_idx is None:
        return None
    properties = reader.element().properties
    if not 0 <= prop_idx < len(properties) or not properties[prop_idx].is_list:
        return None
    return properties[prop_idx]


def extract_properties(
    reader: PLYReader, prop_idxs: Sequence[int] | None, dest_type: PropertyType
) -> list[tuple]:
    """Return one tuple per row holding the given scalar properties as ``dest_type``."""
    if not prop_idxs:
        raise PLYError("no properties requested")
    dest_type = _check_dest(dest_type)
    properties = reader.element().properties
    for idx in prop_idxs:
        if not 0 <= idx < len(properties):
            raise PLYError(f"property index {idx} out of range")
        if properties[idx].is_list:
            raise PLYError(f"property {properties[idx].name!r} is a list")
    return [
        tuple(convert_value(row[idx], dest_type) for idx in prop_idxs)
        for row in reader.element_data
    ]


def get_list_counts(reader: PLYReader, prop_idx: int | None) -> list[int] | None:
    """Return the per-row item counts of a list property, or None if it is not one."""
    prop = _list_property(reader, prop_idx)
    return None if prop is None else list(prop.row_count)


def sum_of_list_counts(reader: PLYReader, prop_idx: int | None) -> int:
    """Return the total number of items in a list property (0 if it is not one)."""
    prop = _list_property(reader, prop_idx)
    return 0 if prop is None else len(prop.list_data)


def get_list_data(reader: PLYReader, prop_idx: int | None) -> list | None:
    """Return all items of a list property in file order, or None if it is not one."""
    prop = _list_property(reader, prop_idx)
    return None if prop is None else list(prop.list_data)


def extract_list_property(
    reader: PLYReader, prop_idx: int | None, dest_type: PropertyType
) -> list:
    """Return all items of a list property converted to ``dest_type``."""
    prop = _list_property(reader, prop_idx)
    if prop is None:
        raise PLYError("not a list property of the current element")
    dest_type = _check_dest(dest_type)
    return [convert_value(value, dest_type) for value in prop.list_data]


def num_triangles(reader: PLYReader, prop_idx: int | None) -> int:
    """Return how many triangles the polygons of a list property split into."""
    counts = get_list_counts(reader, prop_idx)
    if counts is None:
        return 0
    return sum(count - 2 for count in counts if count >= 3)


def requires_triangulation(reader: PLYReader, prop_idx: int | None) -> bool:
    """True if any row of the list property is not a triangle."""
    counts = get_list_counts(reader, prop_idx)
    if counts is None:
        return False
    return any(count != 3 for count in counts)


def extract_triangles(
    reader: PLYReader,
    prop_idx: int | None,
    positions: Sequence[Sequence[float]],
    dest_type: PropertyType,
) -> list:
    """Return the triangle indices of a polygon list property as a flat list.

    ``positions`` holds the ``(x, y, z)`` of every vertex and is used to
    split polygons with more than four corners.
    """
    if not requires_triangulation(reader, prop_idx):
        return extract_list_property(reader, prop_idx, dest_type)

    dest_type = _check_dest(dest_type)
    prop = _list_property(reader, prop_idx)
    assert prop is not None
    result: list = []
    start = 0
    for count in prop.row_count:
        face = [
            convert_value(value, PropertyType.INT)
            for value in prop.list_data[start : start + count]
        ]
        start += count
        for triangle in triangulate_polygon(face, positions):
            result.extend(convert_value(idx, dest_type) for idx in triangle)
    return result