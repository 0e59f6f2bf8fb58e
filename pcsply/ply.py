"""Counting, loading and writing point clouds and triangle meshes in PLY files."""

from __future__ import annotations

import os
import struct
import sys
from collections.abc import Sequence

from .extract import extract_properties
from .plytypes import FileType, PLYError, PropertyType, convert_value
from .reader import PLYReader

VERTEX_ELEMENT = "vertex"
FACE_ELEMENT = "face"

PathType = str | os.PathLike


def _element_count(path: PathType, name: str) -> int:
    with PLYReader(path) as reader:
        elem = reader.get_element(reader.find_element(name))
        return 0 if elem is None else elem.count


def count_vertices(path: PathType) -> int:
    """Return the row count of the ``vertex`` element, or 0 if there is none.

    Raises PLYError if the file is not a valid PLY file.
    """
    return _element_count(path, VERTEX_ELEMENT)


def count_faces(path: PathType) -> int:
    """Return the row count of the ``face`` element, or 0 if there is none.

    Raises PLYError if the file is not a valid PLY file.
    """
    return _element_count(path, FACE_ELEMENT)


def load_point_cloud(
    path: PathType,
) -> tuple[list[tuple[float, float, float]], list[tuple[int, int, int]] | None]:
    """Read vertex positions and, if present, their colours.

    Returns ``(positions, colors)``; positions are float triples, colours
    are unsigned byte triples or None when the vertices carry no colour.
    Positions are empty when the file has no vertex element with x, y, z.
    """
    positions: list[tuple[float, float, float]] = []
    colors: list[tuple[int, int, int]] | None = None
    with PLYReader(path) as reader:
        while reader.has_element():
            if reader.element_is(VERTEX_ELEMENT):
                reader.load_element()
                pos_idxs = reader.find_pos()
                if pos_idxs is None:
                    break
                positions = extract_properties(reader, pos_idxs, PropertyType.FLOAT)
                color_idxs = reader.find_color()
                if color_idxs is not None:
                    colors = extract_properties(reader, color_idxs, PropertyType.UCHAR)
                break
            reader.next_element()
    return positions, colors


def load_mesh(
    path: PathType,
) -> tuple[list[tuple[float, float, float]], list[tuple[int, int, int]]]:
    """Read vertex positions and triangle indices.

    Every face is read as a list of three indices. Raises PLYError if the
    file has no face element, no ``vertex_indices`` list, or lacks vertex
    positions or faces.
    """
    with PLYReader(path) as reader:
        face_elem = reader.get_element(reader.find_element(FACE_ELEMENT))
        if face_elem is None:
            raise PLYError("file has no face element")
        face_idxs = face_elem.convert_list_to_fixed_size(
            face_elem.find_property("vertex_indices"), 3
        )

        positions: list[tuple[float, float, float]] | None = None
        faces: list[tuple[int, int, int]] | None = None
        while reader.has_element() and (positions is None or faces is None):
            if reader.element_is(VERTEX_ELEMENT):
                reader.load_element()
                pos_idxs = reader.find_pos()
                if pos_idxs is not None:
                    positions = extract_properties(reader, pos_idxs, PropertyType.FLOAT)
            elif faces is None and reader.element_is(FACE_ELEMENT):
                reader.load_element()
                faces = extract_properties(reader, face_idxs, PropertyType.UINT)
            if positions is not None and faces is not None:
                break
            reader.next_element()

    if positions is None or faces is None:
        raise PLYError("file lacks vertex positions or faces")
    return positions, faces


def _format_float(value: float) -> str:
    return f"{convert_value(value, PropertyType.FLOAT):f}"


def write_mesh(
    path: PathType,
    positions: Sequence[Sequence[float]],
    indices: Sequence[Sequence[int]],
    binary: bool = False,
) -> None:
    """Write a triangle mesh as a PLY file.

    ``positions`` holds ``(x, y, z)`` triples and ``indices`` holds one
    triple of vertex indices per triangle. Binary files use the byte order
    of the running machine.
    """
    verts = [tuple(p) for p in positions]
    faces = [tuple(f) for f in indices]
    if any(len(v) != 3 for v in verts):
        raise PLYError("every position needs exactly three coordinates")
    if any(len(f) != 3 for f in faces):
        raise PLYError("every face needs exactly three indices")

    if binary:
        little = sys.byteorder == "little"
        file_type = FileType.BINARY if little else FileType.BINARY_BIG_ENDIAN
        endian = "<" if little else ">"
    else:
        file_type = FileType.ASCII
        endian = "<"

    header = (
        "ply\n"
        f"format {file_type.keyword} 1.0\n"
        f"element {VERTEX_ELEMENT} {len(verts)}\n"
        "property float x\n"
        "property float y\n"
        "property float z\n"
        f"element {FACE_ELEMENT} {len(faces)}\n"
        "property list uchar int vertex_indices\n"
        "end_header\n"
    )

    with open(path, "wb") as fh:
        fh.write(header.encode("ascii"))
        if binary:
            vert_layout = struct.Struct(endian + "fff")
            face_layout = struct.Struct(endian + "Biii")
            fh.write(b"".join(vert_layout.pack(*map(float, v)) for v in verts))
            fh.write(
                b"".join(
                    face_layout.pack(3, *(convert_value(int(i), PropertyType.INT) for i in f))
                    for f in faces
                )
            )
        else:
            lines = ["".join(f"{_format_float(c)} " for c in v) + "\n" for v in verts]
            lines.extend(
                "3 "
                + "".join(f"{convert_value(int(i), PropertyType.INT)} " for i in f)
                + "\n"
                for f in faces
            )
            fh.write("".join(lines).encode("ascii"))