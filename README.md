# pcsply

A small library with no third-party dependencies for reading and writing PLY
files. It reads point clouds with colours and polygon meshes in ASCII, binary
little-endian and binary big-endian form, and writes triangle meshes as ASCII
or binary.

## Installation

```
pip install pcsply
```

## Quick start

The functions in `pcsply.ply` cover the common cases:

```python
from pcsply.ply import count_vertices, count_faces, load_point_cloud, load_mesh, write_mesh

print(count_vertices("cloud.ply"), count_faces("mesh.ply"))

# Positions as (x, y, z) floats; colours as (r, g, b) bytes, or None
# when the vertices carry no colour.
positions, colors = load_point_cloud("cloud.ply")

# Positions plus one (a, b, c) index triple per face.
positions, faces = load_mesh("mesh.ply")

# Write a triangle mesh, as ASCII (the default) or binary.
write_mesh("out.ply", positions, faces, binary=True)
```

- `count_vertices` and `count_faces` return the row count of the `vertex` or
  `face` element, or 0 when the file has no such element.
- `load_point_cloud` looks for `x`, `y`, `z` on the `vertex` element and for
  colours named `r`, `g`, `b` or `red`, `green`, `blue`. Positions come back
  empty when there is no vertex element with positions.
- `load_mesh` reads every face as exactly three entries of its
  `vertex_indices` list and raises `PLYError` when the file has no face
  element or lacks positions or faces.
- `write_mesh` writes `float` x, y, z vertices and a
  `list uchar int vertex_indices` face property. Binary output uses the byte
  order of the running machine.

## Working with the reader directly

`pcsply.reader.PLYReader` takes a path or a binary file object, parses the
header on construction and then walks the file one element at a time. Its
`file_type`, `version_major` and `version_minor` attributes describe the
header. Load the current element, look up properties and pull values out with
the helpers in `pcsply.extract`:

```python
from pcsply.reader import PLYReader
from pcsply.plytypes import PropertyType
from pcsply.extract import extract_properties, extract_triangles

with PLYReader("mesh.ply") as reader:
    positions = None
    while reader.has_element():
        if reader.element_is("vertex"):
            reader.load_element()
            positions = extract_properties(reader, reader.find_pos(), PropertyType.FLOAT)
        elif reader.element_is("face") and positions is not None:
            reader.load_element()
            (idx,) = reader.find_indices()
            triangles = extract_triangles(reader, idx, positions, PropertyType.INT)
        reader.next_element()
```

Elements that are not loaded are skipped by `next_element`. Property lookups
(`find_property`, `find_properties`, `find_pos`, `find_normal`,
`find_texcoord`, `find_color`, `find_indices`) return indices, or `None` when
a property is missing.

`pcsply.extract` also offers `get_list_counts`, `get_list_data`,
`sum_of_list_counts`, `extract_list_property`, `num_triangles` and
`requires_triangulation` for list properties.

Faces with more than four corners are split into triangles by ear clipping
(`pcsply.triangulate.triangulate_polygon`); quads are split along a fixed
diagonal. A list property can be turned into fixed columns with
`pcsply.elements.PLYElement.convert_list_to_fixed_size`.

Type names, sizes and C-style value conversion live in `pcsply.plytypes`
(`PropertyType`, `FileType`, `parse_type`, `type_name`, `type_size`,
`convert_value`, `compatible_types`). Malformed input raises
`pcsply.plytypes.PLYError`, a subclass of `ValueError`.

## What it does not do

- There is no command-line tool; the package is a library only.
- Writing is limited to triangle meshes with float positions; there is no
  writer for point clouds, colours or other properties.
- The reader loads the whole file into memory before parsing.

## Running the tests

```
pip install -e .[test]
pytest
```