import io
import struct

import pytest

from pcsply.plytypes import FileType, PLYError
from pcsply.reader import PLYReader


def _ply(fmt, header, body=b""):
    text = f"ply\nformat {fmt} 1.0\n" + "".join(f"{line}\n" for line in header) + "end_header\n"
    return text.encode() + body


def _reader(data):
    return PLYReader(io.BytesIO(data))


VERTEX_HEADER = [
    "element vertex 2",
    "property float x",
    "property float y",
    "property float z",
    "property uchar red",
]
FACE_HEADER = ["element face 2", "property list uchar int vertex_indices"]


def test_ascii_header():
    r = _reader(_ply("ascii", VERTEX_HEADER + FACE_HEADER))
    assert r.file_type is FileType.ASCII
    assert (r.version_major, r.version_minor) == (1, 0)
    assert r.num_elements() == 2
    assert r.find_element("face") == 1
    assert r.find_element("edge") is None
    assert r.get_element(0).count == 2
    assert [p.name for p in r.get_element(0).properties] == ["x", "y", "z", "red"]


def test_comments_and_crlf_are_accepted():
    data = b"ply\r\nformat ascii 1.0\ncomment made up\nobj_info thing\nelement v 1\nproperty int a\nend_header\r\n7\n"
    r = _reader(data)
    assert r.num_elements() == 1
    r.load_element()
    assert r.element_data == [(7,)]


@pytest.mark.parametrize(
    "data",
    [
        b"plx\nformat ascii 1.0\nend_header\n",
        b"ply\nformat text 1.0\nend_header\n",
        b"ply\nformat ascii 1.0\nelement v 1\nproperty int a\n",
        b"ply\nformat ascii 1.0\nelement v 1\nproperty foo a\nend_header\n",
        b"ply\nformat ascii 1.0\nelement v -1\nend_header\n",
        b"ply\nformat ascii 1.0\nbogus line\nend_header\n",
    ],
)
def test_invalid_headers(data):
    with pytest.raises(PLYError):
        _reader(data)


def test_load_ascii_vertices():
    body = b"1.5 -2.25 3 200\n0 0.5 4 7\n"
    r = _reader(_ply("ascii", VERTEX_HEADER, body))
    assert r.element_is("vertex")
    assert r.num_rows() == 2
    r.load_element()
    assert r.element_data == [(1.5, -2.25, 3.0, 200), (0.0, 0.5, 4.0, 7)]


def test_ascii_uint_wraps_negative():
    r = _reader(_ply("ascii", ["element v 1", "property uint a"], b"-1\n"))
    r.load_element()
    assert r.element_data == [(2**32 - 1,)]


def test_ascii_lists():
    r = _reader(_ply("ascii", FACE_HEADER, b"3 0 1 2\n4 0 1 2 3\n"))
    r.load_element()
    prop = r.element().properties[0]
    assert prop.row_count == [3, 4]
    assert prop.list_data == [0, 1, 2, 0, 1, 2, 3]
    assert r.element_data == [(None,), (None,)]


def test_ascii_float_list_count_rejected():
    header = ["element face 1", "property list float int vertex_indices"]
    r = _reader(_ply("ascii", header, b"3 0 1 2\n"))
    with pytest.raises(PLYError):
        r.load_element()
    assert not r.has_element()


@pytest.mark.parametrize(
    "fmt,endian,ftype",
    [
        ("binary_little_endian", "<", FileType.BINARY),
        ("binary_big_endian", ">", FileType.BINARY_BIG_ENDIAN),
    ],
)
def test_binary_vertices_and_faces(fmt, endian, ftype):
    body = (
        struct.pack(endian + "fffB", 1.5, -2.25, 3.0, 200)
        + struct.pack(endian + "fffB", 0.0, 0.5, 4.0, 7)
        + struct.pack(endian + "B3i", 3, 0, 1, 2)
        + struct.pack(endian + "B4i", 4, 3, 2, 1, 0)
    )
    r = _reader(_ply(fmt, VERTEX_HEADER + FACE_HEADER, body))
    assert r.file_type is ftype
    r.load_element()
    assert r.element_data == [(1.5, -2.25, 3.0, 200), (0.0, 0.5, 4.0, 7)]
    r.next_element()
    assert r.element_is("face")
    assert r.element_data == []
    r.load_element()
    prop = r.element().properties[0]
    assert prop.row_count == [3, 4]
    assert prop.list_data == [0, 1, 2, 3, 2, 1, 0]


SKIP_HEADER = [
    "element a 2",
    "property short s",
    "element b 2",
    "property list uchar ushort l",
    "element c 1",
    "property double d",
]


def _skip_file(fmt):
    if fmt == "ascii":
        return _ply(fmt, SKIP_HEADER, b"1\n2\n2 5 6\n0\n2.5\n")
    e = "<" if fmt == "binary_little_endian" else ">"
    body = (
        struct.pack(e + "hh", 1, 2)
        + struct.pack(e + "B2H", 2, 5, 6)
        + struct.pack(e + "B", 0)
        + struct.pack(e + "d", 2.5)
    )
    return _ply(fmt, SKIP_HEADER, body)


@pytest.mark.parametrize("fmt", ["ascii", "binary_little_endian", "binary_big_endian"])
def test_skip_unloaded_elements(fmt):
    r = _reader(_skip_file(fmt))
    r.next_element()
    r.next_element()
    assert r.element_is("c")
    r.load_element()
    assert r.element_data == [(2.5,)]


@pytest.mark.parametrize("fmt", ["ascii", "binary_little_endian", "binary_big_endian"])
def test_skip_fixed_then_load_list(fmt):
    r = _reader(_skip_file(fmt))
    r.next_element()
    r.load_element()
    prop = r.element().properties[0]
    assert prop.list_data == [5, 6]
    assert prop.row_count == [2, 0]


def test_truncated_binary_raises():
    header = ["element v 2", "property float x"]
    r = _reader(_ply("binary_little_endian", header, struct.pack("<f", 1.0)))
    with pytest.raises(PLYError):
        r.load_element()
    assert not r.has_element()


def test_negative_binary_list_count_raises():
    header = ["element face 1", "property list char int vertex_indices"]
    r = _reader(_ply("binary_little_endian", header, struct.pack("<b", -1)))
    with pytest.raises(PLYError):
        r.load_element()


def test_negative_count_raises_when_skipping():
    header = ["element face 1", "property list char int vertex_indices"]
    r = _reader(_ply("binary_little_endian", header, struct.pack("<b", -1)))
    with pytest.raises(PLYError):
        r.next_element()


def test_converted_list_loads_as_fixed_rows():
    header = ["element face 2", "property list uchar int vertex_indices"]
    body = struct.pack("<B3i", 3, 0, 1, 2) + struct.pack("<B3i", 3, 2, 1, 0)
    r = _reader(_ply("binary_little_endian", header, body))
    elem = r.get_element(r.find_element("face"))
    idxs = elem.convert_list_to_fixed_size(elem.find_property("vertex_indices"), 3)
    assert idxs == [1, 2, 3]
    r.load_element()
    assert r.element_data == [(3, 0, 1, 2), (3, 2, 1, 0)]


def test_load_element_is_idempotent():
    r = _reader(_ply("ascii", ["element v 1", "property int a"], b"9\n"))
    r.load_element()
    r.load_element()
    assert r.element_data == [(9,)]


def test_find_helpers():
    header = [
        "element vertex 0",
        "property float x",
        "property float y",
        "property float z",
        "property uchar red",
        "property uchar green",
        "property uchar blue",
        "property float s",
        "property float t",
        "property int vertex_index",
    ]
    r = _reader(_ply("ascii", header))
    assert r.find_pos() == [0, 1, 2]
    assert r.find_normal() is None
    assert r.find_color() == [3, 4, 5]
    assert r.find_texcoord() == [6, 7]
    assert r.find_indices() == [8]
    assert r.find_property("green") == 4


def test_navigation_past_end():
    r = _reader(_ply("ascii", ["element v 1", "property int a", "element w 0"], b"1\n"))
    assert r.element_is("v")
    r.next_element()
    assert r.element_is("w")
    assert r.num_rows() == 0
    r.next_element()
    assert not r.has_element()
    assert r.num_rows() == 0
    assert r.find_property("a") is None
    assert r.find_properties("a") is None
    with pytest.raises(PLYError):
        r.element()
    with pytest.raises(PLYError):
        r.load_element()


def test_get_element_out_of_range():
    r = _reader(_ply("ascii", ["element v 0"]))
    assert r.get_element(0).name == "v"
    assert r.get_element(1) is None
    assert r.get_element(-1) is None
    assert r.get_element(None) is None


def test_path_source_and_context_manager(tmp_path):
    path = tmp_path / "cloud.ply"
    path.write_bytes(_ply("ascii", ["element v 1", "property double d"], b"0.25\n"))
    with PLYReader(path) as r:
        r.load_element()
        assert r.element_data == [(0.25,)]
    assert not r.has_element()
    assert r.num_elements() == 0


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        PLYReader(tmp_path / "absent.ply")