"""Streaming reader for ASCII and binary PLY files."""

from __future__ import annotations

import os
import struct
from typing import BinaryIO

from .elements import PLYElement, PLYProperty
from .literals import double_literal, float_literal, int_literal
from .plytypes import (
    FileType,
    PLYError,
    PropertyType,
    convert_value,
    parse_type,
    type_size,
)

_WHITESPACE = frozenset(b" \t\r")


def _is_letter(ch: int) -> bool:
    return 0x41 <= ch <= 0x5A or 0x61 <= ch <= 0x7A


def _is_keyword_start(ch: int) -> bool:
    return _is_letter(ch) or ch == 0x5F


def _is_keyword_part(ch: int) -> bool:
    return _is_keyword_start(ch) or 0x30 <= ch <= 0x39


class PLYReader:
    """Reads a PLY file one element at a time.

    ``source`` is a path or a binary file object. The header is parsed on
    construction; PLYError is raised if it is malformed.
    """

    def __init__(self, source: str | os.PathLike | BinaryIO) -> None:
        if hasattr(source, "read"):
            data = source.read()
        else:
            with open(source, "rb") as fh:
                data = fh.read()
        self._data = bytes(data)
        self._pos = 0
        self._end = 0
        self._elements: list[PLYElement] = []
        self._current = 0
        self._loaded = False
        self._valid = True
        self.element_data: list[tuple] = []
        self.file_type = FileType.ASCII
        self.version_major = 0
        self.version_minor = 0
        try:
            self._parse_header()
        except PLYError:
            self._valid = False
            raise

    # ---- lifetime ----

    def close(self) -> None:
        self._data = b""
        self._valid = False
        self.element_data = []

    def __enter__(self) -> PLYReader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---- element navigation ----

    def has_element(self) -> bool:
        return self._valid and self._current < len(self._elements)

    def element(self) -> PLYElement:
        if not self.has_element():
            raise PLYError("no current element")
        return self._elements[self._current]

    def load_element(self) -> None:
        """Load the rows of the current element into memory."""
        elem = self.element()
        if self._loaded:
            return
        try:
            if elem.fixed_size:
                self._load_fixed_size(elem)
            else:
                self._load_variable_size(elem)
        except PLYError:
            self._valid = False
            raise
        self._loaded = True

    def next_element(self) -> None:
        """Move to the next element, skipping the current one if not loaded."""
        if not self.has_element():
            return
        elem = self._elements[self._current]
        self._current += 1

        if self._loaded:
            for prop in elem.properties:
                if prop.is_list:
                    prop.list_data = []
                    prop.row_count = []
            self.element_data = []
            self._loaded = False
            return

        if self.file_type is FileType.ASCII:
            for _ in range(elem.count):
                self._next_line()
        elif elem.fixed_size:
            self._pos += elem.row_stride * elem.count
            self._end = self._pos
        else:
            try:
                self._binary_variable_rows(elem, store=False)
            except PLYError:
                self._valid = False
                raise

    def num_elements(self) -> int:
        return len(self._elements) if self._valid else 0

    def find_element(self, name: str) -> int | None:
        for idx in range(self.num_elements()):
            if self._elements[idx].name == name:
                return idx
        return None

    def get_element(self, idx: int | None) -> PLYElement | None:
        if idx is None or not 0 <= idx < self.num_elements():
            return None
        return self._elements[idx]

    def element_is(self, name: str) -> bool:
        return self.has_element() and self.element().name == name

    def num_rows(self) -> int:
        return self.element().count if self.has_element() else 0

    def find_property(self, name: str) -> int | None:
        return self.element().find_property(name) if self.has_element() else None

    def find_properties(self, *args: str) -> list[int] | None:
        if not self.has_element():
            return None
        return self.element().find_properties(*args)

    def find_pos(self) -> list[int] | None:
        return self.find_properties("x", "y", "z")

    def find_normal(self) -> list[int] | None:
        return self.find_properties("nx", "ny", "nz")

    def find_texcoord(self) -> list[int] | None:
        for names in (("u", "v"), ("s", "t"), ("texture_u", "texture_v"), ("texture_s", "texture_t")):
            found = self.find_properties(*names)
            if found is not None:
                return found
        return None

    def find_color(self) -> list[int] | None:
        return self.find_properties("r", "g", "b") or self.find_properties("red", "green", "blue")

    def find_indices(self) -> list[int] | None:
        return self.find_properties("vertex_indices") or self.find_properties("vertex_index")

    # ---- cursor primitives ----

    def _byte(self, idx: int) -> int:
        return self._data[idx] if idx < len(self._data) else 0

    def _accept(self) -> None:
        self._pos = self._end

    def _advance(self) -> bool:
        """Skip whitespace up to the next token or end of line."""
        data = self._data
        self._pos = self._end
        while self._pos < len(data) and data[self._pos] in _WHITESPACE:
            self._pos += 1
        self._end = self._pos
        return self._pos < len(data)

    def _next_line(self) -> bool:
        """Move to the start of the next line that is not a comment."""
        self._pos = self._end
        while True:
            idx = self._data.find(b"\n", self._pos)
            if idx < 0:
                self._pos = self._end = len(self._data)
                return False
            self._pos = self._end = idx + 1
            if not (self._match(b"comment") or self._match(b"obj_info")):
                return True

    def _match(self, text: bytes) -> bool:
        data = self._data
        self._end = self._pos
        matched = 0
        while self._end < len(data) and matched < len(text) and data[self._end] == text[matched]:
            self._end += 1
            matched += 1
        return matched == len(text)

    def _keyword(self, text: bytes) -> bool:
        return self._match(text) and not _is_keyword_part(self._byte(self._end))

    def _identifier(self) -> str:
        self._end = self._pos
        if not _is_keyword_start(self._byte(self._end)):
            raise PLYError("expected an identifier")
        self._end += 1
        while _is_keyword_part(self._byte(self._end)):
            self._end += 1
        return self._data[self._pos : self._end].decode("ascii")

    def _int(self) -> int:
        value, self._end = int_literal(self._data, self._pos)
        return value

    def _property_type(self) -> PropertyType:
        self._end = self._pos
        while _is_keyword_part(self._byte(self._end)):
            self._end += 1
        return parse_type(self._data[self._pos : self._end].decode("ascii"))

    @staticmethod
    def _expect(condition: bool, message: str) -> None:
        if not condition:
            raise PLYError(message)

    # ---- header ----

    def _parse_header(self) -> None:
        self._expect(self._keyword(b"ply") and self._next_line(), "missing 'ply' magic")
        self._expect(self._keyword(b"format") and self._advance(), "missing format line")
        for file_type in FileType:
            if self._keyword(file_type.keyword.encode("ascii")):
                self.file_type = file_type
                break
        else:
            raise PLYError("unknown file format")
        self._expect(self._advance(), "missing version")
        self.version_major = self._int()
        self._expect(
            self._advance() and self._match(b".") and self._advance(),
            "malformed version",
        )
        self.version_minor = self._int()
        self._expect(self._next_line(), "truncated header")

        while self._keyword(b"element"):
            self._elements.append(self._parse_element())

        self._expect(
            self._keyword(b"end_header") and self._advance() and self._match(b"\n"),
            "missing end_header",
        )
        self._accept()
        if self.file_type is FileType.ASCII:
            self._advance()
        for elem in self._elements:
            elem.calculate_offsets()

    def _parse_element(self) -> PLYElement:
        self._expect(self._advance(), "truncated element line")
        name = self._identifier()
        self._expect(self._advance(), "truncated element line")
        count = self._int()
        self._expect(self._next_line(), "truncated header")
        if count < 0:
            raise PLYError(f"element {name!r} has a negative count")
        elem = PLYElement(name, count)
        while self._keyword(b"property"):
            elem.properties.append(self._parse_property())
        return elem

    def _parse_property(self) -> PLYProperty:
        self._expect(self._advance(), "truncated property line")
        count_type = PropertyType.NONE
        if self._keyword(b"list"):
            self._expect(self._advance(), "truncated property line")
            count_type = self._property_type()
            self._expect(self._advance(), "truncated property line")
        ptype = self._property_type()
        self._expect(self._advance(), "truncated property line")
        name = self._identifier()
        self._expect(self._next_line(), "truncated header")
        return PLYProperty(name, ptype, count_type)

    # ---- data ----

    @property
    def _endian(self) -> str:
        return ">" if self.file_type is FileType.BINARY_BIG_ENDIAN else "<"

    def _ascii_value(self, ptype: PropertyType) -> int | float:
        if ptype.is_integer:
            value, end = int_literal(self._data, self._pos)
            value = convert_value(value, ptype)
        elif ptype == PropertyType.FLOAT:
            value, end = float_literal(self._data, self._pos)
        else:
            value, end = double_literal(self._data, self._pos)
        self._end = end
        self._advance()
        return value

    def _ascii_list(self, prop: PLYProperty) -> None:
        if not prop.count_type.is_integer:
            raise PLYError(f"list count of {prop.name!r} must be an integer type")
        count = self._int()
        if not self._advance() or count < 0:
            raise PLYError(f"bad list count for {prop.name!r}")
        prop.row_count.append(count)
        prop.list_data.extend(self._ascii_value(prop.type) for _ in range(count))

    def _unpack(self, ptype: PropertyType, count: int = 1) -> tuple:
        size = type_size(ptype) * count
        if self._pos + size > len(self._data):
            raise PLYError("unexpected end of data")
        values = struct.unpack_from(f"{self._endian}{count}{ptype.format_char}", self._data, self._pos)
        self._pos += size
        self._end = self._pos
        return values

    def _load_fixed_size(self, elem: PLYElement) -> None:
        if self.file_type is FileType.ASCII:
            rows = []
            for _ in range(elem.count):
                rows.append(tuple(self._ascii_value(prop.type) for prop in elem.properties))
                self._next_line()
        else:
            layout = struct.Struct(
                self._endian + "".join(prop.type.format_char for prop in elem.properties)
            )
            size = layout.size * elem.count
            chunk = self._data[self._pos : self._pos + size]
            if len(chunk) < size:
                raise PLYError(f"element {elem.name!r} is truncated")
            self._pos += size
            self._end = self._pos
            if layout.size:
                rows = list(layout.iter_unpack(chunk))
            else:
                rows = [() for _ in range(elem.count)]
        self.element_data = rows

    def _load_variable_size(self, elem: PLYElement) -> None:
        for prop in elem.properties:
            if prop.is_list:
                prop.list_data = []
                prop.row_count = []
        if self.file_type is FileType.ASCII:
            rows = []
            for _ in range(elem.count):
                row = []
                for prop in elem.properties:
                    if prop.is_list:
                        self._ascii_list(prop)
                        row.append(None)
                    else:
                        row.append(self._ascii_value(prop.type))
                rows.append(tuple(row))
                self._next_line()
        else:
            rows = self._binary_variable_rows(elem, store=True)
        self.element_data = rows

    def _binary_variable_rows(self, elem: PLYElement, store: bool) -> list[tuple]:
        rows = []
        for _ in range(elem.count):
            row = []
            for prop in elem.properties:
                if not prop.is_list:
                    row.append(self._unpack(prop.type)[0])
                    continue
                count = convert_value(self._unpack(prop.count_type)[0], PropertyType.INT)
                if count < 0:
                    raise PLYError(f"negative list count for {prop.name!r}")
                values = self._unpack(prop.type, count)
                if store:
                    prop.row_count.append(count)
                    prop.list_data.extend(values)
                row.append(None)
            if store:
                rows.append(tuple(row))
        return rows