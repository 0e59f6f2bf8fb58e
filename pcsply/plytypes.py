"""Property types, file types and value conversion for PLY data."""

from __future__ import annotations

import math
import struct
from enum import Enum, IntEnum


class PLYError(ValueError):
    """Raised when PLY data cannot be parsed, converted or written."""


class PropertyType(IntEnum):
    """Scalar types a PLY property can hold."""

    CHAR = 0
    UCHAR = 1
    SHORT = 2
    USHORT = 3
    INT = 4
    UINT = 5
    FLOAT = 6
    DOUBLE = 7
    NONE = 8

    @property
    def format_char(self) -> str:
        """The struct module format character for this type."""
        try:
            return _FORMAT_CHARS[self]
        except KeyError:
            raise PLYError("type NONE has no binary layout") from None

    @property
    def is_integer(self) -> bool:
        return self < PropertyType.FLOAT

    @property
    def is_signed(self) -> bool:
        return self in (
            PropertyType.CHAR,
            PropertyType.SHORT,
            PropertyType.INT,
            PropertyType.FLOAT,
            PropertyType.DOUBLE,
        )


class FileType(Enum):
    """Encodings a PLY file body can use; values are the header keywords."""

    ASCII = "ascii"
    BINARY = "binary_little_endian"
    BINARY_BIG_ENDIAN = "binary_big_endian"

    @property
    def keyword(self) -> str:
        return self.value


_SIZES = {
    PropertyType.CHAR: 1,
    PropertyType.UCHAR: 1,
    PropertyType.SHORT: 2,
    PropertyType.USHORT: 2,
    PropertyType.INT: 4,
    PropertyType.UINT: 4,
    PropertyType.FLOAT: 4,
    PropertyType.DOUBLE: 8,
}

_FORMAT_CHARS = {
    PropertyType.CHAR: "b",
    PropertyType.UCHAR: "B",
    PropertyType.SHORT: "h",
    PropertyType.USHORT: "H",
    PropertyType.INT: "i",
    PropertyType.UINT: "I",
    PropertyType.FLOAT: "f",
    PropertyType.DOUBLE: "d",
}

_CANONICAL_NAMES = {
    PropertyType.CHAR: "char",
    PropertyType.UCHAR: "uchar",
    PropertyType.SHORT: "short",
    PropertyType.USHORT: "ushort",
    PropertyType.INT: "int",
    PropertyType.UINT: "uint",
    PropertyType.FLOAT: "float",
    PropertyType.DOUBLE: "double",
}

_ALIASES = {
    "char": PropertyType.CHAR,
    "uchar": PropertyType.UCHAR,
    "short": PropertyType.SHORT,
    "ushort": PropertyType.USHORT,
    "int": PropertyType.INT,
    "uint": PropertyType.UINT,
    "float": PropertyType.FLOAT,
    "float32": PropertyType.FLOAT,
    "float64": PropertyType.DOUBLE,
    "double": PropertyType.DOUBLE,
    "uint8": PropertyType.UCHAR,
    "uint16": PropertyType.USHORT,
    "uint32": PropertyType.UINT,
    "int8": PropertyType.CHAR,
    "int16": PropertyType.SHORT,
    "int32": PropertyType.INT,
}


def parse_type(name: str) -> PropertyType:
    """Return the property type named by a PLY header type keyword."""
    try:
        return _ALIASES[name]
    except KeyError:
        raise PLYError(f"unknown property type {name!r}") from None


def type_name(ptype: PropertyType) -> str:
    """Return the canonical header keyword for a property type."""
    try:
        return _CANONICAL_NAMES[PropertyType(ptype)]
    except KeyError:
        raise PLYError(f"type {ptype!r} has no name") from None


def type_size(ptype: PropertyType) -> int:
    """Return the size in bytes of one value of the type (0 for NONE)."""
    return _SIZES.get(PropertyType(ptype), 0)


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def convert_value(value: int | float, dest_type: PropertyType) -> int | float:
    """Convert a number the way a C cast to ``dest_type`` would."""
    dest_type = PropertyType(dest_type)
    if dest_type is PropertyType.NONE:
        raise PLYError("cannot convert to type NONE")
    if dest_type is PropertyType.DOUBLE:
        return float(value)
    if dest_type is PropertyType.FLOAT:
        return _to_float32(float(value))

    if not isinstance(value, int):
        value = float(value)
        if not math.isfinite(value):
            raise PLYError(f"cannot convert {value} to an integer type")
        value = int(value)  # truncates toward zero
    bits = _SIZES[dest_type] * 8
    value &= (1 << bits) - 1
    if dest_type.is_signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def compatible_types(src_type: PropertyType, dest_type: PropertyType) -> bool:
    """True if values of ``src_type`` can be copied bitwise as ``dest_type``."""
    src_type = PropertyType(src_type)
    dest_type = PropertyType(dest_type)
    return src_type == dest_type or (
        src_type < PropertyType.FLOAT and (int(src_type) ^ 1) == int(dest_type)
    )