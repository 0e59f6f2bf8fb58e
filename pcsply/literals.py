"""Parsing of integer and floating point literals in PLY text."""

from __future__ import annotations

from .plytypes import PLYError, PropertyType, convert_value

Text = str | bytes


def _char(text: Text, pos: int) -> str:
    if pos >= len(text):
        return ""
    ch = text[pos]
    return chr(ch) if isinstance(ch, int) else ch


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9" and ch != ""


def _is_letter(ch: str) -> bool:
    return ch != "" and ("a" <= ch <= "z" or "A" <= ch <= "Z")


def _is_alnum(ch: str) -> bool:
    return _is_digit(ch) or _is_letter(ch)


def _wrap_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def int_literal(text: Text, pos: int = 0) -> tuple[int, int]:
    """Parse an integer at ``pos``; return ``(value, end)``.

    The value is a 32-bit signed integer. Raises PLYError if no valid
    literal starts at ``pos``.
    """
    negative = False
    ch = _char(text, pos)
    if ch == "-":
        negative = True
        pos += 1
    elif ch == "+":
        pos += 1

    has_leading_zeroes = _char(text, pos) == "0"
    while _char(text, pos) == "0":
        pos += 1

    num_digits = 0
    value = 0
    while _is_digit(ch := _char(text, pos)):
        value = value * 10 + int(ch)
        num_digits += 1
        pos += 1

    if num_digits == 0 and has_leading_zeroes:
        num_digits = 1

    ch = _char(text, pos)
    if num_digits == 0 or _is_letter(ch) or ch == "_":
        raise PLYError("not an integer literal")
    if num_digits > 10:
        raise PLYError("integer literal too large")

    value = _wrap_int32(value)
    if negative:
        value = _wrap_int32(-value)
    return value, pos


def double_literal(text: Text, pos: int = 0) -> tuple[float, int]:
    """Parse a floating point number at ``pos``; return ``(value, end)``.

    Raises PLYError if no valid literal starts at ``pos``.
    """
    negative = False
    ch = _char(text, pos)
    if ch == "-":
        negative = True
        pos += 1
    elif ch == "+":
        pos += 1

    value = 0.0
    has_int_digits = _is_digit(_char(text, pos))
    if has_int_digits:
        while _is_digit(ch := _char(text, pos)):
            value = value * 10.0 + float(int(ch))
            pos += 1
    elif _char(text, pos) != ".":
        raise PLYError("not a floating point number")

    if _char(text, pos) == ".":
        pos += 1
        if _is_digit(_char(text, pos)):
            scale = 0.1
            while _is_digit(ch := _char(text, pos)):
                value += scale * float(int(ch))
                scale *= 0.1
                pos += 1
        elif not has_int_digits:
            raise PLYError("number has no digits before or after the decimal point")

    if _char(text, pos) in ("e", "E"):
        pos += 1
        negative_exponent = False
        ch = _char(text, pos)
        if ch == "-":
            negative_exponent = True
            pos += 1
        elif ch == "+":
            pos += 1
        if not _is_digit(_char(text, pos)):
            raise PLYError("exponent has no digits")
        exponent = 0.0
        while _is_digit(ch := _char(text, pos)):
            exponent = exponent * 10.0 + float(int(ch))
            pos += 1
        if negative_exponent:
            exponent = -exponent
        try:
            factor = 10.0**exponent
        except OverflowError:
            factor = float("inf")
        value *= factor

    ch = _char(text, pos)
    if ch == "." or ch == "_" or _is_alnum(ch):
        raise PLYError("floating point number has trailing characters")

    if negative:
        value = -value
    return value, pos


def float_literal(text: Text, pos: int = 0) -> tuple[float, int]:
    """Parse a number as :func:`double_literal` and round it to 32 bits."""
    value, end = double_literal(text, pos)
    return convert_value(value, PropertyType.FLOAT), end