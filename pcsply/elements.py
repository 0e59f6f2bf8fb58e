"""Element and property descriptions taken from a PLY header."""

from __future__ import annotations

from dataclasses import dataclass, field

from .plytypes import PLYError, PropertyType, type_size


@dataclass
class PLYProperty:
    """One property of an element: a scalar, or a list with a count type."""

    name: str
    type: PropertyType = PropertyType.NONE
    count_type: PropertyType = PropertyType.NONE
    offset: int = 0
    stride: int = 0
    list_data: list = field(default_factory=list)
    row_count: list[int] = field(default_factory=list)

    @property
    def is_list(self) -> bool:
        return self.count_type != PropertyType.NONE


@dataclass
class PLYElement:
    """A named element with a row count and an ordered list of properties."""

    name: str
    count: int = 0
    properties: list[PLYProperty] = field(default_factory=list)
    fixed_size: bool = field(init=False, default=True)
    row_stride: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.calculate_offsets()

    def calculate_offsets(self) -> None:
        """Work out whether rows have a fixed size and where scalars sit in a row."""
        self.fixed_size = not any(prop.is_list for prop in self.properties)
        self.row_stride = 0
        for prop in self.properties:
            if prop.is_list:
                continue
            prop.offset = self.row_stride
            self.row_stride += type_size(prop.type)

    def find_property(self, name: str) -> int | None:
        """Return the index of the property called ``name``, or None."""
        return next(
            (idx for idx, prop in enumerate(self.properties) if prop.name == name),
            None,
        )

    def find_properties(self, *args: str) -> list[int] | None:
        """Return the indices of all named properties, or None if any is missing."""
        indices = []
        for name in args:
            idx = self.find_property(name)
            if idx is None:
                return None
            indices.append(idx)
        return indices

    def convert_list_to_fixed_size(self, list_prop_idx: int | None, list_size: int) -> list[int]:
        """Replace a list property by a count column and ``list_size`` item columns.

        Returns the indices of the new item properties.
        """
        if (
            self.fixed_size
            or list_prop_idx is None
            or not 0 <= list_prop_idx < len(self.properties)
            or not self.properties[list_prop_idx].is_list
        ):
            raise PLYError("property is not a list property of a variable-size element")
        if list_size < 0:
            raise PLYError("list size must not be negative")

        old = self.properties[list_prop_idx]
        count_prop = PLYProperty(
            name=f"{old.name}_count",
            type=old.count_type,
            stride=type_size(old.count_type),
        )
        items = [
            PLYProperty(name=f"{old.name}_{i}", type=old.type, stride=type_size(old.type))
            for i in range(list_size)
        ]
        self.properties[list_prop_idx : list_prop_idx + 1] = [count_prop, *items]
        self.calculate_offsets()
        return list(range(list_prop_idx + 1, list_prop_idx + 1 + list_size))