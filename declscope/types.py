"""Type descriptors for declarations: primitive kinds, pointers, arrays and functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from math import prod
from typing import Callable, Optional, Protocol

WORD_SIZE = 4
"""Size in bytes of a pointer or function reference."""


class PrimitiveType(IntEnum):
    """Indices of the built-in types; user-defined types are numbered after these."""

    ERROR = -1
    U_CHAR = 0
    CHAR = 1
    U_SHORT = 2
    SHORT = 3
    U_INT = 4
    INT = 5
    U_LONG = 6
    LONG = 7
    U_LONG_LONG = 8
    LONG_LONG = 9
    FLOAT = 10
    DOUBLE = 11
    LONG_DOUBLE = 12
    VOID = 13


FIRST_DEFINED_INDEX = 14
"""Type index handed to the first user-defined type."""

PRIMITIVE_SIZES = {
    PrimitiveType.U_CHAR: 1,
    PrimitiveType.CHAR: 1,
    PrimitiveType.U_SHORT: 2,
    PrimitiveType.SHORT: 2,
    PrimitiveType.U_INT: 4,
    PrimitiveType.INT: 4,
    PrimitiveType.U_LONG: 4,
    PrimitiveType.LONG: 4,
    PrimitiveType.U_LONG_LONG: 8,
    PrimitiveType.LONG_LONG: 8,
    PrimitiveType.FLOAT: 4,
    PrimitiveType.DOUBLE: 8,
    PrimitiveType.LONG_DOUBLE: 8,
}

PRIMITIVE_LABELS = {
    PrimitiveType.U_CHAR: "unsigned_char",
    PrimitiveType.CHAR: "char",
    PrimitiveType.U_SHORT: "unsigned_short",
    PrimitiveType.SHORT: "short",
    PrimitiveType.U_INT: "unsigned_int",
    PrimitiveType.INT: "int",
    PrimitiveType.U_LONG: "unsigned_long",
    PrimitiveType.LONG: "long",
    PrimitiveType.U_LONG_LONG: "unsigned_long_long",
    PrimitiveType.LONG_LONG: "long_long",
    PrimitiveType.FLOAT: "float",
    PrimitiveType.DOUBLE: "double",
    PrimitiveType.LONG_DOUBLE: "long_double",
    PrimitiveType.VOID: "void",
}

_UNSIGNED_INTEGERS = frozenset({0, 2, 4, 6, 8})
_SIGNED_INTEGERS = frozenset({1, 3, 5, 7, 9})


class SemanticError(Exception):
    """Raised when a declaration or type is semantically invalid."""


class SizedDefinition(Protocol):
    """Anything that can report the size of a user-defined type."""

    def size(self, resolver: Resolver) -> int: ...


Resolver = Callable[[str], Optional[SizedDefinition]]


@dataclass(eq=False)
class Type:
    """A declared type: base index plus pointer, array and function shape."""

    type_index: int = PrimitiveType.ERROR
    ptr_level: int = 0
    is_const_variable: bool = False
    is_const_literal: bool = False
    is_pointer: bool = False
    is_array: bool = False
    array_dims: list[int] = field(default_factory=list)
    is_defined_type: bool = False
    defined_type_name: str = ""
    is_function: bool = False
    is_variadic: bool = False
    is_static: bool = False
    arg_types: list[Type] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.ptr_level > 0:
            self.is_pointer = True

    @property
    def array_dim(self) -> int:
        return len(self.array_dims)

    @property
    def num_args(self) -> int:
        return len(self.arg_types)

    def is_primitive(self) -> bool:
        return 0 <= self.type_index < PrimitiveType.VOID

    def is_int(self) -> bool:
        return PrimitiveType.U_CHAR < self.type_index <= PrimitiveType.LONG_LONG and self.ptr_level == 0

    def is_char(self) -> bool:
        return self.type_index in (PrimitiveType.U_CHAR, PrimitiveType.CHAR) and self.ptr_level == 0

    def is_float(self) -> bool:
        return PrimitiveType.FLOAT <= self.type_index <= PrimitiveType.LONG_DOUBLE and self.ptr_level == 0

    def is_int_or_float(self) -> bool:
        return 0 <= self.type_index <= PrimitiveType.LONG_DOUBLE and self.ptr_level == 0

    def is_unsigned(self) -> bool:
        return self.type_index in _UNSIGNED_INTEGERS

    def is_signed(self) -> bool:
        return self.type_index in _SIGNED_INTEGERS

    def make_signed(self) -> None:
        """Switch an unsigned integer kind to its signed counterpart, in place."""
        if self.type_index in _UNSIGNED_INTEGERS:
            self.type_index += 1

    def make_unsigned(self) -> None:
        """Switch a signed integer kind to its unsigned counterpart, in place."""
        if self.type_index in _SIGNED_INTEGERS:
            self.type_index -= 1

    def is_void(self) -> bool:
        return self.type_index == PrimitiveType.VOID and (self.ptr_level == 0 or self.is_array)

    def is_error(self) -> bool:
        return self.type_index == PrimitiveType.ERROR

    def is_aggregate(self) -> bool:
        """True for arrays and for values (not pointers) of user-defined types."""
        return self.is_array or (not self.is_primitive() and self.ptr_level == 0)

    def is_convertible_to(self, other: Type) -> bool:
        if self == other:
            return True
        if self.is_primitive() and not self.is_pointer:
            return True
        if self.is_pointer and other.is_pointer and self.ptr_level == other.ptr_level:
            return PrimitiveType.VOID in (self.type_index, other.type_index)
        return False

    def promote_to_int(self) -> Type:
        """Apply integer promotion: char and short kinds become int or unsigned int."""
        if PrimitiveType.U_CHAR <= self.type_index <= PrimitiveType.SHORT:
            index = PrimitiveType.U_INT if self.is_unsigned() else PrimitiveType.INT
            return Type(index)
        return self

    def _defined_size(self, resolver: Optional[Resolver]) -> int:
        definition = None
        if self.is_defined_type and resolver is not None:
            definition = resolver(self.defined_type_name)
        if definition is None:
            raise SemanticError(f"Type {self.defined_type_name} declared but not defined")
        return definition.size(resolver)

    def size(self, resolver: Optional[Resolver] = None) -> int:
        """Storage size in bytes; ``resolver`` maps a defined type's name to its definition."""
        if self.is_array:
            count = prod(self.array_dims)
            if self.is_primitive():
                element = PRIMITIVE_SIZES[PrimitiveType(self.type_index)]
            else:
                element = self._defined_size(resolver)
            return element * count
        if self.ptr_level > 0 or self.is_function:
            return WORD_SIZE
        if self.is_void():
            return 0
        if not self.is_primitive():
            return self._defined_size(resolver)
        return PRIMITIVE_SIZES[PrimitiveType(self.type_index)]

    def label(self) -> str:
        """Short name used in generated code, e.g. ``unsigned_int`` or ``char_ptr``."""
        if self.is_defined_type:
            text = self.defined_type_name
        else:
            try:
                text = PRIMITIVE_LABELS.get(PrimitiveType(self.type_index), "")
            except ValueError:
                text = ""
        if self.is_pointer:
            text += "_ptr"
        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        if self.type_index != other.type_index:
            return False
        if self.is_array and other.is_array:
            if self.array_dim != other.array_dim:
                return False
            return all(
                a == 0 or b == 0 or a == b
                for a, b in zip(self.array_dims, other.array_dims)
            )
        if self.is_array != other.is_array:
            return self.ptr_level == 1 and other.ptr_level == 1
        if self.is_pointer and other.is_pointer:
            return self.ptr_level == other.ptr_level
        if self.is_pointer != other.is_pointer:
            return False
        if self.is_function and other.is_function:
            if self.num_args != other.num_args:
                return False
            return all(a == b for a, b in zip(self.arg_types, other.arg_types))
        if self.is_function != other.is_function:
            return False
        return True

    __hash__ = None  # type: ignore[assignment]