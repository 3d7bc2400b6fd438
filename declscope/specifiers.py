"""Declaration specifiers: storage classes, qualifiers and the base type they name."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

from declscope.types import PrimitiveType, SemanticError

if TYPE_CHECKING:
    from declscope.table import SymbolTable


class StorageClass(Enum):
    """Storage-class keywords of a declaration."""

    TYPEDEF = "typedef"
    EXTERN = "extern"
    STATIC = "static"
    AUTO = "auto"
    REGISTER = "register"


class TypeQualifier(Enum):
    """Type qualifiers of a declaration."""

    CONST = "const"
    VOLATILE = "volatile"
    RESTRICT = "restrict"


_COUNTED_KEYWORDS = frozenset(
    {"SHORT", "INT", "LONG", "CHAR", "DOUBLE", "FLOAT", "VOID"}
)


@dataclass(frozen=True)
class TypeSpecifier:
    """One type specifier: a keyword, an enum, a struct/union or class name, or a typedef name.

    ``primitive`` holds the keyword token name in upper case (``"INT"``, ``"UNSIGNED"``...).
    """

    primitive: Optional[str] = None
    is_enum: bool = False
    struct_union: Optional[str] = None
    class_name: Optional[str] = None
    type_name: str = ""
    line_no: int = 0
    column_no: int = 0


def _category(spec: TypeSpecifier) -> Optional[str]:
    if spec.primitive is not None:
        return spec.primitive
    if spec.is_enum:
        return "ENUM"
    if spec.struct_union is not None:
        return "STRUCT_UNION"
    if spec.class_name is not None:
        return "CLASS"
    if spec.type_name:
        return "TYPE_NAME"
    return None


def _defined_index(table: SymbolTable, name: str) -> int:
    defined = table.get_defined_type(name)
    return int(PrimitiveType.ERROR) if defined is None else defined.type_index


def resolve_type_index(table: SymbolTable, specifiers: Sequence[TypeSpecifier]) -> int:
    """Type index named by a list of type specifiers; ``PrimitiveType.ERROR`` if invalid.

    Raises SemanticError when a single typedef name is not known.
    """
    counts: Counter[str] = Counter()
    unsigned = False
    for spec in specifiers:
        kind = _category(spec)
        if kind == "UNSIGNED":
            unsigned = True
        elif kind in _COUNTED_KEYWORDS or kind in ("ENUM", "STRUCT_UNION", "CLASS", "TYPE_NAME"):
            counts[kind] += 1

    longs = counts["LONG"]
    number = len(specifiers)
    if number == 3:
        if longs == 2 and unsigned:
            return int(PrimitiveType.U_LONG_LONG)
    elif number == 2:
        if longs >= 2 and not unsigned:
            return int(PrimitiveType.LONG_LONG)
        if longs == 1 and unsigned:
            return int(PrimitiveType.U_LONG)
        if counts["INT"] and unsigned:
            return int(PrimitiveType.U_INT)
        if counts["SHORT"] and unsigned:
            return int(PrimitiveType.U_SHORT)
        if counts["CHAR"] and unsigned:
            return int(PrimitiveType.U_CHAR)
        if longs and counts["DOUBLE"]:
            return int(PrimitiveType.LONG_DOUBLE)
    elif number == 1:
        first = specifiers[0]
        if not unsigned:
            if longs == 1:
                return int(PrimitiveType.LONG)
            for keyword, index in (
                ("INT", PrimitiveType.INT),
                ("SHORT", PrimitiveType.SHORT),
                ("CHAR", PrimitiveType.CHAR),
                ("FLOAT", PrimitiveType.FLOAT),
                ("DOUBLE", PrimitiveType.DOUBLE),
            ):
                if counts[keyword]:
                    return int(index)
        if counts["VOID"]:
            return int(PrimitiveType.VOID)
        if counts["ENUM"]:
            return int(PrimitiveType.INT)
        if counts["STRUCT_UNION"]:
            return _defined_index(table, first.struct_union or "")
        if counts["CLASS"]:
            return _defined_index(table, first.class_name or "")
        if counts["TYPE_NAME"]:
            symbol = table.get_typedef(first.type_name)
            if symbol is None:
                raise SemanticError(f"Type name {first.type_name} not found")
            return int(symbol.type.type_index)
    return int(PrimitiveType.ERROR)


@dataclass
class DeclarationSpecifiers:
    """Everything before the declarators of a declaration."""

    type_specifiers: list[TypeSpecifier] = field(default_factory=list)
    type_qualifiers: list[TypeQualifier] = field(default_factory=list)
    storage_classes: list[StorageClass] = field(default_factory=list)
    is_const_variable: bool = False
    is_typedef: bool = False
    is_static: bool = False
    is_type_name: bool = False
    type_index: int = int(PrimitiveType.ERROR)

    def resolve(self, table: SymbolTable) -> int:
        """Work out the base type index and constness; raises SemanticError if invalid."""
        self.is_const_variable = TypeQualifier.CONST in self.type_qualifiers
        self.type_index = resolve_type_index(table, self.type_specifiers)
        self.is_type_name = (
            len(self.type_specifiers) == 1
            and _category(self.type_specifiers[0]) == "TYPE_NAME"
            and self.type_index != PrimitiveType.ERROR
        )
        if self.type_index == PrimitiveType.ERROR:
            if self.type_specifiers:
                first = self.type_specifiers[0]
                raise SemanticError(
                    f"Invalid Type at line {first.line_no}, column {first.column_no}"
                )
            raise SemanticError("Invalid Type")
        return self.type_index

    def add_storage_class(self, storage: StorageClass) -> None:
        """Record a storage-class keyword, noting typedef and static."""
        self.storage_classes.append(storage)
        if storage is StorageClass.TYPEDEF:
            self.is_typedef = True
        elif storage is StorageClass.STATIC:
            self.is_static = True