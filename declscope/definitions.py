"""User-defined types: struct, union and class definitions and their members."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from typing import Any, Optional

from declscope.types import FIRST_DEFINED_INDEX, Resolver, SemanticError, Type


class TypeCategory(Enum):
    """Kind of a user-defined type."""

    ERROR = "error"
    STRUCT = "struct"
    UNION = "union"
    CLASS = "class"


class AccessSpecifier(Enum):
    """Visibility of a member."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class MemberKind(Enum):
    """Whether a member holds data or is a member function."""

    DATA = "data"
    FUNCTION = "function"


@dataclass
class MemberInfo:
    """One member of a struct, union or class."""

    name: str
    type: Type
    kind: MemberKind = MemberKind.DATA
    access: AccessSpecifier = AccessSpecifier.PUBLIC


@dataclass
class TypeDefinition:
    """The body of a user-defined type: its members and, once attached, its scope's symbols."""

    category: TypeCategory
    members: list[MemberInfo] = field(default_factory=list)
    symbol_table: Optional[Any] = None

    def has_member(self, name: str) -> bool:
        return any(member.name == name for member in self.members)

    def size(self, resolver: Optional[Resolver] = None) -> int:
        """Sum of data member sizes, or their maximum for a union."""
        sizes = (
            member.type.size(resolver)
            for member in self.members
            if member.kind is not MemberKind.FUNCTION
        )
        if self.category is TypeCategory.UNION:
            return max(sizes, default=0)
        return sum(sizes)

    def access_of(self, name: str) -> AccessSpecifier:
        """Access specifier of the first member called ``name``."""
        for member in self.members:
            if member.name == name:
                return member.access
        raise SemanticError(f"Member {name} not found in type definition")

    def members_named(self, name: str) -> list[MemberInfo]:
        return [member for member in self.members if member.name == name]

    def add_member(self, member: MemberInfo) -> None:
        self.members.append(member)


_type_indices = count(FIRST_DEFINED_INDEX)


@dataclass
class DefinedType:
    """A named user-defined type with its own type index."""

    name: str
    category: TypeCategory
    definition: Optional[TypeDefinition] = None
    type_index: int = field(default_factory=lambda: next(_type_indices))

    def as_type(self) -> Type:
        """A plain value type referring to this defined type."""
        return Type(
            type_index=self.type_index,
            is_defined_type=True,
            defined_type_name=self.name,
        )


def inherited_access(
    member_access: AccessSpecifier, derivation: AccessSpecifier
) -> AccessSpecifier:
    """Access a base-class member gets in a derived class for the given derivation."""
    if member_access is AccessSpecifier.PUBLIC:
        return derivation
    if member_access is AccessSpecifier.PROTECTED:
        if derivation in (AccessSpecifier.PUBLIC, AccessSpecifier.PROTECTED):
            return AccessSpecifier.PROTECTED
        return AccessSpecifier.PRIVATE
    return AccessSpecifier.PRIVATE