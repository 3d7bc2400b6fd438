import pytest

from declscope.definitions import (
    AccessSpecifier,
    DefinedType,
    MemberInfo,
    MemberKind,
    TypeCategory,
    TypeDefinition,
    inherited_access,
)
from declscope.types import FIRST_DEFINED_INDEX, WORD_SIZE, PrimitiveType, SemanticError, Type


def _struct(*members):
    definition = TypeDefinition(TypeCategory.STRUCT)
    for member in members:
        definition.add_member(member)
    return definition


def test_has_member_and_members_named():
    definition = _struct(
        MemberInfo("x", Type(PrimitiveType.INT)),
        MemberInfo("y", Type(PrimitiveType.CHAR)),
        MemberInfo("x", Type(PrimitiveType.INT), kind=MemberKind.FUNCTION),
    )
    assert definition.has_member("x")
    assert not definition.has_member("z")
    assert len(definition.members_named("x")) == 2
    assert definition.members_named("z") == []


def test_struct_size_is_sum_of_data_members():
    a = Type(PrimitiveType.INT)
    b = Type(PrimitiveType.CHAR)
    definition = _struct(MemberInfo("a", a), MemberInfo("b", b))
    assert definition.size() == a.size() + b.size()


def test_union_size_is_max_of_members():
    a = Type(PrimitiveType.DOUBLE)
    b = Type(PrimitiveType.CHAR)
    definition = TypeDefinition(TypeCategory.UNION)
    definition.add_member(MemberInfo("a", a))
    definition.add_member(MemberInfo("b", b))
    assert definition.size() == max(a.size(), b.size())


def test_function_members_do_not_count():
    definition = _struct(MemberInfo("a", Type(PrimitiveType.INT)))
    before = definition.size()
    definition.add_member(
        MemberInfo("f", Type(PrimitiveType.INT, is_function=True), kind=MemberKind.FUNCTION)
    )
    assert definition.size() == before


def test_empty_definition_has_zero_size():
    assert TypeDefinition(TypeCategory.STRUCT).size() == 0
    assert TypeDefinition(TypeCategory.UNION).size() == 0


def test_pointer_member_is_word_sized():
    definition = _struct(MemberInfo("p", Type(PrimitiveType.CHAR, ptr_level=1)))
    assert definition.size() == WORD_SIZE


def test_nested_defined_type_uses_resolver():
    inner = _struct(MemberInfo("a", Type(PrimitiveType.INT)))
    inner_type = DefinedType("inner", TypeCategory.STRUCT, inner)
    outer = _struct(MemberInfo("i", inner_type.as_type()))
    definitions = {"inner": inner}
    assert outer.size(definitions.get) == inner.size()


def test_nested_undefined_type_raises():
    outer = _struct(
        MemberInfo("i", DefinedType("ghost", TypeCategory.STRUCT).as_type())
    )
    with pytest.raises(SemanticError):
        outer.size(lambda name: None)


def test_access_of_returns_first_match():
    definition = _struct(
        MemberInfo("a", Type(PrimitiveType.INT), access=AccessSpecifier.PROTECTED),
        MemberInfo("a", Type(PrimitiveType.INT), access=AccessSpecifier.PUBLIC),
    )
    assert definition.access_of("a") is AccessSpecifier.PROTECTED


def test_access_of_missing_member_raises():
    with pytest.raises(SemanticError):
        _struct().access_of("missing")


def test_defined_type_indices_are_fresh_and_increasing():
    first = DefinedType("a", TypeCategory.STRUCT)
    second = DefinedType("b", TypeCategory.CLASS)
    assert first.type_index >= FIRST_DEFINED_INDEX
    assert second.type_index == first.type_index + 1


def test_as_type_refers_to_defined_type():
    defined = DefinedType("point", TypeCategory.STRUCT, TypeDefinition(TypeCategory.STRUCT))
    t = defined.as_type()
    assert t.is_defined_type
    assert t.type_index == defined.type_index
    assert not t.is_primitive()
    assert t.label() == "point"
    assert t.is_aggregate()


@pytest.mark.parametrize(
    "member, derivation, expected",
    [
        (AccessSpecifier.PUBLIC, AccessSpecifier.PUBLIC, AccessSpecifier.PUBLIC),
        (AccessSpecifier.PUBLIC, AccessSpecifier.PROTECTED, AccessSpecifier.PROTECTED),
        (AccessSpecifier.PUBLIC, AccessSpecifier.PRIVATE, AccessSpecifier.PRIVATE),
        (AccessSpecifier.PROTECTED, AccessSpecifier.PUBLIC, AccessSpecifier.PROTECTED),
        (AccessSpecifier.PROTECTED, AccessSpecifier.PROTECTED, AccessSpecifier.PROTECTED),
        (AccessSpecifier.PROTECTED, AccessSpecifier.PRIVATE, AccessSpecifier.PRIVATE),
        (AccessSpecifier.PRIVATE, AccessSpecifier.PUBLIC, AccessSpecifier.PRIVATE),
        (AccessSpecifier.PRIVATE, AccessSpecifier.PRIVATE, AccessSpecifier.PRIVATE),
    ],
)
def test_inherited_access(member, derivation, expected):
    assert inherited_access(member, derivation) is expected