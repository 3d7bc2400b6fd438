import pytest

from declscope.definitions import TypeCategory
from declscope.specifiers import (
    DeclarationSpecifiers,
    StorageClass,
    TypeQualifier,
    TypeSpecifier,
    resolve_type_index,
)
from declscope.table import SymbolTable
from declscope.types import PrimitiveType, SemanticError, Type


def keywords(*names):
    return [TypeSpecifier(primitive=name) for name in names]


@pytest.mark.parametrize(
    "names, expected",
    [
        (("INT",), PrimitiveType.INT),
        (("LONG",), PrimitiveType.LONG),
        (("SHORT",), PrimitiveType.SHORT),
        (("CHAR",), PrimitiveType.CHAR),
        (("FLOAT",), PrimitiveType.FLOAT),
        (("DOUBLE",), PrimitiveType.DOUBLE),
        (("VOID",), PrimitiveType.VOID),
        (("UNSIGNED", "INT"), PrimitiveType.U_INT),
        (("UNSIGNED", "SHORT"), PrimitiveType.U_SHORT),
        (("UNSIGNED", "CHAR"), PrimitiveType.U_CHAR),
        (("UNSIGNED", "LONG"), PrimitiveType.U_LONG),
        (("LONG", "LONG"), PrimitiveType.LONG_LONG),
        (("LONG", "DOUBLE"), PrimitiveType.LONG_DOUBLE),
        (("UNSIGNED", "LONG", "LONG"), PrimitiveType.U_LONG_LONG),
    ],
)
def test_keyword_combinations(names, expected):
    assert resolve_type_index(SymbolTable(), keywords(*names)) == expected


@pytest.mark.parametrize(
    "names",
    [(), ("UNSIGNED",), ("SIGNED", "INT"), ("LONG", "INT"), ("UNSIGNED", "LONG", "LONG", "INT")],
)
def test_unsupported_combinations_are_errors(names):
    assert resolve_type_index(SymbolTable(), keywords(*names)) == PrimitiveType.ERROR


def test_enum_is_int():
    assert resolve_type_index(SymbolTable(), [TypeSpecifier(is_enum=True)]) == PrimitiveType.INT


def test_struct_and_class_use_defined_index():
    table = SymbolTable()
    point = table.declare_type("point", TypeCategory.STRUCT)
    shape = table.declare_type("shape", TypeCategory.CLASS)
    assert resolve_type_index(table, [TypeSpecifier(struct_union="point")]) == point.type_index
    assert resolve_type_index(table, [TypeSpecifier(class_name="shape")]) == shape.type_index


def test_undeclared_struct_is_error():
    assert (
        resolve_type_index(SymbolTable(), [TypeSpecifier(struct_union="missing")])
        == PrimitiveType.ERROR
    )


def test_typedef_name_resolves_and_marks_type_name():
    table = SymbolTable()
    table.insert_typedef("size_t", Type(PrimitiveType.U_INT), 4)
    specs = DeclarationSpecifiers(type_specifiers=[TypeSpecifier(type_name="size_t")])
    assert specs.resolve(table) == PrimitiveType.U_INT
    assert specs.type_index == PrimitiveType.U_INT
    assert specs.is_type_name is True


def test_unknown_typedef_name_raises():
    with pytest.raises(SemanticError, match="Type name nothing not found"):
        resolve_type_index(SymbolTable(), [TypeSpecifier(type_name="nothing")])


def test_resolve_sets_const_from_qualifiers():
    specs = DeclarationSpecifiers(
        type_specifiers=keywords("INT"),
        type_qualifiers=[TypeQualifier.VOLATILE, TypeQualifier.CONST],
    )
    specs.resolve(SymbolTable())
    assert specs.is_const_variable is True
    assert specs.is_type_name is False

    plain = DeclarationSpecifiers(type_specifiers=keywords("INT"))
    plain.resolve(SymbolTable())
    assert plain.is_const_variable is False


def test_resolve_invalid_type_raises_with_position():
    specs = DeclarationSpecifiers(
        type_specifiers=[TypeSpecifier(primitive="SIGNED", line_no=3, column_no=7)]
    )
    with pytest.raises(SemanticError, match="Invalid Type at line 3, column 7"):
        specs.resolve(SymbolTable())
    assert specs.type_index == PrimitiveType.ERROR


def test_resolve_empty_raises():
    with pytest.raises(SemanticError, match="Invalid Type"):
        DeclarationSpecifiers().resolve(SymbolTable())


def test_storage_classes():
    specs = DeclarationSpecifiers()
    specs.add_storage_class(StorageClass.TYPEDEF)
    assert specs.is_typedef is True
    assert specs.is_static is False
    specs.add_storage_class(StorageClass.STATIC)
    assert specs.is_static is True
    specs.add_storage_class(StorageClass.EXTERN)
    assert specs.storage_classes == [
        StorageClass.TYPEDEF,
        StorageClass.STATIC,
        StorageClass.EXTERN,
    ]