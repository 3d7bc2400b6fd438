"""Declarations: typed symbols from declarators, struct and class bodies, function heads."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from declscope.constants import Constant
from declscope.definitions import (
    AccessSpecifier,
    DefinedType,
    MemberInfo,
    MemberKind,
    TypeCategory,
    TypeDefinition,
    inherited_access,
)
from declscope.specifiers import DeclarationSpecifiers
from declscope.table import FunctionScope, Symbol, SymbolTable
from declscope.types import PrimitiveType, Resolver, SemanticError, Type


@dataclass
class Parameter:
    """One parameter of a function declarator."""

    type: Type
    name: Optional[str] = None


@dataclass
class Declarator:
    """A declared name with its pointer, array or function shape and optional initializer.

    ``initializer`` is the type of the initializing expression; ``constant`` is the
    literal it consists of, when it is one.
    """

    name: str
    pointer_level: int = 0
    array_dims: list[int] = field(default_factory=list)
    is_function: bool = False
    parameters: list[Parameter] = field(default_factory=list)
    is_variadic: bool = False
    bit_field_width: int = -1
    initializer: Optional[Type] = None
    constant: Optional[Constant] = None
    line_no: int = 0
    column_no: int = 0

    def __post_init__(self) -> None:
        if self.is_function and self.array_dims:
            raise SemanticError(
                "Type name cannot be a function returning an array "
                f"{self.line_no}, column {self.column_no}"
            )

    @property
    def is_array(self) -> bool:
        return bool(self.array_dims)


@dataclass
class StructSection:
    """A run of struct or union members sharing specifiers and access."""

    specifiers: DeclarationSpecifiers
    declarators: list[Declarator]
    access: AccessSpecifier = AccessSpecifier.PUBLIC


@dataclass
class ClassSection:
    """A run of class members sharing specifiers and access; function declarators are methods."""

    specifiers: DeclarationSpecifiers
    declarators: list[Declarator]
    access: AccessSpecifier = AccessSpecifier.PRIVATE


@dataclass
class BaseClass:
    """A base class named in a class head, with its derivation access."""

    name: str
    access: AccessSpecifier = AccessSpecifier.PRIVATE


def _where(declarator: Declarator) -> str:
    return f"at line {declarator.line_no}, column {declarator.column_no}"


def _resolver(table: SymbolTable) -> Resolver:
    def resolve(name: str) -> Optional[TypeDefinition]:
        defined = table.get_defined_type(name)
        return defined.definition if defined is not None else None

    return resolve


def _symbols_of(definition: TypeDefinition) -> SymbolTable:
    if definition.symbol_table is None:
        definition.symbol_table = SymbolTable()
    return definition.symbol_table


def _member_type(
    specifiers: DeclarationSpecifiers, declarator: Declarator, extend_pointer: bool
) -> Type:
    member = Type(
        specifiers.type_index, declarator.pointer_level, specifiers.is_const_variable
    )
    if declarator.is_array:
        member.is_array = True
        member.is_pointer = True
        member.array_dims = list(declarator.array_dims)
        if extend_pointer:
            member.ptr_level += len(declarator.array_dims)
    return member


def declarator_type(
    specifiers: DeclarationSpecifiers, declarator: Declarator, table: SymbolTable
) -> Type:
    """Full type of ``declarator`` under ``specifiers``, resolving typedef names in ``table``."""
    if specifiers.is_type_name:
        type_name = specifiers.type_specifiers[0].type_name
        symbol = table.get_typedef(type_name)
        if symbol is None:
            raise SemanticError(f"Type name {type_name} not found")
        result = copy.deepcopy(symbol.type)
        result.ptr_level += declarator.pointer_level
        if result.ptr_level > 0:
            result.is_pointer = True
        if specifiers.is_const_variable:
            result.is_const_variable = True
    else:
        result = Type(
            specifiers.type_index, declarator.pointer_level, specifiers.is_const_variable
        )
    if specifiers.is_static:
        result.is_static = True
    if declarator.is_array:
        result.is_array = True
        result.is_pointer = True
        result.array_dims = list(declarator.array_dims)
        result.ptr_level += len(declarator.array_dims)
    if declarator.is_function:
        result.is_function = True
        result.arg_types = [parameter.type for parameter in declarator.parameters]
    if not result.is_primitive():
        result.is_defined_type = True
        if specifiers.type_specifiers:
            first = specifiers.type_specifiers[0]
            if first.struct_union is not None:
                result.defined_type_name = first.struct_union
            elif first.class_name is not None:
                result.defined_type_name = first.class_name
    return result


def _initialize(
    table: SymbolTable, symbol: Symbol, declared: Type, declarator: Declarator
) -> None:
    initializer = declarator.initializer
    assert initializer is not None
    if not initializer.is_convertible_to(declared):
        raise SemanticError(
            f"Incompatible types while initializing variable '{declarator.name}' "
            + _where(declarator)
        )
    if table.current_scope == 0 or symbol.type.is_static:
        return
    if initializer.is_const_literal:
        if declarator.constant is None:
            raise SemanticError(
                f"Constant is null while initializing variable '{declarator.name}' "
                + _where(declarator)
            )
        table.add_constant_value(
            symbol.mangled_name, declarator.constant.value, declarator.constant.kind
        )


def declare(
    table: SymbolTable,
    specifiers: DeclarationSpecifiers,
    declarators: Sequence[Declarator],
) -> list[Symbol]:
    """Enter each declarator into ``table`` (as a typedef if so specified) and check initializers."""
    resolver = _resolver(table)
    declared: list[Symbol] = []
    for declarator in declarators:
        kind = declarator_type(specifiers, declarator, table)
        size = kind.size(resolver)
        if specifiers.is_typedef:
            symbol = table.insert_typedef(declarator.name, kind, size)
        else:
            overloaded = 1 if declarator.is_function else 0
            symbol = table.insert(declarator.name, kind, size, overloaded)
        declared.append(symbol)
        if declarator.initializer is not None:
            _initialize(table, symbol, kind, declarator)
    return declared


def define_struct(
    table: SymbolTable,
    category: TypeCategory,
    name: str,
    sections: Sequence[StructSection],
) -> DefinedType:
    """Declare a struct or union called ``name`` and fill in its members."""
    if category not in (TypeCategory.STRUCT, TypeCategory.UNION):
        raise SemanticError(f"{category.value} is not a struct or union")
    defined = table.declare_type(name, category)
    definition = defined.definition
    assert definition is not None
    resolver = _resolver(table)
    table.enter_scope(defined.as_type(), name)
    try:
        for section in sections:
            for declarator in section.declarators:
                if declarator.is_function:
                    raise SemanticError(
                        "Function cannot be part of Struct/Union " + _where(declarator)
                    )
                member = _member_type(section.specifiers, declarator, extend_pointer=False)
                if declarator.bit_field_width == -1:
                    size = member.size(resolver)
                else:
                    size = declarator.bit_field_width
                table.insert(declarator.name, member, size, 0)
                definition.add_member(
                    MemberInfo(declarator.name, member, MemberKind.DATA, section.access)
                )
    finally:
        table.exit_scope()
    return defined


def _inherit(table: SymbolTable, definition: TypeDefinition, base: BaseClass) -> None:
    defined = table.get_defined_type(base.name)
    if defined is None or defined.definition is None:
        raise SemanticError(f"Type {base.name} not defined")
    parent = defined.definition
    parent_symbols = parent.symbol_table
    if parent_symbols is None:
        return
    own = _symbols_of(definition)
    for member in list(parent.members):
        if definition.has_member(member.name):
            continue
        symbol = parent_symbols.get_symbol(member.name)
        is_typedef = symbol is None
        if symbol is None:
            symbol = parent_symbols.get_typedef(member.name)
        if symbol is None:
            continue
        kind = MemberKind.FUNCTION if symbol.type.is_function else MemberKind.DATA
        definition.add_member(
            MemberInfo(
                member.name,
                symbol.type,
                kind,
                inherited_access(member.access, base.access),
            )
        )
        duplicate = replace(symbol)
        if is_typedef:
            if not own.lookup_typedef(member.name):
                own.typedefs.setdefault(member.name, []).insert(0, duplicate)
        elif not own.lookup_function(member.name, symbol.type.arg_types):
            own.table.setdefault(member.name, []).insert(0, duplicate)


def define_class(
    table: SymbolTable,
    name: str,
    bases: Sequence[BaseClass],
    sections: Sequence[ClassSection],
) -> DefinedType:
    """Declare a class, enter its members and methods, then merge in base-class members."""
    defined = table.declare_type(name, TypeCategory.CLASS)
    definition = defined.definition
    assert definition is not None
    if not sections:
        return defined
    table.enter_scope(defined.as_type(), name)
    try:
        for section in sections:
            for declarator in section.declarators:
                if declarator.is_function:
                    member = Type(
                        section.specifiers.type_index,
                        is_function=True,
                        arg_types=[p.type for p in declarator.parameters],
                    )
                    table.insert(declarator.name, member, member.size(), 1)
                    kind = MemberKind.FUNCTION
                else:
                    declare(table, section.specifiers, [declarator])
                    member = _member_type(section.specifiers, declarator, extend_pointer=True)
                    kind = MemberKind.DATA
                definition.add_member(
                    MemberInfo(declarator.name, member, kind, section.access)
                )
    finally:
        table.exit_scope()
    for base in bases:
        _inherit(table, definition, base)
    return defined


def _declare_parameters(
    table: SymbolTable, declarator: Declarator, scope: FunctionScope, discount: bool
) -> None:
    resolver = _resolver(table)
    for parameter in declarator.parameters:
        if parameter.name is None:
            raise SemanticError(f"Parameter of function {declarator.name} has no name")
        size = parameter.type.size(resolver)
        table.insert(parameter.name, parameter.type, size, 0)
        if discount:
            scope.size -= size


def begin_function(
    table: SymbolTable, specifiers: DeclarationSpecifiers, declarator: Declarator
) -> FunctionScope:
    """Register a function definition, open its scope and declare its parameters."""
    if not declarator.is_function:
        raise SemanticError(
            "Function definition must have a function declarator " + _where(declarator)
        )
    function_type = Type(
        specifiers.type_index, declarator.pointer_level, specifiers.is_const_variable
    )
    arg_types = [replace(parameter.type) for parameter in declarator.parameters]
    if declarator.is_variadic and arg_types:
        arg_types[-1].is_variadic = True
    function_type.is_function = True
    function_type.arg_types = arg_types

    scope = FunctionScope(name=declarator.name)
    existing = table.get_function(declarator.name, arg_types)
    if existing is not None:
        if existing.function_definition is None:
            table.add_function_definition(existing, scope)
            table.enter_scope(function_type, declarator.name)
            _declare_parameters(table, declarator, scope, discount=False)
        elif existing.type.arg_types == arg_types:
            raise SemanticError(
                f"Function {declarator.name} redefined " + _where(declarator)
            )
        return scope

    symbol = table.insert(declarator.name, function_type, function_type.size(), 1)
    table.add_function_definition(symbol, scope)
    if symbol.scope != 0:
        table.class_member_functions.setdefault(declarator.name, []).insert(0, symbol)
    table.enter_scope(function_type, declarator.name)
    _declare_parameters(table, declarator, scope, discount=True)
    return scope


def check_return(function_type: Type, returned: Optional[Type] = None) -> Type:
    """Check a function's declared return type against the type it returns (void if none)."""
    declared = Type(
        function_type.type_index, function_type.ptr_level, function_type.is_const_variable
    )
    actual = returned if returned is not None else Type(PrimitiveType.VOID)
    if not declared.is_convertible_to(actual):
        raise SemanticError("Function is returning incorrect data type")
    return actual