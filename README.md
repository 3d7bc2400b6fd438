# declscope

The semantic-analysis core of a compiler front end for a C-like language that
also has classes. It is a library: you hand it already-parsed declarations and
it keeps track of names, scopes, types and layouts, raising
`declscope.types.SemanticError` whenever a declaration is invalid.

## Modules

- `declscope.types`: `Type` is the type model. It holds a base type index
  (`PrimitiveType`, with user-defined types numbered after the built-ins), a
  pointer level, array dimensions, a function signature and const/static
  flags. `Type` also provides:
  - the predicates `is_int`, `is_float`, `is_unsigned`, `is_void` and the like;
  - `is_convertible_to` and `promote_to_int`;
  - `size(resolver)`, where `resolver` maps a defined type's name to its
    definition;
  - `label()` for names such as `unsigned_int` or `char_ptr`.

  The module also defines `SemanticError`.
- `declscope.definitions`: struct, union and class bodies. It has
  `TypeDefinition` with its `MemberInfo` list, `size`, `access_of` and
  `members_named`, and `DefinedType`, a named type with its own type index.
  Members carry an `AccessSpecifier` and a `MemberKind`. `inherited_access`
  gives the access a base-class member has after public, protected or private
  derivation.
- `declscope.table`: `SymbolTable`, a table of nested scopes. It holds:
  - symbols, overloaded functions, typedefs and defined types;
  - a `FunctionScope` with its own symbol table and frame size for each
    function;
  - running offsets and mangled names (`mangle_name`).

  `SymbolTable` offers lookups (`get_symbol`, `get_function`, `get_typedef`,
  `get_defined_type`, `lookup_*`) and member checks (`check_member_access`,
  `member_type`). `render`, `render_typedefs` and `render_defined_types`
  return text grids of the table's contents.
- `declscope.constants`: classification of literal tokens. `constant_type`
  handles `I_CONSTANT`, `CHAR_CONSTANT` and `F_CONSTANT`. `to_decimal`
  rewrites hexadecimal and octal literals as decimal. `Constant.from_token`
  gives a literal's type and its value with the suffix letters removed.
- `declscope.specifiers`: `TypeSpecifier`, `TypeQualifier`, `StorageClass` and
  `DeclarationSpecifiers`. `resolve_type_index` turns specifier combinations
  such as `unsigned long long`, a struct or class name, or a typedef name
  into a type index.
- `declscope.declarations`: entering declarations into a table.
  - `declarator_type` and `declare` handle variables, arrays, pointers,
    typedefs and initializer compatibility.
  - `define_struct` and `define_class` build struct, union and class
    definitions. For classes they also merge in the members of base classes.
  - `begin_function` registers a function definition, opens its scope and
    declares its parameters.
  - `check_return` checks a function's declared return type against the type
    it returns.

## Example

```python
from declscope.types import Type, PrimitiveType
from declscope.table import SymbolTable
from declscope.specifiers import DeclarationSpecifiers, TypeSpecifier
from declscope.declarations import Declarator, StructSection, define_struct
from declscope.definitions import TypeCategory

table = SymbolTable()
symbol = table.insert("count", Type(PrimitiveType.INT), 4, 0)
print(symbol.mangled_name)   # _v_count_S0
print(symbol.offset)         # 0

ints = DeclarationSpecifiers(type_specifiers=[TypeSpecifier(primitive="INT")])
ints.resolve(table)
point = define_struct(
    table,
    TypeCategory.STRUCT,
    "point",
    [StructSection(ints, [Declarator("x"), Declarator("y")])],
)
print(point.definition.size())   # 8
```

Declaring the same name twice in one scope, or using a type that was never
defined, raises `SemanticError`.

## What it does not do

The package has no lexer or parser, and it has no command-line program.
Declarations must be built by the caller as `DeclarationSpecifiers` and
`Declarator` values. It checks declarations and records them, but it does not
produce intermediate or machine code for them.

## Running the tests

```
pip install .[test]
pytest
```