"""Scoped symbol table: variables, functions, typedefs and user-defined types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from declscope.definitions import DefinedType, TypeCategory, TypeDefinition
from declscope.types import SemanticError, Type

_SYMBOL_RULE = "-" * 120
_TYPEDEF_RULE = "-" * 109
_DEFINED_RULE = "-" * 76


@dataclass
class Symbol:
    """A named entry in a scope."""

    name: str
    type: Type
    scope: int = 0
    offset: int = 0
    mangled_name: str = ""
    is_temp: bool = False
    constant_value: str = ""
    constant_type: str = ""
    function_definition: Optional[FunctionScope] = None


def mangle_name(
    name: str, type: Type, scope: int, enclosing: Optional[Symbol] = None
) -> str:
    """Build the unique name used in generated code for a symbol."""
    if name.startswith("#"):
        return name[1:]
    if type.is_function:
        kind = "f_"
    elif type.is_defined_type:
        kind = "dt_"
    else:
        kind = "v_"
    parts = [f"_{kind}{name}_S{scope}"]
    if enclosing is not None and (
        enclosing.type.is_function or enclosing.type.is_defined_type
    ):
        outer = enclosing.mangled_name
        parts.append(f"__in_{len(outer)}{outer}")
    if type.is_function:
        parts.append("__sig")
        parts.extend(f"_{int(arg.type_index)}" for arg in type.arg_types)
        if type.is_variadic:
            parts.append("_var")
    return "".join(parts)


def _row(symbol: Symbol, mangled_width: int) -> str:
    return (
        f"| {symbol.name:<20}"
        f"| {symbol.mangled_name:<{mangled_width}}"
        f"| {int(symbol.type.type_index):<20}"
        f"| {symbol.scope:<8}"
        f"| {symbol.offset:<12} |\n"
    )


def _header(mangled_width: int) -> str:
    return (
        f"| {'Name':<20}"
        f"| {'Mangled Name':<{mangled_width}}"
        f"| {'Type':<20}"
        f"| {'Scope':<8}"
        f"| {'Offset':<12} |\n"
    )


class SymbolTable:
    """Nested scopes of symbols, typedefs and defined types."""

    def __init__(self) -> None:
        self.current_scope = 0
        self.curr_address = 0
        self.table: dict[str, list[Symbol]] = {}
        self.typedefs: dict[str, list[Symbol]] = {}
        self.defined_types: dict[str, list[tuple[int, DefinedType]]] = {}
        self.static_vars: dict[str, list[Symbol]] = {}
        self.class_member_functions: dict[str, list[Symbol]] = {}
        self.scope_stack: list[Symbol] = []

    # ------------------------------------------------------------------ helpers

    @property
    def _top(self) -> Optional[Symbol]:
        return self.scope_stack[-1] if self.scope_stack else None

    def _make_symbol(self, name: str, type: Type, scope: int, offset: int) -> Symbol:
        return Symbol(
            name=name,
            type=type,
            scope=scope,
            offset=offset,
            mangled_name=mangle_name(name, type, scope, self._top),
        )

    @staticmethod
    def _members_of(definition: TypeDefinition) -> SymbolTable:
        if definition.symbol_table is None:
            definition.symbol_table = SymbolTable()
        return definition.symbol_table

    def _resolve(self, name: str) -> Optional[TypeDefinition]:
        defined = self.get_defined_type(name)
        return defined.definition if defined is not None else None

    def _enclosing_function(self, top: Symbol) -> FunctionScope:
        func_sym = self.get_function(top.name, top.type.arg_types)
        if func_sym is None:
            raise SemanticError(f"Function {top.name} not found")
        if func_sym.function_definition is None:
            raise SemanticError(f"Function {top.name} not defined")
        return func_sym.function_definition

    def _enclosing_type(self, top: Symbol) -> DefinedType:
        defined = self.get_defined_type(top.name)
        if defined is None or defined.definition is None:
            raise SemanticError(f"Undefined type {top.name}")
        return defined

    # ------------------------------------------------------------------ scopes

    def enter_scope(self, type: Type, name: str) -> None:
        """Open a new scope; function and type scopes are remembered for mangling."""
        self.current_scope += 1
        if type.is_function or type.is_defined_type:
            self.scope_stack.append(
                self._make_symbol(name, type, self.current_scope, self.curr_address)
            )

    def exit_scope(self) -> None:
        """Close the innermost scope and drop everything declared in it."""
        if self.current_scope == 0:
            return
        for entries in (self.table, self.typedefs):
            for name in list(entries):
                kept = [s for s in entries[name] if s.scope != self.current_scope]
                if kept:
                    entries[name] = kept
                else:
                    del entries[name]
        top = self._top
        if top is not None and top.scope == self.current_scope:
            self.scope_stack.pop()
        self.current_scope -= 1

    # ------------------------------------------------------------------ insertion

    def insert(self, name: str, type: Type, size: int, overloaded: int = 0) -> Symbol:
        """Declare ``name`` in the current scope; ``overloaded`` allows same-scope functions."""
        top = self._top
        for existing in self.table.get(name, []):
            if existing.scope == self.current_scope and overloaded != 1:
                raise SemanticError(f"Symbol '{name}' already declared in this scope.")
        symbol = self._make_symbol(name, type, self.current_scope, self.curr_address)
        if type.is_static:
            self.static_vars.setdefault(name, []).insert(0, symbol)
        self.table.setdefault(name, []).insert(0, symbol)

        if top is not None and top.type.is_function:
            func = self._enclosing_function(top)
            local = func.symbol_table
            inner = self._make_symbol(name, type, self.current_scope, local.curr_address)
            local.table.setdefault(name, []).insert(0, inner)
            local.curr_address += size
            func.size += size
        elif top is not None and top.type.is_defined_type:
            defined = self._enclosing_type(top)
            members = self._members_of(defined.definition)
            member = self._make_symbol(
                name, type, self.current_scope, members.curr_address
            )
            member.scope = self.current_scope - 1
            members.table.setdefault(name, []).insert(0, member)
            if defined.category is not TypeCategory.UNION:
                members.curr_address += size
        else:
            self.curr_address += size
        return symbol

    def declare_type(self, name: str, category: TypeCategory) -> DefinedType:
        """Create an empty struct, union or class definition and register it."""
        defined = DefinedType(name, category, TypeDefinition(category))
        self.insert_defined_type(name, defined)
        return defined

    def insert_defined_type(self, name: str, defined: DefinedType) -> None:
        top = self._top
        for scope, _ in self.defined_types.get(name, []):
            if scope == self.current_scope:
                raise SemanticError(f"'{name}' already declared in this scope.")
        self.defined_types.setdefault(name, []).insert(0, (self.current_scope, defined))
        if top is not None and top.type.is_function:
            func = self._enclosing_function(top)
            func.symbol_table.defined_types.setdefault(name, []).insert(
                0, (self.current_scope, defined)
            )
        elif top is not None and top.type.is_defined_type:
            outer = self.get_defined_type(top.name)
            if outer is None:
                raise SemanticError(f"Undefined type {top.name}")
            if outer.definition is not None:
                self._members_of(outer.definition).defined_types.setdefault(
                    name, []
                ).insert(0, (self.current_scope - 1, defined))

    def insert_typedef(self, name: str, type: Type, size: int) -> Symbol:
        top = self._top
        for existing in self.typedefs.get(name, []):
            if existing.scope == self.current_scope:
                raise SemanticError(f"Symbol '{name}' already declared in this scope.")
        symbol = self._make_symbol(name, type, self.current_scope, self.curr_address)
        self.curr_address += size
        self.typedefs.setdefault(name, []).insert(0, symbol)
        if top is not None and top.type.is_function:
            func = self._enclosing_function(top)
            func.symbol_table.typedefs.setdefault(name, []).insert(0, symbol)
        elif top is not None and top.type.is_defined_type:
            defined = self._enclosing_type(top)
            member = self._make_symbol(
                name, type, self.current_scope - 1, self.curr_address
            )
            self._members_of(defined.definition).typedefs.setdefault(name, []).insert(
                0, member
            )
        return symbol

    # ------------------------------------------------------------------ lookups

    def lookup(self, name: str) -> bool:
        return any(s.scope <= self.current_scope for s in self.table.get(name, []))

    def lookup_function(self, name: str, arg_types: Sequence[Type]) -> bool:
        """True if a visible function accepts arguments of the given types."""
        for symbol in self.table.get(name, []):
            params = symbol.type.arg_types
            if symbol.scope <= self.current_scope and len(arg_types) == len(params):
                return all(a.is_convertible_to(p) for a, p in zip(arg_types, params))
            if (
                arg_types
                and params
                and params[-1].is_variadic
                and len(arg_types) >= len(params)
            ):
                return all(a.is_convertible_to(p) for a, p in zip(arg_types, params))
        return False

    def lookup_exact_function_match(self, name: str, arg_types: Sequence[Type]) -> bool:
        for symbol in self.table.get(name, []):
            params = symbol.type.arg_types
            if symbol.scope <= self.current_scope and len(arg_types) == len(params):
                if all(a == p for a, p in zip(arg_types, params)):
                    return True
        return False

    def lookup_defined_type(self, name: str) -> bool:
        return any(scope <= self.current_scope for scope, _ in self.defined_types.get(name, []))

    def lookup_typedef(self, name: str) -> bool:
        return any(s.scope <= self.current_scope for s in self.typedefs.get(name, []))

    def _innermost(self, candidates: Sequence[Symbol]) -> Optional[Symbol]:
        best: Optional[Symbol] = None
        for symbol in candidates:
            if symbol.scope <= self.current_scope and (best is None or symbol.scope > best.scope):
                best = symbol
        return best

    def get_symbol(self, name: str) -> Optional[Symbol]:
        """The visible symbol called ``name`` from the innermost scope."""
        return self._innermost(self.table.get(name, []))

    def get_symbol_by_mangled_name(self, mangled_name: str) -> Optional[Symbol]:
        for symbols in self.table.values():
            for symbol in symbols:
                if symbol.mangled_name == mangled_name:
                    return symbol
        return None

    def get_function(self, name: str, arg_types: Sequence[Type]) -> Optional[Symbol]:
        """The innermost visible overload matching ``arg_types``, or None."""
        best: Optional[Symbol] = None
        for symbol in self.table.get(name, []):
            params = symbol.type.arg_types
            if symbol.scope <= self.current_scope and len(params) == len(arg_types):
                if not all(a.is_convertible_to(p) for a, p in zip(arg_types, params)):
                    return None
            elif (
                arg_types
                and params
                and arg_types[-1].is_variadic
                and len(arg_types) >= len(params)
            ):
                if not all(a.is_convertible_to(p) for a, p in zip(arg_types, params)):
                    return None
                extra = arg_types[len(params):]
                if not all(a.is_convertible_to(params[-1]) for a in extra):
                    return None
            else:
                continue
            if best is None or symbol.scope > best.scope:
                best = symbol
        return best

    def get_defined_type(self, name: str) -> Optional[DefinedType]:
        for scope, defined in self.defined_types.get(name, []):
            if scope <= self.current_scope:
                return defined
        return None

    def get_typedef(self, name: str) -> Optional[Symbol]:
        return self._innermost(self.typedefs.get(name, []))

    # ------------------------------------------------------------------ updates

    def add_function_definition(self, symbol: Symbol, definition: FunctionScope) -> None:
        """Attach a function body to ``symbol`` and to its copy in the enclosing scope."""
        symbol.function_definition = definition
        top = self._top
        if top is not None and top.type.is_function:
            func = self._enclosing_function(top)
            inner = func.symbol_table.get_symbol(symbol.name)
            if inner is not None:
                inner.function_definition = definition
        elif top is not None and top.type.is_defined_type:
            defined = self._enclosing_type(top)
            member = self._members_of(defined.definition).get_symbol(symbol.name)
            if member is not None:
                member.function_definition = definition

    def add_constant_value(self, mangled_name: str, value: str, kind: str) -> None:
        symbol = self.get_symbol_by_mangled_name(mangled_name)
        if symbol is None:
            raise SemanticError(f"Symbol {mangled_name} not found")
        symbol.constant_value = value
        symbol.constant_type = kind

    def check_member_access(self, type_name: str, member: str) -> bool:
        """True if ``member`` of ``type_name`` is publicly accessible; raises otherwise."""
        from declscope.definitions import AccessSpecifier

        defined = self.get_defined_type(type_name)
        if defined is None or defined.definition is None:
            raise SemanticError(f"Undefined type {type_name}")
        definition = defined.definition
        if not definition.has_member(member):
            raise SemanticError(
                f"Member variable '{member}' not found in class '{type_name}'"
            )
        access = definition.access_of(member)
        if access is AccessSpecifier.PRIVATE:
            raise SemanticError(f"Member variable '{member}' is private in class '{type_name}")
        if access is AccessSpecifier.PROTECTED:
            raise SemanticError(
                f"Member variable '{member}' is protected in class '{type_name}"
            )
        return True

    def member_type(
        self, type_name: str, member: str, arg_types: Optional[Sequence[Type]] = None
    ) -> Type:
        """Type of a member; with ``arg_types``, of the matching member function."""
        defined = self.get_defined_type(type_name)
        if defined is None or defined.definition is None:
            raise SemanticError(f"Undefined type {type_name}")
        members = self._members_of(defined.definition)
        if arg_types is None:
            symbol = members.get_symbol(member)
        else:
            symbol = members.get_function(member, arg_types)
        if symbol is None:
            raise SemanticError(
                f"Member variable '{member}' not found in class '{type_name}'"
            )
        return symbol.type

    def update(self, name: str, type: Type) -> None:
        symbol = self.get_symbol(name)
        if symbol is None:
            raise SemanticError(f"Symbol '{name}' not found.")
        symbol.type = type

    def remove(self, name: str) -> None:
        if not self.lookup(name):
            raise SemanticError(f"Symbol '{name}' not found.")
        del self.table[name]

    # ------------------------------------------------------------------ rendering

    def render(self) -> str:
        """The symbol table as a text grid, with nested function tables."""
        if not self.table:
            return "The Symbol Table is empty!\n"
        out = ["\nSYMBOL TABLE:\n", _SYMBOL_RULE + "\n", _header(40), _SYMBOL_RULE + "\n"]
        for symbols in self.table.values():
            for symbol in symbols:
                out.append(_row(symbol, 40))
                func = symbol.function_definition
                if func is not None:
                    out.append(f"Printing function definition for: {symbol.name}\n")
                    out.append(f"Function Size: {func.size}\n")
                    out.append(_SYMBOL_RULE + "\n")
                    for inner_symbols in func.symbol_table.table.values():
                        out.extend(_row(inner, 40) for inner in inner_symbols)
        out.append(_SYMBOL_RULE + "\n")
        return "".join(out)

    def render_typedefs(self) -> str:
        if not self.typedefs:
            return "The Typedef Table is empty.\n"
        out = ["\nTYPEDEFS:\n", _TYPEDEF_RULE + "\n", _header(30), _TYPEDEF_RULE + "\n"]
        for symbols in self.typedefs.values():
            out.extend(_row(symbol, 30) for symbol in symbols)
        out.append(_TYPEDEF_RULE + "\n")
        return "".join(out)

    def render_defined_types(self) -> str:
        if not self.defined_types:
            return "The Defined Types Table is empty.\n"
        out = [
            "\nDEFINED TYPES:\n",
            _DEFINED_RULE + "\n",
            f"| {'Name':<20}| {'Type Index':<12}| {'Type Category':<26}| {'Scope':<8} |\n",
            _DEFINED_RULE + "\n",
        ]
        for name, entries in self.defined_types.items():
            for scope, defined in entries:
                index = str(defined.type_index) if defined else "In"
                category = defined.category.name if defined else "Unknown"
                out.append(f"| {name:<20}| {index:<12}| {category:<26}| {scope:<8} |\n")
        out.append(_DEFINED_RULE + "\n")
        return "".join(out)


@dataclass
class FunctionScope:
    """A function body: its local symbols and the stack space they take."""

    name: str = ""
    size: int = 0
    symbol_table: SymbolTable = field(default_factory=lambda: SymbolTable())