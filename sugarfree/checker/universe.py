# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Predeclared names and the small standard-library surface the checker knows.

The universe scope holds the basic types, `error`, `true`/`false`/`nil` and
the builtin functions. Imported packages are stubs: only the members listed in
`_PACKAGES` exist, each with a fixed signature.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from sugarfree.core.types_core import Category, TypeId, TypeTable
from sugarfree.symbols.scope import Scope, ScopeKind, Symbol, SymbolKind

_NUMERIC_TYPES = (
	"int", "int8", "int16", "int32", "int64",
	"uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
	"float32", "float64",
)

BUILTIN_FUNCS = (
	"append", "cap", "close", "copy", "delete", "len", "make", "new", "panic", "print", "println",
)


def build_universe(table: TypeTable) -> Scope:
	"""Create the universe scope, registering basic types in `table`."""
	universe = Scope(ScopeKind.UNIVERSE)

	def add(name: str, kind: SymbolKind, ty: Optional[TypeId]) -> None:
		universe.insert(Symbol(name=name, kind=kind, type=ty))

	for name in _NUMERIC_TYPES:
		add(name, SymbolKind.TYPE, table.ensure_basic(name, Category.NUMERIC))
	add("byte", SymbolKind.TYPE, table.basic("uint8"))
	add("rune", SymbolKind.TYPE, table.basic("int32"))
	add("bool", SymbolKind.TYPE, table.ensure_bool())
	add("string", SymbolKind.TYPE, table.ensure_string())

	error_ty = table.new_named("error")
	error_sig = table.new_func([], [table.ensure_string()])
	table.set_underlying(error_ty, table.new_interface([("Error", error_sig)]))
	add("error", SymbolKind.TYPE, error_ty)
	add("any", SymbolKind.TYPE, table.new_interface([]))

	add("true", SymbolKind.CONST, table.ensure_bool())
	add("false", SymbolKind.CONST, table.ensure_bool())
	add("nil", SymbolKind.NIL, table.ensure_nil())
	for name in BUILTIN_FUNCS:
		add(name, SymbolKind.BUILTIN, None)
	return universe


# Stub packages: each builder gets the table and the `error` type.

def _fmt(table: TypeTable, error: TypeId) -> Dict[str, TypeId]:
	string, int_ = table.ensure_string(), table.ensure_int()
	anys = table.new_slice(table.new_interface([]))
	return {
		"Println": table.new_func([anys], [int_, error], variadic=True),
		"Printf": table.new_func([string, anys], [int_, error], variadic=True),
		"Print": table.new_func([anys], [int_, error], variadic=True),
		"Sprintf": table.new_func([string, anys], [string], variadic=True),
		"Sprint": table.new_func([anys], [string], variadic=True),
		"Errorf": table.new_func([string, anys], [error], variadic=True),
	}


def _errors(table: TypeTable, error: TypeId) -> Dict[str, TypeId]:
	return {"New": table.new_func([table.ensure_string()], [error])}


def _strconv(table: TypeTable, error: TypeId) -> Dict[str, TypeId]:
	string, int_ = table.ensure_string(), table.ensure_int()
	return {
		"Atoi": table.new_func([string], [int_, error]),
		"Itoa": table.new_func([int_], [string]),
	}


def _strings(table: TypeTable, error: TypeId) -> Dict[str, TypeId]:
	string, bool_ = table.ensure_string(), table.ensure_bool()
	return {
		"Contains": table.new_func([string, string], [bool_]),
		"HasPrefix": table.new_func([string, string], [bool_]),
		"ToUpper": table.new_func([string], [string]),
		"TrimSpace": table.new_func([string], [string]),
		"Split": table.new_func([string, string], [table.new_slice(string)]),
		"Join": table.new_func([table.new_slice(string), string], [string]),
	}


_PACKAGES: Dict[str, Callable[[TypeTable, TypeId], Dict[str, TypeId]]] = {
	"fmt": _fmt,
	"errors": _errors,
	"strconv": _strconv,
	"strings": _strings,
}


def package_members(table: TypeTable, universe: Scope, path: str) -> Optional[Dict[str, TypeId]]:
	"""Members of the stub package `path`, or None when the package is unknown."""
	builder = _PACKAGES.get(path)
	if builder is None:
		return None
	error_sym = universe.lookup_local("error")
	assert error_sym is not None and error_sym.type is not None
	return builder(table, error_sym.type)


__all__ = ["BUILTIN_FUNCS", "build_universe", "package_members"]
