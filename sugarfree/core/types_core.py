# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type core shared by the checker, the adapter and the rules.

TypeIds are opaque ints indexing into a TypeTable. TypeKind keeps the universe
small; TypeDef carries kind/name/params for inspection. The engine never makes
type judgments of its own: it only classifies already-resolved types into a
zero-value `Category` and walks pointer/array structure.

Named types are registered first and receive their underlying type later via
`set_underlying`, so self-referential declarations (`type Node struct { next
*Node }`) can be built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple


TypeId = int  # opaque handle into the TypeTable


class TypeKind(Enum):
	"""Kinds of types understood by the type core."""

	BASIC = auto()
	NAMED = auto()
	POINTER = auto()
	ARRAY = auto()
	SLICE = auto()
	MAP = auto()
	CHAN = auto()
	FUNC = auto()
	STRUCT = auto()
	INTERFACE = auto()
	TUPLE = auto()
	NIL = auto()  # type of the untyped `nil`
	UNKNOWN = auto()


class Category(Enum):
	"""Zero-value categories; decides which literal spells a type's zero value."""

	NUMERIC = auto()    # 0
	BOOLEAN = auto()    # false
	STRING = auto()     # ""
	NILABLE = auto()    # nil: pointer, slice, map, chan, func, interface
	COMPOSITE = auto()  # T{}: struct, array


_NILABLE_KINDS = {
	TypeKind.POINTER,
	TypeKind.SLICE,
	TypeKind.MAP,
	TypeKind.CHAN,
	TypeKind.FUNC,
	TypeKind.INTERFACE,
}


@dataclass(frozen=True)
class TypeDef:
	"""Definition of a type stored in the TypeTable."""

	kind: TypeKind
	name: str
	# POINTER/SLICE/ARRAY/CHAN: [elem]; MAP: [key, value]; FUNC: params;
	# TUPLE: items.
	param_types: List[TypeId]
	result_types: List[TypeId] = field(default_factory=list)  # FUNC only
	length: Optional[int] = None  # ARRAY only
	# STRUCT: (field name, type); INTERFACE: (method name, signature).
	fields: Tuple[Tuple[str, TypeId], ...] = ()
	basic: Optional[Category] = None  # BASIC only
	chan_dir: str = "both"  # CHAN only: "both" | "send" | "recv"
	variadic: bool = False  # FUNC only


@dataclass(frozen=True)
class Method:
	"""Method attached to a named type."""

	name: str
	signature: TypeId
	pointer_receiver: bool


class TypeTable:
	"""
	Type table that owns TypeIds.

	Structural types are interned so equal shapes share one TypeId; named types
	are nominal and always get a fresh id.
	"""

	def __init__(self) -> None:
		self._defs: Dict[TypeId, TypeDef] = {}
		self._next_id: TypeId = 1  # reserve 0 for "invalid"
		self._interned: Dict[tuple, TypeId] = {}
		self._basics: Dict[str, TypeId] = {}
		self._underlying: Dict[TypeId, TypeId] = {}
		self._methods: Dict[TypeId, Dict[str, Method]] = {}

	# Registration -------------------------------------------------------

	def ensure_basic(self, name: str, category: Category) -> TypeId:
		"""Return a stable basic TypeId (int, bool, string, ...), creating it once."""
		ty = self._basics.get(name)
		if ty is None:
			ty = self._add(TypeDef(kind=TypeKind.BASIC, name=name, param_types=[], basic=category))
			self._basics[name] = ty
		return ty

	def basic(self, name: str) -> TypeId:
		"""Fetch a basic type registered earlier (KeyError if unknown)."""
		return self._basics[name]

	def ensure_int(self) -> TypeId:
		return self.ensure_basic("int", Category.NUMERIC)

	def ensure_bool(self) -> TypeId:
		return self.ensure_basic("bool", Category.BOOLEAN)

	def ensure_string(self) -> TypeId:
		return self.ensure_basic("string", Category.STRING)

	def ensure_nil(self) -> TypeId:
		return self._intern(("nil",), TypeDef(kind=TypeKind.NIL, name="nil", param_types=[]))

	def ensure_unknown(self) -> TypeId:
		return self._intern(("unknown",), TypeDef(kind=TypeKind.UNKNOWN, name="<unknown>", param_types=[]))

	def new_named(self, name: str) -> TypeId:
		"""Register a named type; its underlying type is attached with `set_underlying`."""
		return self._add(TypeDef(kind=TypeKind.NAMED, name=name, param_types=[]))

	def set_underlying(self, named: TypeId, underlying: TypeId) -> None:
		if self.get(named).kind is not TypeKind.NAMED:
			raise ValueError(f"type {self.type_string(named)} is not a named type")
		self._underlying[named] = self.underlying(underlying)

	def add_method(self, named: TypeId, name: str, signature: TypeId, *, pointer_receiver: bool) -> None:
		self._methods.setdefault(named, {})[name] = Method(name=name, signature=signature, pointer_receiver=pointer_receiver)

	def new_pointer(self, elem: TypeId) -> TypeId:
		return self._intern(("ptr", elem), TypeDef(kind=TypeKind.POINTER, name="*", param_types=[elem]))

	def new_slice(self, elem: TypeId) -> TypeId:
		return self._intern(("slice", elem), TypeDef(kind=TypeKind.SLICE, name="[]", param_types=[elem]))

	def new_array(self, elem: TypeId, length: int) -> TypeId:
		return self._intern(
			("array", elem, length),
			TypeDef(kind=TypeKind.ARRAY, name="[N]", param_types=[elem], length=length),
		)

	def new_map(self, key: TypeId, value: TypeId) -> TypeId:
		return self._intern(("map", key, value), TypeDef(kind=TypeKind.MAP, name="map", param_types=[key, value]))

	def new_chan(self, elem: TypeId, direction: str = "both") -> TypeId:
		return self._intern(
			("chan", elem, direction),
			TypeDef(kind=TypeKind.CHAN, name="chan", param_types=[elem], chan_dir=direction),
		)

	def new_func(self, params: List[TypeId], results: List[TypeId], *, variadic: bool = False) -> TypeId:
		return self._intern(
			("func", tuple(params), tuple(results), variadic),
			TypeDef(kind=TypeKind.FUNC, name="func", param_types=list(params), result_types=list(results), variadic=variadic),
		)

	def new_struct(self, fields: List[Tuple[str, TypeId]]) -> TypeId:
		return self._intern(
			("struct", tuple(fields)),
			TypeDef(kind=TypeKind.STRUCT, name="struct", param_types=[], fields=tuple(fields)),
		)

	def new_interface(self, methods: List[Tuple[str, TypeId]]) -> TypeId:
		return self._intern(
			("interface", tuple(methods)),
			TypeDef(kind=TypeKind.INTERFACE, name="interface", param_types=[], fields=tuple(methods)),
		)

	def new_tuple(self, items: List[TypeId]) -> TypeId:
		return self._intern(("tuple", tuple(items)), TypeDef(kind=TypeKind.TUPLE, name="tuple", param_types=list(items)))

	def _intern(self, key: tuple, ty_def: TypeDef) -> TypeId:
		ty = self._interned.get(key)
		if ty is None:
			ty = self._add(ty_def)
			self._interned[key] = ty
		return ty

	def _add(self, ty_def: TypeDef) -> TypeId:
		ty_id = self._next_id
		self._next_id += 1
		self._defs[ty_id] = ty_def
		return ty_id

	# Queries ------------------------------------------------------------

	def get(self, ty: TypeId) -> TypeDef:
		"""Fetch the TypeDef for a given TypeId."""
		return self._defs[ty]

	def __contains__(self, ty: object) -> bool:
		return ty in self._defs

	def underlying(self, ty: TypeId) -> TypeId:
		"""Follow named types to their underlying (structural or basic) type."""
		seen: set[TypeId] = set()
		while self.get(ty).kind is TypeKind.NAMED:
			if ty in seen or ty not in self._underlying:
				return ty
			seen.add(ty)
			ty = self._underlying[ty]
		return ty

	def kind(self, ty: TypeId) -> TypeKind:
		"""Kind of the underlying type."""
		return self.get(self.underlying(ty)).kind

	def is_pointer(self, ty: TypeId) -> bool:
		return self.kind(ty) is TypeKind.POINTER

	def elem(self, ty: TypeId) -> TypeId:
		"""Element type of a pointer/slice/array/chan, or the value type of a map."""
		under = self.get(self.underlying(ty))
		if under.kind is TypeKind.MAP:
			return under.param_types[1]
		if under.kind in (TypeKind.POINTER, TypeKind.SLICE, TypeKind.ARRAY, TypeKind.CHAN):
			return under.param_types[0]
		raise ValueError(f"type {self.type_string(ty)} has no element type")

	def is_pointer_to_array(self, ty: TypeId) -> bool:
		return self.is_pointer(ty) and self.kind(self.elem(ty)) is TypeKind.ARRAY

	def field_type(self, ty: TypeId, name: str) -> Optional[TypeId]:
		"""Type of field `name` of a struct (or named struct); None when absent."""
		under = self.get(self.underlying(ty))
		if under.kind is not TypeKind.STRUCT:
			return None
		for fname, fty in under.fields:
			if fname == name:
				return fty
		return None

	def method(self, ty: TypeId, name: str) -> Optional[Method]:
		"""Method `name` declared on named type `ty` (or found on an interface)."""
		found = self._methods.get(ty, {}).get(name)
		if found is not None:
			return found
		under = self.get(self.underlying(ty))
		if under.kind is TypeKind.INTERFACE:
			for mname, sig in under.fields:
				if mname == name:
					return Method(name=mname, signature=sig, pointer_receiver=False)
		return None

	def results(self, ty: TypeId) -> List[TypeId]:
		"""Result types of a function type."""
		under = self.get(self.underlying(ty))
		if under.kind is not TypeKind.FUNC:
			raise ValueError(f"type {self.type_string(ty)} is not a function type")
		return list(under.result_types)

	def arity(self, ty: TypeId) -> int:
		"""Number of values an expression of this type yields (tuples count their items)."""
		ty_def = self.get(ty)
		if ty_def.kind is TypeKind.TUPLE:
			return len(ty_def.param_types)
		return 1

	def tuple_items(self, ty: TypeId) -> List[TypeId]:
		ty_def = self.get(ty)
		if ty_def.kind is TypeKind.TUPLE:
			return list(ty_def.param_types)
		return [ty]

	def category(self, ty: TypeId) -> Optional[Category]:
		"""
		Zero-value category of `ty`, following named types.

		Returns None for tuples, the nil type, unknown types and named types
		whose underlying type was never attached.
		"""
		under = self.get(self.underlying(ty))
		if under.kind is TypeKind.BASIC:
			return under.basic
		if under.kind in _NILABLE_KINDS:
			return Category.NILABLE
		if under.kind in (TypeKind.STRUCT, TypeKind.ARRAY):
			return Category.COMPOSITE
		return None

	def type_string(self, ty: TypeId) -> str:
		"""Render a type in source syntax (used for messages and tests)."""
		ty_def = self.get(ty)
		k = ty_def.kind
		if k in (TypeKind.BASIC, TypeKind.NAMED, TypeKind.NIL, TypeKind.UNKNOWN):
			return ty_def.name
		if k is TypeKind.POINTER:
			return "*" + self.type_string(ty_def.param_types[0])
		if k is TypeKind.SLICE:
			return "[]" + self.type_string(ty_def.param_types[0])
		if k is TypeKind.ARRAY:
			return f"[{ty_def.length}]" + self.type_string(ty_def.param_types[0])
		if k is TypeKind.MAP:
			key, val = ty_def.param_types
			return f"map[{self.type_string(key)}]{self.type_string(val)}"
		if k is TypeKind.CHAN:
			prefix = {"both": "chan ", "send": "chan<- ", "recv": "<-chan "}[ty_def.chan_dir]
			return prefix + self.type_string(ty_def.param_types[0])
		if k is TypeKind.FUNC:
			params = [self.type_string(p) for p in ty_def.param_types]
			if ty_def.variadic and params:
				params[-1] = "..." + self.type_string(self.elem(ty_def.param_types[-1]))
			text = f"func({', '.join(params)})"
			results = [self.type_string(r) for r in ty_def.result_types]
			if len(results) == 1:
				text += " " + results[0]
			elif results:
				text += " (" + ", ".join(results) + ")"
			return text
		if k is TypeKind.STRUCT:
			inner = "; ".join(f"{n} {self.type_string(t)}" for n, t in ty_def.fields)
			return "struct{" + inner + "}"
		if k is TypeKind.INTERFACE:
			inner = "; ".join(n + self.type_string(t)[4:] for n, t in ty_def.fields)
			return "interface{" + inner + "}"
		if k is TypeKind.TUPLE:
			return "(" + ", ".join(self.type_string(t) for t in ty_def.param_types) + ")"
		return f"<type {ty}>"


__all__ = ["TypeId", "TypeKind", "Category", "TypeDef", "Method", "TypeTable"]
