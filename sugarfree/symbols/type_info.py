# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type/Symbol adapter.

`TypeInfo` is the externally supplied, authoritative record of what the type
checker decided about a tree: the type of every expression, which identifier
declares or refers to which Symbol, how every selector resolved, and which
node opened which scope. All tables are keyed by NodeId.

The rules read it to make decisions and write to it only to register what they
synthesize (temporaries, zero values, type expressions). A synthetic binding
is always registered before a node referring to it is spliced into the tree.

Lookups that a rule depends on raise `MissingTypeInfo` instead of returning a
guess.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from sugarfree.core.errors import MissingTypeInfo, UnsupportedType, UnsupportedZeroValue
from sugarfree.core.types_core import Category, TypeId, TypeKind, TypeTable
from sugarfree.tree import nodes as N
from sugarfree.tree.clone import clone_node
from sugarfree.tree.node_ids import max_node_id, walk

from .scope import Scope, ScopeKind, Symbol, SymbolKind


@dataclass
class Selection:
	"""
	How a selector `x.sel` resolved.

	kind is "field", "method" or "qualified" (package member). `indirect` is
	True when reaching the field goes through a pointer that the source did not
	dereference explicitly.
	"""

	kind: str
	indirect: bool = False


class TypeInfo:
	"""Side tables keyed by NodeId plus the type table and the scope tree."""

	def __init__(self, table: Optional[TypeTable] = None, universe: Optional[Scope] = None) -> None:
		self.table = table if table is not None else TypeTable()
		self.universe = universe if universe is not None else Scope(ScopeKind.UNIVERSE)
		self.types: Dict[int, TypeId] = {}
		self.defs: Dict[int, Symbol] = {}
		self.uses: Dict[int, Symbol] = {}
		self.selections: Dict[int, Selection] = {}
		self.scopes: Dict[int, Scope] = {}
		# Labels are function-scoped in the source language; fresh label names
		# must avoid every label seen anywhere.
		self.labels: Set[str] = set()
		self._next_id = 1
		self._taken_names: Optional[Set[str]] = None
		self._fresh_counter = 0

	# Node ids -----------------------------------------------------------

	def reserve_ids(self, root: N.Node) -> None:
		"""Make sure synthesized ids never collide with ids already in `root`."""
		self._next_id = max(self._next_id, max_node_id(root) + 1)

	def new_id(self) -> int:
		node_id = self._next_id
		self._next_id += 1
		return node_id

	def adopt(self, node: N.Node) -> N.Node:
		"""Give every node of a freshly built subtree a new id; returns `node`."""
		for sub in walk(node):
			sub.node_id = self.new_id()
		return node

	# Reads --------------------------------------------------------------

	def type_of(self, node: N.Node) -> TypeId:
		ty = self.types.get(node.node_id)
		if ty is None:
			raise MissingTypeInfo(f"no type recorded for {type(node).__name__}", node=node)
		return ty

	def maybe_type(self, node: N.Node) -> Optional[TypeId]:
		return self.types.get(node.node_id)

	def symbol_of(self, ident: N.Ident) -> Symbol:
		sym = self.defs.get(ident.node_id) or self.uses.get(ident.node_id)
		if sym is None:
			raise MissingTypeInfo(f"identifier '{ident.name}' is not bound", node=ident)
		return sym

	def maybe_symbol(self, ident: N.Ident) -> Optional[Symbol]:
		return self.defs.get(ident.node_id) or self.uses.get(ident.node_id)

	def selection_of(self, sel: N.Selector) -> Selection:
		found = self.selections.get(sel.node_id)
		if found is None:
			raise MissingTypeInfo(f"selector '.{sel.sel}' was not resolved", node=sel)
		return found

	def scope_of(self, node: N.Node) -> Optional[Scope]:
		return self.scopes.get(node.node_id)

	# Writes -------------------------------------------------------------

	def record_type(self, node: N.Node, ty: TypeId) -> None:
		self.types[node.node_id] = ty

	def record_use(self, ident: N.Ident, sym: Symbol) -> None:
		self.uses[ident.node_id] = sym
		self.defs.pop(ident.node_id, None)
		if sym.type is not None:
			self.types[ident.node_id] = sym.type

	def record_def(self, ident: N.Ident, sym: Symbol) -> None:
		self.defs[ident.node_id] = sym
		self.uses.pop(ident.node_id, None)
		sym.decl_id = ident.node_id
		if sym.type is not None:
			self.types[ident.node_id] = sym.type

	def set_scope(self, node: N.Node, scope: Scope) -> None:
		self.scopes[node.node_id] = scope

	def move_scope(self, old: N.Node, new: N.Node) -> Optional[Scope]:
		"""Transfer the scope opened by `old` to `new` (used when a block takes over)."""
		scope = self.scopes.pop(old.node_id, None)
		if scope is not None:
			self.scopes[new.node_id] = scope
		return scope

	def declare(self, scope: Scope, ident: N.Ident, ty: TypeId, kind: SymbolKind = SymbolKind.VAR) -> Symbol:
		"""
		Register a synthetic binding for `ident` in `scope`.

		The name must be free in that scope; callers obtain it from `fresh_name`.
		"""
		sym = Symbol(name=ident.name, kind=kind, type=ty)
		clash = scope.insert(sym)
		if clash is not None:
			raise MissingTypeInfo(f"synthetic name '{ident.name}' already bound in scope", node=ident)
		self.record_def(ident, sym)
		self._note_name(ident.name)
		return sym

	def copy_facts(self, src: N.Node, dst: N.Node) -> None:
		"""Give `dst` every fact recorded for `src` (used by cloning)."""
		sid, did = src.node_id, dst.node_id
		if sid in self.types:
			self.types[did] = self.types[sid]
		if sid in self.uses:
			self.uses[did] = self.uses[sid]
		if sid in self.defs:
			# A copy of a declaring identifier refers to the declared symbol.
			self.uses[did] = self.defs[sid]
		if sid in self.selections:
			sel = self.selections[sid]
			self.selections[did] = Selection(kind=sel.kind, indirect=sel.indirect)

	# Names --------------------------------------------------------------

	def _note_name(self, name: str) -> None:
		if self._taken_names is not None:
			self._taken_names.add(name)

	def taken_names(self) -> Set[str]:
		if self._taken_names is None:
			taken: Set[str] = set(self.labels)
			for scope in self.universe.walk():
				taken.update(scope.names)
			self._taken_names = taken
		return self._taken_names

	def fresh_name(self, prefix: str = "__tmp") -> str:
		"""A name not bound in any scope and not used as a label anywhere."""
		taken = self.taken_names()
		while True:
			self._fresh_counter += 1
			candidate = f"{prefix}{self._fresh_counter}"
			if candidate not in taken:
				taken.add(candidate)
				return candidate

	def fresh_label(self, prefix: str = "__next") -> str:
		label = self.fresh_name(prefix)
		self.labels.add(label)
		return label

	# Builders -----------------------------------------------------------

	def universe_ident(self, name: str) -> N.Ident:
		"""A new identifier referring to a predeclared name (true, false, nil)."""
		sym = self.universe.lookup_local(name)
		if sym is None:
			raise MissingTypeInfo(f"universe has no '{name}'")
		ident = N.Ident(name=name)
		ident.node_id = self.new_id()
		self.record_use(ident, sym)
		return ident

	def true_ident(self) -> N.Ident:
		ident = self.universe_ident("true")
		self.record_type(ident, self.table.ensure_bool())
		return ident

	def blank_ident(self, ty: Optional[TypeId] = None) -> N.Ident:
		ident = N.Ident(name="_")
		ident.node_id = self.new_id()
		if ty is not None:
			self.record_type(ident, ty)
		return ident

	def ident_for(self, sym: Symbol) -> N.Ident:
		"""A new identifier referring to `sym`."""
		ident = N.Ident(name=sym.name)
		ident.node_id = self.new_id()
		self.record_use(ident, sym)
		return ident

	def type_expr_for(self, ty: TypeId, *, anchor: Optional[N.Node] = None) -> N.TypeExpr:
		"""
		Spell `ty` as a type expression; every node of the result is recorded.

		Named types are spelled by name. Raises UnsupportedType for tuples, the
		nil type and unknown types.
		"""
		table = self.table
		ty_def = table.get(ty)
		kind = ty_def.kind
		node: N.TypeExpr
		if kind in (TypeKind.BASIC, TypeKind.NAMED):
			node = N.TypeName(name=ty_def.name)
		elif kind is TypeKind.POINTER:
			node = N.PointerType(elem=self.type_expr_for(ty_def.param_types[0], anchor=anchor))
		elif kind is TypeKind.SLICE:
			node = N.ArrayType(length=None, elem=self.type_expr_for(ty_def.param_types[0], anchor=anchor))
		elif kind is TypeKind.ARRAY:
			length = N.BasicLit(kind="INT", value=str(ty_def.length))
			length.node_id = self.new_id()
			self.record_type(length, table.ensure_int())
			node = N.ArrayType(length=length, elem=self.type_expr_for(ty_def.param_types[0], anchor=anchor))
		elif kind is TypeKind.MAP:
			key, val = ty_def.param_types
			node = N.MapType(key=self.type_expr_for(key, anchor=anchor), value=self.type_expr_for(val, anchor=anchor))
		elif kind is TypeKind.CHAN:
			node = N.ChanType(dir=ty_def.chan_dir, elem=self.type_expr_for(ty_def.param_types[0], anchor=anchor))
		elif kind is TypeKind.FUNC:
			node = self._func_type_expr(ty, anchor=anchor)
		elif kind is TypeKind.STRUCT:
			fields = [self._field(name, fty, anchor=anchor) for name, fty in ty_def.fields]
			node = N.StructType(fields=fields)
		elif kind is TypeKind.INTERFACE:
			methods = [
				self._field(name, None, anchor=anchor, type_expr=self._func_type_expr(sig, anchor=anchor))
				for name, sig in ty_def.fields
			]
			node = N.InterfaceType(methods=methods)
		else:
			raise UnsupportedType(f"type {table.type_string(ty)} cannot be written as a type expression", node=anchor)
		node.node_id = self.new_id()
		self.record_type(node, ty)
		return node

	def _func_type_expr(self, ty: TypeId, *, anchor: Optional[N.Node]) -> N.FuncType:
		ty_def = self.table.get(ty)
		params: List[N.Field] = []
		for i, pty in enumerate(ty_def.param_types):
			variadic = ty_def.variadic and i == len(ty_def.param_types) - 1
			spelled = self.table.elem(pty) if variadic else pty
			param = self._field(None, spelled, anchor=anchor)
			param.variadic = variadic
			params.append(param)
		results = [self._field(None, rty, anchor=anchor) for rty in ty_def.result_types]
		node = N.FuncType(params=params, results=results)
		node.node_id = self.new_id()
		self.record_type(node, ty)
		return node

	def _field(
		self,
		name: Optional[str],
		ty: Optional[TypeId],
		*,
		anchor: Optional[N.Node],
		type_expr: Optional[N.TypeExpr] = None,
	) -> N.Field:
		names: List[N.Ident] = []
		if name is not None:
			ident = N.Ident(name=name)
			ident.node_id = self.new_id()
			names.append(ident)
		if type_expr is None:
			assert ty is not None
			type_expr = self.type_expr_for(ty, anchor=anchor)
		fld = N.Field(names=names, type=type_expr)
		fld.node_id = self.new_id()
		return fld

	def zero_value_for(self, ty: TypeId, *, type_expr: Optional[N.TypeExpr] = None, anchor: Optional[N.Node] = None) -> N.Expr:
		"""
		Build the zero-value literal for `ty`.

		`type_expr` (when given) is the declaration's own type expression; it is
		cloned rather than re-spelled for composite literals so the literal names
		the type exactly as the declaration does.
		"""
		category = self.table.category(ty)
		zero: N.Expr
		if category is Category.NUMERIC:
			zero = N.BasicLit(kind="INT", value="0")
		elif category is Category.STRING:
			zero = N.BasicLit(kind="STRING", value='""')
		elif category is Category.BOOLEAN:
			ident = self.universe_ident("false")
			self.record_type(ident, ty)
			return ident
		elif category is Category.NILABLE:
			ident = self.universe_ident("nil")
			self.record_type(ident, ty)
			return ident
		elif category is Category.COMPOSITE:
			if type_expr is not None:
				lit_type = clone_node(type_expr, self)
			else:
				lit_type = self.type_expr_for(ty, anchor=anchor)
			zero = N.CompositeLit(type=lit_type, elts=[])
		else:
			raise UnsupportedZeroValue(
				f"no zero value for type {self.table.type_string(ty)}",
				node=anchor,
			)
		zero.node_id = self.new_id()
		self.record_type(zero, ty)
		return zero


__all__ = ["Selection", "TypeInfo"]
