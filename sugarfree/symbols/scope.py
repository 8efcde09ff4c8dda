# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lexical scopes and symbols.

A Symbol is one binding (name + kind + resolved type) living in exactly one
Scope. Scopes form a tree rooted at the universe scope; each scope remembers
the node that introduced it only through the adapter's `scopes` table, never
through a back-pointer into the syntax tree.

Identity matters: two identifiers denote the same variable iff they resolve
to the same Symbol object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Tuple

from sugarfree.core.types_core import TypeId


class ScopeKind(Enum):
	UNIVERSE = auto()
	PACKAGE = auto()
	FUNC = auto()
	BLOCK = auto()
	IF = auto()
	SWITCH = auto()
	FOR = auto()
	RANGE = auto()
	CASE = auto()


class SymbolKind(Enum):
	VAR = auto()
	TYPE = auto()
	FUNC = auto()
	PKG = auto()
	BUILTIN = auto()
	CONST = auto()  # predeclared true/false
	NIL = auto()


@dataclass(eq=False)
class Symbol:
	"""A binding; compared by identity."""

	name: str
	kind: SymbolKind
	type: Optional[TypeId] = None
	# NodeId of the declaring identifier (None for predeclared symbols).
	decl_id: Optional[int] = None
	scope: Optional["Scope"] = field(default=None, repr=False)

	@property
	def is_package_level(self) -> bool:
		return self.scope is not None and self.scope.kind is ScopeKind.PACKAGE

	def __repr__(self) -> str:  # keep reprs short; scopes are cyclic
		return f"Symbol({self.name!r}, {self.kind.name}, type={self.type}, decl_id={self.decl_id})"


@dataclass(eq=False)
class Scope:
	"""One lexical scope; names are unique within it."""

	kind: ScopeKind
	parent: Optional["Scope"] = field(default=None, repr=False)
	names: Dict[str, Symbol] = field(default_factory=dict)
	children: List["Scope"] = field(default_factory=list, repr=False)

	def __post_init__(self) -> None:
		if self.parent is not None:
			self.parent.children.append(self)

	def insert(self, sym: Symbol) -> Optional[Symbol]:
		"""
		Insert `sym`; returns the already-present symbol (and inserts nothing)
		when the name is taken in this scope.
		"""
		existing = self.names.get(sym.name)
		if existing is not None:
			return existing
		sym.scope = self
		self.names[sym.name] = sym
		return None

	def lookup_local(self, name: str) -> Optional[Symbol]:
		return self.names.get(name)

	def lookup(self, name: str) -> Tuple[Optional["Scope"], Optional[Symbol]]:
		"""Find `name` in this scope or the nearest enclosing one."""
		scope: Optional[Scope] = self
		while scope is not None:
			sym = scope.names.get(name)
			if sym is not None:
				return scope, sym
			scope = scope.parent
		return None, None

	def is_within(self, other: "Scope") -> bool:
		"""True when `other` is this scope or one of its ancestors."""
		scope: Optional[Scope] = self
		while scope is not None:
			if scope is other:
				return True
			scope = scope.parent
		return False

	def reparent(self, new_parent: "Scope") -> None:
		if self.parent is not None and self in self.parent.children:
			self.parent.children.remove(self)
		self.parent = new_parent
		new_parent.children.append(self)

	def walk(self) -> Iterator["Scope"]:
		yield self
		for child in self.children:
			yield from child.walk()


__all__ = ["ScopeKind", "SymbolKind", "Symbol", "Scope"]
