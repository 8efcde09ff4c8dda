# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
parallel-assign: split `a, b = x, y` into single-target assignments.

A parallel assignment evaluates the index and pointer operands on the left and
every value on the right before storing anything. Splitting it is only safe
when no store can change what a later part of the statement reads. Target `i`
is a hazard for a later value `j > i` (and for the operands of a later
target) when

  * both involve the same variable (the target's root variable is read),
  * the target stores through a pointer, slice or map and the later part reads
    through one, calls a function or reads an escaping variable,
  * the target is an escaping variable and the later part reads through a
    pointer or calls a function.

A variable escapes when it is declared at package level or its address is
taken somewhere in the file (`&v`, or a method call on `v`).

Without hazards the statement becomes one assignment per target, in order.
Otherwise every hazardous value (and every earlier value with side effects,
to keep their order) is first copied into a fresh temporary, inside a block
of its own so no declaration lands between a `goto` and its label:

	x, y = y, x
	=>
	{
		var __tmp1 int = x
		x = y
		y = __tmp1
	}

Left-hand operands that read an earlier target are copied the same way
(`i, a[i] = 1, 2` stores into the old `a[i]`). Tuple and comma-ok assignments
(a single value on the right) are not parallel assignments and are left alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from sugarfree.core.types_core import TypeId, TypeKind
from sugarfree.symbols.scope import Scope, ScopeKind, Symbol, SymbolKind
from sugarfree.symbols.type_info import TypeInfo
from sugarfree.tree import nodes as N
from sugarfree.tree.node_ids import walk

from .base import PassContext, Rule


@dataclass
class _Reads:
	"""What evaluating an expression may observe or do."""

	vars: Set[int] = field(default_factory=set)  # id() of the Symbols read
	indirect: bool = False
	effects: bool = False  # calls and receives
	escaping: bool = False  # some variable read may be reached through a pointer

	def merge(self, other: "_Reads") -> None:
		self.vars |= other.vars
		self.indirect = self.indirect or other.indirect
		self.effects = self.effects or other.effects
		self.escaping = self.escaping or other.escaping


@dataclass
class _Target:
	"""Storage written by one assignment target."""

	root: Optional[Symbol]  # variable written directly, if any
	indirect: bool  # stores through a pointer, slice or map


class ParallelAssign(Rule):
	name = "parallel-assign"
	requires = ("short-decl",)
	slot_safe = False

	def __init__(self) -> None:
		super().__init__()
		self._escaping: Set[int] = set()

	def run(self, file: N.File, info: TypeInfo, ctx: PassContext) -> int:
		self._escaping = _address_taken(file, info)
		return super().run(file, info, ctx)

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.Assign) or stmt.tok != "=":
			return None
		if len(stmt.lhs) < 2 or len(stmt.lhs) != len(stmt.rhs):
			return None

		targets = [self._target(t) for t in stmt.lhs]
		reads = [self._reads(value) for value in stmt.rhs]
		hazard_values = {
			j for j in range(len(reads))
			if any(self._conflicts(targets[i], reads[j]) for i in range(j))
		}
		hazard_targets = {
			k for k, target in enumerate(stmt.lhs)
			if any(self._conflicts(targets[i], self._operand_reads(target)) for i in range(k))
		}

		out: List[N.Stmt] = []
		if hazard_values:
			# Copied values are evaluated before the others: keep effects in
			# order, and keep earlier reads ahead of a copied call.
			last = max(hazard_values)
			last_effect = max((j for j in hazard_values if reads[j].effects), default=-1)
			for j in range(last):
				r = reads[j]
				if r.effects or (j < last_effect and (r.vars or r.indirect)):
					hazard_values.add(j)
		value_types = {j: self._value_type(stmt.lhs[j], stmt.rhs[j]) for j in hazard_values}
		for j, ty in value_types.items():
			# Fail before anything is moved when a temporary cannot be declared.
			self.info.type_expr_for(ty, anchor=stmt.rhs[j])
		if not hazard_values and not hazard_targets:
			return [self.new(N.Assign(lhs=[t], tok="=", rhs=[v])) for t, v in zip(stmt.lhs, stmt.rhs)]

		# The temporaries get a block and scope of their own, ending with the
		# statement.
		scope = Scope(ScopeKind.BLOCK, parent=self.current_scope)
		for k in sorted(hazard_targets):
			stmt.lhs[k] = self._freeze_target(stmt.lhs[k], targets[:k], out, scope)
		values = list(stmt.rhs)
		for j in sorted(hazard_values):
			values[j] = self._temp(values[j], value_types[j], out, scope)

		for target, value in zip(stmt.lhs, values):
			out.append(self.new(N.Assign(lhs=[target], tok="=", rhs=[value])))
		block = self.new(N.Block(stmts=out))
		self.info.set_scope(block, scope)
		return [block]

	# Analysis -----------------------------------------------------------

	def _target(self, expr: N.Expr) -> _Target:
		table = self.info.table
		if isinstance(expr, N.Ident):
			if expr.is_blank():
				return _Target(root=None, indirect=False)
			return _Target(root=self.info.symbol_of(expr), indirect=False)
		if isinstance(expr, N.Selector):
			if self.info.selection_of(expr).indirect:
				return _Target(root=None, indirect=True)
			return self._target(expr.x)
		if isinstance(expr, N.Index) and table.kind(self.info.type_of(expr.x)) is TypeKind.ARRAY:
			return self._target(expr.x)
		return _Target(root=None, indirect=True)

	def _reads(self, expr: N.Expr) -> _Reads:
		table = self.info.table
		reads = _Reads()
		for node in walk(expr):
			if isinstance(node, N.Ident):
				sym = self.info.maybe_symbol(node)
				if sym is not None and sym.kind is SymbolKind.VAR:
					reads.vars.add(id(sym))
					reads.escaping = reads.escaping or self._escapes(sym)
			elif isinstance(node, N.Star):
				reads.indirect = True
			elif isinstance(node, (N.Index, N.SliceExpr)):
				if table.kind(self.info.type_of(node.x)) is not TypeKind.ARRAY:
					reads.indirect = True
			elif isinstance(node, N.Selector):
				selection = self.info.selection_of(node)
				if selection.indirect:
					reads.indirect = True
			elif isinstance(node, N.Call):
				if not self._is_conversion(node):
					reads.effects = True
			elif isinstance(node, N.Unary) and node.op == "<-":
				reads.effects = True
		return reads

	def _operand_reads(self, target: N.Expr) -> _Reads:
		"""What evaluating the operands of `target` (not the store) reads."""
		table = self.info.table
		if isinstance(target, N.Selector):
			if self.info.selection_of(target).indirect:
				return self._reads(target.x)
			return self._operand_reads(target.x)
		if isinstance(target, N.Index):
			reads = self._reads(target.index)
			if table.kind(self.info.type_of(target.x)) is TypeKind.ARRAY:
				reads.merge(self._operand_reads(target.x))
			else:
				reads.merge(self._reads(target.x))
			return reads
		if isinstance(target, N.Star):
			return self._reads(target.x)
		return _Reads()

	def _conflicts(self, target: _Target, reads: _Reads) -> bool:
		if target.root is not None:
			if id(target.root) in reads.vars:
				return True
			if self._escapes(target.root) and (reads.indirect or reads.effects):
				return True
		if target.indirect and (reads.indirect or reads.effects or reads.escaping):
			return True
		return False

	def _escapes(self, sym: Symbol) -> bool:
		return sym.is_package_level or id(sym) in self._escaping

	def _is_conversion(self, call: N.Call) -> bool:
		if isinstance(call.fun, N.TypeExpr):
			return True
		if isinstance(call.fun, N.Ident):
			sym = self.info.maybe_symbol(call.fun)
			return sym is not None and sym.kind is SymbolKind.TYPE
		return False

	# Temporaries --------------------------------------------------------

	def _value_type(self, target: N.Expr, value: N.Expr) -> TypeId:
		if isinstance(target, N.Ident) and target.is_blank():
			return self.info.type_of(value)
		return self.info.type_of(target)

	def _temp(self, value: N.Expr, ty: TypeId, out: List[N.Stmt], scope: Scope) -> N.Ident:
		"""Declare `var __tmpN T = value` in `scope` (appended to `out`); returns a use of it."""
		info = self.info
		type_expr = info.type_expr_for(ty, anchor=value)
		name = self.new(N.Ident(name=info.fresh_name()))
		sym = info.declare(scope, name, ty)
		out.append(self.new(N.VarDecl(names=[name], type=type_expr, values=[value])))
		return info.ident_for(sym)

	def _freeze_target(
		self, target: N.Expr, earlier: List[_Target], out: List[N.Stmt], scope: Scope
	) -> N.Expr:
		"""Copy the operands of `target` that read an earlier target into temporaries."""
		table = self.info.table

		def needs_copy(expr: N.Expr) -> bool:
			reads = self._reads(expr)
			return any(self._conflicts(t, reads) for t in earlier)

		if isinstance(target, N.Selector):
			if not self.info.selection_of(target).indirect:
				target.x = self._freeze_target(target.x, earlier, out, scope)
			elif needs_copy(target.x):
				target.x = self._temp(target.x, self.info.type_of(target.x), out, scope)
		elif isinstance(target, N.Index):
			if table.kind(self.info.type_of(target.x)) is TypeKind.ARRAY:
				target.x = self._freeze_target(target.x, earlier, out, scope)
			elif needs_copy(target.x):
				target.x = self._temp(target.x, self.info.type_of(target.x), out, scope)
			if needs_copy(target.index):
				target.index = self._temp(target.index, self.info.type_of(target.index), out, scope)
		elif isinstance(target, N.Star):
			if needs_copy(target.x):
				target.x = self._temp(target.x, self.info.type_of(target.x), out, scope)
		return target


def _address_taken(file: N.File, info: TypeInfo) -> Set[int]:
	"""id() of every variable whose address is taken somewhere in `file`."""
	taken: Set[int] = set()
	for node in walk(file):
		operand: Optional[N.Expr] = None
		if isinstance(node, N.Unary) and node.op == "&":
			operand = node.x
		elif isinstance(node, N.Selector):
			selection = info.selections.get(node.node_id)
			if selection is not None and selection.kind == "method":
				operand = node.x
		while isinstance(operand, (N.Selector, N.Index)):
			operand = operand.x
		if isinstance(operand, N.Ident):
			sym = info.maybe_symbol(operand)
			if sym is not None and sym.kind is SymbolKind.VAR:
				taken.add(id(sym))
	return taken


__all__ = ["ParallelAssign"]
