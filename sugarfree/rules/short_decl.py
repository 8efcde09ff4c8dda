# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
short-decl: eliminate declare-or-reuse assignments.

	a, err := f()     (a already declared in this scope)
	=>
	var err error = nil
	a, err = f()

Each non-blank name on the left is classified against the *current* scope:

  * fresh     the scope's binding for the name is declared by this very
              identifier; it gets a zero-initialized `var` declaration,
  * existing  the scope binds the name to an earlier declaration; nothing is
              declared and the identifier becomes a plain use,
  * neither   the scope has no binding at all: the tree and the adapter
              disagree, which is fatal (`AmbiguousRedeclaration`).

Bindings in enclosing scopes never count as existing. One assignment then
covers every name in the original order, so a multi-value right-hand side is
still evaluated once. The real values are bound by that assignment; the
declarations only carry zero values.

A fresh name may shadow an outer variable that the right-hand side reads.
Those reads are first copied into a temporary declared ahead of the new names:

	x := x + 1        (x declared in an enclosing scope)
	=>
	var __tmp1 int = x
	var x int = 0
	x = __tmp1 + 1

An outer binding that is not a variable, or whose address the right-hand side
takes, cannot be served from a copy; that is reported and the statement kept.

Tuple-context `var` declarations left behind by split-decl
(`var a, b = f()`) inside functions are handled the same way, with every name
fresh. At package level they are kept: a package-level statement cannot
assign.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

from sugarfree.core.errors import AmbiguousRedeclaration, MalformedDeclaration
from sugarfree.core.types_core import TypeKind
from sugarfree.symbols.scope import ScopeKind, Symbol, SymbolKind
from sugarfree.symbols.type_info import TypeInfo
from sugarfree.tree import nodes as N
from sugarfree.tree.node_ids import walk

from .base import Rule

logger = logging.getLogger(__name__)


class ShortDecl(Rule):
	name = "short-decl"
	requires = ("scope-extract", "loop-canon")
	slot_safe = False

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if isinstance(stmt, N.Assign) and stmt.tok == ":=":
			return self._unify(stmt, stmt.lhs, stmt.rhs)
		if isinstance(stmt, N.VarDecl) and len(stmt.names) > 1 and len(stmt.values) == 1:
			if self.current_scope.kind is ScopeKind.PACKAGE:
				return None
			return self._unify(stmt, list(stmt.names), stmt.values)
		return None

	def _classify(self, targets: List[N.Expr]) -> List[Tuple[N.Ident, Symbol, bool]]:
		"""(identifier, symbol, fresh) for every non-blank target."""
		scope = self.current_scope
		out: List[Tuple[N.Ident, Symbol, bool]] = []
		for target in targets:
			if not isinstance(target, N.Ident):
				raise MalformedDeclaration("non-name on left side of declare-or-reuse assignment", node=target)
			if target.is_blank():
				continue
			local = scope.lookup_local(target.name)
			if local is None:
				raise AmbiguousRedeclaration(
					f"'{target.name}' has no binding in the current scope",
					node=target,
				)
			out.append((target, local, local.decl_id == target.node_id))
		return out

	def _unify(self, stmt: N.Stmt, targets: List[N.Expr], values: List[N.Expr]) -> List[N.Stmt]:
		info = self.info
		classified = self._classify(targets)
		captured = self._captured_reads(classified, values)

		# Build every declaration before touching the adapter's bindings, so a
		# local failure leaves the statement and its facts as they were.
		decls: List[Tuple[N.VarDecl, N.Ident, Symbol]] = []
		for ident, sym, fresh in classified:
			if not fresh:
				continue
			if sym.type is None:
				raise AmbiguousRedeclaration(f"'{ident.name}' is bound without a type", node=ident)
			type_expr = info.type_expr_for(sym.type, anchor=ident)
			zero = info.zero_value_for(sym.type, type_expr=type_expr, anchor=ident)
			name = self.new(N.Ident(name=ident.name))
			decls.append((self.new(N.VarDecl(names=[name], type=type_expr, values=[zero])), name, sym))
		copy_types: Dict[int, N.TypeExpr] = {}
		for outer, reads in captured:
			copy_types[id(outer)] = info.type_expr_for(info.type_of(reads[0]), anchor=reads[0])

		out: List[N.Stmt] = []
		for outer, reads in captured:
			out.append(self._copy_outer(outer, reads, copy_types[id(outer)]))
		for _, name, sym in decls:
			info.record_def(name, sym)
		for ident, sym, _ in classified:
			info.record_use(ident, sym)
		logger.debug(
			"%s: %d fresh, %d reused, %d outer value(s) copied",
			", ".join(t.name for t in targets if isinstance(t, N.Ident)),
			len(decls),
			len(classified) - len(decls),
			len(captured),
		)

		assign = N.Assign(lhs=list(targets), tok="=", rhs=values)
		if isinstance(stmt, N.Assign):
			stmt.tok = "="
			assign = stmt
		else:
			self.new(assign)
		out.extend(decl for decl, _, _ in decls)
		out.append(assign)
		return out

	def _captured_reads(
		self, classified: List[Tuple[N.Ident, Symbol, bool]], values: List[N.Expr]
	) -> List[Tuple[Symbol, List[N.Ident]]]:
		"""
		Reads on the right of outer bindings that a fresh name shadows.

		Once `var x T = zero` precedes the assignment, `x := x + 1` would read
		the new `x`. Such reads are returned grouped by the outer symbol, in
		first-read order. Reads that cannot be served from a copy (the outer
		binding is not a variable, or its address is needed) are reported.
		"""
		info = self.info
		fresh = {ident.name: sym for ident, sym, is_fresh in classified if is_fresh}
		if not fresh:
			return []
		addressed = set()
		for value in values:
			addressed |= _addressed_idents(value, info)
		groups: Dict[int, Tuple[Symbol, List[N.Ident]]] = {}
		for value in values:
			for node in walk(value):
				if not isinstance(node, N.Ident) or node.name not in fresh:
					continue
				outer = info.maybe_symbol(node)
				# Struct literal keys carry no binding.
				if outer is None or outer is fresh[node.name]:
					continue
				if outer.kind is not SymbolKind.VAR or id(node) in addressed:
					raise MalformedDeclaration(
						f"right-hand side refers to outer '{node.name}', which the new declaration would shadow",
						node=node,
					)
				groups.setdefault(id(outer), (outer, []))[1].append(node)
		return list(groups.values())

	def _copy_outer(self, outer: Symbol, reads: List[N.Ident], type_expr: N.TypeExpr) -> N.VarDecl:
		"""`var __tmpN T = outer`, retargeting `reads` to the copy."""
		info = self.info
		ty = info.type_of(reads[0])
		name = self.new(N.Ident(name=info.fresh_name()))
		temp = info.declare(self.current_scope, name, ty)
		for read in reads:
			read.name = temp.name
			info.record_use(read, temp)
		return self.new(N.VarDecl(names=[name], type=type_expr, values=[info.ident_for(outer)]))


def _addressed_idents(expr: N.Expr, info: TypeInfo) -> Set[int]:
	"""id() of the identifiers in `expr` whose variable is addressed, not just read."""
	out: Set[int] = set()
	for node in walk(expr):
		operand: Optional[N.Expr] = None
		if isinstance(node, N.Unary) and node.op == "&":
			operand = node.x
		elif isinstance(node, N.Selector):
			selection = info.selections.get(node.node_id)
			if selection is not None and selection.kind == "method":
				operand = node.x
		elif isinstance(node, N.SliceExpr) and info.table.kind(info.type_of(node.x)) is TypeKind.ARRAY:
			operand = node.x
		while isinstance(operand, (N.Selector, N.Index)):
			operand = operand.x
		if isinstance(operand, N.Ident):
			out.add(id(operand))
	return out


__all__ = ["ShortDecl"]
