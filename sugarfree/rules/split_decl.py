# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
split-decl: one name per `var` declaration.

	var a, b = 1, 2   => var a = 1; var b = 2
	var a, b T        => var a T; var b T

A declaration whose single initializer yields one value per name (tuple
context, `var a, b = f()`) cannot be split; short-decl turns it into
declarations plus one tuple assignment. Any other count mismatch is malformed
input and is reported.
"""

from __future__ import annotations

from typing import List, Optional

from sugarfree.core.errors import MalformedDeclaration
from sugarfree.tree import nodes as N
from sugarfree.tree.clone import clone_node
from sugarfree.tree.node_ids import walk

from .base import Rule


class SplitDecl(Rule):
	name = "split-decl"
	slot_safe = False

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.VarDecl) or len(stmt.names) < 2:
			return None
		names, values = stmt.names, stmt.values
		if len(values) == 1 and self.info.table.arity(self.info.type_of(values[0])) == len(names):
			return None
		if values and len(values) != len(names):
			raise MalformedDeclaration(
				f"{len(names)} names but {len(values)} initializer(s) in var declaration",
				node=stmt,
			)
		self._check_no_capture(stmt)

		out: List[N.Stmt] = []
		for i, name in enumerate(names):
			ty = stmt.type
			if ty is not None and i > 0:
				ty = clone_node(ty, self.info)
			decl_values = [values[i]] if values else []
			out.append(self.new(N.VarDecl(names=[name], type=ty, values=decl_values)))
		return out

	def _check_no_capture(self, stmt: N.VarDecl) -> None:
		# After the split, a later initializer naming an earlier declared name
		# would see the new variable instead of the outer one.
		for i, value in enumerate(stmt.values[1:], start=1):
			earlier = {n.name for n in stmt.names[:i] if not n.is_blank()}
			for node in walk(value):
				if not isinstance(node, N.Ident) or node.name not in earlier:
					continue
				# Struct literal keys carry no binding.
				if self.info.maybe_symbol(node) is not None:
					raise MalformedDeclaration(
						f"initializer of '{stmt.names[i].name}' refers to outer '{node.name}', "
						"which splitting would shadow",
						node=node,
					)


__all__ = ["SplitDecl"]
