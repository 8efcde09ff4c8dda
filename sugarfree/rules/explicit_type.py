# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""explicit-type: `var x = v` => `var x T = v` with T the variable's resolved type."""

from __future__ import annotations

from typing import List, Optional

from sugarfree.tree import nodes as N

from .base import Rule


class ExplicitType(Rule):
	name = "explicit-type"
	requires = ("split-decl",)

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.VarDecl) or stmt.type is not None:
			return None
		if len(stmt.names) != 1 or len(stmt.values) != 1:
			return None
		ty = self.info.type_of(stmt.names[0])
		stmt.type = self.info.type_expr_for(ty, anchor=stmt)
		return [stmt]


__all__ = ["ExplicitType"]
