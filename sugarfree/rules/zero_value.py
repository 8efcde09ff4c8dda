# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
zero-value: `var x T` => `var x T = zero(T)`.

The zero value follows the category of T's underlying type: `0`, `false`,
`""`, `nil`, or an empty composite literal `T{}` that spells T exactly as the
declaration does.
"""

from __future__ import annotations

from typing import List, Optional

from sugarfree.tree import nodes as N

from .base import Rule


class ZeroValue(Rule):
	name = "zero-value"
	requires = ("split-decl",)

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.VarDecl) or stmt.values or stmt.type is None:
			return None
		if len(stmt.names) != 1:
			return None
		ty = self.info.type_of(stmt.type)
		stmt.values = [self.info.zero_value_for(ty, type_expr=stmt.type, anchor=stmt)]
		return [stmt]


__all__ = ["ZeroValue"]
