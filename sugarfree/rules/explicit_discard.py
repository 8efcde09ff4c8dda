# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
explicit-discard: expression statements no longer drop values silently.

	f()    => _, _ = f()      f returns two values
	<-ch   => _ = <-ch

Statements yielding no value (calls of functions without results, builtins
such as `panic` or `close`) are left alone.
"""

from __future__ import annotations

from typing import List, Optional

from sugarfree.tree import nodes as N

from .base import Rule


class ExplicitDiscard(Rule):
	name = "explicit-discard"

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.ExprStmt):
			return None
		table = self.info.table
		items = table.tuple_items(self.info.type_of(stmt.x))
		if not items:
			return None
		blanks: List[N.Expr] = [self.info.blank_ident(ty) for ty in items]
		return [self.new(N.Assign(lhs=blanks, tok="=", rhs=[stmt.x]))]


__all__ = ["ExplicitDiscard"]
