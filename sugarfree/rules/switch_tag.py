# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""switch-tag: `switch { ... }` => `switch true { ... }`."""

from __future__ import annotations

from typing import List, Optional

from sugarfree.tree import nodes as N

from .base import Rule


class SwitchTag(Rule):
	name = "switch-tag"

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.Switch) or stmt.tag is not None:
			return None
		stmt.tag = self.info.true_ident()
		return [stmt]


__all__ = ["SwitchTag"]
