# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
scope-extract: move control-statement initializers into a block of their own.

	if init; cond { ... }        =>  { init; if cond { ... } }
	switch init; tag { ... }     =>  { init; switch tag { ... } }
	for init; cond; post { ... } =>  { init; for ; cond; post { ... } }

The new block takes over the scope the statement opened, so names bound by
the initializer stay visible to exactly the statement and nothing after it.
The statement object itself is kept; a label naming it still names it.
"""

from __future__ import annotations

from typing import List, Optional, Union

from sugarfree.tree import nodes as N

from .base import Rule

ControlWithInit = Union[N.If, N.Switch, N.For]


def hoist_init(rule: Rule, stmt: ControlWithInit) -> N.Block:
	"""Wrap `stmt` in a block starting with its initializer (which is cleared)."""
	assert stmt.init is not None
	block = rule.new(N.Block(stmts=[stmt.init, stmt]))
	rule.info.move_scope(stmt, block)
	stmt.init = None
	return block


class ScopeExtract(Rule):
	name = "scope-extract"

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.CONTROL_WITH_INIT) or stmt.init is None:
			return None
		return [hoist_init(self, stmt)]


__all__ = ["ScopeExtract", "hoist_init"]
