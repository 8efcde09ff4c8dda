# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common machinery for the rule passes.

A rule is a `Rewriter` with a name and a list of prerequisite rules. Subclasses
implement `normalize_stmt` and/or `normalize_expr`; both return None to leave
the node as it is. Local failures (`fatal = False` errors) raised while
rewriting one statement are reported on the pass context and that statement is
kept unrewritten. Fatal errors propagate to the pipeline, which stops.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, TypeVar

from sugarfree.core.diagnostics import Diagnostic
from sugarfree.core.errors import NormalizeError
from sugarfree.symbols.type_info import TypeInfo
from sugarfree.tree import nodes as N
from sugarfree.tree.rewriter import Rewriter

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=N.Node)


@dataclass
class PassContext:
	"""What one pass reports back to the pipeline."""

	rule: str
	diagnostics: List[Diagnostic] = field(default_factory=list)

	def report(self, err: NormalizeError) -> None:
		diag = err.to_diagnostic(phase=self.rule)
		self.diagnostics.append(diag)
		logger.debug("%s: %s", self.rule, diag.render())


class Rule(Rewriter):
	"""Base class of the ten normalization rules."""

	name: str = ""
	# Rules that must have run (when enabled) before this one.
	requires: Tuple[str, ...] = ()

	def __init__(self) -> None:
		super().__init__()
		self.ctx = PassContext(rule=self.name)
		self.rewrites = 0

	def run(self, file: N.File, info: TypeInfo, ctx: PassContext) -> int:
		"""Rewrite `file` in place; returns the number of rewritten nodes."""
		self.ctx = ctx
		self.rewrites = 0
		self.rewrite_file(file, info)
		return self.rewrites

	# Hooks --------------------------------------------------------------

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		return None

	def normalize_expr(self, expr: N.Expr) -> Optional[N.Expr]:
		return None

	def rewrite_stmt(self, stmt: N.Stmt) -> List[N.Stmt]:
		try:
			result = self.normalize_stmt(stmt)
		except NormalizeError as err:
			if err.fatal:
				raise
			self.ctx.report(err)
			return [stmt]
		if result is None:
			return [stmt]
		self.rewrites += 1
		return result

	def rewrite_expr(self, expr: N.Expr) -> N.Expr:
		result = self.normalize_expr(expr)
		if result is None:
			return expr
		self.rewrites += 1
		return result

	# Helpers ------------------------------------------------------------

	def new(self, node: T) -> T:
		"""Give a freshly built node (not its children) an id."""
		node.node_id = self.info.new_id()
		return node

	def __repr__(self) -> str:
		return f"<rule {self.name}>"


__all__ = ["PassContext", "Rule"]
