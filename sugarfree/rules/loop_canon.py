# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
loop-canon: every `for` loop becomes a conditional-only loop.

	for init; cond; post { body }
	=>
	{
		init
		for cond {
			body
			post
		}
	}

A missing condition becomes `true`. Every `continue` that targets the loop
(unlabeled and not inside a nested loop, or labeled with the loop's label) is
preceded by a copy of the post statement, so the post statement still runs on
every iteration.

When the body declares a name the post statement mentions, a copy placed in
the body would bind to the wrong variable. In that case the old body becomes
a block of its own, followed by the post statement under a fresh label, and
the `continue`s become `goto`s to that label:

	for cond {
		{
			body      // continue => goto __nextN
		}
	__nextN:
		post
	}
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Set

from sugarfree.symbols.scope import Scope, ScopeKind
from sugarfree.tree import nodes as N
from sugarfree.tree.clone import clone_node
from sugarfree.tree.node_ids import walk

from .base import Rule
from .scope_extract import hoist_init


class LoopCanon(Rule):
	name = "loop-canon"
	requires = ("scope-extract",)

	def normalize_stmt(self, stmt: N.Stmt) -> Optional[List[N.Stmt]]:
		if not isinstance(stmt, N.For):
			return None
		if stmt.init is None and stmt.post is None and stmt.cond is not None:
			return None
		result: N.Stmt = stmt
		if stmt.init is not None:
			result = hoist_init(self, stmt)
		if stmt.cond is None:
			stmt.cond = self.info.true_ident()
		if stmt.post is not None:
			post, stmt.post = stmt.post, None
			self._fold_post(stmt, post)
		return [result]

	# Post statement -----------------------------------------------------

	def _fold_post(self, loop: N.For, post: N.Stmt) -> None:
		label = self.label_of(loop)
		if not self._shadowed(loop.body, post):
			loop.body.stmts = self._patch_list(loop.body.stmts, label, post, None, nested=False)
			loop.body.stmts.append(post)
			return

		inner = loop.body
		target: Optional[str] = None
		if any(self._continues(inner, label, nested=False)):
			target = self.info.fresh_label()
			inner.stmts = self._patch_list(inner.stmts, label, post, target, nested=False)
		tail: N.Stmt = post if target is None else self.new(N.Labeled(label=target, stmt=post))
		loop.body = self.new(N.Block(stmts=[inner, tail]))
		# The new body sits between the loop's scope and the old body's.
		old_scope = self.info.scope_of(inner)
		if old_scope is not None and old_scope.parent is not None:
			body_scope = Scope(ScopeKind.BLOCK, parent=old_scope.parent)
			old_scope.reparent(body_scope)
			self.info.set_scope(loop.body, body_scope)

	def _shadowed(self, body: N.Block, post: N.Stmt) -> bool:
		"""True when some scope inside `body` redeclares a name `post` refers to."""
		names: Set[str] = {
			node.name for node in walk(post)
			if isinstance(node, N.Ident) and self.info.maybe_symbol(node) is not None
		}
		scope = self.info.scope_of(body)
		if scope is None or not names:
			return False
		return any(names & sc.names.keys() for sc in scope.walk())

	def _targets_loop(self, branch: N.Branch, label: Optional[str], nested: bool) -> bool:
		if branch.tok != "continue":
			return False
		if branch.label is None:
			return not nested
		return branch.label == label

	def _continues(self, stmt: N.Stmt, label: Optional[str], *, nested: bool) -> Iterator[N.Branch]:
		"""The continues in `stmt` that target the loop being rewritten."""
		if isinstance(stmt, N.Branch):
			if self._targets_loop(stmt, label, nested):
				yield stmt
		elif isinstance(stmt, N.Block):
			for sub in stmt.stmts:
				yield from self._continues(sub, label, nested=nested)
		elif isinstance(stmt, N.If):
			yield from self._continues(stmt.body, label, nested=nested)
			if stmt.else_ is not None:
				yield from self._continues(stmt.else_, label, nested=nested)
		elif isinstance(stmt, N.Switch):
			for clause in stmt.clauses:
				for sub in clause.body:
					yield from self._continues(sub, label, nested=nested)
		elif isinstance(stmt, (N.For, N.Range)):
			yield from self._continues(stmt.body, label, nested=True)
		elif isinstance(stmt, N.Labeled):
			yield from self._continues(stmt.stmt, label, nested=nested)

	def _patch_list(
		self,
		stmts: List[N.Stmt],
		label: Optional[str],
		post: N.Stmt,
		target: Optional[str],
		*,
		nested: bool,
	) -> List[N.Stmt]:
		out: List[N.Stmt] = []
		for stmt in stmts:
			out.extend(self._patch(stmt, label, post, target, nested=nested))
		return out

	def _patch(
		self,
		stmt: N.Stmt,
		label: Optional[str],
		post: N.Stmt,
		target: Optional[str],
		*,
		nested: bool,
	) -> List[N.Stmt]:
		"""Rewrite the continues of the loop found in `stmt`."""
		if isinstance(stmt, N.Branch):
			if not self._targets_loop(stmt, label, nested):
				return [stmt]
			if target is not None:
				stmt.tok, stmt.label = "goto", target
				return [stmt]
			return [clone_node(post, self.info), stmt]
		if isinstance(stmt, N.Block):
			stmt.stmts = self._patch_list(stmt.stmts, label, post, target, nested=nested)
		elif isinstance(stmt, N.If):
			self._patch(stmt.body, label, post, target, nested=nested)
			if stmt.else_ is not None:
				self._patch(stmt.else_, label, post, target, nested=nested)
		elif isinstance(stmt, N.Switch):
			for clause in stmt.clauses:
				clause.body = self._patch_list(clause.body, label, post, target, nested=nested)
		elif isinstance(stmt, (N.For, N.Range)):
			self._patch(stmt.body, label, post, target, nested=True)
		elif isinstance(stmt, N.Labeled):
			patched = self._patch(stmt.stmt, label, post, target, nested=nested)
			if len(patched) == 1:
				stmt.stmt = patched[0]
			else:
				stmt.stmt = self.new(N.Block(stmts=patched))
		return [stmt]


__all__ = ["LoopCanon"]
