# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
In-place tree rewriter.

This is the traversal every rule pass is built on. It walks a file bottom-up:
children of a statement are visited (and rewritten) before the statement
itself is offered to `rewrite_stmt`, and every expression slot is offered to
`rewrite_expr` after its own children.

Statement lists are rebuilt from the lists `rewrite_stmt` returns, then stored
back into the owning node (`Block.stmts`, `CaseClause.body`, `File.decls`), so
one statement may become several. Single-statement slots (`If.init`,
`For.post`, ...) can only hold one statement: subclasses that may expand a
statement into several set `slot_safe = False` and are not offered those slots.

While walking, the rewriter keeps the stack of scopes the adapter recorded for
the nodes it is inside of, so `current_scope` is the innermost scope at the
statement being rewritten.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from sugarfree.symbols.scope import Scope
from sugarfree.symbols.type_info import TypeInfo
from sugarfree.tree import nodes as N


class Rewriter:
	"""Base class: bottom-up, in-place rewriting of statements and expressions."""

	# Whether rewrite_stmt may be offered single-statement slots (If.init,
	# Switch.init, For.init, For.post).
	slot_safe: bool = True

	def __init__(self) -> None:
		self.info: TypeInfo = TypeInfo()
		self._scopes: List[Scope] = []
		self._labels: Dict[int, str] = {}

	# Hooks --------------------------------------------------------------

	def rewrite_stmt(self, stmt: N.Stmt) -> List[N.Stmt]:
		"""Return the statements replacing `stmt` (children already rewritten)."""
		return [stmt]

	def rewrite_expr(self, expr: N.Expr) -> N.Expr:
		"""Return the expression replacing `expr` (children already rewritten)."""
		return expr

	# Scope tracking -----------------------------------------------------

	@property
	def current_scope(self) -> Scope:
		if self._scopes:
			return self._scopes[-1]
		return self.info.universe

	@contextmanager
	def _scope(self, node: N.Node) -> Iterator[None]:
		scope = self.info.scope_of(node)
		if scope is None:
			yield
			return
		self._scopes.append(scope)
		try:
			yield
		finally:
			self._scopes.pop()

	def label_of(self, stmt: N.Stmt) -> Optional[str]:
		"""Label attached to `stmt` by an enclosing Labeled statement."""
		return self._labels.get(stmt.node_id)

	# Entry points -------------------------------------------------------

	def rewrite_file(self, file: N.File, info: TypeInfo) -> N.File:
		self.info = info
		self._scopes = []
		self._labels = {}
		with self._scope(file):
			new_decls: List[N.Node] = []
			for decl in file.decls:
				if isinstance(decl, N.FuncDecl):
					self.rewrite_block(decl.body)
					new_decls.append(decl)
				elif isinstance(decl, N.VarDecl):
					new_decls.extend(self.visit_stmt(decl))
				else:
					new_decls.append(decl)
			file.decls = new_decls
		return file

	def rewrite_block(self, block: N.Block) -> N.Block:
		with self._scope(block):
			block.stmts = self.rewrite_stmt_list(block.stmts)
		return block

	def rewrite_stmt_list(self, stmts: List[N.Stmt]) -> List[N.Stmt]:
		new_stmts: List[N.Stmt] = []
		for stmt in stmts:
			new_stmts.extend(self.visit_stmt(stmt))
		return new_stmts

	# Statements ---------------------------------------------------------

	def visit_stmt(self, stmt: N.Stmt) -> List[N.Stmt]:
		"""Rewrite the children of `stmt`, then `stmt` itself."""
		if isinstance(stmt, N.Labeled):
			return self._visit_labeled(stmt)
		if isinstance(stmt, N.Block):
			self.rewrite_block(stmt)
			return self.rewrite_stmt(stmt)
		if isinstance(stmt, (N.If, N.Switch, N.For, N.Range)):
			with self._scope(stmt):
				self._visit_control(stmt)
			return self.rewrite_stmt(stmt)
		self._visit_simple(stmt)
		return self.rewrite_stmt(stmt)

	def _visit_labeled(self, stmt: N.Labeled) -> List[N.Stmt]:
		inner = stmt.stmt
		self._labels[inner.node_id] = stmt.label
		result = self.visit_stmt(inner)
		if len(result) == 1 and result[0] is inner:
			return self.rewrite_stmt(stmt)
		# The inner statement was replaced or wrapped. The label stays with the
		# statement it named when that statement survives inside the result
		# (directly or as a member of a single wrapping block).
		for i, new in enumerate(result):
			if new is inner:
				stmt.stmt = new
				result[i] = stmt
				return result
			if isinstance(new, N.Block):
				for j, sub in enumerate(new.stmts):
					if sub is inner:
						stmt.stmt = sub
						new.stmts[j] = stmt
						return result
		if not result:
			return []
		stmt.stmt = result[0]
		return [stmt] + result[1:]

	def _visit_slot(self, stmt: Optional[N.Stmt]) -> Optional[N.Stmt]:
		if stmt is None:
			return None
		self._visit_simple(stmt)
		if not self.slot_safe:
			return stmt
		result = self.rewrite_stmt(stmt)
		assert len(result) == 1, f"{type(self).__name__} expanded a single-statement slot"
		return result[0]

	def _visit_control(self, stmt: N.Stmt) -> None:
		if isinstance(stmt, N.If):
			stmt.init = self._visit_slot(stmt.init)
			stmt.cond = self.visit_expr(stmt.cond)
			self.rewrite_block(stmt.body)
			if stmt.else_ is not None:
				stmt.else_ = self._visit_else(stmt.else_)
		elif isinstance(stmt, N.Switch):
			stmt.init = self._visit_slot(stmt.init)
			if stmt.tag is not None:
				stmt.tag = self.visit_expr(stmt.tag)
			for clause in stmt.clauses:
				with self._scope(clause):
					if clause.exprs is not None:
						clause.exprs = [self.visit_expr(e) for e in clause.exprs]
					clause.body = self.rewrite_stmt_list(clause.body)
		elif isinstance(stmt, N.For):
			stmt.init = self._visit_slot(stmt.init)
			if stmt.cond is not None:
				stmt.cond = self.visit_expr(stmt.cond)
			stmt.post = self._visit_slot(stmt.post)
			self.rewrite_block(stmt.body)
		elif isinstance(stmt, N.Range):
			if stmt.key is not None:
				stmt.key = self.visit_expr(stmt.key)
			if stmt.value is not None:
				stmt.value = self.visit_expr(stmt.value)
			stmt.x = self.visit_expr(stmt.x)
			self.rewrite_block(stmt.body)

	def _visit_else(self, else_: N.Stmt) -> N.Stmt:
		result = self.visit_stmt(else_)
		if len(result) == 1 and isinstance(result[0], (N.Block, N.If)):
			return result[0]
		block = N.Block(stmts=result)
		block.node_id = self.info.new_id()
		return block

	def _visit_simple(self, stmt: N.Stmt) -> None:
		if isinstance(stmt, N.ExprStmt):
			stmt.x = self.visit_expr(stmt.x)
		elif isinstance(stmt, N.Assign):
			stmt.lhs = [self.visit_expr(e) for e in stmt.lhs]
			stmt.rhs = [self.visit_expr(e) for e in stmt.rhs]
		elif isinstance(stmt, N.IncDec):
			stmt.x = self.visit_expr(stmt.x)
		elif isinstance(stmt, N.VarDecl):
			stmt.values = [self.visit_expr(e) for e in stmt.values]
		elif isinstance(stmt, N.Return):
			stmt.results = [self.visit_expr(e) for e in stmt.results]
		elif isinstance(stmt, (N.Go, N.Defer)):
			call = self.visit_expr(stmt.call)
			assert isinstance(call, N.Call)
			stmt.call = call
		elif isinstance(stmt, N.Send):
			stmt.chan = self.visit_expr(stmt.chan)
			stmt.value = self.visit_expr(stmt.value)
		# Branch statements carry no children.

	# Expressions --------------------------------------------------------

	def visit_expr(self, expr: N.Expr) -> N.Expr:
		"""Rewrite the sub-expressions of `expr`, then `expr` itself."""
		if isinstance(expr, N.TypeExpr):
			return expr
		if isinstance(expr, N.Selector):
			expr.x = self.visit_expr(expr.x)
		elif isinstance(expr, N.Index):
			expr.x = self.visit_expr(expr.x)
			expr.index = self.visit_expr(expr.index)
		elif isinstance(expr, N.SliceExpr):
			expr.x = self.visit_expr(expr.x)
			if expr.low is not None:
				expr.low = self.visit_expr(expr.low)
			if expr.high is not None:
				expr.high = self.visit_expr(expr.high)
		elif isinstance(expr, (N.Star, N.Unary)):
			expr.x = self.visit_expr(expr.x)
		elif isinstance(expr, N.Binary):
			expr.x = self.visit_expr(expr.x)
			expr.y = self.visit_expr(expr.y)
		elif isinstance(expr, N.Call):
			expr.fun = self.visit_expr(expr.fun)
			expr.args = [self.visit_expr(a) for a in expr.args]
		elif isinstance(expr, N.TypeAssert):
			expr.x = self.visit_expr(expr.x)
		elif isinstance(expr, N.CompositeLit):
			expr.elts = [self.visit_expr(e) for e in expr.elts]
		elif isinstance(expr, N.KeyValue):
			# Struct literal keys are field names, not expressions.
			if not isinstance(expr.key, N.Ident):
				expr.key = self.visit_expr(expr.key)
			expr.value = self.visit_expr(expr.value)
		return self.rewrite_expr(expr)


__all__ = ["Rewriter"]
