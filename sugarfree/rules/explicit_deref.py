# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
explicit-deref: spell out the dereferences the source language inserts.

	p[i]    => (*p)[i]      p is a pointer to an array
	p[a:b]  => (*p)[a:b]
	p.f     => (*p).f       f is a field reached through the pointer

Method selections are left alone: the receiver adjustment for methods is not
a dereference of the operand.
"""

from __future__ import annotations

from typing import Optional

from sugarfree.core.types_core import TypeId
from sugarfree.tree import nodes as N

from .base import Rule


class ExplicitDeref(Rule):
	name = "explicit-deref"

	def normalize_expr(self, expr: N.Expr) -> Optional[N.Expr]:
		table = self.info.table
		if isinstance(expr, (N.Index, N.SliceExpr)):
			x_ty = self.info.type_of(expr.x)
			if not table.is_pointer_to_array(x_ty):
				return None
			expr.x = self._deref(expr.x, x_ty)
			return expr
		if isinstance(expr, N.Selector):
			selection = self.info.selection_of(expr)
			if selection.kind != "field" or not selection.indirect:
				return None
			expr.x = self._deref(expr.x, self.info.type_of(expr.x))
			selection.indirect = False
			return expr
		return None

	def _deref(self, x: N.Expr, x_ty: TypeId) -> N.Star:
		star = self.new(N.Star(x=x))
		self.info.record_type(star, self.info.table.elem(x_ty))
		return star


__all__ = ["ExplicitDeref"]
