# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reference type checker.

Produces the `TypeInfo` the normalization rules consume: a type for every
expression and type expression, a Symbol for every identifier, a Selection for
every selector and a Scope for every scope-opening node. It is deliberately
lenient about things the rules themselves report (a `var` whose name and value
counts disagree still gets its names declared, with unknown types), and strict
about everything a consumer of the tree would trip over (undefined names,
unknown fields, assignment count mismatches).

Untyped constants take the type the context expects, or their default type
(int, float64, rune, string, bool) when the context expects nothing.
Comma-ok forms (`v, ok := m[k]`, `x.(T)`, `<-ch`) are recorded with the tuple
type `(T, bool)` on the right-hand expression.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sugarfree.core.diagnostics import Diagnostic
from sugarfree.core.span import Span
from sugarfree.core.types_core import Category, TypeId, TypeKind, TypeTable
from sugarfree.symbols.scope import Scope, ScopeKind, Symbol, SymbolKind
from sugarfree.symbols.type_info import Selection, TypeInfo
from sugarfree.tree import nodes as N

from .universe import build_universe, package_members

logger = logging.getLogger(__name__)

_COMPARISON_OPS = {"==", "!=", "<", "<=", ">", ">="}
_LOGICAL_OPS = {"&&", "||"}
_SHIFT_OPS = {"<<", ">>"}


class CheckError(Exception):
	"""Source the reference checker rejects."""

	def __init__(self, message: str, *, node: Optional[N.Node] = None) -> None:
		self.message = message
		self.node = node
		self.span = node.span if node is not None else Span()
		super().__init__(f"{self.span.render()}: {message}")

	def to_diagnostic(self) -> Diagnostic:
		return Diagnostic(
			message=self.message,
			code="E-CHECK",
			phase="checker",
			span=self.span,
			node_id=self.node.node_id if self.node is not None else None,
		)


def check_file(file: N.File) -> TypeInfo:
	"""Type-check `file` and return the adapter describing it."""
	return Checker().check(file)


def _int_value(text: str) -> int:
	text = text.replace("_", "")
	if len(text) > 1 and text[0] == "0" and text[1].isdigit():
		return int(text, 8)
	return int(text, 0)


class Checker:
	def __init__(self) -> None:
		table = TypeTable()
		self.table = table
		self.info = TypeInfo(table=table, universe=build_universe(table))
		self._packages: Dict[str, Dict[str, TypeId]] = {}
		# Result types of the function whose body is being checked.
		self._results: List[TypeId] = []
		self._void = table.new_tuple([])

	# Declarations -------------------------------------------------------

	def check(self, file: N.File) -> TypeInfo:
		info = self.info
		info.reserve_ids(file)
		pkg = Scope(ScopeKind.PACKAGE, parent=info.universe)
		info.set_scope(file, pkg)
		for imp in file.imports:
			self._import(imp, pkg)

		type_decls = [d for d in file.decls if isinstance(d, N.TypeDecl)]
		func_decls = [d for d in file.decls if isinstance(d, N.FuncDecl)]
		# Named types first, so declarations may refer to each other.
		for decl in type_decls:
			self._define(pkg, decl.name, SymbolKind.TYPE, self.table.new_named(decl.name.name))
		for decl in type_decls:
			named = info.symbol_of(decl.name).type
			assert named is not None
			self.table.set_underlying(named, self.resolve_type(decl.type, pkg))
		for func in func_decls:
			self._declare_func(func, pkg)
		for decl in file.decls:
			if isinstance(decl, N.VarDecl):
				self._var_decl(decl, pkg)
		for func in func_decls:
			self._check_func(func, pkg)

		logger.debug(
			"checked package %s: %d typed nodes, %d scopes",
			file.package,
			len(info.types),
			len(info.scopes),
		)
		return info

	def _import(self, imp: N.Import, pkg: Scope) -> None:
		members = package_members(self.table, self.info.universe, imp.path)
		if members is None:
			raise CheckError(f"unknown package \"{imp.path}\"", node=imp)
		name = imp.path.rsplit("/", 1)[-1]
		if pkg.insert(Symbol(name=name, kind=SymbolKind.PKG)) is not None:
			raise CheckError(f"{name} redeclared in this block", node=imp)
		self._packages[name] = members

	def _define(self, scope: Scope, ident: N.Ident, kind: SymbolKind, ty: Optional[TypeId]) -> Optional[Symbol]:
		if ident.is_blank():
			if ty is not None:
				self.info.record_type(ident, ty)
			return None
		sym = Symbol(name=ident.name, kind=kind, type=ty)
		if scope.insert(sym) is not None:
			raise CheckError(f"{ident.name} redeclared in this block", node=ident)
		self.info.record_def(ident, sym)
		return sym

	def _declare_func(self, func: N.FuncDecl, pkg: Scope) -> None:
		sig = self.resolve_type(func.type, pkg)
		if func.recv is None:
			self._define(pkg, func.name, SymbolKind.FUNC, sig)
			return
		recv_ty = self.resolve_type(func.recv.type, pkg)
		pointer = self.table.get(recv_ty).kind is TypeKind.POINTER
		base = self.table.get(recv_ty).param_types[0] if pointer else recv_ty
		if self.table.get(base).kind is not TypeKind.NAMED:
			raise CheckError(f"invalid receiver type {self.table.type_string(recv_ty)}", node=func.recv)
		self.table.add_method(base, func.name.name, sig, pointer_receiver=pointer)
		# Methods live in their type's method set, not in any scope.
		self.info.record_def(func.name, Symbol(name=func.name.name, kind=SymbolKind.FUNC, type=sig))

	def _check_func(self, func: N.FuncDecl, pkg: Scope) -> None:
		scope = Scope(ScopeKind.FUNC, parent=pkg)
		# The body block shares the function scope with the parameters.
		self.info.set_scope(func.body, scope)
		fields: List[N.Field] = list(func.type.params) + list(func.type.results)
		if func.recv is not None:
			fields.insert(0, func.recv)
		for fld in fields:
			ty = self.info.type_of(fld.type)
			if fld.variadic:
				ty = self.table.new_slice(ty)
			for name in fld.names:
				self._define(scope, name, SymbolKind.VAR, ty)
		self._results = self.table.results(self.info.type_of(func.type))
		self._stmts(func.body.stmts, scope)

	# Types --------------------------------------------------------------

	def resolve_type(self, node: N.TypeExpr, scope: Scope) -> TypeId:
		table = self.table
		ty: TypeId
		if isinstance(node, N.TypeName):
			_, sym = scope.lookup(node.name)
			if sym is None or sym.kind is not SymbolKind.TYPE or sym.type is None:
				raise CheckError(f"undefined type: {node.name}", node=node)
			ty = sym.type
		elif isinstance(node, N.PointerType):
			ty = table.new_pointer(self.resolve_type(node.elem, scope))
		elif isinstance(node, N.ArrayType):
			elem = self.resolve_type(node.elem, scope)
			if node.length is None:
				ty = table.new_slice(elem)
			else:
				if not (isinstance(node.length, N.BasicLit) and node.length.kind == "INT"):
					raise CheckError("array length must be an integer literal", node=node.length)
				self.info.record_type(node.length, table.ensure_int())
				ty = table.new_array(elem, _int_value(node.length.value))
		elif isinstance(node, N.MapType):
			ty = table.new_map(self.resolve_type(node.key, scope), self.resolve_type(node.value, scope))
		elif isinstance(node, N.ChanType):
			ty = table.new_chan(self.resolve_type(node.elem, scope), node.dir)
		elif isinstance(node, N.FuncType):
			params = self._field_types(node.params, scope)
			results = self._field_types(node.results, scope)
			variadic = bool(node.params) and node.params[-1].variadic
			ty = table.new_func(params, results, variadic=variadic)
		elif isinstance(node, N.StructType):
			fields: List[Tuple[str, TypeId]] = []
			for fld in node.fields:
				fty = self.resolve_type(fld.type, scope)
				fields.extend((name.name, fty) for name in fld.names)
			ty = table.new_struct(fields)
		elif isinstance(node, N.InterfaceType):
			methods = []
			for m in node.methods:
				methods.append((m.names[0].name, self.resolve_type(m.type, scope)))
			ty = table.new_interface(methods)
		else:
			raise CheckError(f"not a type: {type(node).__name__}", node=node)
		self.info.record_type(node, ty)
		return ty

	def _field_types(self, fields: Sequence[N.Field], scope: Scope) -> List[TypeId]:
		types: List[TypeId] = []
		for fld in fields:
			ty = self.resolve_type(fld.type, scope)
			if fld.variadic:
				ty = self.table.new_slice(ty)
			types.extend([ty] * max(1, len(fld.names)))
		return types

	# Statements ---------------------------------------------------------

	def _stmts(self, stmts: Sequence[N.Stmt], scope: Scope) -> None:
		for stmt in stmts:
			self._stmt(stmt, scope)

	def _stmt(self, stmt: N.Stmt, scope: Scope) -> None:
		if isinstance(stmt, N.VarDecl):
			self._var_decl(stmt, scope)
		elif isinstance(stmt, N.Assign):
			self._assign(stmt, scope)
		elif isinstance(stmt, N.ExprStmt):
			self.expr(stmt.x, scope)
		elif isinstance(stmt, N.IncDec):
			self.expr(stmt.x, scope)
		elif isinstance(stmt, N.Return):
			self._return(stmt, scope)
		elif isinstance(stmt, N.Block):
			self._block(stmt, scope)
		elif isinstance(stmt, N.If):
			self._if(stmt, scope)
		elif isinstance(stmt, N.Switch):
			self._switch(stmt, scope)
		elif isinstance(stmt, N.For):
			self._for(stmt, scope)
		elif isinstance(stmt, N.Range):
			self._range(stmt, scope)
		elif isinstance(stmt, N.Labeled):
			self.info.labels.add(stmt.label)
			self._stmt(stmt.stmt, scope)
		elif isinstance(stmt, N.Branch):
			pass
		elif isinstance(stmt, (N.Go, N.Defer)):
			self.expr(stmt.call, scope)
		elif isinstance(stmt, N.Send):
			chan = self.expr(stmt.chan, scope)
			if self.table.kind(chan) is not TypeKind.CHAN:
				raise CheckError("send to non-channel", node=stmt)
			self.expr(stmt.value, scope, self.table.elem(chan))
		else:
			raise CheckError(f"unsupported statement {type(stmt).__name__}", node=stmt)

	def _block(self, block: N.Block, parent: Scope) -> None:
		scope = Scope(ScopeKind.BLOCK, parent=parent)
		self.info.set_scope(block, scope)
		self._stmts(block.stmts, scope)

	def _var_decl(self, decl: N.VarDecl, scope: Scope) -> None:
		declared = self.resolve_type(decl.type, scope) if decl.type is not None else None
		n = len(decl.names)
		if decl.values:
			types = self._rhs_types(decl.values, n, scope, [declared] * n, strict=False)
		else:
			types = [declared if declared is not None else self.table.ensure_unknown()] * n
		# Initializers are checked before the names come into scope.
		for name, ty in zip(decl.names, types):
			if declared is not None:
				ty = declared
			elif self.table.get(ty).kind is TypeKind.NIL:
				raise CheckError("use of untyped nil in variable declaration", node=name)
			self._define(scope, name, SymbolKind.VAR, ty)

	def _rhs_types(
		self,
		values: Sequence[N.Expr],
		n: int,
		scope: Scope,
		expected: Sequence[Optional[TypeId]],
		*,
		strict: bool,
	) -> List[TypeId]:
		"""Types for `n` targets fed by `values` (one tuple/comma-ok value or n values)."""
		table = self.table
		if len(values) == 1 and n > 1:
			value = values[0]
			ty = self.expr(value, scope)
			items = table.tuple_items(ty)
			if n == 2 and len(items) == 1 and self._is_comma_ok(value):
				ty = table.new_tuple([ty, table.ensure_bool()])
				self.info.record_type(value, ty)
				items = table.tuple_items(ty)
			if len(items) == n:
				return items
		elif len(values) == n:
			return [self.expr(v, scope, expected[i]) for i, v in enumerate(values)]
		else:
			for v in values:
				self.expr(v, scope)
		if strict:
			raise CheckError(
				f"assignment mismatch: {n} variable(s) but {len(values)} value(s)",
				node=values[0] if values else None,
			)
		return [table.ensure_unknown()] * n

	def _is_comma_ok(self, value: N.Expr) -> bool:
		if isinstance(value, N.TypeAssert):
			return True
		if isinstance(value, N.Unary) and value.op == "<-":
			return True
		if isinstance(value, N.Index):
			return self.table.kind(self.info.type_of(value.x)) is TypeKind.MAP
		return False

	def _assign(self, stmt: N.Assign, scope: Scope) -> None:
		table = self.table
		n = len(stmt.lhs)
		if stmt.tok == ":=":
			types = self._rhs_types(stmt.rhs, n, scope, [None] * n, strict=True)
			declared_any = False
			for target, ty in zip(stmt.lhs, types):
				if not isinstance(target, N.Ident):
					raise CheckError("non-name on left side of :=", node=target)
				if target.is_blank():
					self.info.record_type(target, ty)
					continue
				if table.get(ty).kind is TypeKind.NIL:
					raise CheckError("use of untyped nil in assignment", node=target)
				existing = scope.lookup_local(target.name)
				if existing is not None and existing.kind is SymbolKind.VAR:
					self.info.record_use(target, existing)
				else:
					self._define(scope, target, SymbolKind.VAR, ty)
					declared_any = True
			if not declared_any:
				raise CheckError("no new variables on left side of :=", node=stmt)
			return

		if stmt.tok != "=":
			# Operator assignment: single target, single value.
			target_ty = self.expr(stmt.lhs[0], scope)
			hint = None if stmt.tok in ("<<=", ">>=") else target_ty
			self.expr(stmt.rhs[0], scope, hint)
			return

		target_types: List[Optional[TypeId]] = []
		for target in stmt.lhs:
			if isinstance(target, N.Ident) and target.is_blank():
				target_types.append(None)
			else:
				target_types.append(self.expr(target, scope))
		types = self._rhs_types(stmt.rhs, n, scope, target_types, strict=True)
		for target, ty in zip(stmt.lhs, types):
			if isinstance(target, N.Ident) and target.is_blank():
				self.info.record_type(target, ty)

	def _return(self, stmt: N.Return, scope: Scope) -> None:
		results = stmt.results
		if len(results) == 1 and len(self._results) > 1:
			self.expr(results[0], scope)
			return
		for i, res in enumerate(results):
			expected = self._results[i] if i < len(self._results) else None
			self.expr(res, scope, expected)

	def _if(self, stmt: N.If, parent: Scope) -> None:
		scope = Scope(ScopeKind.IF, parent=parent)
		self.info.set_scope(stmt, scope)
		if stmt.init is not None:
			self._stmt(stmt.init, scope)
		self.expr(stmt.cond, scope, self.table.ensure_bool())
		self._block(stmt.body, scope)
		if isinstance(stmt.else_, N.If):
			self._if(stmt.else_, scope)
		elif stmt.else_ is not None:
			self._block(stmt.else_, scope)

	def _switch(self, stmt: N.Switch, parent: Scope) -> None:
		scope = Scope(ScopeKind.SWITCH, parent=parent)
		self.info.set_scope(stmt, scope)
		if stmt.init is not None:
			self._stmt(stmt.init, scope)
		tag_ty = self.expr(stmt.tag, scope) if stmt.tag is not None else self.table.ensure_bool()
		for clause in stmt.clauses:
			clause_scope = Scope(ScopeKind.CASE, parent=scope)
			self.info.set_scope(clause, clause_scope)
			for e in clause.exprs or []:
				self.expr(e, scope, tag_ty)
			self._stmts(clause.body, clause_scope)

	def _for(self, stmt: N.For, parent: Scope) -> None:
		scope = Scope(ScopeKind.FOR, parent=parent)
		self.info.set_scope(stmt, scope)
		if stmt.init is not None:
			self._stmt(stmt.init, scope)
		if stmt.cond is not None:
			self.expr(stmt.cond, scope, self.table.ensure_bool())
		if stmt.post is not None:
			self._stmt(stmt.post, scope)
		self._block(stmt.body, scope)

	def _range(self, stmt: N.Range, parent: Scope) -> None:
		table = self.table
		x_ty = self.expr(stmt.x, parent)
		kind = table.kind(x_ty)
		key_ty: TypeId
		value_ty: Optional[TypeId] = None
		if kind in (TypeKind.SLICE, TypeKind.ARRAY):
			key_ty, value_ty = table.ensure_int(), table.elem(x_ty)
		elif table.is_pointer_to_array(x_ty):
			key_ty, value_ty = table.ensure_int(), table.elem(table.elem(x_ty))
		elif kind is TypeKind.MAP:
			key_ty, value_ty = table.get(table.underlying(x_ty)).param_types
		elif kind is TypeKind.CHAN:
			key_ty = table.elem(x_ty)
		elif table.category(x_ty) is Category.STRING:
			key_ty, value_ty = table.ensure_int(), table.basic("int32")
		elif table.category(x_ty) is Category.NUMERIC:
			key_ty = x_ty
		else:
			raise CheckError(f"cannot range over {table.type_string(x_ty)}", node=stmt.x)
		if stmt.value is not None and value_ty is None:
			raise CheckError("range permits only one iteration variable here", node=stmt.value)

		scope = Scope(ScopeKind.RANGE, parent=parent)
		self.info.set_scope(stmt, scope)
		for target, ty in ((stmt.key, key_ty), (stmt.value, value_ty)):
			if target is None or ty is None:
				continue
			if isinstance(target, N.Ident) and target.is_blank():
				self.info.record_type(target, ty)
			elif stmt.tok == ":=":
				if not isinstance(target, N.Ident):
					raise CheckError("non-name on left side of :=", node=target)
				self._define(scope, target, SymbolKind.VAR, ty)
			else:
				self.expr(target, scope)
		self._block(stmt.body, scope)

	# Expressions --------------------------------------------------------

	def expr(self, expr: N.Expr, scope: Scope, expected: Optional[TypeId] = None) -> TypeId:
		"""Check `expr`, record its type and return it."""
		ty = self._expr(expr, scope, expected)
		self.info.record_type(expr, ty)
		return ty

	def _expr(self, expr: N.Expr, scope: Scope, expected: Optional[TypeId]) -> TypeId:
		table = self.table
		if isinstance(expr, N.Ident):
			return self._ident(expr, scope, expected)
		if isinstance(expr, N.BasicLit):
			return self._literal(expr, expected)
		if isinstance(expr, N.CompositeLit):
			return self._composite(expr, scope, expected)
		if isinstance(expr, N.Selector):
			return self._selector(expr, scope)
		if isinstance(expr, N.Index):
			return self._index(expr, scope)
		if isinstance(expr, N.SliceExpr):
			x_ty = self.expr(expr.x, scope)
			for bound in (expr.low, expr.high):
				if bound is not None:
					self.expr(bound, scope, table.ensure_int())
			kind = table.kind(x_ty)
			if kind is TypeKind.SLICE or table.category(x_ty) is Category.STRING:
				return x_ty
			if kind is TypeKind.ARRAY:
				return table.new_slice(table.elem(x_ty))
			if table.is_pointer_to_array(x_ty):
				return table.new_slice(table.elem(table.elem(x_ty)))
			raise CheckError(f"cannot slice {table.type_string(x_ty)}", node=expr)
		if isinstance(expr, N.Star):
			x_ty = self.expr(expr.x, scope)
			if not table.is_pointer(x_ty):
				raise CheckError(f"invalid indirect of {table.type_string(x_ty)}", node=expr)
			return table.elem(x_ty)
		if isinstance(expr, N.Unary):
			return self._unary(expr, scope, expected)
		if isinstance(expr, N.Binary):
			return self._binary(expr, scope, expected)
		if isinstance(expr, N.Call):
			return self._call(expr, scope, expected)
		if isinstance(expr, N.TypeAssert):
			x_ty = self.expr(expr.x, scope)
			if table.kind(x_ty) is not TypeKind.INTERFACE:
				raise CheckError(f"{table.type_string(x_ty)} is not an interface", node=expr.x)
			return self.resolve_type(expr.type, scope)
		if isinstance(expr, N.TypeExpr):
			raise CheckError("type is not an expression", node=expr)
		raise CheckError(f"unsupported expression {type(expr).__name__}", node=expr)

	def _ident(self, ident: N.Ident, scope: Scope, expected: Optional[TypeId]) -> TypeId:
		if ident.is_blank():
			raise CheckError("cannot use _ as value", node=ident)
		_, sym = scope.lookup(ident.name)
		if sym is None:
			raise CheckError(f"undefined: {ident.name}", node=ident)
		if sym.kind is SymbolKind.PKG:
			raise CheckError(f"use of package {ident.name} without selector", node=ident)
		if sym.kind is SymbolKind.BUILTIN:
			raise CheckError(f"{ident.name} must be called", node=ident)
		if sym.kind is SymbolKind.TYPE:
			raise CheckError(f"{ident.name} is a type, not an expression", node=ident)
		self.info.record_use(ident, sym)
		assert sym.type is not None
		if sym.kind is SymbolKind.NIL and expected is not None:
			return expected
		return sym.type

	def _literal(self, lit: N.BasicLit, expected: Optional[TypeId]) -> TypeId:
		table = self.table
		want = table.category(expected) if expected is not None else None
		if lit.kind == "STRING":
			return expected if want is Category.STRING else table.ensure_string()
		if want is Category.NUMERIC:
			assert expected is not None
			return expected
		if lit.kind == "INT":
			return table.ensure_int()
		if lit.kind == "FLOAT":
			return table.ensure_basic("float64", Category.NUMERIC)
		return table.basic("int32")

	def _is_untyped(self, expr: N.Expr, scope: Scope) -> bool:
		if isinstance(expr, N.BasicLit):
			return True
		if isinstance(expr, N.Ident):
			_, sym = scope.lookup(expr.name)
			return sym is not None and sym.kind in (SymbolKind.CONST, SymbolKind.NIL)
		if isinstance(expr, N.Unary) and expr.op in ("-", "+", "^", "!"):
			return self._is_untyped(expr.x, scope)
		if isinstance(expr, N.Binary) and expr.op not in _COMPARISON_OPS:
			return self._is_untyped(expr.x, scope) and self._is_untyped(expr.y, scope)
		return False

	def _unary(self, expr: N.Unary, scope: Scope, expected: Optional[TypeId]) -> TypeId:
		table = self.table
		if expr.op == "&":
			hint = None
			if expected is not None and table.is_pointer(expected):
				hint = table.elem(expected)
			return table.new_pointer(self.expr(expr.x, scope, hint))
		if expr.op == "<-":
			x_ty = self.expr(expr.x, scope)
			if table.kind(x_ty) is not TypeKind.CHAN:
				raise CheckError("receive from non-channel", node=expr)
			return table.elem(x_ty)
		if expr.op == "!":
			return self.expr(expr.x, scope, table.ensure_bool())
		return self.expr(expr.x, scope, expected)

	def _binary(self, expr: N.Binary, scope: Scope, expected: Optional[TypeId]) -> TypeId:
		table = self.table
		if expr.op in _SHIFT_OPS:
			x_ty = self.expr(expr.x, scope, expected)
			self.expr(expr.y, scope)
			return x_ty
		if expr.op in _LOGICAL_OPS:
			x_ty = self.expr(expr.x, scope, table.ensure_bool())
			self.expr(expr.y, scope, x_ty)
			return x_ty
		hint = None if expr.op in _COMPARISON_OPS else expected
		x_untyped = self._is_untyped(expr.x, scope)
		y_untyped = self._is_untyped(expr.y, scope)
		if x_untyped and not y_untyped:
			y_ty = self.expr(expr.y, scope, hint)
			x_ty = self.expr(expr.x, scope, y_ty)
		else:
			x_ty = self.expr(expr.x, scope, hint)
			y_ty = self.expr(expr.y, scope, x_ty)
		if expr.op in _COMPARISON_OPS:
			return table.ensure_bool()
		return x_ty

	def _composite(self, lit: N.CompositeLit, scope: Scope, expected: Optional[TypeId]) -> TypeId:
		table = self.table
		if lit.type is not None:
			ty = self.resolve_type(lit.type, scope)
		elif expected is not None:
			ty = expected
		else:
			raise CheckError("missing type in composite literal", node=lit)
		under = table.get(table.underlying(ty))
		if under.kind is TypeKind.STRUCT:
			keyed = [e for e in lit.elts if isinstance(e, N.KeyValue)]
			if keyed and len(keyed) != len(lit.elts):
				raise CheckError("mixture of field:value and value elements in struct literal", node=lit)
			if keyed:
				for kv in keyed:
					if not isinstance(kv.key, N.Ident):
						raise CheckError("invalid field name in struct literal", node=kv.key)
					fty = table.field_type(ty, kv.key.name)
					if fty is None:
						raise CheckError(f"unknown field {kv.key.name} in struct literal", node=kv.key)
					self.info.record_type(kv, self.expr(kv.value, scope, fty))
			else:
				if lit.elts and len(lit.elts) != len(under.fields):
					raise CheckError("too few values in struct literal", node=lit)
				for elt, (_, fty) in zip(lit.elts, under.fields):
					self.expr(elt, scope, fty)
		elif under.kind in (TypeKind.SLICE, TypeKind.ARRAY):
			elem = under.param_types[0]
			for elt in lit.elts:
				if isinstance(elt, N.KeyValue):
					self.expr(elt.key, scope, table.ensure_int())
					self.info.record_type(elt, self.expr(elt.value, scope, elem))
				else:
					self.expr(elt, scope, elem)
		elif under.kind is TypeKind.MAP:
			key_ty, value_ty = under.param_types
			for elt in lit.elts:
				if not isinstance(elt, N.KeyValue):
					raise CheckError("missing key in map literal", node=elt)
				self.expr(elt.key, scope, key_ty)
				self.info.record_type(elt, self.expr(elt.value, scope, value_ty))
		else:
			raise CheckError(f"invalid composite literal type {table.type_string(ty)}", node=lit)
		return ty

	def _selector(self, sel: N.Selector, scope: Scope) -> TypeId:
		table = self.table
		if isinstance(sel.x, N.Ident) and not sel.x.is_blank():
			_, sym = scope.lookup(sel.x.name)
			if sym is not None and sym.kind is SymbolKind.PKG:
				member = self._packages[sym.name].get(sel.sel)
				if member is None:
					raise CheckError(f"undefined: {sel.x.name}.{sel.sel}", node=sel)
				self.info.record_use(sel.x, sym)
				self.info.selections[sel.node_id] = Selection(kind="qualified")
				return member
		x_ty = self.expr(sel.x, scope)
		base, indirect = x_ty, False
		if table.is_pointer(x_ty):
			base, indirect = table.elem(x_ty), True
		field_ty = table.field_type(base, sel.sel)
		if field_ty is not None:
			self.info.selections[sel.node_id] = Selection(kind="field", indirect=indirect)
			return field_ty
		method = table.method(base, sel.sel)
		if method is None:
			raise CheckError(f"{table.type_string(x_ty)}.{sel.sel} undefined", node=sel)
		self.info.selections[sel.node_id] = Selection(kind="method")
		return method.signature

	def _index(self, expr: N.Index, scope: Scope) -> TypeId:
		table = self.table
		x_ty = self.expr(expr.x, scope)
		kind = table.kind(x_ty)
		if kind is TypeKind.MAP:
			key_ty, value_ty = table.get(table.underlying(x_ty)).param_types
			self.expr(expr.index, scope, key_ty)
			return value_ty
		self.expr(expr.index, scope, table.ensure_int())
		if kind in (TypeKind.SLICE, TypeKind.ARRAY):
			return table.elem(x_ty)
		if table.is_pointer_to_array(x_ty):
			return table.elem(table.elem(x_ty))
		if table.category(x_ty) is Category.STRING:
			return table.basic("uint8")
		raise CheckError(f"cannot index {table.type_string(x_ty)}", node=expr)

	# Calls --------------------------------------------------------------

	def _type_operand(self, node: N.Expr, scope: Scope) -> Optional[TypeId]:
		"""The type named by `node` when it denotes a type, else None."""
		if isinstance(node, N.TypeExpr):
			return self.resolve_type(node, scope)
		if isinstance(node, N.Ident):
			_, sym = scope.lookup(node.name)
			if sym is not None and sym.kind is SymbolKind.TYPE:
				assert sym.type is not None
				self.info.record_use(node, sym)
				return sym.type
		return None

	def _result_type(self, results: List[TypeId]) -> TypeId:
		if len(results) == 1:
			return results[0]
		return self.table.new_tuple(results)

	def _call(self, call: N.Call, scope: Scope, expected: Optional[TypeId]) -> TypeId:
		table = self.table
		fun = call.fun
		conv = self._type_operand(fun, scope)
		if conv is not None:
			if len(call.args) != 1:
				raise CheckError("conversion takes exactly one argument", node=call)
			self.expr(call.args[0], scope, conv)
			return conv
		if isinstance(fun, N.Ident):
			_, sym = scope.lookup(fun.name)
			if sym is not None and sym.kind is SymbolKind.BUILTIN:
				self.info.record_use(fun, sym)
				return self._builtin(fun.name, call, scope, expected)

		fun_ty = self.expr(fun, scope)
		under = table.get(table.underlying(fun_ty))
		if under.kind is not TypeKind.FUNC:
			raise CheckError(f"cannot call non-function of type {table.type_string(fun_ty)}", node=call)
		params = under.param_types
		args = call.args
		if len(args) == 1 and len(params) > 1:
			arg_ty = self.expr(args[0], scope)
			if table.arity(arg_ty) != len(params):
				raise CheckError("not enough arguments in call", node=call)
			return self._result_type(under.result_types)
		for i, arg in enumerate(args):
			if under.variadic and i >= len(params) - 1:
				last = params[-1]
				want: Optional[TypeId] = last if call.ellipsis else table.elem(last)
			elif i < len(params):
				want = params[i]
			else:
				raise CheckError("too many arguments in call", node=arg)
			self.expr(arg, scope, want)
		required = len(params) - 1 if under.variadic else len(params)
		if len(args) < required:
			raise CheckError("not enough arguments in call", node=call)
		return self._result_type(under.result_types)

	def _builtin(self, name: str, call: N.Call, scope: Scope, expected: Optional[TypeId]) -> TypeId:
		table = self.table
		args = call.args
		if name in ("len", "cap"):
			self._expect_args(call, 1)
			self.expr(args[0], scope)
			return table.ensure_int()
		if name == "append":
			if not args:
				raise CheckError("not enough arguments for append", node=call)
			slice_ty = self.expr(args[0], scope, expected)
			if table.kind(slice_ty) is not TypeKind.SLICE:
				raise CheckError("first argument to append must be a slice", node=args[0])
			for arg in args[1:]:
				self.expr(arg, scope, slice_ty if call.ellipsis else table.elem(slice_ty))
			return slice_ty
		if name in ("make", "new"):
			if not args:
				raise CheckError(f"not enough arguments for {name}", node=call)
			ty = self._type_operand(args[0], scope)
			if ty is None:
				raise CheckError(f"{name} expects a type as first argument", node=args[0])
			self.info.record_type(args[0], ty)
			for arg in args[1:]:
				self.expr(arg, scope, table.ensure_int())
			return ty if name == "make" else table.new_pointer(ty)
		if name == "copy":
			self._expect_args(call, 2)
			for arg in args:
				self.expr(arg, scope)
			return table.ensure_int()
		if name == "delete":
			self._expect_args(call, 2)
			map_ty = self.expr(args[0], scope)
			if table.kind(map_ty) is not TypeKind.MAP:
				raise CheckError("first argument to delete must be a map", node=args[0])
			self.expr(args[1], scope, table.get(table.underlying(map_ty)).param_types[0])
			return self._void
		# close, panic, print, println
		for arg in args:
			self.expr(arg, scope)
		return self._void

	def _expect_args(self, call: N.Call, count: int) -> None:
		if len(call.args) != count:
			raise CheckError(f"expected {count} argument(s), got {len(call.args)}", node=call)


__all__ = ["CheckError", "Checker", "check_file"]
