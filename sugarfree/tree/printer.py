# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Debug printer: render a tree back into surface syntax.

The output is meant for humans and for tests; it is accepted by the parser, so
a printed program can be fed through the pipeline again. Comments and the
original layout are not reproduced.
"""

from __future__ import annotations

from typing import List

from sugarfree.tree import nodes as N

_BINARY_PREC = {
	"||": 1,
	"&&": 2,
	"==": 3, "!=": 3, "<": 3, "<=": 3, ">": 3, ">=": 3,
	"+": 4, "-": 4, "|": 4, "^": 4,
	"*": 5, "/": 5, "%": 5, "<<": 5, ">>": 5, "&": 5, "&^": 5,
}
_UNARY_PREC = 6


def _prec(expr: N.Expr) -> int:
	if isinstance(expr, N.Binary):
		return _BINARY_PREC[expr.op]
	if isinstance(expr, (N.Unary, N.Star)):
		return _UNARY_PREC
	return 7


def format_type(ty: N.TypeExpr) -> str:
	if isinstance(ty, N.TypeName):
		return ty.name
	if isinstance(ty, N.PointerType):
		return "*" + format_type(ty.elem)
	if isinstance(ty, N.ArrayType):
		length = "" if ty.length is None else format_expr(ty.length)
		return f"[{length}]" + format_type(ty.elem)
	if isinstance(ty, N.MapType):
		return f"map[{format_type(ty.key)}]{format_type(ty.value)}"
	if isinstance(ty, N.ChanType):
		prefix = {"both": "chan ", "send": "chan<- ", "recv": "<-chan "}[ty.dir]
		return prefix + format_type(ty.elem)
	if isinstance(ty, N.FuncType):
		return "func" + _format_signature(ty)
	if isinstance(ty, N.StructType):
		return "struct{" + "; ".join(_format_field(f) for f in ty.fields) + "}"
	if isinstance(ty, N.InterfaceType):
		methods = []
		for m in ty.methods:
			assert isinstance(m.type, N.FuncType)
			methods.append(m.names[0].name + _format_signature(m.type))
		return "interface{" + "; ".join(methods) + "}"
	return f"<invalid type {type(ty).__name__}>"


def _format_field(fld: N.Field) -> str:
	ty = format_type(fld.type)
	if fld.variadic:
		ty = "..." + ty
	if fld.names:
		return ", ".join(n.name for n in fld.names) + " " + ty
	return ty


def _format_signature(ft: N.FuncType) -> str:
	text = "(" + ", ".join(_format_field(p) for p in ft.params) + ")"
	if len(ft.results) == 1 and not ft.results[0].names:
		text += " " + _format_field(ft.results[0])
	elif ft.results:
		text += " (" + ", ".join(_format_field(r) for r in ft.results) + ")"
	return text


def _operand(expr: N.Expr, min_prec: int, header: bool = False) -> str:
	text = format_expr(expr, header)
	if _prec(expr) < min_prec:
		return f"({text})"
	return text


def format_expr(expr: N.Expr, header: bool = False) -> str:
	"""
	Render `expr`. In a statement header (`header=True`) every composite
	literal is parenthesized; its brace would otherwise open the body.
	"""
	if isinstance(expr, N.TypeExpr):
		text = format_type(expr)
		# `*T` and `func()` would not read back as types in operand position.
		if isinstance(expr, (N.PointerType, N.FuncType)):
			return f"({text})"
		return text
	if isinstance(expr, N.Ident):
		return expr.name
	if isinstance(expr, N.BasicLit):
		return expr.value
	if isinstance(expr, N.CompositeLit):
		elts = ", ".join(format_expr(e) for e in expr.elts)
		ty = "" if expr.type is None else format_type(expr.type)
		text = f"{ty}{{{elts}}}"
		return f"({text})" if header else text
	if isinstance(expr, N.KeyValue):
		return f"{format_expr(expr.key, header)}: {format_expr(expr.value, header)}"
	if isinstance(expr, N.Selector):
		return f"{_operand(expr.x, 7, header)}.{expr.sel}"
	if isinstance(expr, N.Index):
		return f"{_operand(expr.x, 7, header)}[{format_expr(expr.index, header)}]"
	if isinstance(expr, N.SliceExpr):
		low = "" if expr.low is None else format_expr(expr.low, header)
		high = "" if expr.high is None else format_expr(expr.high, header)
		return f"{_operand(expr.x, 7, header)}[{low}:{high}]"
	if isinstance(expr, N.Star):
		return "*" + _operand(expr.x, _UNARY_PREC, header)
	if isinstance(expr, N.Unary):
		inner = _operand(expr.x, _UNARY_PREC, header)
		# `- -x` and `<-<-c` must not fuse into another token.
		if inner.startswith(expr.op[-1]) or (expr.op == "&" and inner.startswith("&")):
			return f"{expr.op}({format_expr(expr.x, header)})"
		return expr.op + inner
	if isinstance(expr, N.Binary):
		prec = _BINARY_PREC[expr.op]
		# Binary operators are left-associative.
		return f"{_operand(expr.x, prec, header)} {expr.op} {_operand(expr.y, prec + 1, header)}"
	if isinstance(expr, N.Call):
		args = ", ".join(format_expr(a, header) for a in expr.args)
		if expr.ellipsis:
			args += "..."
		fun = _operand(expr.fun, 7, header)
		if isinstance(expr.fun, N.ChanType):
			# Conversion: `chan T(x)` would convert x to T.
			fun = f"({fun})"
		return f"{fun}({args})"
	if isinstance(expr, N.TypeAssert):
		return f"{_operand(expr.x, 7, header)}.({format_type(expr.type)})"
	return f"<invalid expr {type(expr).__name__}>"


def format_simple(stmt: N.Stmt, header: bool = False) -> str:
	"""Render a statement that fits on one line (no nested blocks)."""
	if isinstance(stmt, N.ExprStmt):
		return format_expr(stmt.x, header)
	if isinstance(stmt, N.Assign):
		lhs = ", ".join(format_expr(e, header) for e in stmt.lhs)
		rhs = ", ".join(format_expr(e, header) for e in stmt.rhs)
		return f"{lhs} {stmt.tok} {rhs}"
	if isinstance(stmt, N.IncDec):
		return format_expr(stmt.x, header) + stmt.tok
	if isinstance(stmt, N.VarDecl):
		text = "var " + ", ".join(n.name for n in stmt.names)
		if stmt.type is not None:
			text += " " + format_type(stmt.type)
		if stmt.values:
			text += " = " + ", ".join(format_expr(v) for v in stmt.values)
		return text
	if isinstance(stmt, N.Return):
		if not stmt.results:
			return "return"
		return "return " + ", ".join(format_expr(e) for e in stmt.results)
	if isinstance(stmt, N.Branch):
		return stmt.tok if stmt.label is None else f"{stmt.tok} {stmt.label}"
	if isinstance(stmt, N.Go):
		return "go " + format_expr(stmt.call)
	if isinstance(stmt, N.Defer):
		return "defer " + format_expr(stmt.call)
	if isinstance(stmt, N.Send):
		return f"{format_expr(stmt.chan)} <- {format_expr(stmt.value)}"
	return f"<invalid stmt {type(stmt).__name__}>"


class _Printer:
	def __init__(self) -> None:
		self.lines: List[str] = []

	def emit(self, depth: int, text: str) -> None:
		self.lines.append("\t" * depth + text)

	def block_body(self, stmts: List[N.Stmt], depth: int) -> None:
		for stmt in stmts:
			self.stmt(stmt, depth)

	def stmt(self, stmt: N.Stmt, depth: int) -> None:
		if isinstance(stmt, N.Labeled):
			self.emit(depth, f"{stmt.label}:")
			self.stmt(stmt.stmt, depth)
		elif isinstance(stmt, N.Block):
			self.emit(depth, "{")
			self.block_body(stmt.stmts, depth + 1)
			self.emit(depth, "}")
		elif isinstance(stmt, N.If):
			self.if_chain(stmt, depth, "")
		elif isinstance(stmt, N.Switch):
			head = "switch "
			if stmt.init is not None:
				head += format_simple(stmt.init, header=True) + "; "
			if stmt.tag is not None:
				head += format_expr(stmt.tag, header=True) + " "
			self.emit(depth, head + "{")
			for clause in stmt.clauses:
				if clause.exprs is None:
					self.emit(depth, "default:")
				else:
					self.emit(depth, "case " + ", ".join(format_expr(e) for e in clause.exprs) + ":")
				self.block_body(clause.body, depth + 1)
			self.emit(depth, "}")
		elif isinstance(stmt, N.For):
			if stmt.init is None and stmt.post is None:
				head = "for "
				if stmt.cond is not None:
					head += format_expr(stmt.cond, header=True) + " "
			else:
				init = "" if stmt.init is None else format_simple(stmt.init, header=True)
				cond = "" if stmt.cond is None else format_expr(stmt.cond, header=True)
				post = "" if stmt.post is None else format_simple(stmt.post, header=True)
				head = f"for {init}; {cond}; {post} "
			self.emit(depth, head + "{")
			self.block_body(stmt.body.stmts, depth + 1)
			self.emit(depth, "}")
		elif isinstance(stmt, N.Range):
			head = "for "
			if stmt.key is not None:
				head += format_expr(stmt.key)
				if stmt.value is not None:
					head += ", " + format_expr(stmt.value)
				head += f" {stmt.tok} "
			head += "range " + format_expr(stmt.x, header=True) + " {"
			self.emit(depth, head)
			self.block_body(stmt.body.stmts, depth + 1)
			self.emit(depth, "}")
		else:
			self.emit(depth, format_simple(stmt))

	def if_chain(self, stmt: N.If, depth: int, prefix: str) -> None:
		head = prefix + "if "
		if stmt.init is not None:
			head += format_simple(stmt.init, header=True) + "; "
		self.emit(depth, head + format_expr(stmt.cond, header=True) + " {")
		self.block_body(stmt.body.stmts, depth + 1)
		if stmt.else_ is None:
			self.emit(depth, "}")
		elif isinstance(stmt.else_, N.If):
			# Continue the chain on the closing-brace line.
			self.if_chain(stmt.else_, depth, "} else ")
		else:
			self.emit(depth, "} else {")
			self.block_body(stmt.else_.stmts, depth + 1)
			self.emit(depth, "}")

	def decl(self, decl: N.Node) -> None:
		if isinstance(decl, N.TypeDecl):
			self.emit(0, f"type {decl.name.name} {format_type(decl.type)}")
		elif isinstance(decl, N.VarDecl):
			self.emit(0, format_simple(decl))
		elif isinstance(decl, N.FuncDecl):
			head = "func "
			if decl.recv is not None:
				head += f"({_format_field(decl.recv)}) "
			head += decl.name.name + _format_signature(decl.type)
			self.emit(0, head + " {")
			self.block_body(decl.body.stmts, 1)
			self.emit(0, "}")


def format_stmt(stmt: N.Stmt) -> str:
	printer = _Printer()
	printer.stmt(stmt, 0)
	return "\n".join(printer.lines)


def format_file(file: N.File) -> str:
	printer = _Printer()
	printer.emit(0, f"package {file.package}")
	if file.imports:
		printer.emit(0, "")
		for imp in file.imports:
			printer.emit(0, f"import \"{imp.path}\"")
	for decl in file.decls:
		printer.emit(0, "")
		printer.decl(decl)
	return "\n".join(printer.lines) + "\n"


__all__ = ["format_expr", "format_type", "format_simple", "format_stmt", "format_file"]
