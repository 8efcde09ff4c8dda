# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax tree consumed and produced by the normalization engine.

Pipeline placement:
  source → parser (front end) → checker (TypeInfo) → rules (in place) → consumer

The tree mirrors the surface language closely: every shorthand the rules
eliminate (`:=`, control-statement initializers, three-clause loops, tag-less
switches, implicit dereference) is representable here so the rules can find
and remove it.

Guiding rules:
- Nodes are purely syntactic; types and bindings live in the adapter
  (`sugarfree.symbols.TypeInfo`), keyed by `node_id`.
- Each node owns its children. A node is replaced by assigning into its
  parent's slot, never by sharing it between two parents; use
  `sugarfree.tree.clone.clone_node` when a subtree must appear twice.
- `node_id` and `span` are plain attributes, not dataclass fields, so
  structural equality (`==`) ignores them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from sugarfree.core.span import Span

# Stable identifiers for nodes (used by the adapter's side tables).
NodeId = int


# Base node kinds

class Node:
	"""Base class for all tree nodes."""
	node_id: NodeId = 0
	span: Span = Span()


class Expr(Node):
	"""Base class for all expressions."""
	pass


class TypeExpr(Expr):
	"""Base class for type expressions (types may appear in operand position)."""
	pass


class Stmt(Node):
	"""Base class for all statements."""
	pass


class Decl(Node):
	"""Base class for top-level declarations."""
	pass


# Expressions

@dataclass(eq=True)
class Ident(Expr):
	"""Identifier reference or definition (the adapter tells which)."""
	name: str

	def is_blank(self) -> bool:
		return self.name == "_"


@dataclass
class BasicLit(Expr):
	"""Literal as spelled in source; `kind` is INT, FLOAT, STRING or CHAR."""
	kind: str
	value: str


@dataclass
class KeyValue(Expr):
	"""`key: value` element of a composite literal."""
	key: Expr
	value: Expr


@dataclass
class CompositeLit(Expr):
	"""`T{elts}`; `type` is None for elided element literals (`{1, 2}` inside `[][]int{...}`)."""
	type: Optional[TypeExpr]
	elts: List[Expr] = field(default_factory=list)


@dataclass
class Selector(Expr):
	"""Field access, method value or package member: x.sel"""
	x: Expr
	sel: str


@dataclass
class Index(Expr):
	"""Indexing: x[index]"""
	x: Expr
	index: Expr


@dataclass
class SliceExpr(Expr):
	"""Slicing: x[low:high]"""
	x: Expr
	low: Optional[Expr] = None
	high: Optional[Expr] = None


@dataclass
class Star(Expr):
	"""Explicit pointer dereference: *x"""
	x: Expr


@dataclass
class Unary(Expr):
	"""Unary operation: `-`, `+`, `!`, `^`, `&` (address-of) or `<-` (receive)."""
	op: str
	x: Expr


@dataclass
class Binary(Expr):
	"""Binary operation with Go precedence; `&&`/`||` keep short-circuit semantics."""
	op: str
	x: Expr
	y: Expr


@dataclass
class Call(Expr):
	"""Call, conversion or builtin invocation: fun(args...)"""
	fun: Expr
	args: List[Expr] = field(default_factory=list)
	ellipsis: bool = False  # f(xs...)


@dataclass
class TypeAssert(Expr):
	"""Type assertion: x.(T)"""
	x: Expr
	type: TypeExpr


# Type expressions

@dataclass
class TypeName(TypeExpr):
	"""Named or predeclared type: int, error, Point."""
	name: str


@dataclass
class PointerType(TypeExpr):
	elem: TypeExpr


@dataclass
class ArrayType(TypeExpr):
	"""`[len]elem`, or a slice type `[]elem` when `length` is None."""
	length: Optional[Expr]
	elem: TypeExpr


@dataclass
class MapType(TypeExpr):
	key: TypeExpr
	value: TypeExpr


@dataclass
class ChanType(TypeExpr):
	"""Channel type; `dir` is "both", "send" (chan<- T) or "recv" (<-chan T)."""
	dir: str
	elem: TypeExpr


@dataclass
class Field(Node):
	"""Parameter, result, struct field or interface method (names may be empty)."""
	names: List[Ident]
	type: TypeExpr
	variadic: bool = False


@dataclass
class FuncType(TypeExpr):
	params: List[Field] = field(default_factory=list)
	results: List[Field] = field(default_factory=list)


@dataclass
class StructType(TypeExpr):
	fields: List[Field] = field(default_factory=list)


@dataclass
class InterfaceType(TypeExpr):
	"""Interface type; each method is a Field whose type is a FuncType."""
	methods: List[Field] = field(default_factory=list)


# Statements

@dataclass
class Block(Stmt):
	"""Ordered list of statements; a lexical scope of its own."""
	stmts: List[Stmt] = field(default_factory=list)


@dataclass
class ExprStmt(Stmt):
	"""Expression used as a statement."""
	x: Expr


@dataclass
class Assign(Stmt):
	"""
	Assignment.

	`tok` is "=" (plain), ":=" (declare-or-reuse) or an operator assignment
	such as "+=" (single target only).
	"""
	lhs: List[Expr]
	tok: str
	rhs: List[Expr]


@dataclass
class IncDec(Stmt):
	"""x++ / x--"""
	x: Expr
	tok: str


@dataclass
class VarDecl(Stmt):
	"""
	`var names [type] [= values]`.

	Used both as a statement and as a top-level declaration. After
	normalization each VarDecl has exactly one name, a type and one value.
	"""
	names: List[Ident]
	type: Optional[TypeExpr] = None
	values: List[Expr] = field(default_factory=list)


@dataclass
class If(Stmt):
	"""`if [init;] cond body [else else_]`; `else_` is a Block or another If."""
	init: Optional[Stmt]
	cond: Expr
	body: Block
	else_: Optional[Union[Block, "If"]] = None


@dataclass
class CaseClause(Node):
	"""`case exprs:` or `default:` (exprs is None) followed by its statements."""
	exprs: Optional[List[Expr]]
	body: List[Stmt] = field(default_factory=list)


@dataclass
class Switch(Stmt):
	"""Expression switch: `switch [init;] [tag] { clauses }`."""
	init: Optional[Stmt]
	tag: Optional[Expr]
	clauses: List[CaseClause] = field(default_factory=list)


@dataclass
class For(Stmt):
	"""
	`for [init]; [cond]; [post] { body }`.

	The conditional-only loop is `For(init=None, cond=c, post=None)`.
	"""
	init: Optional[Stmt]
	cond: Optional[Expr]
	post: Optional[Stmt]
	body: Block


@dataclass
class Range(Stmt):
	"""`for key, value (= | :=) range x { body }`; tok is None without key/value."""
	key: Optional[Expr]
	value: Optional[Expr]
	tok: Optional[str]
	x: Expr
	body: Block


@dataclass
class Return(Stmt):
	results: List[Expr] = field(default_factory=list)


@dataclass
class Branch(Stmt):
	"""`break`, `continue`, `goto` or `fallthrough`, with an optional label."""
	tok: str
	label: Optional[str] = None


@dataclass
class Labeled(Stmt):
	label: str
	stmt: Stmt


@dataclass
class Go(Stmt):
	call: Call


@dataclass
class Defer(Stmt):
	call: Call


@dataclass
class Send(Stmt):
	"""Channel send: chan <- value"""
	chan: Expr
	value: Expr


# Top level

@dataclass
class Import(Decl):
	path: str


@dataclass
class TypeDecl(Decl):
	name: Ident
	type: TypeExpr


@dataclass
class FuncDecl(Decl):
	"""Function or method (recv is the receiver Field)."""
	name: Ident
	type: FuncType
	body: Block
	recv: Optional[Field] = None


@dataclass
class File(Node):
	package: str
	imports: List[Import] = field(default_factory=list)
	decls: List[Node] = field(default_factory=list)  # FuncDecl | TypeDecl | VarDecl


# Statement kinds that carry an optional initializer statement.
CONTROL_WITH_INIT = (If, Switch, For)


__all__ = [
	"NodeId",
	"Node", "Expr", "TypeExpr", "Stmt", "Decl",
	"Ident", "BasicLit", "KeyValue", "CompositeLit", "Selector", "Index", "SliceExpr",
	"Star", "Unary", "Binary", "Call", "TypeAssert",
	"TypeName", "PointerType", "ArrayType", "MapType", "ChanType", "Field", "FuncType",
	"StructType", "InterfaceType",
	"Block", "ExprStmt", "Assign", "IncDec", "VarDecl", "If", "CaseClause", "Switch",
	"For", "Range", "Return", "Branch", "Labeled", "Go", "Defer", "Send",
	"Import", "TypeDecl", "FuncDecl", "File",
	"CONTROL_WITH_INIT",
]
