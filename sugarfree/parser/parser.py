# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Front end: source text to `sugarfree.tree.nodes.File`.

The grammar lives next to this module (`grammar.lark`) and is compiled once
with lark's LALR parser. Two post-lexing steps run between the lexer and the
parser:

- `SemicolonInserter` applies the usual automatic-semicolon rule: a newline
  ends a statement when the last token on the line can end one.
- `BraceClassifier` decides for each `{` whether it opens a block or a
  composite literal / struct body, and supplies the terminator a statement
  list may omit before its closing `}` or `)`.

A composite literal inside an `if`/`for`/`switch` header must be
parenthesized, as the brace would otherwise open the body.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from lark import Lark, Token, Tree

from sugarfree.core.span import Span
from sugarfree.tree import nodes as N
from sugarfree.tree.node_ids import assign_node_ids

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class ParseError(ValueError):
	"""Input that the grammar accepts but the tree model cannot represent."""

	def __init__(self, message: str, *, span: Span) -> None:
		super().__init__(message)
		self.span = span


class SemicolonInserter:
	always_accept = ("_NEWLINE", "_SEMI")

	TERMINABLE = {
		"NAME",
		"INT",
		"FLOAT",
		"STRING",
		"CHAR",
		"_RETURN",
		"BREAK",
		"CONTINUE",
		"FALLTHROUGH",
		"INC",
		"DEC",
		"_RPAR",
		"_RSQB",
		"_RBRACE",
	}

	def process(self, stream: Iterator[Token]) -> Iterator[Token]:
		"""
		Turn `;` and statement-ending newlines into `_TERMINATOR`.

		The token value tells both apart afterwards: ";" for an explicit
		semicolon, "\\n" for an inserted one.
		"""
		last: Optional[str] = None
		for token in stream:
			ttype = token.type
			if ttype == "_NEWLINE":
				if last in self.TERMINABLE:
					yield Token.new_borrow_pos("_TERMINATOR", "\n", token)
					last = "_TERMINATOR"
				continue
			if ttype == "_SEMI":
				yield Token.new_borrow_pos("_TERMINATOR", ";", token)
				last = "_TERMINATOR"
				continue
			yield token
			last = ttype


class BraceClassifier:
	HEADER_KEYWORDS = {"_IF", "_FOR", "_SWITCH", "_FUNC"}
	# A `{` right after one of these opens a block.
	BLOCK_AFTER = {None, "_TERMINATOR", "_BLOCK_OPEN", "_COLON", "_ELSE"}
	# A `(` right after one of these opens a declaration group.
	GROUP_AFTER = {"_IMPORT", "_VAR", "_TYPE"}
	# No terminator is needed before a closing brace/paren after one of these.
	NO_TERMINATOR_AFTER = {"_TERMINATOR", "_BLOCK_OPEN", "_LBRACE", "_LPAR", "_COLON"}

	def process(self, stream: Iterator[Token]) -> Iterator[Token]:
		braces: List[str] = []  # "block" | "decl" | "lit"
		parens: List[str] = []  # "group" | "expr"
		# Nesting depth at which the pending statement header started.
		header: Optional[Tuple[int, int]] = None
		prev: Optional[str] = None

		for token in stream:
			ttype = token.type
			if ttype in self.HEADER_KEYWORDS:
				if header is None:
					header = (len(parens), len(braces))
			elif ttype == "_TERMINATOR":
				if token.value == "\n" and header == (len(parens), len(braces)):
					header = None
			elif ttype in ("_LPAR", "_LSQB"):
				parens.append("group" if ttype == "_LPAR" and prev in self.GROUP_AFTER else "expr")
			elif ttype in ("_RPAR", "_RSQB"):
				kind = parens.pop() if parens else "expr"
				if kind == "group" and prev not in self.NO_TERMINATOR_AFTER:
					yield Token.new_borrow_pos("_TERMINATOR", "\n", token)
			elif ttype == "_LBRACE":
				if prev in ("_STRUCT", "_INTERFACE"):
					kind = "decl"
				elif header == (len(parens), len(braces)):
					kind = "block"
					header = None
				elif braces and braces[-1] == "lit":
					kind = "lit"
				elif prev in self.BLOCK_AFTER:
					kind = "block"
				else:
					kind = "lit"
				braces.append(kind)
				if kind == "block":
					token = Token.new_borrow_pos("_BLOCK_OPEN", token.value, token)
			elif ttype == "_RBRACE":
				kind = braces.pop() if braces else "block"
				if kind != "lit" and prev not in self.NO_TERMINATOR_AFTER:
					yield Token.new_borrow_pos("_TERMINATOR", "\n", token)
				if header is not None and len(braces) < header[1]:
					header = None
			yield token
			prev = token.type


class SugarfreePostLex:
	"""Combined post-lexer: terminator insertion, then brace classification."""

	# Lark drops terminals the grammar never references unless the post-lexer
	# asks to keep them.
	always_accept = SemicolonInserter.always_accept

	def __init__(self) -> None:
		self._semicolons = SemicolonInserter()
		self._braces = BraceClassifier()

	def process(self, stream: Iterator[Token]) -> Iterator[Token]:
		return self._braces.process(self._semicolons.process(stream))


_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="source_file",
	propagate_positions=True,
	maybe_placeholders=False,
	postlex=SugarfreePostLex(),
)


def parse_file(source: str, file: Optional[str] = None) -> N.File:
	"""
	Parse a whole source file and number its nodes.

	Raises `lark.exceptions.UnexpectedInput` on syntax errors and `ParseError`
	for constructs the tree cannot represent.
	"""
	if not source.endswith("\n"):
		source += "\n"
	tree = _PARSER.parse(source)
	result = _Builder(file).build_file(tree)
	assign_node_ids(result)
	return result


# Builders -----------------------------------------------------------------


def _name(node: Union[Tree, Token]) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	return node.type


def _trees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _tokens(tree: Tree, ttype: str) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and c.type == ttype]


def _flatten(tree: Tree, name: str) -> List[Union[Tree, Token]]:
	"""Unroll a left-recursive list rule (`x_list: x | x_list SEP x`)."""
	items: List[Union[Tree, Token]] = []
	while True:
		children = tree.children
		if len(children) == 2 and isinstance(children[0], Tree) and _name(children[0]) == name:
			items.append(children[1])
			tree = children[0]
			continue
		items.append(children[0])
		break
	items.reverse()
	return items


class _Builder:
	def __init__(self, file: Optional[str]) -> None:
		self.file = file

	def _span(self, node: Union[Tree, Token]) -> Span:
		if isinstance(node, Token):
			return Span(
				file=self.file,
				line=node.line,
				column=node.column,
				end_line=node.end_line,
				end_column=node.end_column,
			)
		return Span.from_meta(node.meta, self.file)

	def _at(self, node: N.Node, src: Union[Tree, Token]) -> N.Node:
		node.span = self._span(src)
		return node

	def _ident(self, tok: Token) -> N.Ident:
		ident = N.Ident(name=tok.value)
		ident.span = self._span(tok)
		return ident

	# File ---------------------------------------------------------------

	def build_file(self, tree: Tree) -> N.File:
		package = tree.children[0]
		assert isinstance(package, Token)
		imports: List[N.Import] = []
		decls: List[N.Node] = []
		for child in _trees(tree):
			kind = _name(child)
			if kind == "import_decl":
				for tok in _tokens(child, "STRING"):
					imp = N.Import(path=tok.value[1:-1])
					imports.append(self._at(imp, tok))
			elif kind in ("func_decl", "method_decl"):
				decls.append(self._build_func(child))
			elif kind == "var_decl":
				decls.extend(self._build_var_decl(child))
			elif kind == "type_decl":
				for spec in _trees(child):
					name, ty = spec.children
					decl = N.TypeDecl(name=self._ident(name), type=self._build_type(ty))
					decls.append(self._at(decl, spec))
			else:
				raise ParseError(f"unexpected top-level node '{kind}'", span=self._span(child))
		return self._at(N.File(package=package.value, imports=imports, decls=decls), tree)

	def _build_func(self, tree: Tree) -> N.FuncDecl:
		recv: Optional[N.Field] = None
		children = list(tree.children)
		if _name(tree) == "method_decl":
			recv_tree = children.pop(0)
			assert isinstance(recv_tree, Tree)
			recv_children = recv_tree.children
			if len(recv_children) == 2:
				recv = N.Field(names=[self._ident(recv_children[0])], type=self._build_type(recv_children[1]))
			else:
				recv = N.Field(names=[], type=self._build_type(recv_children[0]))
			self._at(recv, recv_tree)
		name, sig, body = children
		func = N.FuncDecl(
			name=self._ident(name),
			type=self._build_signature(sig),
			body=self._build_block(body),
			recv=recv,
		)
		return self._at(func, tree)

	def _build_signature(self, tree: Tree) -> N.FuncType:
		params_tree, *rest = tree.children
		params = self._build_parameters(params_tree)
		results: List[N.Field] = []
		if rest:
			res = rest[0]
			if isinstance(res, Tree) and _name(res) == "parameters":
				results = self._build_parameters(res)
			else:
				fld = N.Field(names=[], type=self._build_type(res))
				results = [self._at(fld, res)]
		return self._at(N.FuncType(params=params, results=results), tree)

	def _build_parameters(self, tree: Tree) -> List[N.Field]:
		lists = _trees(tree)
		if not lists:
			return []
		entries = _flatten(lists[0], "param_list")
		named = any(_name(e) == "param_named" for e in entries)
		fields: List[N.Field] = []
		pending: List[N.Ident] = []
		for entry in entries:
			assert isinstance(entry, Tree)
			variadic = bool(_tokens(entry, "ELLIPSIS"))
			type_tree = entry.children[-1]
			if not named:
				fld = N.Field(names=[], type=self._build_type(type_tree), variadic=variadic)
				fields.append(self._at(fld, entry))
				continue
			if _name(entry) == "param_anon":
				# In a named list, a lone name is grouped with the next type.
				if variadic or not (isinstance(type_tree, Tree) and _name(type_tree) == "type_name"):
					raise ParseError("mixed named and unnamed parameters", span=self._span(entry))
				pending.append(self._ident(type_tree.children[0]))
				continue
			pending.append(self._ident(entry.children[0]))
			fld = N.Field(names=pending, type=self._build_type(type_tree), variadic=variadic)
			fields.append(self._at(fld, entry))
			pending = []
		if pending:
			raise ParseError("mixed named and unnamed parameters", span=self._span(tree))
		return fields

	def _build_var_decl(self, tree: Tree) -> List[N.VarDecl]:
		decls: List[N.VarDecl] = []
		for spec in _trees(tree):
			names: List[N.Ident] = []
			ty: Optional[N.TypeExpr] = None
			values: List[N.Expr] = []
			for child in spec.children:
				if isinstance(child, Token):
					continue  # ASSIGN
				kind = _name(child)
				if kind == "name_list":
					names = [self._ident(t) for t in _flatten(child, "name_list")]
				elif kind == "expr_list":
					values = self._build_expr_list(child)
				else:
					ty = self._build_type(child)
			decls.append(self._at(N.VarDecl(names=names, type=ty, values=values), spec))
		return decls

	# Types --------------------------------------------------------------

	def _build_type(self, node: Union[Tree, Token]) -> N.TypeExpr:
		assert isinstance(node, Tree), f"expected a type, got token {node!r}"
		kind = _name(node)
		children = node.children
		ty: N.TypeExpr
		if kind == "type_name":
			ty = N.TypeName(name=children[0].value)
		elif kind == "pointer_type":
			ty = N.PointerType(elem=self._build_type(children[-1]))
		elif kind == "slice_type":
			ty = N.ArrayType(length=None, elem=self._build_type(children[0]))
		elif kind == "array_type":
			ty = N.ArrayType(length=self._build_expr(children[0]), elem=self._build_type(children[1]))
		elif kind == "map_type":
			ty = N.MapType(key=self._build_type(children[0]), value=self._build_type(children[1]))
		elif kind == "chan_type":
			ty = N.ChanType(dir="both", elem=self._build_type(children[0]))
		elif kind == "chan_recv":
			ty = N.ChanType(dir="recv", elem=self._build_type(children[-1]))
		elif kind == "func_type":
			ty = self._build_signature(children[0])
		elif kind == "struct_type":
			fields = []
			for fld_tree in _trees(node):
				name_list, fld_type = fld_tree.children
				names = [self._ident(t) for t in _flatten(name_list, "name_list")]
				fields.append(self._at(N.Field(names=names, type=self._build_type(fld_type)), fld_tree))
			ty = N.StructType(fields=fields)
		elif kind == "interface_type":
			methods = []
			for spec in _trees(node):
				name, sig = spec.children
				fld = N.Field(names=[self._ident(name)], type=self._build_signature(sig))
				methods.append(self._at(fld, spec))
			ty = N.InterfaceType(methods=methods)
		else:
			raise ParseError(f"unexpected type node '{kind}'", span=self._span(node))
		return self._at(ty, node)

	# Statements ---------------------------------------------------------

	def _build_block(self, tree: Tree) -> N.Block:
		(seq,) = tree.children
		return self._at(N.Block(stmts=self._build_stmt_seq(seq)), tree)

	def _build_stmt_seq(self, tree: Tree) -> List[N.Stmt]:
		stmts: List[N.Stmt] = []
		for child in _trees(tree):
			stmts.extend(self._build_stmt(child))
		return stmts

	def _build_single(self, tree: Tree) -> N.Stmt:
		stmts = self._build_stmt(tree)
		if len(stmts) != 1:
			raise ParseError("expected a single statement", span=self._span(tree))
		return stmts[0]

	def _build_stmt(self, tree: Tree) -> List[N.Stmt]:
		kind = _name(tree)
		children = tree.children
		stmt: N.Stmt
		if kind == "var_decl":
			return list(self._build_var_decl(tree))
		if kind == "expr_stmt":
			stmt = N.ExprStmt(x=self._build_expr(children[0]))
		elif kind == "assign":
			lhs, tok, rhs = children
			if tok.type == "OP_ASSIGN":
				stmt = N.Assign(lhs=[self._build_expr(lhs)], tok=tok.value, rhs=[self._build_expr(rhs)])
			else:
				stmt = N.Assign(lhs=self._build_expr_list(lhs), tok=tok.value, rhs=self._build_expr_list(rhs))
		elif kind == "incdec":
			stmt = N.IncDec(x=self._build_expr(children[0]), tok=children[1].value)
		elif kind == "send":
			stmt = N.Send(chan=self._build_expr(children[0]), value=self._build_expr(children[2]))
		elif kind == "block":
			return [self._build_block(tree)]
		elif kind in ("if_plain", "if_init"):
			stmt = self._build_if(tree)
		elif kind.startswith("switch_"):
			stmt = self._build_switch(tree)
		elif kind.startswith("for_"):
			stmt = self._build_for(tree)
		elif kind == "return_stmt":
			results = self._build_expr_list(children[0]) if children else []
			stmt = N.Return(results=results)
		elif kind == "branch":
			label = children[1].value if len(children) > 1 else None
			stmt = N.Branch(tok=children[0].value, label=label)
		elif kind in ("go_stmt", "defer_stmt"):
			call = self._build_expr(children[0])
			if not isinstance(call, N.Call):
				raise ParseError("expression in go/defer must be a call", span=self._span(tree))
			stmt = N.Go(call=call) if kind == "go_stmt" else N.Defer(call=call)
		elif kind == "labeled":
			stmt = N.Labeled(label=children[0].value, stmt=self._build_single(children[1]))
		else:
			raise ParseError(f"unexpected statement node '{kind}'", span=self._span(tree))
		return [self._at(stmt, tree)]

	def _build_if(self, tree: Tree) -> N.If:
		children = list(tree.children)
		init = self._build_single(children.pop(0)) if _name(tree) == "if_init" else None
		cond = self._build_expr(children[0])
		body = self._build_block(children[1])
		else_: Optional[Union[N.Block, N.If]] = None
		if len(children) > 2:
			branch = children[2]
			if _name(branch) == "block":
				else_ = self._build_block(branch)
			else:
				else_ = self._build_if(branch)
		return self._at(N.If(init=init, cond=cond, body=body, else_=else_), tree)

	def _build_switch(self, tree: Tree) -> N.Switch:
		kind = _name(tree)
		children = list(tree.children)
		init = self._build_single(children.pop(0)) if kind in ("switch_init", "switch_init_tag") else None
		tag = self._build_expr(children.pop(0)) if kind in ("switch_tag", "switch_init_tag") else None
		(body,) = children
		clauses: List[N.CaseClause] = []
		for clause_tree in _trees(body):
			if _name(clause_tree) == "default_clause":
				exprs = None
				seq = clause_tree.children[0]
			else:
				exprs = self._build_expr_list(clause_tree.children[0])
				seq = clause_tree.children[1]
			clause = N.CaseClause(exprs=exprs, body=self._build_stmt_seq(seq))
			clauses.append(self._at(clause, clause_tree))
		return self._at(N.Switch(init=init, tag=tag, clauses=clauses), tree)

	def _build_for(self, tree: Tree) -> N.Stmt:
		kind = _name(tree)
		children = tree.children
		body = self._build_block(children[-1])
		if kind == "for_forever":
			return N.For(init=None, cond=None, post=None, body=body)
		if kind == "for_while":
			return N.For(init=None, cond=self._build_expr(children[0]), post=None, body=body)
		if kind == "for_three":
			init_t, cond_t, post_t = children[:3]
			init = self._build_single(init_t.children[0]) if init_t.children else None
			cond = self._build_expr(cond_t.children[0]) if cond_t.children else None
			post = self._build_single(post_t.children[0]) if post_t.children else None
			return N.For(init=init, cond=cond, post=post, body=body)
		clause = children[0]
		parts = clause.children
		key: Optional[N.Expr] = None
		value: Optional[N.Expr] = None
		tok: Optional[str] = None
		if len(parts) == 3:
			targets = self._build_expr_list(parts[0])
			if len(targets) > 2:
				raise ParseError("range permits at most two iteration variables", span=self._span(clause))
			key = targets[0]
			value = targets[1] if len(targets) == 2 else None
			tok = parts[1].value
		return N.Range(key=key, value=value, tok=tok, x=self._build_expr(parts[-1]), body=body)

	# Expressions --------------------------------------------------------

	def _build_expr_list(self, tree: Tree) -> List[N.Expr]:
		return [self._build_expr(e) for e in _flatten(tree, "expr_list")]

	def _build_expr(self, node: Union[Tree, Token]) -> N.Expr:
		assert isinstance(node, Tree), f"expected an expression, got token {node!r}"
		kind = _name(node)
		children = node.children
		expr: N.Expr
		if kind == "ident":
			return self._ident(children[0])
		if kind in ("int_lit", "float_lit", "string_lit", "char_lit"):
			lit_kind = kind[: -len("_lit")].upper()
			expr = N.BasicLit(kind=lit_kind, value=children[0].value)
		elif kind == "binary":
			expr = N.Binary(op=children[1].value, x=self._build_expr(children[0]), y=self._build_expr(children[2]))
		elif kind == "unary":
			expr = N.Unary(op=children[0].value, x=self._build_expr(children[1]))
		elif kind == "deref":
			expr = N.Star(x=self._build_expr(children[1]))
		elif kind == "selector":
			expr = N.Selector(x=self._build_expr(children[0]), sel=children[1].value)
		elif kind == "type_assert":
			expr = N.TypeAssert(x=self._build_expr(children[0]), type=self._build_type(children[1]))
		elif kind == "index":
			expr = N.Index(x=self._build_expr(children[0]), index=self._build_expr(children[1]))
		elif kind == "slice_expr":
			x, low, high = children
			expr = N.SliceExpr(
				x=self._build_expr(x),
				low=self._build_expr(low.children[0]) if low.children else None,
				high=self._build_expr(high.children[0]) if high.children else None,
			)
		elif kind == "call":
			args: List[N.Expr] = []
			ellipsis = False
			if len(children) > 1:
				call_args = children[1]
				args = self._build_expr_list(call_args.children[0])
				ellipsis = bool(_tokens(call_args, "ELLIPSIS"))
			expr = N.Call(fun=self._build_expr(children[0]), args=args, ellipsis=ellipsis)
		elif kind == "composite_lit":
			type_node, body = children
			if isinstance(type_node, Token):
				lit_type: N.TypeExpr = self._at(N.TypeName(name=type_node.value), type_node)
			else:
				lit_type = self._build_type(type_node)
			expr = self._build_lit_body(body, lit_type)
		elif kind in ("slice_type", "array_type", "map_type", "chan_type"):
			return self._build_type(node)
		else:
			raise ParseError(f"unexpected expression node '{kind}'", span=self._span(node))
		return self._at(expr, node)

	def _build_lit_body(self, tree: Tree, lit_type: Optional[N.TypeExpr]) -> N.CompositeLit:
		elts: List[N.Expr] = []
		lists = _trees(tree)
		if lists:
			for elem in _flatten(lists[0], "elem_list"):
				elts.append(self._build_element(elem))
		return self._at(N.CompositeLit(type=lit_type, elts=elts), tree)

	def _build_element(self, node: Union[Tree, Token]) -> N.Expr:
		assert isinstance(node, Tree)
		kind = _name(node)
		if kind == "keyed":
			key, value = node.children
			kv = N.KeyValue(key=self._build_element(key), value=self._build_element(value))
			return self._at(kv, node)
		if kind == "lit_body":
			return self._build_lit_body(node, None)
		return self._build_expr(node)


__all__ = ["ParseError", "SemicolonInserter", "BraceClassifier", "SugarfreePostLex", "parse_file"]
