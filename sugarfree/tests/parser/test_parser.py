# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Front end: surface syntax to tree nodes.
"""

import pytest
from lark.exceptions import UnexpectedInput

from sugarfree.parser import parse_file
from sugarfree.test_support import find_func
from sugarfree.tree import nodes as N
from sugarfree.tree.node_ids import walk


def _body(source: str):
	return find_func(parse_file("package main\n\nfunc main() {\n" + source + "}\n")).body.stmts


def test_every_node_gets_a_unique_id():
	file = parse_file("package main\n\nfunc main() {\n\tx := 1\n\tx = x + 2\n}\n")
	ids = [n.node_id for n in walk(file)]
	assert 0 not in ids
	assert len(ids) == len(set(ids))


def test_declarations_and_imports():
	file = parse_file(
		"package demo\n"
		"\n"
		"import (\n"
		"\t\"fmt\"\n"
		"\t\"strings\"\n"
		")\n"
		"\n"
		"type Pair struct {\n"
		"\tA, B int\n"
		"}\n"
		"\n"
		"var count, total int\n"
		"\n"
		"func (p *Pair) Sum() int {\n"
		"\treturn p.A + p.B\n"
		"}\n"
	)
	assert file.package == "demo"
	assert [imp.path for imp in file.imports] == ["fmt", "strings"]
	type_decl, var_decl, method = file.decls
	assert isinstance(type_decl, N.TypeDecl)
	assert [f.names[0].name for f in type_decl.type.fields] == ["A"]
	assert [n.name for n in type_decl.type.fields[0].names] == ["A", "B"]
	assert isinstance(var_decl, N.VarDecl) and [n.name for n in var_decl.names] == ["count", "total"]
	assert isinstance(method.recv.type, N.PointerType)
	assert method.name.name == "Sum"


def test_short_declarations_and_assignment_forms():
	decl, op_assign, incdec, tuple_assign = _body(
		"\ta, b := 1, 2\n"
		"\ta += b\n"
		"\tb--\n"
		"\ta, b = b, a\n"
	)
	assert decl.tok == ":=" and [e.name for e in decl.lhs] == ["a", "b"]
	assert op_assign.tok == "+=" and len(op_assign.rhs) == 1
	assert isinstance(incdec, N.IncDec) and incdec.tok == "--"
	assert tuple_assign.tok == "=" and [e.name for e in tuple_assign.rhs] == ["b", "a"]


def test_control_statements_keep_their_initializers():
	if_stmt, switch, loop = _body(
		"\tif x := 1; x > 0 {\n"
		"\t}\n"
		"\tswitch y := 2; {\n"
		"\tcase y > 1:\n"
		"\tdefault:\n"
		"\t}\n"
		"\tfor i := 0; i < 3; i++ {\n"
		"\t}\n"
	)
	assert isinstance(if_stmt.init, N.Assign)
	assert isinstance(switch.init, N.Assign) and switch.tag is None
	assert switch.clauses[1].exprs is None
	assert isinstance(loop.init, N.Assign) and isinstance(loop.post, N.IncDec)


def test_loop_forms():
	forever, while_, ranged = _body(
		"\tfor {\n"
		"\t\tbreak\n"
		"\t}\n"
		"\tfor false {\n"
		"\t}\n"
		"\tfor i, c := range \"ab\" {\n"
		"\t\tcontinue\n"
		"\t}\n"
	)
	assert forever.cond is None and forever.init is None and forever.post is None
	assert isinstance(while_.cond, N.Ident)
	assert isinstance(ranged, N.Range) and ranged.tok == ":=" and ranged.value.name == "c"


def test_labels_and_branches():
	(labeled,) = _body(
		"outer:\n"
		"\tfor {\n"
		"\t\tcontinue outer\n"
		"\t}\n"
	)
	assert isinstance(labeled, N.Labeled) and labeled.label == "outer"
	branch = labeled.stmt.body.stmts[0]
	assert branch.tok == "continue" and branch.label == "outer"


def test_semicolons_separate_statements_on_one_line():
	stmts = _body("\tx := 1; y := 2; x, y = y, x\n")
	assert len(stmts) == 3


def test_composite_literals_and_pointer_operations():
	(assign,) = _body("\tp := &[]int{1, 2}[0]\n")
	unary = assign.rhs[0]
	assert isinstance(unary, N.Unary) and unary.op == "&"
	index = unary.x
	assert isinstance(index, N.Index) and isinstance(index.x, N.CompositeLit)
	(deref,) = _body("\t*p = 1\n")
	assert isinstance(deref.lhs[0], N.Star)


def test_spans_point_at_the_source():
	file = parse_file("package main\n\nfunc main() {\n\tx := 1\n}\n", "prog.go")
	stmt = find_func(file).body.stmts[0]
	assert stmt.span.file == "prog.go"
	assert stmt.span.line == 4


def test_syntax_errors_raise():
	with pytest.raises(UnexpectedInput):
		parse_file("package main\n\nfunc main() {\n\tx := \n}\n")
