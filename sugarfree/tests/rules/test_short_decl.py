# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
short-decl: declare-or-reuse assignments become declarations plus one assignment.
"""

import logging

from sugarfree.pipeline import Pipeline
from sugarfree.test_support import body_lines, find_func, invariant_violations, normalize_source, prepare
from sugarfree.tree.printer import format_file

PRELUDE = (
	"package main\n"
	"\n"
	"import \"strconv\"\n"
	"\n"
	"func pair() (int, string) {\n"
	"\treturn 1, \"a\"\n"
	"}\n"
	"\n"
)


def _main(body: str) -> str:
	return PRELUDE + "func main() {\n" + body + "}\n"


def test_mixed_fresh_and_reused_names():
	"""Only err is new; y keeps its earlier declaration."""
	file, info, result = normalize_source(_main(
		"\ty := 0\n"
		"\ty, err := strconv.Atoi(\"1\")\n"
		"\t_ = err\n"
	), ["short-decl"])
	assert result.ok
	assert body_lines(file) == [
		"var y int = 0",
		"y = 0",
		"var err error = nil",
		"y, err = strconv.Atoi(\"1\")",
		"_ = err",
	]
	y_decl, _, err_decl, assign, _ = find_func(file).body.stmts
	assert info.symbol_of(assign.lhs[0]) is info.symbol_of(y_decl.names[0])
	assert info.symbol_of(assign.lhs[1]) is info.symbol_of(err_decl.names[0])
	# The declaration now declares; the assignment only uses.
	err = info.symbol_of(err_decl.names[0])
	assert err.decl_id == err_decl.names[0].node_id
	assert assign.lhs[1].node_id in info.uses


def test_blank_targets_declare_nothing():
	file, _, _ = normalize_source(_main("\t_, s := pair()\n\t_ = s\n"), ["short-decl"])
	assert body_lines(file) == [
		"var s string = \"\"",
		"_, s = pair()",
		"_ = s",
	]


def test_outer_bindings_do_not_count_as_existing():
	file, info, _ = normalize_source(_main(
		"\tx := 1\n"
		"\t{\n"
		"\t\tx, y := 2, 3\n"
		"\t\t_ = y\n"
		"\t}\n"
	), ["short-decl"])
	assert body_lines(file) == [
		"var x int = 0",
		"x = 1",
		"{",
		"\tvar x int = 0",
		"\tvar y int = 0",
		"\tx, y = 2, 3",
		"\t_ = y",
		"}",
	]
	outer_decl, _, block = find_func(file).body.stmts
	assert info.symbol_of(block.stmts[0].names[0]) is not info.symbol_of(outer_decl.names[0])


def test_shadowing_name_reading_the_outer_variable():
	"""`x := x + 1` in an inner block still adds one to the outer x."""
	file, info, result = normalize_source(_main(
		"\tx := 1\n"
		"\t{\n"
		"\t\tx := x + 1\n"
		"\t\t_ = x\n"
		"\t}\n"
	), ["short-decl"])
	assert result.ok
	assert body_lines(file) == [
		"var x int = 0",
		"x = 1",
		"{",
		"\tvar __tmp1 int = x",
		"\tvar x int = 0",
		"\tx = __tmp1 + 1",
		"\t_ = x",
		"}",
	]
	outer_decl, _, block = find_func(file).body.stmts
	copy, inner_decl, assign = block.stmts[:3]
	outer = info.symbol_of(outer_decl.names[0])
	temp = info.symbol_of(copy.names[0])
	assert info.symbol_of(copy.values[0]) is outer
	assert info.symbol_of(assign.rhs[0].x) is temp
	assert info.symbol_of(assign.lhs[0]) is info.symbol_of(inner_decl.names[0])
	assert temp.scope is info.scope_of(block)


def test_shadowing_name_read_by_another_value():
	file, _, result = normalize_source(_main(
		"\tb := 2\n"
		"\t{\n"
		"\t\ta, b := b, 1\n"
		"\t\t_, _ = a, b\n"
		"\t}\n"
	), ["short-decl"])
	assert result.ok
	assert body_lines(file)[2:] == [
		"{",
		"\tvar __tmp1 int = b",
		"\tvar a int = 0",
		"\tvar b int = 0",
		"\ta, b = __tmp1, 1",
		"\t_, _ = a, b",
		"}",
	]


def test_shadowed_initializer_read_after_extraction():
	"""The hoisted `err := check(err)` must still pass the outer err."""
	file, info, result = normalize_source(
		"package main\n"
		"\n"
		"import \"errors\"\n"
		"\n"
		"func check(err error) error {\n"
		"\treturn err\n"
		"}\n"
		"\n"
		"func main() {\n"
		"\terr := errors.New(\"x\")\n"
		"\tif err := check(err); err != nil {\n"
		"\t\tprintln(1)\n"
		"\t}\n"
		"\t_ = err\n"
		"}\n"
	)
	assert result.ok
	assert body_lines(file)[2:6] == [
		"{",
		"\tvar __tmp1 error = err",
		"\tvar err error = nil",
		"\terr = check(__tmp1)",
	]
	assert invariant_violations(file, info) == []


def test_shadowed_outer_address_is_reported():
	"""A copy cannot stand in for `&x`, so the statement is kept and reported."""
	file, _, result = normalize_source(_main(
		"\tx := 1\n"
		"\t{\n"
		"\t\tx := &x\n"
		"\t\t_ = x\n"
		"\t}\n"
	), ["short-decl"])
	assert result.aborted_pass is None
	assert [d.code for d in result.diagnostics] == ["E-DECL-ARITY"]
	assert "shadow" in result.diagnostics[0].message
	assert body_lines(file) == ["var x int = 0", "x = 1", "{", "\tx := &x", "\t_ = x", "}"]


def test_shadowed_builtin_is_reported():
	file, _, result = normalize_source(_main("\tlen := len(\"abc\")\n\t_ = len\n"), ["short-decl"])
	assert [d.code for d in result.diagnostics] == ["E-DECL-ARITY"]
	assert body_lines(file) == ["len := len(\"abc\")", "_ = len"]


def test_comma_ok_keeps_a_single_right_hand_side():
	file, _, result = normalize_source(_main(
		"\tm := map[string]int{}\n"
		"\tv, ok := m[\"a\"]\n"
		"\t_, _ = v, ok\n"
	))
	assert result.ok
	assert body_lines(file) == [
		"var m map[string]int = nil",
		"m = map[string]int{}",
		"var v int = 0",
		"var ok bool = false",
		"v, ok = m[\"a\"]",
		"_ = v",
		"_ = ok",
	]


def test_tuple_var_declaration_inside_a_function():
	file, _, result = normalize_source(_main("\tvar n, s = pair()\n"))
	assert result.ok
	assert body_lines(file) == [
		"var n int = 0",
		"var s string = \"\"",
		"n, s = pair()",
	]


def test_tuple_var_declaration_at_package_level_is_kept():
	file, info, result = normalize_source(
		"package main\n"
		"\n"
		"func pair() (int, string) {\n"
		"\treturn 1, \"a\"\n"
		"}\n"
		"\n"
		"var n, s = pair()\n"
		"\n"
		"func main() {\n"
		"}\n"
	)
	assert result.ok
	assert "\nvar n, s = pair()\n" in format_file(file)
	assert invariant_violations(file, info) == []


def test_initializer_scope_after_extraction():
	"""A name bound in an if initializer is declared inside the extracted block only."""
	file, info, result = normalize_source(_main(
		"\tx := 0\n"
		"\tif x := 5; x > 0 {\n"
		"\t\tx = 6\n"
		"\t}\n"
		"\tx = 1\n"
	))
	assert result.ok
	assert body_lines(file) == [
		"var x int = 0",
		"x = 0",
		"{",
		"\tvar x int = 0",
		"\tx = 5",
		"\tif x > 0 {",
		"\t\tx = 6",
		"\t}",
		"}",
		"x = 1",
	]
	body = find_func(file).body
	outer_decl, _, block, last = body.stmts
	outer = info.symbol_of(outer_decl.names[0])
	inner = info.symbol_of(block.stmts[0].names[0])
	assert inner is not outer
	assert info.symbol_of(last.lhs[0]) is outer
	assert inner.scope is info.scope_of(block)
	assert info.scope_of(block).parent is info.scope_of(body)


def test_missing_binding_aborts_the_pipeline(caplog):
	file, info = prepare(_main("\tx := 1\n\tx = 2\n"))
	del info.scope_of(find_func(file).body).names["x"]
	with caplog.at_level(logging.WARNING, logger="sugarfree.pipeline"):
		result = Pipeline().run(file, info)
	assert result.aborted_pass == "short-decl"
	assert [d.code for d in result.diagnostics] == ["E-REDECL-AMBIGUOUS"]
	assert "short-decl" not in result.rewrites
	assert "parallel-assign" not in result.rewrites
	assert body_lines(file) == ["x := 1", "x = 2"]
	assert "pass short-decl aborted" in caplog.text
