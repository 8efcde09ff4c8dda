# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
split-decl, explicit-type and zero-value.
"""

import pytest

from sugarfree.core.errors import UnsupportedZeroValue
from sugarfree.test_support import body_lines, find_func, normalize_source, prepare
from sugarfree.tree import nodes as N
from sugarfree.tree.printer import format_file

PRELUDE = (
	"package main\n"
	"\n"
	"type Point struct {\n"
	"\tX, Y int\n"
	"}\n"
	"\n"
	"func pair() (int, string) {\n"
	"\treturn 1, \"a\"\n"
	"}\n"
	"\n"
)


def _main(body: str) -> str:
	return PRELUDE + "func main() {\n" + body + "}\n"


def test_split_decl_gives_each_name_its_own_declaration():
	file, _, result = normalize_source(_main(
		"\tvar a, b = 1, \"x\"\n"
		"\tvar c, d int\n"
	), ["split-decl"])
	assert result.ok
	assert body_lines(file) == [
		"var a = 1",
		"var b = \"x\"",
		"var c int",
		"var d int",
	]
	assert result.rewrites == {"split-decl": 2}


def test_split_decl_copies_the_type_expression():
	"""Each declaration owns its type expression."""
	file, info, _ = normalize_source(_main("\tvar p, q *Point\n"), ["split-decl"])
	first, second = find_func(file).body.stmts
	assert first.type == second.type
	assert first.type is not second.type
	assert info.type_of(second.type) == info.type_of(first.type)


def test_split_decl_leaves_tuple_context_alone():
	file, _, result = normalize_source(_main("\tvar n, s = pair()\n"), ["split-decl"])
	assert body_lines(file) == ["var n, s = pair()"]
	assert result.rewrites == {"split-decl": 0}


def test_split_decl_reports_count_mismatch_and_keeps_the_declaration():
	file, _, result = normalize_source(_main("\tvar a, b = 1, 2, 3\n"))
	assert result.aborted_pass is None
	assert [d.code for d in result.diagnostics] == ["E-DECL-ARITY"]
	assert result.diagnostics[0].phase == "split-decl"
	assert body_lines(file) == ["var a, b = 1, 2, 3"]


def test_split_decl_refuses_to_capture_an_outer_name():
	"""`var x, y = 2, x` reads the outer x; separate declarations would not."""
	file, _, result = normalize_source(_main(
		"\tx := 1\n"
		"\t{\n"
		"\t\tvar x, y = 2, x\n"
		"\t}\n"
	), ["split-decl"])
	assert [d.code for d in result.diagnostics] == ["E-DECL-ARITY"]
	assert "shadow" in result.diagnostics[0].message
	assert body_lines(file)[2] == "\tvar x, y = 2, x"


def test_explicit_type_spells_the_resolved_type():
	file, _, result = normalize_source(_main(
		"\tvar a, b = 1, \"x\"\n"
		"\tvar p = &Point{}\n"
		"\tvar m = map[string][]int{}\n"
		"\tvar f = pair\n"
	), ["split-decl", "explicit-type"])
	assert result.ok
	assert body_lines(file) == [
		"var a int = 1",
		"var b string = \"x\"",
		"var p *Point = &Point{}",
		"var m map[string][]int = map[string][]int{}",
		"var f func() (int, string) = pair",
	]


def test_zero_value_by_category():
	file, _, result = normalize_source(_main(
		"\tvar n int\n"
		"\tvar f float64\n"
		"\tvar ok bool\n"
		"\tvar s string\n"
		"\tvar p *Point\n"
		"\tvar xs []int\n"
		"\tvar err error\n"
		"\tvar pt Point\n"
		"\tvar arr [2]int\n"
	), ["zero-value"])
	assert result.ok
	assert body_lines(file) == [
		"var n int = 0",
		"var f float64 = 0",
		"var ok bool = false",
		"var s string = \"\"",
		"var p *Point = nil",
		"var xs []int = nil",
		"var err error = nil",
		"var pt Point = Point{}",
		"var arr [2]int = [2]int{}",
	]


def test_zero_value_literal_owns_a_copy_of_the_type():
	file, info, _ = normalize_source(_main("\tvar pt Point\n"), ["zero-value"])
	(decl,) = find_func(file).body.stmts
	lit = decl.values[0]
	assert isinstance(lit, N.CompositeLit)
	assert lit.type == decl.type and lit.type is not decl.type
	assert info.type_of(lit) == info.type_of(decl.type)


def test_package_level_declarations_are_normalized():
	file, _, result = normalize_source(
		"package main\n"
		"\n"
		"var a, b int\n"
		"var c = \"x\"\n"
		"\n"
		"func main() {\n"
		"}\n"
	)
	assert result.ok
	assert "var a int = 0\n\nvar b int = 0\n\nvar c string = \"x\"\n" in format_file(file)


def test_unrepresentable_zero_value_raises():
	_, info = prepare(_main(""))
	with pytest.raises(UnsupportedZeroValue):
		info.zero_value_for(info.table.ensure_unknown())
