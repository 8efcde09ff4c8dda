# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
switch-tag, scope-extract and loop-canon.
"""

from sugarfree.symbols.scope import ScopeKind
from sugarfree.test_support import body_lines, find_func, normalize_source
from sugarfree.tree import nodes as N

HEADER = (
	"package main\n"
	"\n"
	"func f() (int, bool) {\n"
	"\treturn 1, true\n"
	"}\n"
	"\n"
)


def _main(body: str) -> str:
	return HEADER + "func main() {\n" + body + "}\n"


def test_switch_tag_makes_the_tag_explicit():
	file, info, result = normalize_source(_main(
		"\tx := 1\n"
		"\tswitch {\n"
		"\tcase x > 0:\n"
		"\t\tx = 2\n"
		"\t}\n"
		"\tswitch x {\n"
		"\tcase 1:\n"
		"\t}\n"
	), ["switch-tag"])
	assert body_lines(file) == [
		"x := 1",
		"switch true {",
		"case x > 0:",
		"\tx = 2",
		"}",
		"switch x {",
		"case 1:",
		"}",
	]
	assert result.rewrites == {"switch-tag": 1}
	tag = find_func(file).body.stmts[1].tag
	assert info.symbol_of(tag) is info.universe.lookup_local("true")


def test_scope_extract_hoists_if_initializer_into_a_block():
	file, info, _ = normalize_source(_main(
		"\tif v, ok := f(); ok {\n"
		"\t\tv = 2\n"
		"\t}\n"
	), ["scope-extract"])
	assert body_lines(file) == [
		"{",
		"\tv, ok := f()",
		"\tif ok {",
		"\t\tv = 2",
		"\t}",
		"}",
	]
	(block,) = find_func(file).body.stmts
	if_stmt = block.stmts[1]
	assert info.scope_of(block).kind is ScopeKind.IF
	assert info.scope_of(if_stmt) is None


def test_scope_extract_handles_switch_and_else_chains():
	file, _, _ = normalize_source(_main(
		"\tx := 0\n"
		"\tif x > 1 {\n"
		"\t} else if y := x; y > 0 {\n"
		"\t\tx = y\n"
		"\t}\n"
		"\tswitch z := x; z {\n"
		"\tcase 0:\n"
		"\t}\n"
	), ["scope-extract"])
	assert body_lines(file) == [
		"x := 0",
		"if x > 1 {",
		"} else {",
		"\ty := x",
		"\tif y > 0 {",
		"\t\tx = y",
		"\t}",
		"}",
		"{",
		"\tz := x",
		"\tswitch z {",
		"\tcase 0:",
		"\t}",
		"}",
	]


def test_scope_extract_keeps_the_label_on_the_loop():
	file, _, _ = normalize_source(_main(
		"outer:\n"
		"\tfor i := 0; i < 2; i++ {\n"
		"\t\tbreak outer\n"
		"\t}\n"
	), ["scope-extract"])
	(block,) = find_func(file).body.stmts
	assert isinstance(block, N.Block)
	labeled = block.stmts[1]
	assert isinstance(labeled, N.Labeled) and isinstance(labeled.stmt, N.For)


def test_loop_canon_moves_post_before_continue_and_to_the_end():
	file, _, result = normalize_source(_main(
		"\tsum := 0\n"
		"\tfor i := 0; i < 3; i++ {\n"
		"\t\tif i == 1 {\n"
		"\t\t\tcontinue\n"
		"\t\t}\n"
		"\t\tsum += i\n"
		"\t}\n"
	), ["scope-extract", "loop-canon"])
	assert result.ok
	assert body_lines(file) == [
		"sum := 0",
		"{",
		"\ti := 0",
		"\tfor i < 3 {",
		"\t\tif i == 1 {",
		"\t\t\ti++",
		"\t\t\tcontinue",
		"\t\t}",
		"\t\tsum += i",
		"\t\ti++",
		"\t}",
		"}",
	]


def test_loop_canon_fills_in_a_missing_condition():
	file, _, _ = normalize_source(_main(
		"\tfor {\n"
		"\t\tbreak\n"
		"\t}\n"
		"\tfor n := 0; ; n++ {\n"
		"\t\tif n > 2 {\n"
		"\t\t\tbreak\n"
		"\t\t}\n"
		"\t}\n"
	), ["scope-extract", "loop-canon"])
	assert body_lines(file) == [
		"for true {",
		"\tbreak",
		"}",
		"{",
		"\tn := 0",
		"\tfor true {",
		"\t\tif n > 2 {",
		"\t\t\tbreak",
		"\t\t}",
		"\t\tn++",
		"\t}",
		"}",
	]


def test_loop_canon_skips_continues_of_inner_loops_unless_labeled():
	file, _, _ = normalize_source(_main(
		"outer:\n"
		"\tfor i := 0; i < 3; i++ {\n"
		"\t\tfor j := 0; j < 3; j++ {\n"
		"\t\t\tif j == i {\n"
		"\t\t\t\tcontinue outer\n"
		"\t\t\t}\n"
		"\t\t\tcontinue\n"
		"\t\t}\n"
		"\t}\n"
	), ["scope-extract", "loop-canon"])
	assert body_lines(file) == [
		"{",
		"\ti := 0",
		"\touter:",
		"\tfor i < 3 {",
		"\t\t{",
		"\t\t\tj := 0",
		"\t\t\tfor j < 3 {",
		"\t\t\t\tif j == i {",
		"\t\t\t\t\ti++",
		"\t\t\t\t\tcontinue outer",
		"\t\t\t\t}",
		"\t\t\t\tj++",
		"\t\t\t\tcontinue",
		"\t\t\t\tj++",
		"\t\t\t}",
		"\t\t}",
		"\t\ti++",
		"\t}",
		"}",
	]


def test_loop_canon_uses_a_label_when_the_body_shadows_the_post_step():
	"""A copied `j++` inside the body would increment the body's own j."""
	file, info, result = normalize_source(_main(
		"\tfor j := 0; j < 3; j++ {\n"
		"\t\tj := 10\n"
		"\t\tif j > 5 {\n"
		"\t\t\tcontinue\n"
		"\t\t}\n"
		"\t\tj = 1\n"
		"\t}\n"
	), ["scope-extract", "loop-canon"])
	assert result.ok
	assert body_lines(file) == [
		"{",
		"\tj := 0",
		"\tfor j < 3 {",
		"\t\t{",
		"\t\t\tj := 10",
		"\t\t\tif j > 5 {",
		"\t\t\t\tgoto __next1",
		"\t\t\t}",
		"\t\t\tj = 1",
		"\t\t}",
		"\t\t__next1:",
		"\t\tj++",
		"\t}",
		"}",
	]
	loop = find_func(file).body.stmts[0].stmts[1]
	inner, tail = loop.body.stmts
	assert info.scope_of(inner).parent is info.scope_of(loop.body)
	assert info.scope_of(loop.body).parent is info.scope_of(find_func(file).body.stmts[0])
	# The post step still increments the loop variable, not the shadowing one.
	assert info.symbol_of(tail.stmt.x) is info.symbol_of(find_func(file).body.stmts[0].stmts[0].lhs[0])


def test_loop_canon_without_continue_needs_no_label():
	file, _, _ = normalize_source(_main(
		"\tfor j := 0; j < 3; j++ {\n"
		"\t\tj := 10\n"
		"\t\tj = 1\n"
		"\t}\n"
	), ["scope-extract", "loop-canon"])
	assert body_lines(file) == [
		"{",
		"\tj := 0",
		"\tfor j < 3 {",
		"\t\t{",
		"\t\t\tj := 10",
		"\t\t\tj = 1",
		"\t\t}",
		"\t\tj++",
		"\t}",
		"}",
	]


def test_loop_canon_leaves_conditional_loops_and_ranges_alone():
	file, _, result = normalize_source(_main(
		"\tn := 0\n"
		"\txs := []int{1}\n"
		"\tfor n < 3 {\n"
		"\t\tn++\n"
		"\t}\n"
		"\tfor i := range xs {\n"
		"\t\tn += i\n"
		"\t}\n"
	), ["loop-canon"])
	assert result.rewrites == {"loop-canon": 0}
	assert body_lines(file)[2] == "for n < 3 {"
	assert body_lines(file)[5] == "for i := range xs {"
