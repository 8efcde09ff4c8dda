# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
explicit-deref and explicit-discard.
"""

from sugarfree.test_support import body_lines, find_func, normalize_source
from sugarfree.tree import nodes as N

PRELUDE = (
	"package main\n"
	"\n"
	"import \"fmt\"\n"
	"\n"
	"type Point struct {\n"
	"\tX, Y int\n"
	"}\n"
	"\n"
	"func (p *Point) Move(dx int) {\n"
	"\tp.X += dx\n"
	"}\n"
	"\n"
	"func pair() (int, string) {\n"
	"\treturn 1, \"a\"\n"
	"}\n"
	"\n"
)


def _main(body: str) -> str:
	return PRELUDE + "func main() {\n" + body + "}\n"


def test_explicit_deref_spells_out_implicit_dereferences():
	file, info, result = normalize_source(_main(
		"\tarr := [3]int{1, 2, 3}\n"
		"\tp := &arr\n"
		"\tp[0] = 5\n"
		"\ts := p[1:2]\n"
		"\tpt := &Point{X: 1}\n"
		"\tpt.X = 2\n"
		"\tpt.Move(1)\n"
		"\tfmt.Println(s, len(p))\n"
	), ["explicit-deref"])
	assert result.ok
	assert body_lines(file) == [
		"arr := [3]int{1, 2, 3}",
		"p := &arr",
		"(*p)[0] = 5",
		"s := (*p)[1:2]",
		"pt := &Point{X: 1}",
		"(*pt).X = 2",
		"pt.Move(1)",
		"fmt.Println(s, len(p))",
	]
	stmts = find_func(file).body.stmts
	target = stmts[5].lhs[0]
	assert info.selection_of(target).indirect is False
	star = target.x
	assert isinstance(star, N.Star)
	assert info.table.type_string(info.type_of(star)) == "Point"
	assert info.selection_of(stmts[6].x.fun).kind == "method"


def test_explicit_deref_reaches_method_bodies():
	file, _, _ = normalize_source(_main(""), ["explicit-deref"])
	assert body_lines(file, "Move") == ["(*p).X += dx"]


def test_explicit_deref_rewrites_nested_selections():
	file, _, _ = normalize_source(_main(
		"\tpts := []*Point{&Point{}}\n"
		"\tpts[0].Y = pts[0].X\n"
	), ["explicit-deref"])
	assert body_lines(file)[1] == "(*pts[0]).Y = (*pts[0]).X"


def test_explicit_discard_names_every_dropped_value():
	file, info, result = normalize_source(_main(
		"\tch := make(chan int, 1)\n"
		"\tpair()\n"
		"\tfmt.Println(\"hi\")\n"
		"\tlen(\"abc\")\n"
		"\t<-ch\n"
		"\tprintln(\"x\")\n"
		"\tclose(ch)\n"
	), ["explicit-discard"])
	assert body_lines(file) == [
		"ch := make(chan int, 1)",
		"_, _ = pair()",
		"_, _ = fmt.Println(\"hi\")",
		"_ = len(\"abc\")",
		"_ = <-ch",
		"println(\"x\")",
		"close(ch)",
	]
	assert result.rewrites == {"explicit-discard": 4}
	blanks = find_func(file).body.stmts[2].lhs
	assert [info.table.type_string(info.type_of(b)) for b in blanks] == ["int", "error"]
