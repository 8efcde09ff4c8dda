# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reference checker: the facts it records and the programs it rejects.
"""

import pytest

from sugarfree.checker import CheckError
from sugarfree.symbols.scope import ScopeKind, SymbolKind
from sugarfree.test_support import find_func, prepare

POINT = (
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
)


def _main(body: str) -> str:
	return POINT + "func main() {\n" + body + "}\n"


def test_untyped_constants_take_default_or_expected_types():
	file, info = prepare(_main(
		"\ta := 1\n"
		"\tb := 1.5\n"
		"\tvar c float64 = 2\n"
		"\td := 'x'\n"
	))
	table = info.table
	stmts = find_func(file).body.stmts
	assert table.type_string(info.type_of(stmts[0].lhs[0])) == "int"
	assert table.type_string(info.type_of(stmts[1].lhs[0])) == "float64"
	assert table.type_string(info.type_of(stmts[2].values[0])) == "float64"
	assert table.type_string(info.type_of(stmts[3].lhs[0])) == "int32"


def test_comma_ok_forms_are_recorded_as_pairs():
	file, info = prepare(_main(
		"\tm := map[string]int{\"a\": 1}\n"
		"\tv, ok := m[\"a\"]\n"
		"\tvar e any = 1\n"
		"\tn, isInt := e.(int)\n"
		"\t_, _, _, _ = v, ok, n, isInt\n"
	))
	table = info.table
	stmts = find_func(file).body.stmts
	assert table.type_string(info.type_of(stmts[1].rhs[0])) == "(int, bool)"
	assert table.type_string(info.type_of(stmts[3].rhs[0])) == "(int, bool)"
	assert table.type_string(info.type_of(stmts[1].lhs[1])) == "bool"


def test_selections_distinguish_fields_methods_and_packages():
	file, info = prepare(_main(
		"\tpt := &Point{X: 1}\n"
		"\tpt.X = 2\n"
		"\tpt.Move(1)\n"
		"\tfmt.Println(pt.Y)\n"
	))
	stmts = find_func(file).body.stmts
	field = info.selection_of(stmts[1].lhs[0])
	assert field.kind == "field" and field.indirect
	assert info.selection_of(stmts[2].x.fun).kind == "method"
	call = stmts[3].x
	assert info.selection_of(call.fun).kind == "qualified"
	assert info.table.type_string(info.type_of(call)) == "(int, error)"


def test_reused_names_in_short_declarations_refer_to_the_existing_symbol():
	file, info = prepare(
		"package main\n"
		"\n"
		"import \"strconv\"\n"
		"\n"
		"func main() {\n"
		"\ty := 0\n"
		"\ty, err := strconv.Atoi(\"1\")\n"
		"\t_ = err\n"
		"}\n"
	)
	first, second, _ = find_func(file).body.stmts
	y = info.symbol_of(first.lhs[0])
	assert info.symbol_of(second.lhs[0]) is y
	assert second.lhs[0].node_id in info.uses
	err = info.symbol_of(second.lhs[1])
	assert err.decl_id == second.lhs[1].node_id
	assert err.kind is SymbolKind.VAR


def test_scopes_are_recorded_for_control_statements():
	file, info = prepare(_main(
		"\tif x := 1; x > 0 {\n"
		"\t\tx = 2\n"
		"\t}\n"
		"\tfor i := 0; i < 2; i++ {\n"
		"\t}\n"
	))
	body = find_func(file).body
	if_stmt, loop = body.stmts
	if_scope = info.scope_of(if_stmt)
	assert if_scope.kind is ScopeKind.IF
	assert if_scope.parent is info.scope_of(body)
	assert "x" in if_scope.names
	assert info.scope_of(loop).kind is ScopeKind.FOR
	assert info.scope_of(loop.body).parent is info.scope_of(loop)


def test_mismatched_var_declarations_are_left_to_the_rules():
	"""The checker declares the names with unknown types instead of failing."""
	file, info = prepare(_main("\tvar a, b = 1, 2, 3\n"))
	decl = find_func(file).body.stmts[0]
	assert info.table.type_string(info.type_of(decl.names[0])) == "<unknown>"


@pytest.mark.parametrize(
	"body, message",
	[
		("\tx = 1\n", "undefined: x"),
		("\tx := 1\n\tx := 2\n", "no new variables"),
		("\ta, b := 1\n", "assignment mismatch"),
		("\tvar p Point\n\tp.Z = 1\n", "Point.Z undefined"),
		("\tx := nil\n", "untyped nil"),
		("\tlen(1, 2)\n", "expected 1 argument"),
	],
)
def test_rejected_programs(body, message):
	with pytest.raises(CheckError) as excinfo:
		prepare(_main(body))
	assert message in str(excinfo.value)
	assert excinfo.value.to_diagnostic().code == "E-CHECK"


def test_unknown_package_is_rejected():
	with pytest.raises(CheckError, match="unknown package"):
		prepare("package main\n\nimport \"os\"\n\nfunc main() {\n}\n")
