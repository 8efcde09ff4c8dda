# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Pipeline ordering, configuration and whole-program properties.
"""

import pytest

from sugarfree import normalize
from sugarfree.core.errors import PipelineConfigError
from sugarfree.pipeline import DEFAULT_ORDER, Pipeline, PipelineConfig
from sugarfree.rules import RULES
from sugarfree.test_support import body_lines, invariant_violations, normalize_source, prepare
from sugarfree.tree.printer import format_file

PROGRAM = (
	"package main\n"
	"\n"
	"import \"fmt\"\n"
	"\n"
	"type Point struct {\n"
	"\tX, Y int\n"
	"}\n"
	"\n"
	"func pair() (int, string) {\n"
	"\treturn 1, \"a\"\n"
	"}\n"
	"\n"
	"func main() {\n"
	"\tvar a, b = 1, \"x\"\n"
	"\tvar total int\n"
	"\tpt := &Point{X: 1, Y: 2}\n"
	"\tpt.X = 3\n"
	"\tn, s := pair()\n"
	"\tif v := n + 1; v > 2 {\n"
	"\t\ttotal = v\n"
	"\t}\n"
	"\tswitch {\n"
	"\tcase total > 1:\n"
	"\t\ttotal = 0\n"
	"\t}\n"
	"\tfor i := 0; i < 3; i++ {\n"
	"\t\tif i == 1 {\n"
	"\t\t\tcontinue\n"
	"\t\t}\n"
	"\t\ttotal += i\n"
	"\t}\n"
	"\ta, total = total, a\n"
	"\tfmt.Println(a, b, s, pt.Y)\n"
	"}\n"
)

SHADOWING = (
	"package main\n"
	"\n"
	"import \"strconv\"\n"
	"\n"
	"var limit, step = 3, 1\n"
	"\n"
	"func main() {\n"
	"\tarr := [2]int{1, 2}\n"
	"\tp := &arr\n"
	"\tfor j := 0; j < limit; j += step {\n"
	"\t\tj, err := strconv.Atoi(\"7\")\n"
	"\t\tif err != nil {\n"
	"\t\t\tcontinue\n"
	"\t\t}\n"
	"\t\tp[0], p[1] = p[1], j\n"
	"\t}\n"
	"\tswitch k := len(p); {\n"
	"\tcase k > 1:\n"
	"\t\tprintln(k)\n"
	"\t}\n"
	"}\n"
)


def test_default_order_covers_every_rule_once():
	assert sorted(DEFAULT_ORDER) == sorted(RULES)
	assert len(DEFAULT_ORDER) == 10
	PipelineConfig().validate()


def test_prerequisites_come_first_in_the_default_order():
	position = {name: i for i, name in enumerate(DEFAULT_ORDER)}
	for name, rule in RULES.items():
		for prereq in rule.requires:
			assert position[prereq] < position[name], (name, prereq)


def test_prerequisite_ordered_after_its_dependent_is_rejected():
	config = PipelineConfig(order=("short-decl", "scope-extract"))
	with pytest.raises(PipelineConfigError, match="requires 'scope-extract'"):
		Pipeline(config)


def test_disabled_prerequisite_does_not_block_a_rule():
	config = PipelineConfig(order=("short-decl", "scope-extract"), disabled=frozenset({"scope-extract"}))
	assert Pipeline(config).passes == ["short-decl"]


@pytest.mark.parametrize(
	"config, message",
	[
		(PipelineConfig(order=("split-decl", "bogus")), "unknown rule"),
		(PipelineConfig(disabled=frozenset({"bogus"})), "unknown rule"),
		(PipelineConfig(order=("switch-tag", "switch-tag")), "listed twice"),
	],
)
def test_invalid_configurations(config, message):
	with pytest.raises(PipelineConfigError, match=message):
		config.validate()


def test_only_keeps_the_default_relative_order():
	config = PipelineConfig.only(["zero-value", "split-decl"])
	assert config.enabled() == ["split-decl", "zero-value"]
	with pytest.raises(PipelineConfigError):
		PipelineConfig.only(["nope"])


def test_full_pipeline_output():
	file, info, result = normalize_source(PROGRAM)
	assert result.ok
	assert result.aborted_pass is None
	assert list(result.rewrites) == list(DEFAULT_ORDER)
	assert body_lines(file) == [
		"var a int = 1",
		"var b string = \"x\"",
		"var total int = 0",
		"var pt *Point = nil",
		"pt = &Point{X: 1, Y: 2}",
		"(*pt).X = 3",
		"var n int = 0",
		"var s string = \"\"",
		"n, s = pair()",
		"{",
		"\tvar v int = 0",
		"\tv = n + 1",
		"\tif v > 2 {",
		"\t\ttotal = v",
		"\t}",
		"}",
		"switch true {",
		"case total > 1:",
		"\ttotal = 0",
		"}",
		"{",
		"\tvar i int = 0",
		"\ti = 0",
		"\tfor i < 3 {",
		"\t\tif i == 1 {",
		"\t\t\ti++",
		"\t\t\tcontinue",
		"\t\t}",
		"\t\ttotal += i",
		"\t\ti++",
		"\t}",
		"}",
		"{",
		"\tvar __tmp1 int = a",
		"\ta = total",
		"\ttotal = __tmp1",
		"}",
		"_, _ = fmt.Println(a, b, s, (*pt).Y)",
	]


@pytest.mark.parametrize("source", [PROGRAM, SHADOWING], ids=["program", "shadowing"])
def test_normalized_tree_has_no_shorthand_left(source):
	file, info, result = normalize_source(source)
	assert result.ok, [d.render() for d in result.diagnostics]
	assert invariant_violations(file, info) == []


@pytest.mark.parametrize("source", [PROGRAM, SHADOWING], ids=["program", "shadowing"])
def test_normalizing_twice_changes_nothing(source):
	file, _, _ = normalize_source(source)
	text = format_file(file)
	again, info = prepare(text)
	result = normalize(again, info)
	assert result.ok
	assert sum(result.rewrites.values()) == 0
	assert format_file(again) == text


def test_rules_before_their_prerequisites_see_raw_input():
	"""Disabling split-decl leaves multi-name declarations for the later rules to skip."""
	file, info, result = normalize_source(
		"package main\n\nfunc main() {\n\tvar a, b int\n}\n",
		["explicit-type", "zero-value"],
	)
	assert body_lines(file) == ["var a, b int"]
	assert result.rewrites == {"explicit-type": 0, "zero-value": 0}
	assert invariant_violations(file, info) != []


def test_missing_type_facts_abort_the_pass():
	file, info = prepare("package main\n\nfunc f() int {\n\treturn 1\n}\n\nfunc main() {\n\tf()\n}\n")
	call = file.decls[1].body.stmts[0].x
	del info.types[call.node_id]
	result = Pipeline().run(file, info)
	assert result.aborted_pass == "explicit-discard"
	assert result.diagnostics[0].code == "E-MISSING-TYPE"
	assert result.diagnostics[0].node_id == call.node_id
	assert not result.ok
