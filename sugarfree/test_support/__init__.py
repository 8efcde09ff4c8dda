# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need a parsed, type-checked tree.

Tests describe their input as source text; these helpers run the front end,
optionally the pipeline, and render function bodies back to text so
expectations read like the program they describe. `invariant_violations`
walks a normalized tree and lists every place the sugar-free form is broken.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Set, Tuple

from sugarfree.checker import check_file
from sugarfree.parser import parse_file
from sugarfree.pipeline import DEFAULT_ORDER, NormalizeResult, Pipeline, PipelineConfig
from sugarfree.symbols.type_info import TypeInfo
from sugarfree.tree import nodes as N
from sugarfree.tree.node_ids import walk
from sugarfree.tree.printer import format_stmt


def prepare(source: str) -> Tuple[N.File, TypeInfo]:
	"""Parse and type-check `source`."""
	file = parse_file(source, "test.go")
	return file, check_file(file)


def normalize_source(source: str, rules: Optional[Iterable[str]] = None) -> Tuple[N.File, TypeInfo, NormalizeResult]:
	"""
	Parse, check and normalize `source`.

	`rules` restricts the run to the named rules (default order); None runs
	the full pipeline.
	"""
	file, info = prepare(source)
	config = PipelineConfig() if rules is None else PipelineConfig.only(rules)
	result = Pipeline(config).run(file, info)
	return file, info, result


def find_func(file: N.File, name: str = "main") -> N.FuncDecl:
	for decl in file.decls:
		if isinstance(decl, N.FuncDecl) and decl.name.name == name:
			return decl
	raise KeyError(name)


def body_lines(file: N.File, func: str = "main") -> List[str]:
	"""The statements of `func`, printed, one line per entry (tabs kept past the first level)."""
	text = format_stmt(find_func(file, func).body)
	lines = text.splitlines()[1:-1]
	return [line[1:] if line.startswith("\t") else line for line in lines]


def invariant_violations(file: N.File, info: TypeInfo) -> List[str]:
	"""Describe every node that still carries one of the eliminated shorthands."""
	table = info.table
	# Package-level tuple declarations cannot be turned into assignments.
	exempt: Set[int] = {
		decl.node_id for decl in file.decls
		if isinstance(decl, N.VarDecl) and len(decl.names) > 1 and len(decl.values) == 1
	}
	problems: List[str] = []
	for node in walk(file):
		kind = type(node).__name__
		if isinstance(node, (N.Index, N.SliceExpr)):
			if table.is_pointer(info.type_of(node.x)):
				problems.append(f"{kind}#{node.node_id}: implicit dereference")
		elif isinstance(node, N.Selector):
			selection = info.selections.get(node.node_id)
			if selection is not None and selection.indirect:
				problems.append(f"{kind}#{node.node_id}: implicit dereference")
		elif isinstance(node, N.VarDecl):
			if node.node_id in exempt:
				continue
			if len(node.names) != 1 or node.type is None or len(node.values) != 1:
				problems.append(f"{kind}#{node.node_id}: not a single typed initialized declaration")
		elif isinstance(node, N.Assign):
			if node.tok == ":=":
				problems.append(f"{kind}#{node.node_id}: declare-or-reuse assignment")
			if len(node.lhs) > 1 and len(node.rhs) != 1:
				problems.append(f"{kind}#{node.node_id}: parallel assignment")
		elif isinstance(node, N.If):
			if node.init is not None:
				problems.append(f"{kind}#{node.node_id}: initializer")
		elif isinstance(node, N.Switch):
			if node.init is not None:
				problems.append(f"{kind}#{node.node_id}: initializer")
			if node.tag is None:
				problems.append(f"{kind}#{node.node_id}: missing tag")
		elif isinstance(node, N.For):
			if node.init is not None or node.post is not None or node.cond is None:
				problems.append(f"{kind}#{node.node_id}: not a conditional-only loop")
		elif isinstance(node, N.ExprStmt):
			if table.arity(info.type_of(node.x)) > 0:
				problems.append(f"{kind}#{node.node_id}: discarded value")
	return problems


__all__ = [
	"DEFAULT_ORDER",
	"prepare",
	"normalize_source",
	"find_func",
	"body_lines",
	"invariant_violations",
]
