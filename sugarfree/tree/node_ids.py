# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
NodeId assignment and generic child iteration.

The front end assigns stable NodeIds to every node so the adapter's side
tables can key off nodes without relying on Python object identity. Rules that
synthesize nodes draw fresh ids from `TypeInfo.new_id()` instead.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Iterator

from sugarfree.tree import nodes as N


def iter_children(node: N.Node) -> Iterator[N.Node]:
	"""Yield the direct child nodes of `node` in field order."""
	if not is_dataclass(node):
		return
	for f in fields(node):
		val = getattr(node, f.name)
		if isinstance(val, N.Node):
			yield val
		elif isinstance(val, list):
			for item in val:
				if isinstance(item, N.Node):
					yield item


def walk(node: N.Node) -> Iterator[N.Node]:
	"""Pre-order traversal of `node` and all of its descendants."""
	stack = [node]
	while stack:
		cur = stack.pop()
		yield cur
		stack.extend(reversed(list(iter_children(cur))))


def assign_node_ids(root: N.Node, *, start: int = 1) -> int:
	"""
	Assign NodeIds to all nodes reachable from `root`.

	Returns the next available NodeId after traversal.
	"""
	next_id = start
	for node in walk(root):
		node.node_id = next_id
		next_id += 1
	return next_id


def max_node_id(root: N.Node) -> int:
	return max((n.node_id for n in walk(root)), default=0)


__all__ = ["iter_children", "walk", "assign_node_ids", "max_node_id"]
