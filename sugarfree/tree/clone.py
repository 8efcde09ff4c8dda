# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Deep copies of subtrees.

Children are owned exclusively, so a subtree that must appear twice (a loop
post-step repeated before every `continue`, a declaration's type reused in its
zero-value literal) is copied. The copy gets fresh NodeIds and inherits the
adapter facts of the original node by node. Spans are not carried over.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from sugarfree.tree import nodes as N

if TYPE_CHECKING:
	from sugarfree.symbols.type_info import TypeInfo

T = TypeVar("T", bound=N.Node)


def clone_node(node: T, info: "TypeInfo") -> T:
	"""Deep-copy `node`, assigning fresh ids and copying recorded facts."""
	assert is_dataclass(node), f"cannot clone {type(node).__name__}"
	kwargs = {f.name: _clone_value(getattr(node, f.name), info) for f in fields(node)}
	copy = type(node)(**kwargs)
	copy.node_id = info.new_id()
	info.copy_facts(node, copy)
	return copy


def _clone_value(val: Any, info: "TypeInfo") -> Any:
	if isinstance(val, N.Node):
		return clone_node(val, info)
	if isinstance(val, list):
		return [_clone_value(item, info) for item in val]
	return val


__all__ = ["clone_node"]
