# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The ten normalization rules.

Pipeline placement:
  parser → checker (TypeInfo) → [rules, in DEFAULT_ORDER] → consumer

`RULES` maps each rule name to its class; `requires` on each class lists the
rules that must run before it when both are enabled.
"""

from typing import Dict, Type

from .base import PassContext, Rule
from .explicit_deref import ExplicitDeref
from .explicit_discard import ExplicitDiscard
from .explicit_type import ExplicitType
from .loop_canon import LoopCanon
from .parallel_assign import ParallelAssign
from .scope_extract import ScopeExtract
from .short_decl import ShortDecl
from .split_decl import SplitDecl
from .switch_tag import SwitchTag
from .zero_value import ZeroValue

RULES: Dict[str, Type[Rule]] = {
	rule.name: rule
	for rule in (
		ExplicitDeref,
		SplitDecl,
		ExplicitType,
		ZeroValue,
		SwitchTag,
		ScopeExtract,
		LoopCanon,
		ExplicitDiscard,
		ShortDecl,
		ParallelAssign,
	)
}

__all__ = [
	"RULES",
	"PassContext",
	"Rule",
	"ExplicitDeref",
	"ExplicitDiscard",
	"ExplicitType",
	"LoopCanon",
	"ParallelAssign",
	"ScopeExtract",
	"ShortDecl",
	"SplitDecl",
	"SwitchTag",
	"ZeroValue",
]
