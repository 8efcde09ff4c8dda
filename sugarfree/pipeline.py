# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rule pipeline.

Runs the enabled rules over one file, in order, against one `TypeInfo`. The
order is data (`DEFAULT_ORDER`) and so are the dependencies between rules
(`Rule.requires`); a configuration that runs a rule before one of its enabled
prerequisites is rejected up front.

A pass that hits a consistency failure (`MissingTypeInfo`,
`AmbiguousRedeclaration`) is aborted and no later pass runs. The tree may then
be partially rewritten by the aborted pass; the result names that pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from sugarfree.core.diagnostics import Diagnostic
from sugarfree.core.errors import NormalizeError, PipelineConfigError
from sugarfree.rules import RULES, PassContext
from sugarfree.symbols.type_info import TypeInfo
from sugarfree.tree import nodes as N

logger = logging.getLogger(__name__)

DEFAULT_ORDER: Tuple[str, ...] = (
	"explicit-deref",
	"split-decl",
	"explicit-type",
	"zero-value",
	"switch-tag",
	"scope-extract",
	"loop-canon",
	"explicit-discard",
	"short-decl",
	"parallel-assign",
)


@dataclass(frozen=True)
class PipelineConfig:
	"""Which rules run, and in what order."""

	order: Tuple[str, ...] = DEFAULT_ORDER
	disabled: FrozenSet[str] = frozenset()

	@classmethod
	def only(cls, names: Iterable[str]) -> "PipelineConfig":
		"""Run just `names`, keeping their default relative order."""
		wanted = set(names)
		unknown = wanted - set(DEFAULT_ORDER)
		if unknown:
			raise PipelineConfigError(f"unknown rule(s): {', '.join(sorted(unknown))}")
		return cls(disabled=frozenset(set(DEFAULT_ORDER) - wanted))

	def enabled(self) -> List[str]:
		return [name for name in self.order if name not in self.disabled]

	def validate(self) -> None:
		seen = set()
		for name in list(self.order) + sorted(self.disabled):
			if name not in RULES:
				raise PipelineConfigError(f"unknown rule '{name}'")
		for name in self.order:
			if name in seen:
				raise PipelineConfigError(f"rule '{name}' listed twice")
			seen.add(name)

		enabled = self.enabled()
		position = {name: i for i, name in enumerate(enabled)}
		for name in enabled:
			for prereq in RULES[name].requires:
				if prereq in position and position[prereq] > position[name]:
					raise PipelineConfigError(
						f"rule '{name}' requires '{prereq}' to run first"
					)


@dataclass
class NormalizeResult:
	"""Outcome of one pipeline run; the tree and table were updated in place."""

	file: N.File
	info: TypeInfo
	diagnostics: List[Diagnostic] = field(default_factory=list)
	rewrites: Dict[str, int] = field(default_factory=dict)
	aborted_pass: Optional[str] = None

	@property
	def ok(self) -> bool:
		return self.aborted_pass is None and not self.diagnostics


class Pipeline:
	"""Ordered rule passes over a tree/table pair."""

	def __init__(self, config: Optional[PipelineConfig] = None) -> None:
		self.config = config if config is not None else PipelineConfig()
		self.config.validate()

	@property
	def passes(self) -> List[str]:
		return self.config.enabled()

	def run(self, file: N.File, info: TypeInfo) -> NormalizeResult:
		result = NormalizeResult(file=file, info=info)
		info.reserve_ids(file)
		for name in self.passes:
			rule = RULES[name]()
			ctx = PassContext(rule=name)
			try:
				count = rule.run(file, info, ctx)
			except NormalizeError as err:
				ctx.diagnostics.append(err.to_diagnostic(phase=name))
				result.diagnostics.extend(ctx.diagnostics)
				result.aborted_pass = name
				logger.warning("pass %s aborted: %s", name, err.message)
				break
			result.diagnostics.extend(ctx.diagnostics)
			result.rewrites[name] = count
			logger.debug("pass %s: %d rewrite(s), %d diagnostic(s)", name, count, len(ctx.diagnostics))
		return result


def normalize(file: N.File, info: TypeInfo, config: Optional[PipelineConfig] = None) -> NormalizeResult:
	"""Run the pipeline over `file` (mutated in place)."""
	return Pipeline(config).run(file, info)


__all__ = ["DEFAULT_ORDER", "NormalizeResult", "Pipeline", "PipelineConfig", "normalize"]
