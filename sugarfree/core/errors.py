# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error taxonomy for the normalization engine.

Two families exist:

- *Local* failures (`UnsupportedZeroValue`, `MalformedDeclaration`) concern a
  single declaration. The rule reports a diagnostic, leaves that declaration
  untouched and keeps going.
- *Consistency* failures (`MissingTypeInfo`, `AmbiguousRedeclaration`) mean the
  caller handed over a tree/table pair that does not agree. The running pass is
  aborted and the pipeline stops; nothing is guessed.

Every error converts to a `Diagnostic` naming the offending node.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .diagnostics import Diagnostic
from .span import Span

if TYPE_CHECKING:
	from sugarfree.tree.nodes import Node


class NormalizeError(Exception):
	"""Base class for engine failures that carry the offending node."""

	code = "E-NORMALIZE"
	fatal = True

	def __init__(self, message: str, *, node: "Optional[Node]" = None) -> None:
		super().__init__(message)
		self.message = message
		self.node = node

	@property
	def span(self) -> Span:
		if self.node is None:
			return Span()
		return getattr(self.node, "span", None) or Span()

	def to_diagnostic(self, phase: str | None = None) -> Diagnostic:
		node_id = getattr(self.node, "node_id", None) if self.node is not None else None
		notes: list[str] = []
		if self.node is not None:
			notes.append(f"node: {type(self.node).__name__}#{node_id}")
		return Diagnostic(
			message=self.message,
			code=self.code,
			phase=phase,
			span=self.span,
			node_id=node_id,
			notes=notes,
		)


class MissingTypeInfo(NormalizeError):
	"""The adapter has no type/symbol entry for a node a rule needs."""

	code = "E-MISSING-TYPE"


class AmbiguousRedeclaration(NormalizeError):
	"""A `:=` name has no binding in the current scope, so reuse vs declare is undecidable."""

	code = "E-REDECL-AMBIGUOUS"


class UnsupportedZeroValue(NormalizeError):
	"""A declared type has no zero-value category the engine can spell."""

	code = "E-ZERO-VALUE"
	fatal = False


class UnsupportedType(NormalizeError):
	"""A resolved type cannot be spelled as a type expression (tuple, untyped nil, unknown)."""

	code = "E-UNSUPPORTED-TYPE"
	fatal = False


class MalformedDeclaration(NormalizeError):
	"""Name/initializer counts disagree outside of tuple context."""

	code = "E-DECL-ARITY"
	fatal = False


class PipelineConfigError(ValueError):
	"""Invalid pipeline configuration (unknown rule, prerequisite ordered late)."""


__all__ = [
	"NormalizeError",
	"MissingTypeInfo",
	"AmbiguousRedeclaration",
	"UnsupportedZeroValue",
	"UnsupportedType",
	"MalformedDeclaration",
	"PipelineConfigError",
]
