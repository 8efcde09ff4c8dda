# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the front end, the checker and the rule passes.

A diagnostic is a message plus a stable code, the phase that produced it (the
rule name for normalization passes) and a best-effort span. Node identity is
kept in `node_id` so callers can map a report back onto their own tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label: "parser", "checker", or the name of the rule pass that
	# reported the problem.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	node_id: Optional[int] = None
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		"""Human-readable one-liner in the `file:line:col: severity: message` shape."""
		head = f"{self.span.render()}: {self.severity}"
		if self.phase:
			head += f" [{self.phase}]"
		text = f"{head}: {self.message}"
		if self.code:
			text += f" ({self.code})"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text

	def to_json(self) -> Dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"node_id": self.node_id,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
