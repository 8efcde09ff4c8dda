# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

Spans are only attached to nodes built by the front end. Nodes synthesized by
the normalization rules carry the empty `Span()`; positions are not preserved
across rewrites.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_meta(cls, meta: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a lark `Meta` (or any object with line/column attrs).

		Lark leaves `meta.empty` set for rules that matched no tokens; those map
		to the unknown span.
		"""
		if meta is None or getattr(meta, "empty", False):
			return cls(file=file)
		if isinstance(meta, cls):
			return meta
		return cls(
			file=file,
			line=getattr(meta, "line", None),
			column=getattr(meta, "column", None),
			end_line=getattr(meta, "end_line", None),
			end_column=getattr(meta, "end_column", None),
			raw=meta,
		)

	def is_known(self) -> bool:
		return self.line is not None

	def render(self) -> str:
		"""`file:line:col` with `?` for missing parts (driver diagnostic prefix)."""
		file = self.file or "<input>"
		line = self.line if self.line is not None else "?"
		col = self.column if self.column is not None else "?"
		return f"{file}:{line}:{col}"


__all__ = ["Span"]
