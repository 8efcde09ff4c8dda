# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
sugarfree: syntax-sugar normalization for a Go-like language.

Pipeline placement:
  source → parser → checker (TypeInfo) → pipeline (ten rules, in place) → consumer

Public API:
  - normalize(file, info, config=None) -> NormalizeResult
  - Pipeline, PipelineConfig, DEFAULT_ORDER
  - parse_file / check_file for feeding the engine from source text
"""

from .checker import CheckError, check_file
from .parser import ParseError, parse_file
from .pipeline import DEFAULT_ORDER, NormalizeResult, Pipeline, PipelineConfig, normalize

__all__ = [
	"DEFAULT_ORDER",
	"NormalizeResult",
	"Pipeline",
	"PipelineConfig",
	"normalize",
	"CheckError",
	"check_file",
	"ParseError",
	"parse_file",
]
