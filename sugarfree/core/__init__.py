# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared core: spans, diagnostics, error taxonomy and the type table."""

from .diagnostics import Diagnostic
from .errors import (
	AmbiguousRedeclaration,
	MalformedDeclaration,
	MissingTypeInfo,
	NormalizeError,
	PipelineConfigError,
	UnsupportedType,
	UnsupportedZeroValue,
)
from .span import Span
from .types_core import Category, TypeDef, TypeId, TypeKind, TypeTable

__all__ = [
	"Diagnostic",
	"Span",
	"NormalizeError",
	"MissingTypeInfo",
	"AmbiguousRedeclaration",
	"UnsupportedZeroValue",
	"UnsupportedType",
	"MalformedDeclaration",
	"PipelineConfigError",
	"Category",
	"TypeDef",
	"TypeId",
	"TypeKind",
	"TypeTable",
]
