# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Type/Symbol adapter: scopes, symbols and the `TypeInfo` side tables."""

from .scope import Scope, ScopeKind, Symbol, SymbolKind
from .type_info import Selection, TypeInfo

__all__ = ["Scope", "ScopeKind", "Symbol", "SymbolKind", "Selection", "TypeInfo"]
