# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reference type checker.

Builds the `TypeInfo` the rules consume from a parsed file. It covers the
subset of the language the parser accepts plus a few stub packages
(`fmt`, `errors`, `strconv`, `strings`).
"""

from .type_checker import CheckError, Checker, check_file
from .universe import BUILTIN_FUNCS, build_universe

__all__ = ["CheckError", "Checker", "check_file", "BUILTIN_FUNCS", "build_universe"]
