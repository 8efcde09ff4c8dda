# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Front end: lark grammar plus tree builder producing `sugarfree.tree.nodes.File`."""

from .parser import ParseError, parse_file

__all__ = ["ParseError", "parse_file"]
