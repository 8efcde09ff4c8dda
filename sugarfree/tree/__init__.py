# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Tree model: node classes, node ids, cloning, the in-place rewriter and a
debug printer.

Pipeline placement:
  parser → tree (this package) → checker → rules → printer/consumer
"""

__all__ = ["nodes", "node_ids", "clone", "rewriter", "printer"]
