# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line driver: parse, type-check and normalize one source file.

	sugarfree prog.go                  print the normalized program
	sugarfree prog.go --only split-decl --only zero-value
	sugarfree prog.go --disable loop-canon --json
	sugarfree --list-rules

Exit status is 0 when normalization completed without diagnostics, 1 when any
stage reported an error and 2 for usage errors.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from lark.exceptions import UnexpectedInput

from sugarfree.checker import CheckError, check_file
from sugarfree.core.diagnostics import Diagnostic
from sugarfree.core.errors import PipelineConfigError
from sugarfree.core.span import Span
from sugarfree.parser import ParseError, parse_file
from sugarfree.pipeline import DEFAULT_ORDER, Pipeline, PipelineConfig
from sugarfree.rules import RULES
from sugarfree.tree.printer import format_file

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int) -> None:
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity >= 2:
		level = logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _build_config(args: argparse.Namespace) -> PipelineConfig:
	if args.only:
		config = PipelineConfig.only(args.only)
		return PipelineConfig(order=config.order, disabled=config.disabled | frozenset(args.disable))
	return PipelineConfig(disabled=frozenset(args.disable))


def _report(diagnostics: List[Diagnostic], source: Path, as_json: bool, exit_code: int) -> int:
	if as_json:
		payload = []
		for diag in diagnostics:
			entry = diag.to_json()
			if entry["file"] is None:
				entry["file"] = str(source)
			payload.append(entry)
		print(json.dumps({"exit_code": exit_code, "diagnostics": payload}, indent=2))
	else:
		for diag in diagnostics:
			print(diag.render(), file=sys.stderr)
	return exit_code


def _list_rules() -> int:
	for name in DEFAULT_ORDER:
		requires = RULES[name].requires
		suffix = f"  (after {', '.join(requires)})" if requires else ""
		print(f"{name}{suffix}")
	return 0


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(
		prog="sugarfree",
		description="Rewrite a Go-like program into its sugar-free form.",
	)
	parser.add_argument("source", type=Path, nargs="?", help="Path to the source file")
	parser.add_argument(
		"--disable",
		action="append",
		default=[],
		metavar="RULE",
		help="Skip RULE (may be repeated)",
	)
	parser.add_argument(
		"--only",
		action="append",
		default=[],
		metavar="RULE",
		help="Run only the given rules, in the default order (may be repeated)",
	)
	parser.add_argument("--list-rules", action="store_true", help="List rules in default order and exit")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Print the result (program text and diagnostics) as JSON",
	)
	parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
	args = parser.parse_args(argv)
	_configure_logging(args.verbose)

	if args.list_rules:
		return _list_rules()
	if args.source is None:
		parser.error("the following arguments are required: source")

	try:
		pipeline = Pipeline(_build_config(args))
	except PipelineConfigError as err:
		parser.error(str(err))

	source: Path = args.source
	try:
		text = source.read_text()
	except OSError as err:
		diag = Diagnostic(message=f"cannot read {source}: {err.strerror}", phase="cli", span=Span(file=str(source)))
		return _report([diag], source, args.json, 1)

	try:
		file = parse_file(text, str(source))
	except UnexpectedInput as err:
		span = Span(file=str(source), line=getattr(err, "line", None), column=getattr(err, "column", None))
		diag = Diagnostic(message=str(err).strip().splitlines()[0], code="E-SYNTAX", phase="parser", span=span)
		return _report([diag], source, args.json, 1)
	except ParseError as err:
		diag = Diagnostic(message=str(err), code="E-SYNTAX", phase="parser", span=err.span)
		return _report([diag], source, args.json, 1)

	try:
		info = check_file(file)
	except CheckError as err:
		return _report([err.to_diagnostic()], source, args.json, 1)

	result = pipeline.run(file, info)
	logger.info("rewrites: %s", ", ".join(f"{k}={v}" for k, v in result.rewrites.items()))
	exit_code = 0 if result.ok else 1
	text = format_file(file)
	if args.json:
		payload = {
			"exit_code": exit_code,
			"aborted_pass": result.aborted_pass,
			"rewrites": result.rewrites,
			"program": text,
			"diagnostics": [d.to_json() for d in result.diagnostics],
		}
		print(json.dumps(payload, indent=2))
		return exit_code
	for diag in result.diagnostics:
		print(diag.render(), file=sys.stderr)
	if result.aborted_pass is None:
		sys.stdout.write(text)
	return exit_code


__all__ = ["main"]
