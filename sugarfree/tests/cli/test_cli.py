# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command-line driver: exit codes, output and JSON payloads.
"""

import json

import pytest

from sugarfree.cli import main

SOURCE = (
	"package main\n"
	"\n"
	"func main() {\n"
	"\tvar a, b = 1, 2\n"
	"\ta, b = b, a\n"
	"\tprintln(a, b)\n"
	"}\n"
)


def _write(tmp_path, text: str):
	path = tmp_path / "prog.go"
	path.write_text(text)
	return path


def test_prints_the_normalized_program(tmp_path, capsys):
	path = _write(tmp_path, SOURCE)
	assert main([str(path)]) == 0
	out = capsys.readouterr().out
	assert out.startswith("package main\n")
	assert "\tvar a int = 1\n" in out
	assert "\t\tvar __tmp1 int = a\n" in out
	assert "\tprintln(a, b)\n" in out


def test_json_payload(tmp_path, capsys):
	path = _write(tmp_path, SOURCE)
	assert main([str(path), "--json", "--only", "split-decl"]) == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 0
	assert payload["aborted_pass"] is None
	assert payload["rewrites"] == {"split-decl": 1}
	assert payload["diagnostics"] == []
	assert "\tvar a = 1\n\tvar b = 2\n" in payload["program"]


def test_disable_skips_a_rule(tmp_path, capsys):
	path = _write(tmp_path, SOURCE)
	assert main([str(path), "--disable", "parallel-assign"]) == 0
	assert "\ta, b = b, a\n" in capsys.readouterr().out


def test_list_rules(capsys):
	assert main(["--list-rules"]) == 0
	lines = capsys.readouterr().out.splitlines()
	assert lines[0] == "explicit-deref"
	assert "short-decl  (after scope-extract, loop-canon)" in lines
	assert len(lines) == 10


def test_syntax_error_exits_1(tmp_path, capsys):
	path = _write(tmp_path, "package main\n\nfunc main() {\n\tx := \n}\n")
	assert main([str(path)]) == 1
	captured = capsys.readouterr()
	assert "E-SYNTAX" in captured.err
	assert captured.out == ""


def test_check_error_exits_1(tmp_path, capsys):
	path = _write(tmp_path, "package main\n\nfunc main() {\n\tx = 1\n}\n")
	assert main([str(path)]) == 1
	assert "undefined: x" in capsys.readouterr().err


def test_check_error_as_json(tmp_path, capsys):
	path = _write(tmp_path, "package main\n\nfunc main() {\n\tx = 1\n}\n")
	assert main([str(path), "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	assert payload["diagnostics"][0]["message"] == "undefined: x"


def test_unknown_rule_is_a_usage_error(tmp_path, capsys):
	path = _write(tmp_path, SOURCE)
	with pytest.raises(SystemExit) as exc:
		main([str(path), "--only", "bogus"])
	assert exc.value.code == 2
	assert "unknown rule" in capsys.readouterr().err


def test_missing_file_exits_1(tmp_path, capsys):
	assert main([str(tmp_path / "absent.go")]) == 1
	assert "cannot read" in capsys.readouterr().err


def test_malformed_declaration_still_prints_the_program(tmp_path, capsys):
	path = _write(tmp_path, "package main\n\nfunc main() {\n\tvar a, b = 1, 2, 3\n}\n")
	assert main([str(path)]) == 1
	captured = capsys.readouterr()
	assert "E-DECL-ARITY" in captured.err
	assert "\tvar a, b = 1, 2, 3\n" in captured.out
