import os
import subprocess
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
CLI = os.path.join(ROOT, "cli.py")


def run_cli(*args):
    return subprocess.run(
        [sys.executable, CLI, "--no-color", *args],
        text=True,
        capture_output=True,
        cwd=ROOT,
        timeout=10,
    )


def write_script(tmp_path, source):
    path = tmp_path / "script.lox"
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_clean_script_exits_zero(tmp_path):
    path = write_script(tmp_path, 'var greeting = "hi";\nprint greeting + " there";\n')
    proc = run_cli(path)
    assert proc.returncode == 0
    assert proc.stdout == "hi there\n"
    assert proc.stderr == ""


def test_run_subcommand(tmp_path):
    path = write_script(tmp_path, "print 1 + 2 * 3;\n")
    proc = run_cli("run", path)
    assert proc.returncode == 0
    assert proc.stdout == "7\n"


def test_syntax_error_exits_65_without_running(tmp_path):
    path = write_script(tmp_path, 'print "before";\nvar = 1;\nprint ;\n')
    proc = run_cli(path)
    assert proc.returncode == 65
    assert proc.stdout == ""
    assert proc.stderr.splitlines() == [
        "[line 2] Error at '=': Expect variable name.",
        "[line 3] Error at ';': Expect expression.",
    ]


def test_lexical_error_exits_65(tmp_path):
    path = write_script(tmp_path, 'print "open;\n')
    proc = run_cli(path)
    assert proc.returncode == 65
    assert "[line 1] Error: Unterminated string." in proc.stderr


def test_runtime_error_exits_70(tmp_path):
    path = write_script(tmp_path, 'print "ok";\nprint 1 + nil;\nprint "never";\n')
    proc = run_cli(path)
    assert proc.returncode == 70
    assert proc.stdout == "ok\n"
    assert proc.stderr == "Operands must be two numbers or two strings.\n[line 2]\n"


def test_missing_file_exits_66(tmp_path):
    proc = run_cli(str(tmp_path / "nope.lox"))
    assert proc.returncode == 66


def test_usage_error_exits_64():
    proc = run_cli("one.lox", "two.lox")
    assert proc.returncode == 64
    assert "Usage" in proc.stderr


def test_parse_subcommand_dumps_ast(tmp_path):
    path = write_script(tmp_path, "print 1 + 2;\n")
    proc = run_cli("parse", path)
    assert proc.returncode == 0
    assert "type: Print" in proc.stdout
    assert "type: Binary" in proc.stdout
    assert "op: +" in proc.stdout


def test_tokens_subcommand(tmp_path):
    path = write_script(tmp_path, "var x;\n")
    proc = run_cli("tokens", path)
    assert proc.returncode == 0
    lines = proc.stdout.splitlines()
    assert "VAR" in lines[0]
    assert "EOF" in lines[-1]
