import os
import shutil
import stat
import subprocess

import pytest

from yamltoscript.script_builder import ScriptBuilder, ScriptOptions

needs_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


def _index(lines, needle):
    return next(i for i, line in enumerate(lines) if needle in line)


def test_layout_with_summary():
    builder = ScriptBuilder()
    builder.add_job("build")
    builder.add_command("Compile", "make all")
    builder.finalize()
    lines = builder.lines

    assert lines[0] == "#!/bin/bash"
    assert _index(lines, "SummaryPrinter()") < _index(lines, "CallWrapper()")
    assert _index(lines, "CallWrapper()") < _index(lines, "# Job: build")
    assert lines[_index(lines, "# Compile") + 1] == "CallWrapper Compile 'make all'"
    assert lines[-1] == "SummaryPrinter 0"


def test_layout_without_summary():
    builder = ScriptBuilder(ScriptOptions(summary=False))
    builder.finalize()
    text = builder.render()

    assert "SummaryPrinter" not in text
    assert "commandSummaries" not in text
    # a failure still aborts the script
    assert "\t\texit $exitCode" in text
    assert builder.lines[-1] == "exit 0"


def test_no_error_check_never_aborts():
    text = ScriptBuilder(ScriptOptions(error_check=False, summary=False)).render()
    assert "Stopping execution early" not in text
    assert "exit $exitCode" not in text


def test_echo_toggle():
    assert '\techo "$2"' in ScriptBuilder(ScriptOptions(echo=True)).render()
    assert '\techo "$2"' not in ScriptBuilder(ScriptOptions(echo=False)).render()


def test_commands_are_shell_quoted():
    builder = ScriptBuilder()
    builder.add_command("Say 'hi'", "echo 'it''s' && ls $HOME")
    line = builder.lines[-2]
    assert line.startswith("CallWrapper ")
    assert "'\"'\"'" in line  # shlex.quote escaping of single quotes
    assert builder.commands == [("Say 'hi'", "echo 'it''s' && ls $HOME")]


def test_multiline_display_name_stays_a_single_comment():
    builder = ScriptBuilder()
    builder.add_command("first\nsecond", "true")
    assert "# first second" in builder.lines


def test_finalized_script_is_closed():
    builder = ScriptBuilder()
    builder.finalize()
    builder.finalize()
    assert builder.lines.count("SummaryPrinter 0") == 1
    with pytest.raises(RuntimeError):
        builder.add_command("late", "true")


def test_write_sets_owner_executable(tmp_path):
    out = tmp_path / "build.sh"
    ScriptBuilder().write(out)
    assert os.stat(out).st_mode & stat.S_IXUSR
    assert out.read_text().endswith("SummaryPrinter 0\n")


def _run(tmp_path, builder):
    script = builder.write(tmp_path / "run.sh")
    return subprocess.run(["bash", str(script)], cwd=tmp_path, capture_output=True, text=True)


@needs_bash
@pytest.mark.parametrize("summary", [True, False])
def test_generated_script_aborts_on_first_failure(tmp_path, summary):
    builder = ScriptBuilder(ScriptOptions(summary=summary))
    builder.add_command("first", "echo one >> trace.txt")
    builder.add_command("boom", "(exit 7)")
    builder.add_command("never", "echo never >> trace.txt")
    proc = _run(tmp_path, builder)

    assert proc.returncode == 7
    assert (tmp_path / "trace.txt").read_text() == "one\n"
    assert "failed with error code 7" in proc.stdout
    if summary:
        assert "Summary" in proc.stdout
        assert "boom : Failed" in proc.stdout


@needs_bash
def test_generated_script_runs_everything_in_order(tmp_path):
    builder = ScriptBuilder()
    for n in ("a", "b", "c"):
        builder.add_command(f"step {n}", f"echo {n} >> trace.txt")
    proc = _run(tmp_path, builder)

    assert proc.returncode == 0
    assert (tmp_path / "trace.txt").read_text() == "a\nb\nc\n"
    summary = proc.stdout.split("Summary", 1)[1]
    assert summary.index("step a") < summary.index("step b") < summary.index("step c")


@needs_bash
def test_without_error_check_failures_do_not_stop_the_script(tmp_path):
    builder = ScriptBuilder(ScriptOptions(error_check=False))
    builder.add_command("boom", "(exit 3)")
    builder.add_command("after", "echo after >> trace.txt")
    proc = _run(tmp_path, builder)

    assert proc.returncode == 0
    assert (tmp_path / "trace.txt").read_text() == "after\n"
    assert "boom : Failed (3)" in proc.stdout


@needs_bash
def test_quoted_command_survives_the_wrapper(tmp_path):
    builder = ScriptBuilder(ScriptOptions(summary=False, echo=False))
    builder.add_command("quote", "printf '%s\\n' \"it's here\" > out.txt")
    proc = _run(tmp_path, builder)

    assert proc.returncode == 0
    assert (tmp_path / "out.txt").read_text() == "it's here\n"
