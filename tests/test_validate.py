from conftest import ScriptedPrompter, answer
from yamltoscript.prompt import ResponseType
from yamltoscript.validate import validate_input_path, validate_output_path, validate_working_directory

R = ResponseType


def test_existing_input_is_accepted(tmp_path):
    path = tmp_path / "p.yml"
    path.write_text("jobs: []\n")
    assert validate_input_path(path, ScriptedPrompter()) == path.resolve()


def test_missing_input_asks_again(tmp_path):
    good = tmp_path / "p.yml"
    good.write_text("jobs: []\n")
    prompter = ScriptedPrompter(answer(R.STRING, str(tmp_path / "nope.yml")), answer(R.STRING, str(good)))
    assert validate_input_path(tmp_path / "missing.yml", prompter) == good.resolve()
    assert len(prompter.questions) == 2


def test_missing_input_quit(tmp_path):
    prompter = ScriptedPrompter(answer(R.QUIT))
    assert validate_input_path(tmp_path / "missing.yml", prompter) is None


def test_new_output_is_accepted(tmp_path):
    assert validate_output_path(tmp_path / "out.sh", ScriptedPrompter()) == (tmp_path / "out.sh").resolve()


def test_existing_output_overwrite_confirmed(tmp_path):
    out = tmp_path / "out.sh"
    out.write_text("old")
    assert validate_output_path(out, ScriptedPrompter(answer(R.YES))) == out.resolve()


def test_existing_output_no_asks_for_new_path(tmp_path):
    out = tmp_path / "out.sh"
    out.write_text("old")
    prompter = ScriptedPrompter(answer(R.NO), answer(R.STRING, str(tmp_path / "new.sh")))
    assert validate_output_path(out, prompter) == (tmp_path / "new.sh").resolve()


def test_existing_output_quit(tmp_path):
    out = tmp_path / "out.sh"
    out.write_text("old")
    assert validate_output_path(out, ScriptedPrompter(answer(R.QUIT))) is None


def test_working_directory_must_be_a_directory(tmp_path, console, capsys):
    not_dir = tmp_path / "file.txt"
    not_dir.write_text("")
    prompter = ScriptedPrompter(answer(R.STRING, str(tmp_path)))
    assert validate_working_directory(not_dir, prompter, console) == tmp_path.resolve()
    assert "set as the default working directory" in capsys.readouterr().out


def test_working_directory_quit(tmp_path, console):
    prompter = ScriptedPrompter(answer(R.QUIT))
    assert validate_working_directory(tmp_path / "nope", prompter, console) is None
