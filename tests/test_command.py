import pytest

from apipe import BuilderMisuseError, Command, Pipeline
from apipe.exceptions import EmptyCommand, ParseError


def test_new_command_has_no_args():
    command = Command.new("ls")
    assert command.program == "ls"
    assert command.args == []
    assert command.argv == ["ls"]


def test_arg_chains_and_appends_in_order():
    command = Command("ls").arg("-la").arg("~/Documents")
    assert command.args == ["-la", "~/Documents"]


def test_extend_appends_many():
    command = Command("ls").extend(["-la", "~/Documents"]).arg("-h")
    assert command.args == ["-la", "~/Documents", "-h"]


def test_empty_program_is_rejected():
    with pytest.raises(BuilderMisuseError):
        Command("")


def test_parse_str_delegates_to_tokenizer():
    command = Command.parse_str('grep -E "a b" file.txt')
    assert command == Command("grep", ["-E", "a b", "file.txt"])


def test_parse_str_rejects_pipes_and_blanks():
    with pytest.raises(ParseError):
        Command.parse_str("ls | wc")
    with pytest.raises(EmptyCommand):
        Command.parse_str("  ")


def test_pipe_combines_two_commands():
    pipeline = Command("echo").arg("hi").pipe(Command("wc").arg("-c"))
    assert isinstance(pipeline, Pipeline)
    assert pipeline.argvs() == [["echo", "hi"], ["wc", "-c"]]


def test_pipe_with_pipeline_keeps_order():
    tail = Pipeline().add_command("sort").add_command("uniq")
    pipeline = Command("cat").pipe(tail)
    assert [command.program for command in pipeline] == ["cat", "sort", "uniq"]


def test_or_operator_is_pipe():
    pipeline = Command("grep") | Command("wc")
    assert pipeline == Command("grep").pipe(Command("wc"))


def test_str_renders_quoted_argv():
    command = Command("grep").arg("a b").arg("c")
    assert str(command) == "grep 'a b' c"
    assert Command.parse_str(str(command)) == command


def test_copy_is_independent():
    original = Command("ls").arg("-l")
    clone = original.copy()
    clone.arg("-a")
    assert original.args == ["-l"]
    assert clone.args == ["-l", "-a"]
