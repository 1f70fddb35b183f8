import os

import pytest

from sops_shell.shell import Shell
from sops_shell.utils import CommandExecutionError, EncodingError


def test_run():
    assert Shell().run('echo hi') == 'hi'


def test_run_trims_whitespace():
    assert Shell().run("printf '  spaced out \\n\\n'") == 'spaced out'


def test_run_uses_a_shell():
    assert Shell().run('echo one | tr o 0 && echo two') == '0ne\ntwo'


def test_run_environment():
    shell = Shell(environment={'PATH': os.environ['PATH'], 'GREETING': 'hello'})
    assert shell.run('echo "$GREETING"') == 'hello'


def test_run_environment_is_a_snapshot(monkeypatch):
    monkeypatch.setenv('SOPS_SHELL_TEST_VALUE', 'before')
    shell = Shell()
    monkeypatch.setenv('SOPS_SHELL_TEST_VALUE', 'after')
    assert shell.run('echo "$SOPS_SHELL_TEST_VALUE"') == 'before'


def test_run_failure():
    with pytest.raises(CommandExecutionError) as excinfo:
        Shell().run('echo "no credentials" >&2; exit 3')
    assert excinfo.value.message == 'Command failed: no credentials'


def test_run_failure_ignores_stdout():
    with pytest.raises(CommandExecutionError):
        Shell().run('echo value; false')


def test_run_invalid_utf8():
    with pytest.raises(EncodingError):
        Shell().run("printf '\\377\\376'")


def test_run_missing_shell(tmp_path):
    with pytest.raises(CommandExecutionError) as excinfo:
        Shell(executable=(tmp_path / 'missing').as_posix()).run('echo hi')
    assert isinstance(excinfo.value.__cause__, OSError)
