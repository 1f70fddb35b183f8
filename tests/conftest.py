import pathlib
import stat
import typing

import attr
import click.testing
import pytest

import sops_shell.cli
from sops_shell.shell import Shell
from sops_shell.sync import Synchronizer
from sops_shell.utils import DecryptError, SetValueError

FAKE_SOPS = """#!/bin/sh
while [ "$1" = "--verbose" ]; do shift; done
case "$1" in
    --version)
        echo "sops 3.9.0" ;;
    --decrypt)
        case "$2" in
            *broken*) echo "Failed to get the data key" >&2; exit 128 ;;
        esac
        cat "$2" ;;
    --set)
        printf '%s\\n' "$2" >> "$3.set" ;;
    *)
        exit 1 ;;
esac
"""


@pytest.fixture()
def fake_sops(tmp_path: pathlib.Path) -> pathlib.Path:
    """A sops stand-in that 'decrypts' by printing the file and records --set calls."""
    path = tmp_path / 'bin' / 'sops'
    path.parent.mkdir()
    path.write_text(FAKE_SOPS)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def write(tmp_path: pathlib.Path):
    def write_func(name: str, text: str) -> pathlib.Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return write_func


@pytest.fixture()
def invoke(fake_sops: pathlib.Path):
    def invoke_func(arguments: typing.Sequence[str], exit_code: int = 0):
        assert all(isinstance(arg, str) for arg in arguments)
        runner = click.testing.CliRunner()
        result = runner.invoke(
            sops_shell.cli.main,
            ['--sops', fake_sops.as_posix(), *arguments])
        if result.exit_code != exit_code:
            message = f"Command sops-shell {' '.join(arguments)} exited with {result.exit_code}"
            raise Exception(message) from result.exception
        return result.output.splitlines()

    return invoke_func


@attr.s
class FakeSops:
    """Reads files as if they were already decrypted and records updates."""
    broken: typing.Set[pathlib.Path] = attr.ib(factory=set)
    failing_keys: typing.Set[str] = attr.ib(factory=set)
    decrypted: typing.List[pathlib.Path] = attr.ib(factory=list)
    updates: typing.List[typing.Tuple[pathlib.Path, str, str]] = attr.ib(factory=list)

    def decrypt(self, path: pathlib.Path) -> str:
        self.decrypted.append(path)
        if path in self.broken:
            raise DecryptError("SOPS command failed: Failed to get the data key")
        return path.read_text()

    def set(self, path: pathlib.Path, key: str, value: str) -> None:
        if key in self.failing_keys:
            raise SetValueError(f"SOPS command failed: could not set {key}")
        self.updates.append((path, key, value))


@pytest.fixture()
def sops() -> FakeSops:
    return FakeSops()


@pytest.fixture()
def synchronizer(sops: FakeSops) -> Synchronizer:
    return Synchronizer(sops=sops, shell=Shell())  # type: ignore
