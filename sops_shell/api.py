import pathlib
import typing

from .sync import Summary, Synchronizer


def sync(paths: typing.Sequence[pathlib.Path]) -> Summary:
    return Synchronizer().process_files(paths, dry_run=False)


def check(paths: typing.Sequence[pathlib.Path]) -> Summary:
    return Synchronizer().process_files(paths, dry_run=True)
