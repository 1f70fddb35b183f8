import functools
import itertools
import logging
import os.path
import pathlib

import click

log = logging.getLogger(__name__)

COMMENT_PREFIXES = ('#', ';')


@functools.lru_cache()
def rel(path: pathlib.Path) -> str:
    """
    Convert a path to a relative Path.

    Returns a string as these should only be used for presentation.
    """
    return os.path.relpath(path.as_posix(), pathlib.Path.cwd().as_posix())


def is_comment(line: str) -> bool:
    return line.strip().startswith(COMMENT_PREFIXES)


def has_comments(path: pathlib.Path, limit: int) -> bool:
    """
    Check if any of the first lines of a file look like comments.

    Files that can't be read are assumed to have comments, leaving the
    decision to sops.
    """
    try:
        with path.open(encoding='utf-8', errors='replace') as f:
            return any(is_comment(line) for line in itertools.islice(f, limit))
    except OSError as error:
        log.debug(f"Could not pre-scan {path}: {error}")
        return True


class SopsShellException(click.ClickException):
    pass


class MissingFileError(SopsShellException):
    def __init__(self, path: pathlib.Path):
        super().__init__(f"File not found: {path}")
        self.path = path


class DecryptError(SopsShellException):
    pass


class ParseError(SopsShellException):
    pass


class CommandExecutionError(SopsShellException):
    pass


class SetValueError(SopsShellException):
    pass


class EncodingError(SopsShellException):
    pass
