"""
Find 'shell:' directives in decrypted files and read the values they annotate.

Neither function understands YAML, JSON, ENV or INI. Both work line by line,
which is enough to pair a comment with the key below it but means a key that
is a prefix of another key (``token`` and ``token_id``) can match the wrong
line when extracting values.
"""

import logging
import re
import typing

import attr

from .utils import ParseError, is_comment

log = logging.getLogger(__name__)

DIRECTIVE = re.compile(r'^\s*[#;]\s*shell:\s*(.+)$')
KEY = re.compile(r'^\s*([^:=\s]+)\s*[:=]')


def split_lines(text: str) -> typing.List[str]:
    """Split on newlines only, dropping the carriage return of CRLF endings."""
    return [line.rstrip('\r') for line in text.split('\n')]


@attr.s(frozen=True)
class CommandMapping:
    key: str = attr.ib()
    command: str = attr.ib()


def scan(plaintext: str) -> typing.Sequence[CommandMapping]:
    """Pair every directive with the key on the next non-blank line."""
    if not isinstance(plaintext, str):
        raise ParseError(f"Expected decrypted text, got {type(plaintext).__name__}")

    lines = split_lines(plaintext)
    mappings: typing.List[CommandMapping] = []

    for index, line in enumerate(lines):
        match = DIRECTIVE.match(line.strip())
        if not match:
            continue

        command = match.group(1).strip()
        if not command:
            continue

        key = next_key(lines, index + 1)
        if key is None:
            log.debug(f"Directive on line {index + 1} is not followed by a key")
            continue

        mappings.append(CommandMapping(key=key, command=command))

    return tuple(mappings)


def next_key(lines: typing.Sequence[str], start: int) -> typing.Optional[str]:
    for line in lines[start:]:
        stripped = line.strip()
        if not stripped:
            continue
        # A directive followed by another comment doesn't bind to anything.
        if is_comment(stripped):
            return None
        match = KEY.match(stripped)
        return match.group(1) if match else None
    return None


def extract_value(plaintext: str, key: str) -> typing.Optional[str]:
    """
    Return the value of the first line that starts with the key.

    Surrounding double quotes are removed, nothing else is unescaped.
    """
    for line in split_lines(plaintext):
        stripped = line.strip()
        if not stripped or is_comment(stripped):
            continue
        if not stripped.startswith(key):
            continue

        rest = stripped[len(key):].lstrip()
        if not rest.startswith((':', '=')):
            continue

        return unquote(rest[1:].strip())
    return None


def unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value
