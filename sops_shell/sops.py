import json
import logging
import pathlib
import shutil
import subprocess
import typing

import attr

from .utils import DecryptError, EncodingError, SetValueError, SopsShellException

log = logging.getLogger(__name__)


def reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


def format_value(value: str) -> str:
    """
    Format a value for 'sops --set'.

    Values that are valid JSON keep their type, so '8080' stays a number and
    'true' a boolean. Anything else, including NaN and Infinity, is written
    as a string.
    """
    try:
        return json.dumps(json.loads(value, parse_constant=reject_constant))
    except ValueError:
        return json.dumps(value)


@attr.s(frozen=True)
class Sops:
    binary: str = attr.ib(default='sops')
    verbose: bool = attr.ib(default=False)
    config: typing.Optional[pathlib.Path] = attr.ib(default=None)

    def command(self, arguments: typing.Sequence[str]) -> typing.Tuple[str, ...]:
        command: typing.Tuple[str, ...] = (self.binary,)
        if self.verbose:
            command = (*command, '--verbose')
        if self.config:
            command = (*command, '--config', str(self.config))
        return (*command, *arguments)

    def run(
            self,
            arguments: typing.Sequence[str],
            error: typing.Type[SopsShellException]) -> bytes:
        if shutil.which(self.binary) is None:
            raise error(
                "SOPS command not found. Please install SOPS or ensure it's in PATH")

        try:
            return subprocess.run(
                self.command(arguments),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True).stdout
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode('utf-8', errors='replace').strip()
            for line in stderr.splitlines():
                log.debug(line)
            raise error(f"SOPS command failed: {stderr}") from exc
        except OSError as exc:
            raise error(f"Failed to execute {self.binary}") from exc

    def decrypt(self, path: pathlib.Path) -> str:
        log.debug(f"Decrypting {path}")
        stdout = self.run(['--decrypt', str(path)], error=DecryptError)
        try:
            return stdout.decode('utf-8')
        except UnicodeDecodeError as error:
            raise EncodingError(f"Decrypted {path} is not valid UTF-8") from error

    def set(self, path: pathlib.Path, key: str, value: str) -> None:
        log.debug(f"Setting {key} in {path}")
        self.run([
            '--set', f'["{key}"] {format_value(value)}',
            str(path),
        ], error=SetValueError)
