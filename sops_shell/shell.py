import logging
import os
import subprocess
import typing

import attr

from .utils import CommandExecutionError, EncodingError

log = logging.getLogger(__name__)


def environment_snapshot() -> typing.Dict[str, str]:
    return dict(os.environ)


@attr.s(frozen=True)
class Shell:
    """
    Runs commands with '<executable> -c <command>'.

    Commands get a copy of the environment taken when the Shell was created and
    share our stdin, so they can prompt for passwords. There is no timeout.
    """
    executable: str = attr.ib(default='sh')
    environment: typing.Mapping[str, str] = attr.ib(factory=environment_snapshot)

    def command(self, command: str) -> typing.Tuple[str, ...]:
        return (self.executable, '-c', command)

    def run(self, command: str) -> str:
        log.debug(f"Running {command!r}")
        try:
            result = subprocess.run(
                self.command(command),
                env=dict(self.environment),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE)
        except OSError as error:
            raise CommandExecutionError(
                f"Failed to execute command with {self.executable}") from error

        if result.returncode != 0:
            stderr = result.stderr.decode('utf-8', errors='replace').strip()
            log.debug(f"Command exited with status {result.returncode}")
            raise CommandExecutionError(f"Command failed: {stderr}")

        try:
            return result.stdout.decode('utf-8').strip()
        except UnicodeDecodeError as error:
            raise EncodingError("Command output is not valid UTF-8") from error
