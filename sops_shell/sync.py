import logging
import pathlib
import typing

import attr
import click

from .parser import CommandMapping, extract_value, scan
from .shell import Shell
from .sops import Sops
from .utils import (
    CommandExecutionError,
    DecryptError,
    EncodingError,
    ParseError,
    SetValueError,
    has_comments,
    rel,
)

log = logging.getLogger(__name__)

Result = typing.Tuple[int, int]


@attr.s(frozen=True)
class PendingUpdate:
    key: str = attr.ib()
    value: str = attr.ib()


@attr.s(frozen=True)
class Summary:
    files: int = attr.ib(default=0)
    secrets: int = attr.ib(default=0)
    updates: int = attr.ib(default=0)

    def __add__(self, result: Result) -> 'Summary':
        secrets, updates = result
        return Summary(
            files=self.files + 1,
            secrets=self.secrets + secrets,
            updates=self.updates + updates)

    def report(self, dry_run: bool) -> None:
        click.echo(f"\n{'=' * 60}")
        click.echo("Summary:")
        if dry_run:
            click.echo(f"  Files checked: {self.files}")
            click.echo(f"  Secrets checked: {self.secrets}")
            click.echo(f"  Secrets out of sync: {self.updates}")
            if self.updates:
                click.secho("\nRun 'sops-shell sync <files>' to update", fg='yellow')
        else:
            click.echo(f"  Files processed: {self.files}")
            click.echo(f"  Secrets checked: {self.secrets}")
            click.echo(f"  Secrets updated: {self.updates}")


def error_chain(error: BaseException) -> typing.Iterator[str]:
    current: typing.Optional[BaseException] = error
    while current is not None:
        yield str(current)
        current = current.__cause__


@attr.s(frozen=True)
class Synchronizer:
    sops: Sops = attr.ib(factory=Sops)
    shell: Shell = attr.ib(factory=Shell)
    prescan_lines: int = attr.ib(default=100)

    def process_files(
            self,
            paths: typing.Sequence[pathlib.Path],
            dry_run: bool = False) -> Summary:
        summary = Summary()
        for path in paths:
            summary += self.process_file(path, dry_run=dry_run)
        summary.report(dry_run)
        return summary

    def process_file(self, path: pathlib.Path, dry_run: bool = False) -> Result:
        """
        Check every annotated secret in a file and update any that changed.

        Problems with the file or with individual secrets are reported and
        never raised. Returns the number of secrets found and the number that
        were out of sync.
        """
        click.echo(f"\nProcessing {rel(path)}...")

        if not has_comments(path, self.prescan_lines):
            click.echo(f"  No comments in the first {self.prescan_lines} lines, skipping")
            return 0, 0

        try:
            decrypted = self.sops.decrypt(path)
        except (DecryptError, EncodingError) as error:
            self.file_error('decrypt', error)
            return 0, 0

        try:
            mappings = scan(decrypted)
        except ParseError as error:
            self.file_error('parse commands', error)
            return 0, 0

        if not mappings:
            click.echo("  No secrets with 'shell:' commands found")
            return 0, 0

        click.echo(f"  Found {len(mappings)} secrets with commands\n")

        updates = [u for u in (self.compare(m, decrypted) for m in mappings) if u]

        if not updates:
            click.secho("\n  All secrets in sync", fg='green')
        elif dry_run:
            click.echo(f"\n  Would update {len(updates)} secrets (dry run)")
        else:
            self.write(path, updates)

        return len(mappings), len(updates)

    def compare(
            self,
            mapping: CommandMapping,
            decrypted: str) -> typing.Optional[PendingUpdate]:
        click.echo(f"  {click.style(mapping.key, bold=True)}")
        click.echo(f"    Command: {mapping.command}")

        try:
            value = self.shell.run(mapping.command)
        except (CommandExecutionError, EncodingError) as error:
            click.secho("    Error: Command failed", fg='red')
            for message in error_chain(error):
                click.secho(f"    {message}", fg='red')
            return None

        if value == extract_value(decrypted, mapping.key):
            click.echo(f"    Status: {click.style('IN SYNC', fg='green')}")
            return None

        click.echo(f"    Status: {click.style('OUT OF SYNC', fg='yellow')}")
        return PendingUpdate(key=mapping.key, value=value)

    def write(self, path: pathlib.Path, updates: typing.Sequence[PendingUpdate]) -> None:
        click.echo(f"\n  Updating {len(updates)} secrets...")
        for update in updates:
            try:
                self.sops.set(path, update.key, update.value)
            except SetValueError as error:
                click.secho(f"    Error updating {update.key}: {error.message}", fg='red')
                continue
            click.echo(f"    Updated {update.key}")
        click.echo(f"\n  Updated {rel(path)}")

    @staticmethod
    def file_error(operation: str, error: Exception) -> None:
        click.secho(f"  Error: Failed to {operation}: {error}", fg='red')
