import logging
import pathlib
import typing

import click

from . import __doc__, __version__
from .shell import Shell
from .sops import Sops
from .sync import Synchronizer
from .utils import MissingFileError

log = logging.getLogger(__name__)


class PathType(click.Path):
    def convert(self, value, param, ctx):
        return pathlib.Path(super().convert(value, param, ctx))


files_argument = click.argument(
    'files',
    type=PathType(dir_okay=False),
    required=True,
    nargs=-1)


def require_files(files: typing.Sequence[pathlib.Path]) -> None:
    """Fail before doing anything if any of the files are missing."""
    for path in files:
        if not path.exists():
            raise MissingFileError(path)


@click.group(help=__doc__)
@click.version_option(version=__version__, prog_name='sops-shell')
@click.option(
    '-d', '--debug', 'debug',
    default=False,
    is_flag=True,
    help="Enable debug logging.")
@click.option(
    '-v', '--verbose', 'sops_verbose',
    default=False,
    is_flag=True,
    help="Run sops with --verbose.")
@click.option(
    '--sops', 'sops_binary',
    metavar='PATH',
    envvar='SOPS_SHELL_SOPS',
    default='sops',
    show_default=True,
    help="The sops executable.")
@click.option(
    '--sops-config', 'sops_config',
    type=PathType(dir_okay=False, exists=True),
    envvar='SOPS_SHELL_CONFIG',
    default=None,
    help="Forwarded directly to sops --config.")
@click.option(
    '--shell', 'shell',
    metavar='PATH',
    envvar='SOPS_SHELL_SHELL',
    default='sh',
    show_default=True,
    help="Shell used to run commands as '<shell> -c <command>'.")
@click.pass_context
def main(
        ctx,
        debug: bool,
        sops_verbose: bool,
        sops_binary: str,
        sops_config: typing.Optional[pathlib.Path],
        shell: str):
    logging.basicConfig(level=(logging.DEBUG if debug else logging.WARNING))
    ctx.obj = Synchronizer(
        sops=Sops(binary=sops_binary, verbose=sops_verbose, config=sops_config),
        shell=Shell(executable=shell))


@main.command()
def version():
    """Show the application version."""
    click.echo(f"sops-shell {__version__}")


@main.command()
@files_argument
@click.pass_obj
def sync(synchronizer: Synchronizer, files: typing.Sequence[pathlib.Path]):
    """
    Update secrets that don't match the output of their commands.

    Failures to decrypt a file, run a command or set a value are reported and
    the remaining secrets are still processed.
    """
    require_files(files)
    synchronizer.process_files(files, dry_run=False)


@main.command()
@files_argument
@click.pass_obj
def check(synchronizer: Synchronizer, files: typing.Sequence[pathlib.Path]):
    """Report secrets that don't match the output of their commands."""
    require_files(files)
    synchronizer.process_files(files, dry_run=True)
