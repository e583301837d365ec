"""git-local-backup command line."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click

from ._version import __version__
from .config import load_config, merge_config
from .exceptions import BackupError
from .manager import BackupManager
from .models.backup import ReconcileResult

_ENV_PREFIX = "GIT_LOCAL_BACKUP_"


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def _echo_dry_run(result: ReconcileResult) -> None:
    click.echo("Simulating changes to backup directory:")
    click.echo()
    for action in result.actions:
        if action.op == "copy":
            click.echo(f"+ {action.path}")
        elif action.op == "delete":
            click.echo(f"- {action.path}")
        else:
            click.echo(f"- {action.path}{os.sep}")


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog="Options given on the command line override values from --config.",
)
@click.option(
    "--projects-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=f"{_ENV_PREFIX}PROJECTS_DIR",
    help="Directory holding one git project per subdirectory (required).",
)
@click.option(
    "--backup-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=f"{_ENV_PREFIX}BACKUP_DIR",
    help="Backup directory owned by this tool (required). "
    "Files in it that are not part of any project backup are removed.",
)
@click.option(
    "--remote-branch",
    metavar="NAME",
    envvar=f"{_ENV_PREFIX}REMOTE",
    help="Remote to compare branches against.  [default: origin]",
)
@click.option(
    "--force-include",
    multiple=True,
    metavar="PATH",
    help='Always include a git-ignored file or directory such as ".git". Repeatable.',
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the changes without modifying the backup directory.",
)
@click.option(
    "--compare-permissions",
    is_flag=True,
    help="Re-copy files whose permission bits differ even if their content matches.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=f"{_ENV_PREFIX}CONFIG",
    help="YAML file with default values for the options above.",
)
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
@click.version_option(__version__, prog_name="git-local-backup")
def main(
    projects_dir: Path | None,
    backup_dir: Path | None,
    remote_branch: str | None,
    force_include: tuple[str, ...],
    dry_run: bool,
    compare_permissions: bool,
    config_path: Path | None,
    verbose: int,
) -> None:
    """Copy every unpushed file of your git projects to a backup directory.

    \b
    Only files that could be lost in an incident are copied:
      - committed files not yet pushed to the remote
      - staged and working-tree changes not yet committed
      - files not yet tracked by "git add"
      - git-ignored files named with --force-include

    Unchanged files are skipped, and files that no longer need a backup
    are removed from the backup directory.
    """
    _configure_logging(verbose)

    try:
        file_values = load_config(config_path) if config_path is not None else {}
    except BackupError as exc:
        raise click.ClickException(str(exc)) from exc

    if not (projects_dir or file_values.get("projects-dir") or file_values.get("projects_dir")):
        raise click.UsageError("Missing option '--projects-dir'.")
    if not (backup_dir or file_values.get("backup-dir") or file_values.get("backup_dir")):
        raise click.UsageError("Missing option '--backup-dir'.")

    try:
        config = merge_config(
            file_values,
            projects_dir=projects_dir,
            backup_dir=backup_dir,
            remote_branch=remote_branch,
            force_include=list(force_include) or None,
            dry_run=dry_run or None,
            compare_permissions=compare_permissions or None,
        )
        result = BackupManager(config).run()
    except BackupError as exc:
        raise click.ClickException(str(exc)) from exc

    if config.dry_run:
        _echo_dry_run(result)
