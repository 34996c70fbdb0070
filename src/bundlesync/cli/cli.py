import logging
import os
import re
from pathlib import Path

import click

from bundlesync.cli.output import error_output, user_output
from bundlesync.core.clean import CleanReport, CleanStatus, clean_bundles
from bundlesync.core.context import BundleSyncContext, create_context
from bundlesync.core.declarations import read_declarations
from bundlesync.core.executables import ExecutableNotFound
from bundlesync.core.options import SyncOptions
from bundlesync.core.registry import build_registry
from bundlesync.core.sync import BundleReport, SyncStatus, sync_bundles

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags
DEBUG_ENV_VAR = "BUNDLESYNC_DEBUG"


def _compile_filter(
    ctx: click.Context, param: click.Parameter, value: str
) -> re.Pattern[str]:
    try:
        return re.compile(value)
    except re.error as e:
        raise click.BadParameter(f"not a valid regular expression: {e}") from e


def format_summary(sync_reports: list[BundleReport], clean_reports: list[CleanReport]) -> str:
    """One line tallying what the run did."""
    cloned = sum(
        1
        for r in sync_reports
        if r.status in (SyncStatus.CLONED, SyncStatus.CLONED_DEFAULT_BRANCH)
    )
    updated = sum(1 for r in sync_reports if r.status == SyncStatus.UPDATED)
    failed = sum(1 for r in sync_reports if r.status.is_failure)
    failed += sum(1 for r in clean_reports if r.status == CleanStatus.FAILED)

    parts = [f"{cloned} cloned", f"{updated} updated"]
    if clean_reports:
        removed = sum(1 for r in clean_reports if r.status == CleanStatus.REMOVED)
        would_remove = sum(1 for r in clean_reports if r.status == CleanStatus.WOULD_REMOVE)
        parts.append(f"{removed} removed" if not would_remove else f"{would_remove} to remove")
    parts.append(f"{failed} failed")

    summary = "Done: " + ", ".join(parts)
    return click.style(summary, fg="red" if failed else "green")


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="bundlesync")
@click.option("-u", "--update", is_flag=True, help="Pull bundles that are already installed.")
@click.option(
    "-f",
    "--filter",
    "filter_pattern",
    default=".",
    show_default=True,
    callback=_compile_filter,
    help="Only sync bundles whose owner/project matches this regular expression.",
)
@click.option(
    "-c", "--clean", is_flag=True, help="Remove bundle directories that are no longer declared."
)
@click.option(
    "-n",
    "--dry-run",
    is_flag=True,
    default=False,
    help="With --clean, only show which directories would be removed.",
)
@click.option(
    "-r",
    "--max-parallel",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of bundles processed at once (default: 12, or config file).",
)
@click.option(
    "--file",
    "declarations_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Vim script declaring the bundles (default: ~/.vim/init.vim).",
)
@click.option(
    "--root",
    "bundle_root",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Directory holding one subdirectory per bundle (default: ~/.vim/bundle).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    update: bool,
    filter_pattern: re.Pattern[str],
    clean: bool,
    dry_run: bool,
    max_parallel: int | None,
    declarations_file: Path | None,
    bundle_root: Path | None,
) -> None:
    """Clone, update and clean the bundles declared in your Vim configuration.

    Individual bundle failures are reported but never change the exit status.
    """
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            created = create_context()
        except ValueError as e:
            error_output(f"Error: {e}")
            raise SystemExit(1) from e
        if isinstance(created, ExecutableNotFound):
            error_output(f"Error: {created.message}")
            raise SystemExit(1)
        ctx.obj = created

    app: BundleSyncContext = ctx.obj
    config = app.global_config
    options = SyncOptions(
        update=update,
        filter_pattern=filter_pattern,
        clean=clean,
        dry_run=dry_run,
        max_parallel=max_parallel if max_parallel is not None else config.max_parallel,
    )
    run_bundlesync(
        app,
        options,
        declarations_file=(declarations_file or config.declarations_file).expanduser(),
        bundle_root=(bundle_root or config.bundle_root).expanduser(),
    )


def run_bundlesync(
    app: BundleSyncContext,
    options: SyncOptions,
    *,
    declarations_file: Path,
    bundle_root: Path,
) -> None:
    """Read declarations, sync, regenerate help tags, then clean if requested.

    Clean runs last: directories created by the sync belong to declared
    bundles, so the order does not change what gets removed.
    """
    try:
        declarations = read_declarations(declarations_file)
    except FileNotFoundError as e:
        error_output(f"Error: declaration file not found: {declarations_file}")
        raise SystemExit(1) from e
    except OSError as e:
        error_output(f"Error: cannot read declaration file {declarations_file}: {e}")
        raise SystemExit(1) from e

    registry = build_registry(declarations)
    for rejected in registry.rejected:
        app.reports.emit(str(rejected))
    logger.debug("Declared bundles: %d, rejected: %d", len(registry), len(registry.rejected))

    sync_reports = sync_bundles(
        registry,
        git=app.git,
        reports=app.reports,
        bundle_root=bundle_root,
        options=options,
    )

    try:
        app.help_index.regenerate(force=options.update)
    except RuntimeError as e:
        logger.warning("Failed generating help tags: %s", e)

    clean_reports: list[CleanReport] = []
    if options.clean:
        clean_reports = clean_bundles(
            registry, bundle_root=bundle_root, dry_run=options.dry_run, reports=app.reports
        )

    user_output(format_summary(sync_reports, clean_reports))


def main() -> None:
    """CLI entry point used by the `bundlesync` console script."""
    if os.environ.get(DEBUG_ENV_VAR):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")
    cli()
