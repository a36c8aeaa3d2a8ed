"""Command-line interface for gdrivesync.

Provides commands for:
- upload: Upload a file, a directory tree or stdin to Google Drive
- download: Download a file or a folder tree from Google Drive
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click

from gdrivesync.config import (
    DOWNLOAD_MAX_RETRIES,
    MAX_DELAY_SEC,
    MIN_DELAY_SEC,
    UPLOAD_MAX_RETRIES,
    AppConfig,
    build_delegate_config,
)
from gdrivesync.drive.delegate import ChunkSize
from gdrivesync.errors import GDriveSyncError, InvalidChunkSizeError, format_error_chain
from gdrivesync.manager import GoogleDriveSync
from gdrivesync.models import DirectoryTransferResult, DriveFile
from gdrivesync.util.size import format_size

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            force=True,
        )
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s", force=True)
        # Request-level chatter from the client libraries.
        logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def open_sync(config: AppConfig) -> GoogleDriveSync:
    return GoogleDriveSync(config.auth_info)


def _parse_chunk_size(ctx: click.Context, param: click.Parameter, value: Any) -> ChunkSize:
    if value is None:
        return ChunkSize.default()
    try:
        return ChunkSize.parse(value)
    except InvalidChunkSizeError as exc:
        raise click.BadParameter(str(exc)) from exc


def _fail(exc: GDriveSyncError) -> None:
    click.echo(f"Error: {format_error_chain(exc)}", err=True)
    sys.exit(1)


def transfer_options(default_max_retries: int):
    """Options shared by upload and download."""

    def decorator(f):
        f = click.option(
            "--chunk-size",
            callback=_parse_chunk_size,
            default=None,
            metavar="MIB",
            help="Chunk size in MiB, a power of 2 between 1 and 8192 [default: 32].",
        )(f)
        f = click.option(
            "--max-retries",
            type=click.IntRange(min=0),
            default=default_max_retries,
            show_default=True,
            help="Retries per chunk before giving up.",
        )(f)
        f = click.option(
            "--min-delay",
            type=click.FloatRange(min=0),
            default=MIN_DELAY_SEC,
            show_default=True,
            help="Initial retry delay in seconds.",
        )(f)
        f = click.option(
            "--max-delay",
            type=click.FloatRange(min=0),
            default=MAX_DELAY_SEC,
            show_default=True,
            help="Maximum retry delay in seconds.",
        )(f)
        f = click.option(
            "--print-chunk-errors",
            is_flag=True,
            help="Print errors of failed chunk attempts.",
        )(f)
        f = click.option(
            "--print-chunk-info",
            is_flag=True,
            help="Print details about every chunk sent.",
        )(f)
        return f

    return decorator


@click.group()
@click.version_option(package_name="gdrivesync")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding client_secrets.json and token.json.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_dir: Optional[Path]) -> None:
    """gdrivesync - upload and download files and folders on Google Drive."""
    setup_logging(verbose)
    ctx.obj = AppConfig.load(config_dir)


@cli.command()
@click.argument(
    "file_path",
    required=False,
    type=click.Path(exists=True, path_type=Path),
)
@click.option("--parent", "parents", multiple=True, metavar="ID", help="Parent folder id (repeatable).")
@click.option("--mime", "mime_type", default=None, metavar="TYPE", help="Force the mime type.")
@click.option("-r", "--recursive", is_flag=True, help="Upload directories.")
@click.option("--print-only-id", is_flag=True, help="Print only the id of the uploaded file.")
@transfer_options(UPLOAD_MAX_RETRIES)
@click.pass_obj
def upload(
    config: AppConfig,
    file_path: Optional[Path],
    parents: tuple[str, ...],
    mime_type: Optional[str],
    recursive: bool,
    print_only_id: bool,
    chunk_size: ChunkSize,
    max_retries: int,
    min_delay: float,
    max_delay: float,
    print_chunk_errors: bool,
    print_chunk_info: bool,
) -> None:
    """Upload FILE_PATH, or stdin when FILE_PATH is omitted."""
    if max_delay < min_delay:
        raise click.BadParameter("--max-delay must be >= --min-delay")

    delegate_config = build_delegate_config(
        chunk_size=chunk_size,
        max_retries=max_retries,
        min_delay=min_delay,
        max_delay=max_delay,
        print_chunk_errors=print_chunk_errors,
        print_chunk_info=print_chunk_info,
    )

    try:
        sync = open_sync(config)
        result = sync.upload(
            file_path,
            parents=parents,
            mime_type=mime_type,
            recursive=recursive,
            delegate_config=delegate_config,
            on_item_uploaded=_echo_uploaded_item if print_only_id else None,
        )
    except GDriveSyncError as exc:
        _fail(exc)
        return

    if isinstance(result, DriveFile):
        if print_only_id:
            click.echo(result.id)
        else:
            click.echo(f"Id: {result.id}")
            click.echo(f"Name: {result.name}")
        return

    if not print_only_id:
        _echo_directory_result(result)


@cli.command()
@click.argument("file_id")
@click.option("--overwrite", is_flag=True, help="Overwrite existing files.")
@click.option("--follow-shortcuts", is_flag=True, help="Download the target of a shortcut.")
@click.option("-r", "--recursive", is_flag=True, help="Download directories.")
@click.option(
    "--destination",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to download into [default: current directory].",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Write the file content to stdout.")
@transfer_options(DOWNLOAD_MAX_RETRIES)
@click.pass_obj
def download(
    config: AppConfig,
    file_id: str,
    overwrite: bool,
    follow_shortcuts: bool,
    recursive: bool,
    destination: Optional[Path],
    to_stdout: bool,
    chunk_size: ChunkSize,
    max_retries: int,
    min_delay: float,
    max_delay: float,
    print_chunk_errors: bool,
    print_chunk_info: bool,
) -> None:
    """Download the file or folder FILE_ID."""
    if max_delay < min_delay:
        raise click.BadParameter("--max-delay must be >= --min-delay")

    delegate_config = build_delegate_config(
        chunk_size=chunk_size,
        max_retries=max_retries,
        min_delay=min_delay,
        max_delay=max_delay,
        print_chunk_errors=print_chunk_errors,
        print_chunk_info=print_chunk_info,
    )

    try:
        sync = open_sync(config)
        result = sync.download(
            file_id,
            destination=destination,
            overwrite=overwrite,
            follow_shortcuts=follow_shortcuts,
            recursive=recursive,
            to_stdout=to_stdout,
            delegate_config=delegate_config,
        )
    except GDriveSyncError as exc:
        _fail(exc)
        return

    if isinstance(result, DirectoryTransferResult):
        logger.info(
            "%d files downloaded, %d already up to date",
            result.transferred_count,
            result.skipped_count,
        )


def _echo_uploaded_item(relative_path: Path, drive_id: str) -> None:
    click.echo(f"{relative_path}: {drive_id}")


def _echo_directory_result(result: DirectoryTransferResult) -> None:
    for folder in result.folders:
        click.echo(f"{folder.drive_id}  {folder.relative_path}/")
    for file in result.files:
        click.echo(f"{file.drive_id}  {file.relative_path}  {format_size(file.size)}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
