"""Command line entry point for logship."""

from __future__ import annotations

import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

import click
from pydantic import ValidationError

from logship import __version__
from logship.config import UploaderConfig
from logship.core.constants import ENV_PREFIX
from logship.core.key_formatter import format_key
from logship.core.uploader import S3Uploader
from logship.utils.identifier import get_identifier
from logship.utils.logging import configure_logging, get_logger
from logship.utils.signals import restore_signal_handlers, setup_signal_handlers


def _load_config(config_path: Optional[Path], overrides: dict[str, Any]) -> UploaderConfig:
    """YAML file (or LOGSHIP_* env) first, then command line overrides."""
    try:
        if config_path is not None:
            base = UploaderConfig.from_yaml(config_path).model_dump()
        elif os.getenv(f"{ENV_PREFIX}BUCKET"):
            base = UploaderConfig.from_env().model_dump()
        else:
            base = {}
        base.update({k: v for k, v in overrides.items() if v is not None})
        return UploaderConfig.model_validate(base)
    except (ValidationError, ValueError) as exc:
        raise click.UsageError(f"Invalid configuration: {exc}") from exc


def _connection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="YAML config file (defaults to LOGSHIP_* env vars).",
        ),
        click.option("--bucket", help="Destination bucket."),
        click.option("--folder", help="Key folder template, e.g. logs/%d{yyyy/MM}."),
        click.option("--region", help="S3 region."),
        click.option("--endpoint", help="Custom S3-compatible endpoint URL."),
        click.option("--access-key", help="Static access key."),
        click.option("--secret-key", help="Static secret key."),
        click.option(
            "--prefix-timestamp/--no-prefix-timestamp",
            default=None,
            help="Prefix file names with yyyyMMdd_HHmmss_.",
        ),
        click.option(
            "--prefix-identifier/--no-prefix-identifier",
            default=None,
            help="Prefix file names with this host's identifier.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(__version__, prog_name="logship")
@click.option(
    "--log-level",
    default=lambda: os.getenv("LOG_LEVEL", "INFO"),
    show_default="INFO",
    help="Log level.",
)
@click.option("--json-logs/--console-logs", default=False, help="Log output format.")
def cli(log_level: str, json_logs: bool) -> None:
    """Ship log files to S3-compatible object storage."""
    configure_logging(level=log_level, json_output=json_logs)


@cli.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
)
@_connection_options
@click.option("--extra-folder", help="Extra folder segment after the folder template.")
@click.option(
    "--force-timestamp",
    is_flag=True,
    help="Always prefix the timestamp, whatever the config says.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds to wait for uploads before cancelling.",
)
@click.pass_context
def upload(
    ctx: click.Context,
    files: tuple[Path, ...],
    config_path: Optional[Path],
    extra_folder: Optional[str],
    force_timestamp: bool,
    timeout: Optional[float],
    **overrides: Any,
) -> None:
    """Upload FILES, wait for them and exit non-zero on any failure."""
    logger = get_logger(__name__)
    config = _load_config(config_path, overrides)
    uploader = S3Uploader(config)

    previous_handlers = None
    if threading.current_thread() is threading.main_thread():
        previous_handlers = setup_signal_handlers(uploader)

    queued = []
    try:
        for path in files:
            timestamp = datetime.now()
            job = uploader.build_job(path, timestamp, force_timestamp, extra_folder)
            if job is None:
                click.echo(f"skipped {path}: missing or empty", err=True)
                continue
            future = uploader.enqueue(job)
            if future is None:
                click.echo(f"skipped {path}: uploader stopping", err=True)
                continue
            queued.append((job, future))
    finally:
        drained = uploader.shutdown(timeout)
        if previous_handlers is not None:
            restore_signal_handlers(previous_handlers)

    failures = 0
    for job, future in queued:
        ok = future.done() and not future.cancelled() and future.result()
        if ok:
            click.echo(f"uploaded {job.file_path} -> {job.uri}")
        else:
            failures += 1
            click.echo(f"failed {job.file_path} -> {job.uri}", err=True)

    logger.info("cli_upload_finished", queued=len(queued), failed=failures, drained=drained)
    if failures:
        ctx.exit(1)


@cli.command()
@click.argument("file_name")
@click.option("--folder", help="Key folder template.")
@click.option("--extra-folder", help="Extra folder segment.")
@click.option(
    "--at",
    "timestamp",
    type=click.DateTime(),
    help="Timestamp to render (default: now).",
)
@click.option("--prefix-timestamp", is_flag=True, help="Add the timestamp prefix.")
@click.option("--identifier", help="Identifier prefix to use.")
@click.option(
    "--prefix-identifier",
    is_flag=True,
    help="Add this host's identifier as prefix.",
)
def key(
    file_name: str,
    folder: Optional[str],
    extra_folder: Optional[str],
    timestamp: Optional[datetime],
    prefix_timestamp: bool,
    identifier: Optional[str],
    prefix_identifier: bool,
) -> None:
    """Print the object key FILE_NAME would be uploaded under."""
    if prefix_identifier and not identifier:
        identifier = get_identifier()
    click.echo(
        format_key(
            file_name,
            timestamp or datetime.now(),
            folder=folder,
            extra_folder=extra_folder,
            prefix_timestamp=prefix_timestamp,
            identifier=identifier,
        )
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
