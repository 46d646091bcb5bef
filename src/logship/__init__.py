"""logship - ship rotated log files to S3-compatible object storage."""

__version__ = "0.1.0"

from .config import UploaderConfig  # noqa: E402
from .core.folder import FolderOverride, extra_folder  # noqa: E402
from .core.key_formatter import format_key, render_folder  # noqa: E402
from .core.models import UploaderStats, UploadJob, WorkerState  # noqa: E402
from .core.uploader import S3Uploader  # noqa: E402
from .handlers import S3RotatingFileHandler, S3TimedRotatingFileHandler  # noqa: E402

__all__ = [
    "UploaderConfig",
    "S3Uploader",
    "UploadJob",
    "UploaderStats",
    "WorkerState",
    "FolderOverride",
    "extra_folder",
    "format_key",
    "render_folder",
    "S3RotatingFileHandler",
    "S3TimedRotatingFileHandler",
]
