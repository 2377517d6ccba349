"""
Configuration adapter for transcoding settings.

Centralizes access to Django settings and environment variables,
ensuring consistent configuration across CLI and web app.
"""
from pathlib import Path

from django.conf import settings

from downloads.service.constants import (
    DEFAULT_FILE_BASE,
    DEFAULT_FILE_NAME_MAX_BYTES,
    DEFAULT_TRANSCODE_TIMEOUT,
    FILESYSTEM_NAME_MAX_BYTES,
    TEMP_TOKEN_SIZE,
)


def get_ffmpeg_binary():
    """Get the ffmpeg executable name or path"""
    return getattr(settings, 'VIDGRAB_FFMPEG_BINARY', None) or 'ffmpeg'


def get_transcode_timeout():
    """
    Get the transcode deadline in seconds.

    Returns:
        float: Seconds before a running ffmpeg process is killed
    """
    value = getattr(settings, 'VIDGRAB_TRANSCODE_TIMEOUT', None)
    if value in (None, ''):
        return float(DEFAULT_TRANSCODE_TIMEOUT)
    return float(value)


def get_scratch_dir():
    """
    Get the scratch directory for temporary transcoder output.

    Returns:
        Path: Directory the orchestrator writes temporary MP4 files to
    """
    return Path(settings.VIDGRAB_SCRATCH_DIR)


def get_default_file_base():
    """Get the base name used when the caller supplies no file name"""
    return getattr(settings, 'VIDGRAB_DEFAULT_FILE_BASE', None) or DEFAULT_FILE_BASE


def get_log_path():
    """Get the download log file path, or None when file logging is disabled"""
    return getattr(settings, 'VIDGRAB_LOG_PATH', None) or None


def get_file_name_max_bytes():
    """
    Get the maximum UTF-8 length of a derived file name, extension included.

    Capped so '<token>_<file name>' still fits in one filesystem name.

    Returns:
        int: Maximum file name length in bytes
    """
    value = getattr(settings, 'VIDGRAB_FILE_NAME_MAX_BYTES', None)
    if value in (None, ''):
        value = DEFAULT_FILE_NAME_MAX_BYTES
    return max(16, min(int(value), FILESYSTEM_NAME_MAX_BYTES - TEMP_TOKEN_SIZE - 1))
