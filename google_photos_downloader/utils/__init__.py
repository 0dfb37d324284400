"""Utility functions for Google Photos Downloader."""

from .auth import authenticate_google_photos, get_credentials
from .file_utils import dated_directory, disambiguate_filename, parse_creation_time
from .retry import TRANSIENT_STATUS_CODES, RetryPolicy, status_code_of

__all__ = [
    "authenticate_google_photos",
    "get_credentials",
    "dated_directory",
    "disambiguate_filename",
    "parse_creation_time",
    "TRANSIENT_STATUS_CODES",
    "RetryPolicy",
    "status_code_of",
]
