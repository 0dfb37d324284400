"""File utilities for Google Photos Downloader."""

import os
import re
from datetime import datetime

# Fractions beyond microseconds are dropped; the API reports up to nanoseconds
_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)


def parse_creation_time(value: str) -> datetime:
    """Parse an RFC 3339 timestamp as reported by the Google Photos API.

    Args:
        value: Timestamp such as "2021-03-05T10:00:00Z" or
            "2014-10-02T15:01:23.045123456+02:00"

    Returns:
        Timezone-aware datetime, kept in the offset of the timestamp

    Raises:
        ValueError: If the value is not a valid RFC 3339 timestamp
    """
    match = _RFC3339_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid RFC 3339 timestamp: {value!r}")

    offset = match.group("offset")
    if offset in ("Z", "z"):
        offset = "+00:00"
    fraction = match.group("fraction")
    fraction = f".{fraction[:6].ljust(6, '0')}" if fraction else ""

    return datetime.fromisoformat(match.group("base").replace(" ", "T") + fraction + offset)


def dated_directory(root_dir: str, when: datetime) -> str:
    """Get the YYYY/MM directory below root_dir for a capture time."""
    return os.path.join(root_dir, f"{when.year:04d}", f"{when.month:02d}")


def disambiguate_filename(filename: str, item_id: str) -> str:
    """Insert the item id before the file extension.

    Args:
        filename: Original filename, e.g. "img.jpg"
        item_id: Remote identifier of the item

    Returns:
        Filename such as "img-<item_id>.jpg"
    """
    stem, ext = os.path.splitext(filename)
    return f"{stem}-{item_id}{ext}"
