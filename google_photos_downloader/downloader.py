"""Download of media items into a YYYY/MM directory tree."""

import logging
import os
from enum import Enum
from typing import Dict, Optional

import requests

from google_photos_downloader.models import MediaItem
from google_photos_downloader.utils.file_utils import (
    dated_directory,
    disambiguate_filename,
    parse_creation_time,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class DownloadStatus(str, Enum):
    """Outcome of a single item download."""
    DOWNLOADED = "downloaded"
    SKIPPED = "skipped"
    FAILED = "failed"


class MediaDownloader:
    """Downloads media items one at a time below a root directory."""

    def __init__(
        self,
        root_dir: str,
        session: Optional[requests.Session] = None,
        track_collisions: bool = True,
        dry_run: bool = False,
        chunk_size: int = CHUNK_SIZE,
        timeout: Optional[float] = None,
    ):
        """Initialize the downloader.

        Args:
            root_dir: Root of the local YYYY/MM tree
            session: HTTP session used for content requests
            track_collisions: Rename same-named items instead of skipping them
            dry_run: Log what would be downloaded without touching the disk
            chunk_size: Size of the chunks streamed to disk
            timeout: Timeout in seconds for content requests, None to wait forever
        """
        self.root_dir = root_dir
        self.session = session or requests.Session()
        self.track_collisions = track_collisions
        self.dry_run = dry_run
        self.chunk_size = chunk_size
        self.timeout = timeout
        # Local path -> id of the item occupying it during this run
        self.collision_map: Dict[str, str] = {}

    def resolve_path(self, item: MediaItem) -> str:
        """Resolve the local path of an item, creating its directory.

        Raises:
            ValueError: If the item has no filename or its creation time cannot be parsed
            OSError: If the directory cannot be created
        """
        filename = os.path.basename(item.filename)
        if not filename:
            raise ValueError(f"Media item {item.id} has no filename")

        creation_time = parse_creation_time(item.creation_time)
        dirpath = dated_directory(self.root_dir, creation_time)
        if not self.dry_run:
            os.makedirs(dirpath, exist_ok=True)

        filepath = os.path.join(dirpath, filename)
        if self.track_collisions:
            owner = self.collision_map.get(filepath)
            if owner is not None and owner != item.id:
                filepath = os.path.join(dirpath, disambiguate_filename(filename, item.id))
        return filepath

    def download(self, item: MediaItem) -> DownloadStatus:
        """Download an item unless its local path is already taken.

        Per-item failures are logged and reported as FAILED, never raised.
        """
        try:
            filepath = self.resolve_path(item)
        except ValueError as e:
            logger.error("Unable to download media item %s (%s): %s", item.filename, item.id, e)
            return DownloadStatus.FAILED
        except OSError as e:
            logger.error("Unable to create directory for %s: %s", item.filename, e)
            return DownloadStatus.FAILED

        if os.path.exists(filepath):
            logger.info('File already exists: "%s"', filepath)
            status = DownloadStatus.SKIPPED
        elif self.dry_run:
            logger.info('[DRY RUN] Would download "%s"', filepath)
            status = DownloadStatus.DOWNLOADED
        else:
            logger.info('Downloading "%s"', filepath)
            try:
                self._fetch(item.download_url, filepath)
            except (OSError, requests.RequestException) as e:
                logger.error('Unable to download media item "%s": %s', filepath, e)
                return DownloadStatus.FAILED
            status = DownloadStatus.DOWNLOADED

        if self.track_collisions:
            self.collision_map[filepath] = item.id
        return status

    def _fetch(self, url: str, filepath: str) -> None:
        """Stream the body of url into a new file at filepath.

        A partially written file is left in place on failure.
        """
        with open(filepath, "wb") as file:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        file.write(chunk)
