"""Main module for Google Photos Downloader."""

import argparse
import logging
import sys
from typing import List, Optional

import requests
from googleapiclient.discovery import Resource
from tabulate import tabulate

from google_photos_downloader.config import DownloaderConfig
from google_photos_downloader.downloader import MediaDownloader
from google_photos_downloader.lister import PAGE_SIZE, MediaLister
from google_photos_downloader.models import AuthenticationError, ListingError
from google_photos_downloader.pipeline import DownloadPipeline, DownloadStats
from google_photos_downloader.utils.auth import authenticate_google_photos

logger = logging.getLogger(__name__)


class GooglePhotosDownloader:
    """Downloads a whole Google Photos library into a local directory tree."""

    def __init__(self, config: DownloaderConfig):
        """Initialize the downloader."""
        self.config = config
        self.service: Optional[Resource] = None

    def authenticate(self) -> None:
        """Authenticate with Google Photos API."""
        try:
            self.service = authenticate_google_photos(
                token_path=self.config.token_path,
                credentials_path=self.config.credentials_path,
                cache_token=self.config.cache_token,
            )
        except AuthenticationError as e:
            logger.error("Authentication failed: %s", str(e))
            raise

    def build_pipeline(self, session: Optional[requests.Session] = None) -> DownloadPipeline:
        """Wire a lister and a downloader for the configured run."""
        if not self.service:
            raise AuthenticationError("Not authenticated with Google Photos")

        lister = MediaLister(
            self.service,
            page_size=self.config.page_size,
            retry_policy=self.config.retry,
        )
        downloader = MediaDownloader(
            self.config.root_dir,
            session=session,
            track_collisions=self.config.track_collisions,
            dry_run=self.config.dry_run,
            timeout=self.config.download_timeout,
        )
        return DownloadPipeline(
            lister,
            downloader,
            queue_size=self.config.queue_size,
            poll_interval_s=self.config.poll_interval_s,
        )

    def download_all(self) -> DownloadStats:
        """Download every media item of the library.

        Raises:
            ListingError: If the library could not be listed
        """
        logger.info("Downloading Google Photos library to %s", self.config.root_dir)
        with requests.Session() as session:
            return self.build_pipeline(session).run()

    def print_summary(self, stats: DownloadStats) -> None:
        """Print the outcome counts of a run."""
        rows = [
            ["Downloaded", stats.downloaded],
            ["Already present", stats.skipped],
            ["Failed", stats.failed],
            ["Total", stats.total],
        ]
        print("\nDownload summary:")
        print(tabulate(rows, headers=["Result", "Items"], tablefmt="psql"))


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Google Photos Downloader")

    parser.add_argument("dirpath", type=str, help="Root directory of the downloaded library")
    parser.add_argument(
        "--cache-token",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Cache the OAuth 2.0 token on disk",
    )
    parser.add_argument(
        "--credentials", type=str, default="client_secret.json", help="OAuth client secret file"
    )
    parser.add_argument("--token", type=str, default="token.json", help="Cached token file")
    parser.add_argument(
        "--page-size", type=int, default=PAGE_SIZE, help="Media items requested per page"
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Retries per page on transient API errors (default: unlimited)",
    )
    parser.add_argument(
        "--retry-delay", type=float, default=0.0, help="Seconds to wait before the first retry"
    )
    parser.add_argument(
        "--retry-backoff", type=float, default=1.0, help="Multiplier applied to each retry delay"
    )
    parser.add_argument(
        "--no-collision-check",
        dest="collision_check",
        action="store_false",
        help="Skip same-named items of the same month instead of renaming them",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, help="Timeout in seconds for content downloads"
    )
    parser.add_argument("--dry-run", action="store_true", help="Run without making changes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the Google Photos Downloader CLI."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    downloader = GooglePhotosDownloader(DownloaderConfig.from_args(args))
    try:
        downloader.authenticate()
        stats = downloader.download_all()
    except AuthenticationError as e:
        logger.error("Unable to get photoslibrary: %s", e)
        sys.exit(1)
    except ListingError as e:
        logger.error("Unable to download media items: %s", e)
        sys.exit(1)

    downloader.print_summary(stats)


if __name__ == "__main__":
    main()
