"""Run configuration for Google Photos Downloader."""

import argparse
from dataclasses import dataclass, field
from typing import Optional

from google_photos_downloader.lister import PAGE_SIZE
from google_photos_downloader.pipeline import POLL_INTERVAL_S, QUEUE_SIZE
from google_photos_downloader.utils.retry import RetryPolicy


@dataclass
class DownloaderConfig:
    """Settings of a download run."""
    root_dir: str
    cache_token: bool = True
    credentials_path: str = "client_secret.json"
    token_path: str = "token.json"
    page_size: int = PAGE_SIZE
    queue_size: int = QUEUE_SIZE
    poll_interval_s: float = POLL_INTERVAL_S
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    track_collisions: bool = True
    dry_run: bool = False
    download_timeout: Optional[float] = None

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "DownloaderConfig":
        """Build the configuration from parsed command line arguments."""
        return cls(
            root_dir=args.dirpath,
            cache_token=args.cache_token,
            credentials_path=args.credentials,
            token_path=args.token,
            page_size=args.page_size,
            retry=RetryPolicy(
                max_retries=args.max_retries,
                base_delay_s=args.retry_delay,
                backoff_factor=args.retry_backoff,
            ),
            track_collisions=args.collision_check,
            dry_run=args.dry_run,
            download_timeout=args.timeout,
        )
