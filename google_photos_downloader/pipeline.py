"""Concurrent listing and downloading of a Google Photos library."""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum

from google_photos_downloader.downloader import DownloadStatus, MediaDownloader
from google_photos_downloader.lister import END_OF_STREAM, MediaLister
from google_photos_downloader.models import ListingError

logger = logging.getLogger(__name__)

QUEUE_SIZE = 100
POLL_INTERVAL_S = 0.1
JOIN_TIMEOUT_S = 5.0


class PipelineState(str, Enum):
    """State of a download run."""
    LISTING = "listing"
    DRAINING = "draining"
    DONE = "done"
    FAILED = "failed"


@dataclass
class DownloadStats:
    """Counts of item outcomes in a run."""
    downloaded: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.downloaded + self.skipped + self.failed

    def record(self, status: DownloadStatus) -> None:
        if status == DownloadStatus.DOWNLOADED:
            self.downloaded += 1
        elif status == DownloadStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


class DownloadPipeline:
    """Runs a MediaLister in the background and downloads its items in order.

    The lister feeds a bounded item queue and reports a terminal failure on a
    single-slot error queue. The main loop moves through LISTING, DRAINING
    (the lister has finished, queued items remain) and DONE, or stops in
    FAILED as soon as an error arrives, without downloading the items still
    queued.
    """

    def __init__(
        self,
        lister: MediaLister,
        downloader: MediaDownloader,
        queue_size: int = QUEUE_SIZE,
        poll_interval_s: float = POLL_INTERVAL_S,
    ):
        self.lister = lister
        self.downloader = downloader
        self.queue_size = queue_size
        self.poll_interval_s = poll_interval_s
        self.state = PipelineState.LISTING
        self.stats = DownloadStats()

    def run(self) -> DownloadStats:
        """Download the whole library.

        Returns:
            Outcome counts of the run

        Raises:
            ListingError: If the listing failed with a non-transient error
        """
        item_queue: queue.Queue = queue.Queue(maxsize=self.queue_size)
        error_queue: queue.Queue = queue.Queue(maxsize=1)
        cancel = threading.Event()
        closed = threading.Event()

        self.state = PipelineState.LISTING
        self.stats = DownloadStats()
        thread = threading.Thread(
            target=self.lister.run,
            args=(item_queue, error_queue, cancel, closed),
            name="media-lister",
            daemon=True,
        )
        thread.start()

        try:
            while self.state not in (PipelineState.DONE, PipelineState.FAILED):
                self._step(item_queue, error_queue, closed)
        finally:
            cancel.set()
            thread.join(JOIN_TIMEOUT_S)
            if thread.is_alive():
                logger.warning("Lister thread did not stop within %.1fs", JOIN_TIMEOUT_S)

        logger.info(
            "Finished: %d downloaded, %d skipped, %d failed",
            self.stats.downloaded,
            self.stats.skipped,
            self.stats.failed,
        )
        return self.stats

    def _step(
        self, item_queue: queue.Queue, error_queue: queue.Queue, closed: threading.Event
    ) -> None:
        """Handle one event: an error, the next item or the end of the stream."""
        try:
            error = error_queue.get_nowait()
        except queue.Empty:
            pass
        else:
            self._transition(PipelineState.FAILED)
            if isinstance(error, ListingError):
                raise error
            raise ListingError(f"Unable to read media items: {error}") from error

        if self.state == PipelineState.LISTING and closed.is_set():
            self._transition(PipelineState.DRAINING)

        try:
            item = item_queue.get(timeout=self.poll_interval_s)
        except queue.Empty:
            return

        if item is END_OF_STREAM:
            self._transition(PipelineState.DONE)
            return

        self.stats.record(self.downloader.download(item))

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline state %s -> %s", self.state.value, state.value)
        self.state = state
