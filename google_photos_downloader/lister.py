"""Paginated listing of the Google Photos library."""

import logging
import queue
import threading
import time
from typing import Any, Dict, Iterator, Optional

from google_photos_downloader.models import ListingError, MediaItem
from google_photos_downloader.utils.retry import RetryPolicy, status_code_of

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

# Marks the end of the item stream on the item queue
END_OF_STREAM = object()


class MediaLister:
    """Walks mediaItems.search page by page and produces media items."""

    def __init__(
        self,
        service: Any,
        page_size: int = PAGE_SIZE,
        retry_policy: Optional[RetryPolicy] = None,
        put_timeout_s: float = 0.1,
    ):
        """Initialize the lister.

        Args:
            service: Google Photos API service object
            page_size: Number of items requested per page
            retry_policy: Policy for transient errors, unbounded immediate retry by default
            put_timeout_s: How long to block on a full queue before re-checking cancellation
        """
        self.service = service
        self.page_size = page_size
        self.retry_policy = retry_policy or RetryPolicy()
        self.put_timeout_s = put_timeout_s
        self.retry_count = 0

    def search_page(self, page_token: str) -> Dict[str, Any]:
        """Request a single page of media items."""
        body: Dict[str, Any] = {"pageSize": self.page_size}
        if page_token:
            body["pageToken"] = page_token
        return self.service.mediaItems().search(body=body).execute()

    def fetch_page(
        self, page_token: str, cancel: Optional[threading.Event] = None
    ) -> Optional[Dict[str, Any]]:
        """Request a page, retrying the same request on transient errors.

        Args:
            page_token: Cursor of the page, empty for the first page
            cancel: Event that interrupts waiting between retries

        Returns:
            The page response, or None if cancelled while waiting to retry

        Raises:
            ListingError: On a non-transient error or when retries are exhausted
        """
        attempt = 0
        while True:
            try:
                return self.search_page(page_token)
            except Exception as e:
                status = status_code_of(e)
                if not self.retry_policy.should_retry(status, attempt):
                    raise ListingError(f"Unable to read media items: {e}", status) from e

                delay = self.retry_policy.compute_delay(attempt)
                logger.warning(
                    "Unable to read media items (HTTP %s), retrying in %.1fs: %s",
                    status,
                    delay,
                    e,
                )
                attempt += 1
                self.retry_count += 1

            if cancel is not None:
                if cancel.wait(delay):
                    return None
            elif delay > 0:
                time.sleep(delay)

    def iter_items(self, cancel: Optional[threading.Event] = None) -> Iterator[MediaItem]:
        """Yield every media item of the library in listing order.

        Stops when the remote reports no further page or when cancel is set.
        """
        page_token = ""
        page_count = 0
        while True:
            if cancel is not None and cancel.is_set():
                return

            response = self.fetch_page(page_token, cancel)
            if response is None:
                return
            page_count += 1

            items = response.get("mediaItems", [])
            logger.debug("Page %d returned %d media items", page_count, len(items))
            for item in items:
                if cancel is not None and cancel.is_set():
                    return
                yield MediaItem.from_api(item)

            page_token = response.get("nextPageToken") or ""
            if not page_token:
                logger.debug("Listing finished after %d pages", page_count)
                return

    def run(
        self,
        item_queue: queue.Queue,
        error_queue: queue.Queue,
        cancel: threading.Event,
        closed: threading.Event,
    ) -> None:
        """Feed the item queue until the listing ends, fails or is cancelled.

        On success END_OF_STREAM is queued after the last item and closed is set.
        A failure is forwarded once on error_queue.
        """
        try:
            for item in self.iter_items(cancel):
                if not self._put(item_queue, item, cancel):
                    return
            if cancel.is_set():
                return
            closed.set()
            self._put(item_queue, END_OF_STREAM, cancel)
        except Exception as e:
            logger.debug("Listing stopped: %s", e)
            error_queue.put(e)

    def _put(self, item_queue: queue.Queue, item: Any, cancel: threading.Event) -> bool:
        """Block until there is room for the item; False if cancelled first."""
        while not cancel.is_set():
            try:
                item_queue.put(item, timeout=self.put_timeout_s)
                return True
            except queue.Full:
                continue
        return False
