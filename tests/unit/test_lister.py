"""Unit tests for the paginated media lister."""

import queue
import threading

import pytest

from google_photos_downloader.lister import END_OF_STREAM, MediaLister
from google_photos_downloader.models import ListingError
from google_photos_downloader.utils.retry import RetryPolicy


def search_bodies(service):
    """Request bodies passed to mediaItems().search, in call order."""
    return [c.kwargs["body"] for c in service.mediaItems.return_value.search.call_args_list]


def page(items, next_page_token=None):
    """Build a search response."""
    response = {"mediaItems": items}
    if next_page_token is not None:
        response["nextPageToken"] = next_page_token
    return response


def test_iter_items_in_page_order(api_item, photos_service):
    """Test that items arrive page by page, in the order returned."""
    service = photos_service(
        [
            page([api_item("A1"), api_item("A2")], "token-2"),
            page([api_item("B1")], "token-3"),
            page([api_item("C1"), api_item("C2")], ""),
        ]
    )
    lister = MediaLister(service, page_size=2)

    ids = [item.id for item in lister.iter_items()]

    assert ids == ["A1", "A2", "B1", "C1", "C2"]
    assert search_bodies(service) == [
        {"pageSize": 2},
        {"pageSize": 2, "pageToken": "token-2"},
        {"pageSize": 2, "pageToken": "token-3"},
    ]


def test_iter_items_empty_library(photos_service):
    """Test that an empty first page ends the listing."""
    service = photos_service([{}])
    lister = MediaLister(service)

    assert list(lister.iter_items()) == []
    assert search_bodies(service) == [{"pageSize": 100}]


def test_transient_errors_retry_same_request(api_item, photos_service, http_error):
    """Test that N transient errors cause exactly N retries of the same page."""
    service = photos_service(
        [
            page([api_item("A1")], "token-2"),
            http_error(429),
            http_error(500),
            http_error(502),
            http_error(503),
            page([api_item("B1")]),
        ]
    )
    lister = MediaLister(service)

    ids = [item.id for item in lister.iter_items()]

    assert ids == ["A1", "B1"]
    assert lister.retry_count == 4
    bodies = search_bodies(service)
    assert len(bodies) == 6
    assert all(body == {"pageSize": 100, "pageToken": "token-2"} for body in bodies[1:])


def test_non_transient_error_is_terminal(photos_service, http_error):
    """Test that other API errors stop the listing without retrying."""
    service = photos_service([http_error(403)])
    lister = MediaLister(service)

    with pytest.raises(ListingError) as exc_info:
        list(lister.iter_items())

    assert exc_info.value.status_code == 403
    assert lister.retry_count == 0


def test_network_error_is_terminal(photos_service):
    """Test that failures without a status code are not retried."""
    service = photos_service([ConnectionError("connection reset")])
    lister = MediaLister(service)

    with pytest.raises(ListingError) as exc_info:
        list(lister.iter_items())

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_bounded_retries_exhausted(photos_service, http_error):
    """Test that a bounded policy turns persistent transient errors terminal."""
    service = photos_service([http_error(503), http_error(503), http_error(503)])
    lister = MediaLister(service, retry_policy=RetryPolicy(max_retries=2))

    with pytest.raises(ListingError) as exc_info:
        list(lister.iter_items())

    assert exc_info.value.status_code == 503
    assert lister.retry_count == 2


def test_retry_waits_on_cancel_event(photos_service, http_error, mocker):
    """Test that the retry delay is interruptible by cancellation."""
    service = photos_service([http_error(503), page([])])
    lister = MediaLister(service, retry_policy=RetryPolicy(base_delay_s=2.5))
    cancel = mocker.Mock(spec=threading.Event)
    cancel.is_set.return_value = False
    cancel.wait.return_value = True

    assert lister.fetch_page("", cancel) is None
    cancel.wait.assert_called_once_with(2.5)


def test_cancelled_lister_makes_no_requests(photos_service):
    """Test that a set cancel event stops the listing before any request."""
    service = photos_service([page([])])
    cancel = threading.Event()
    cancel.set()

    assert list(MediaLister(service).iter_items(cancel)) == []
    service.mediaItems.return_value.search.assert_not_called()


def test_run_feeds_queue_and_closes_stream(api_item, photos_service):
    """Test that run queues every item followed by the end marker."""
    service = photos_service([page([api_item("A1")], "t"), page([api_item("B1")])])
    item_queue, error_queue = queue.Queue(maxsize=10), queue.Queue(maxsize=1)
    cancel, closed = threading.Event(), threading.Event()

    MediaLister(service).run(item_queue, error_queue, cancel, closed)

    assert [item_queue.get_nowait().id for _ in range(2)] == ["A1", "B1"]
    assert item_queue.get_nowait() is END_OF_STREAM
    assert closed.is_set()
    assert error_queue.empty()


def test_run_forwards_terminal_error(api_item, photos_service, http_error):
    """Test that run reports a terminal error once and does not close the stream."""
    service = photos_service([page([api_item("A1")], "t"), http_error(404)])
    item_queue, error_queue = queue.Queue(maxsize=10), queue.Queue(maxsize=1)
    cancel, closed = threading.Event(), threading.Event()

    MediaLister(service).run(item_queue, error_queue, cancel, closed)

    error = error_queue.get_nowait()
    assert isinstance(error, ListingError)
    assert error.status_code == 404
    assert item_queue.get_nowait().id == "A1"
    assert item_queue.empty()
    assert not closed.is_set()


def test_run_stops_on_full_queue_when_cancelled(api_item, photos_service):
    """Test that a lister blocked on a full queue gives up once cancelled."""
    requested = threading.Event()

    def search(*args, **kwargs):
        requested.set()
        return page([api_item("A1"), api_item("A2")])

    service = photos_service([])
    service.mediaItems.return_value.search.return_value.execute.side_effect = search
    item_queue, error_queue = queue.Queue(maxsize=1), queue.Queue(maxsize=1)
    item_queue.put("blocker")
    cancel, closed = threading.Event(), threading.Event()
    lister = MediaLister(service, put_timeout_s=0.01)

    thread = threading.Thread(target=lister.run, args=(item_queue, error_queue, cancel, closed))
    thread.start()
    assert requested.wait(timeout=2)
    cancel.set()
    thread.join(timeout=2)

    assert not thread.is_alive()
    assert item_queue.get_nowait() == "blocker"
    assert item_queue.empty()
    assert error_queue.empty()
    assert not closed.is_set()


def test_unbounded_backoff_survives_long_transient_streak(photos_service, http_error):
    """Test that an unbounded policy with backoff keeps retrying past the float range."""
    service = photos_service([http_error(503) for _ in range(1100)] + [page([])])
    lister = MediaLister(service, retry_policy=RetryPolicy(backoff_factor=2.0))

    assert list(lister.iter_items()) == []
    assert lister.retry_count == 1100
