"""Test configuration for pytest."""

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def api_item() -> Callable[..., Dict[str, Any]]:
    """Build a mediaItems.search result entry."""
    def _make(
        item_id: str,
        filename: str = "img.jpg",
        creation_time: str = "2021-03-05T10:00:00Z",
        is_photo: bool = True,
    ) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"creationTime": creation_time}
        if is_photo:
            metadata["photo"] = {"cameraMake": "Test"}
        else:
            metadata["video"] = {"fps": 30}
        return {
            "id": item_id,
            "filename": filename,
            "baseUrl": f"https://lh3.example.com/{item_id}",
            "mimeType": "image/jpeg" if is_photo else "video/mp4",
            "mediaMetadata": metadata,
        }
    return _make


@pytest.fixture
def http_error() -> Callable[[int], HttpError]:
    """Build a googleapiclient HttpError with the given status."""
    def _make(status: int) -> HttpError:
        resp = httplib2.Response({"status": status, "reason": "test"})
        return HttpError(resp, b'{"error": {"message": "test error"}}')
    return _make


@pytest.fixture
def photos_service() -> Callable[[List[Any]], MagicMock]:
    """Build a mock Photos service whose search calls return or raise in order."""
    def _make(responses: List[Any]) -> MagicMock:
        service = MagicMock()
        service.mediaItems.return_value.search.return_value.execute.side_effect = responses
        return service
    return _make


@pytest.fixture
def content_session() -> MagicMock:
    """Create a mock HTTP session that serves a fixed body."""
    session = MagicMock()
    response = session.get.return_value.__enter__.return_value
    response.iter_content.return_value = [b"abc", b"def"]
    return session
