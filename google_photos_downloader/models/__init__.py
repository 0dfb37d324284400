"""Models for Google Photos Downloader."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

PHOTO_URL_SUFFIX = "=d"
VIDEO_URL_SUFFIX = "=dv"


@dataclass(frozen=True)
class MediaItem:
    """Represents a media item in Google Photos."""
    id: str
    filename: str
    creation_time: str
    base_url: str
    is_photo: bool
    mime_type: str = ""

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "MediaItem":
        """Build a media item from a mediaItems.search result entry."""
        metadata = item.get("mediaMetadata", {})
        return cls(
            id=item["id"],
            filename=item.get("filename", ""),
            creation_time=metadata.get("creationTime", ""),
            base_url=item.get("baseUrl", ""),
            is_photo="photo" in metadata,
            mime_type=item.get("mimeType", ""),
        )

    @property
    def download_url(self) -> str:
        """URL of the original-quality variant of the item."""
        suffix = PHOTO_URL_SUFFIX if self.is_photo else VIDEO_URL_SUFFIX
        return self.base_url + suffix


class GooglePhotosError(Exception):
    """Base exception for Google Photos operations."""

class AuthenticationError(GooglePhotosError):
    """Raised when authentication fails."""

class ApiError(GooglePhotosError):
    """Raised when API calls fail."""

class ListingError(ApiError):
    """Raised when the media listing fails for good."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
