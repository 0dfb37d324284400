"""Configuration for unit tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Capture debug logging of the downloader modules."""
    caplog.set_level(logging.DEBUG, logger="google_photos_downloader")
    yield
