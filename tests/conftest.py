"""Top-level pytest configuration for the subscriber package."""

import pytest

from subscriber.config import reset_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    """Run every test against default settings.

    SUBSCRIBER_* variables from the calling shell are removed and the cached
    settings are dropped before and after the test.
    """
    monkeypatch.delenv("SUBSCRIBER_STRICT_ANNOTATIONS", raising=False)
    reset_settings()
    yield
    reset_settings()
