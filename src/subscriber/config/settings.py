# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Settings for service discovery.

Values load from ``SUBSCRIBER_*`` environment variables.
"""

from __future__ import annotations

import threading

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SubscriberSettings(BaseSettings):
    """Environment-driven settings for subscribed service discovery."""

    model_config = SettingsConfigDict(
        env_prefix="SUBSCRIBER_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    strict_annotations: bool = Field(
        default=False,
        description=(
            "Raise a configuration error when a member annotation cannot be "
            "evaluated instead of falling back to the raw annotation string"
        ),
    )

    @classmethod
    def load(cls) -> SubscriberSettings:
        """Load settings from environment variables or defaults."""
        return cls()


_settings: SubscriberSettings | None = None
_lock = threading.Lock()


def get_settings() -> SubscriberSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    with _lock:
        if _settings is None:
            _settings = SubscriberSettings.load()
        return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call reloads the environment."""
    global _settings
    with _lock:
        _settings = None
