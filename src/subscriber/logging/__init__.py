# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber

"""
Public API for the subscriber logging system.
"""

from __future__ import annotations

from subscriber.logging.config import LoggingSettings
from subscriber.logging.level import LogLevel
from subscriber.logging.logger import (
    StructuredFormatter,
    StructuredLogger,
    get_logger,
)

__all__ = [
    "LogLevel",
    "LoggingSettings",
    "StructuredFormatter",
    "StructuredLogger",
    "get_logger",
]
