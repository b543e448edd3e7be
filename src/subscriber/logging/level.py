# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Log levels accepted by ``SUBSCRIBER_LOGGING_LEVEL`` and the package loggers.
"""

from __future__ import annotations

import logging
from enum import Enum

_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_stdlib_level(self) -> int:
        return logging.getLevelNamesMapping()[self.value]

    @classmethod
    def parse(cls, value: str | int | LogLevel) -> LogLevel:
        """
        Read a level from a name, an alias or a stdlib level number.

        ``"warn"`` and ``"fatal"`` are accepted as aliases; numbers between
        levels round down to the nearest named level.

        Raises:
            ValueError: If the value names no level
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            named = [level for level in cls if level.to_stdlib_level() <= value]
            if not named:
                raise ValueError(f"Invalid log level: {value}")
            return named[-1]
        if isinstance(value, str):
            name = value.strip().upper()
            try:
                return cls(_ALIASES.get(name, name))
            except ValueError:
                pass
        raise ValueError(f"Invalid log level: {value!r}")
