# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber

"""
Error handling for the subscriber package.
"""

from __future__ import annotations

from subscriber.errors.base import (
    INTERNAL,
    INTERNAL_ERROR,
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
    SubscriberError,
)
from subscriber.errors.registry import ErrorRegistry, registry

__all__ = [
    # Error categories
    "ErrorCategory",
    "ErrorCode",
    "ErrorSeverity",
    "INTERNAL",
    "INTERNAL_ERROR",
    # Base errors
    "SubscriberError",
    # Registry
    "ErrorRegistry",
    "registry",
]
