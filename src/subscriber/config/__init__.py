# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber

"""
Configuration for the subscriber package.
"""

from subscriber.config.settings import SubscriberSettings, get_settings, reset_settings

__all__ = [
    "SubscriberSettings",
    "get_settings",
    "reset_settings",
]
