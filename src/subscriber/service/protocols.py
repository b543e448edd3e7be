# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Protocol definitions for subscribed services.

This module contains the contracts shared by subscribers, locators and
containers.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeAlias, runtime_checkable

from subscriber.service.attributes import SubscribedService

ServiceMap: TypeAlias = dict[int | str, str | SubscribedService]
"""Ordered service declarations: ``key -> "?Type"`` entries and appended records."""


@runtime_checkable
class ContainerProtocol(Protocol):
    """Container-like accessor handed to subscribers."""

    def get(self, id: str) -> Any:
        """Get a service by id."""
        ...

    def has(self, id: str) -> bool:
        """Check whether a service id can be provided."""
        ...


@runtime_checkable
class ServiceProviderProtocol(ContainerProtocol, Protocol):
    """Accessor that can also list the services it provides."""

    def get_provided_services(self) -> dict[str, str]:
        """Map each id to its type string, ``"?"`` when unknown."""
        ...


@runtime_checkable
class ServiceSubscriberProtocol(Protocol):
    """Class declaring the services it needs from a container."""

    @classmethod
    def get_subscribed_services(cls) -> ServiceMap:
        """Return the service declarations of the class."""
        ...
