# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Service registration module for the subscriber container.

This module defines the ServiceRegistration class used to track service
registrations in the container.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ServiceLifetime(str, Enum):
    """Service lifetime options."""

    SINGLETON = "singleton"
    TRANSIENT = "transient"


class ServiceRegistration(Generic[T]):
    """Represents a service registration in the container.

    A registration contains the service id, its implementation, factory or
    instance, and the lifetime of the service.
    """

    def __init__(
        self,
        service_id: str,
        implementation: type[T] | Any,
        lifetime: ServiceLifetime,
    ) -> None:
        """Initialize a service registration.

        Args:
            service_id: The id the service is resolved by
            implementation: A concrete type, a factory taking the container,
                or a ready instance
            lifetime: The lifetime of the service
        """
        self.service_id = service_id
        self.implementation = implementation
        self.lifetime = lifetime

    @property
    def is_type(self) -> bool:
        return isinstance(self.implementation, type)

    @property
    def is_factory(self) -> bool:
        """Check if the implementation is a factory rather than a type or instance."""
        return not self.is_type and callable(self.implementation)

    def __repr__(self) -> str:
        return (
            f"ServiceRegistration({self.service_id!r}, "
            f"{self.implementation!r}, {self.lifetime.value!r})"
        )
