# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Lazy service locator handed to subscribers.

A locator maps service ids to factories and only creates a service when
it is requested.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from subscriber.service.errors import CircularReferenceError, ServiceNotFoundError


class ServiceLocator:
    """Container-like accessor over a fixed set of service factories.

    Factories are called on every get(); caching, if any, belongs to the
    factory.
    """

    def __init__(
        self,
        factories: Mapping[str, Callable[[], Any]],
        provided: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize a locator.

        Args:
            factories: Service id to zero-argument factory
            provided: Optional service id to type string, used by
                get_provided_services()
        """
        self._factories = dict(factories)
        self._provided = dict(provided or {})
        self._loading: list[str] = []

    def has(self, id: str) -> bool:
        return id in self._factories

    def get(self, id: str) -> Any:
        """Create the service registered under ``id``.

        Raises:
            ServiceNotFoundError: If the id is unknown
            CircularReferenceError: If the id is requested while its own
                factory is running
        """
        if id not in self._factories:
            if self._loading:
                raise ServiceNotFoundError(
                    id,
                    available=sorted(self._factories),
                    requested_by=self._loading[-1],
                )
            raise ServiceNotFoundError(id, available=sorted(self._factories))

        if id in self._loading:
            path = self._loading[self._loading.index(id) :] + [id]
            raise CircularReferenceError(id, path)

        self._loading.append(id)
        try:
            return self._factories[id]()
        finally:
            self._loading.pop()

    def get_provided_services(self) -> dict[str, str]:
        """Map each id to its type string, ``"?"`` when unknown."""
        return {id: self._provided.get(id, "?") for id in self._factories}

    def __contains__(self, id: object) -> bool:
        return id in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)

    def __repr__(self) -> str:
        return f"ServiceLocator({sorted(self._factories)!r})"
