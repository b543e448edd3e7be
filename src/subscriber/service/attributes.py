# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Markers for subscribed services.

Provides the SubscribedService marker, the @subscribed_service decorator
that attaches it to methods and properties, and the @required marker for
setter injection.

Example:
    ```python
    class Mailer(ServiceMethodsSubscriber):
        @subscribed_service
        def transport(self) -> Transport:
            return self.container.get(self.subscribed_key("transport"))

        @property
        @subscribed_service(nullable=True)
        def logger(self) -> Logger:
            return self.container.get(self.subscribed_key("logger"))

        cache: Annotated[Cache, SubscribedService(key="app.cache")]
    ```
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Annotated, Any, Final, TypeVar, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, field_validator

F = TypeVar("F")

MARKER_ATTR: Final[str] = "__subscribed_service__"
REQUIRED_ATTR: Final[str] = "__required__"


class SubscribedService(BaseModel):
    """Declares that a member's value comes from the service container.

    Attributes:
        key: Service id; defaults to ``Class::method`` or ``Class::$property::get``
        type: Service type name; defaults to the member's annotation
        nullable: Whether the service may be missing; OR-ed with the annotation
        attributes: Extra attributes; when present the declaration is kept as
            a full record instead of a ``key -> type`` entry
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str | None = None
    type: str | None = None
    nullable: bool = False
    attributes: list[Any] = Field(default_factory=list)

    def __init__(self, key: str | None = None, /, **data: Any) -> None:
        if key is not None:
            data["key"] = key
        super().__init__(**data)

    @field_validator("attributes", mode="before")
    @classmethod
    def _wrap_attributes(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        if isinstance(value, list | tuple):
            return list(value)
        return [value]

    @property
    def type_string(self) -> str:
        """The ``"?Type"`` / ``"Type"`` form used in service maps."""
        return ("?" if self.nullable else "") + (self.type or "")


class Autowire(BaseModel):
    """Attribute selecting the container id a subscribed service resolves to."""

    model_config = ConfigDict(frozen=True)

    service: str

    def __init__(self, service: str | None = None, /, **data: Any) -> None:
        if service is not None:
            data["service"] = service
        super().__init__(**data)


class SubscribedProperty(property):
    """A property carrying a SubscribedService marker.

    Copies made by ``getter``, ``setter`` and ``deleter`` keep the marker.
    """

    def getter(self, fget: Callable[[Any], Any]) -> SubscribedProperty:
        return self._keep_marker(super().getter(fget))

    def setter(self, fset: Callable[[Any, Any], None]) -> SubscribedProperty:
        return self._keep_marker(super().setter(fset))

    def deleter(self, fdel: Callable[[Any], None]) -> SubscribedProperty:
        return self._keep_marker(super().deleter(fdel))

    def _keep_marker(self, copy: Any) -> SubscribedProperty:
        marker = getattr(self, MARKER_ATTR, None)
        if marker is not None:
            setattr(copy, MARKER_ATTR, marker)
        return copy


def _mark(member: Any, marker: SubscribedService) -> Any:
    if isinstance(member, staticmethod | classmethod):
        setattr(member.__func__, MARKER_ATTR, marker)
        return member
    if isinstance(member, property):
        marked = SubscribedProperty(member.fget, member.fset, member.fdel, member.__doc__)
        setattr(marked, MARKER_ATTR, marker)
        return marked
    try:
        setattr(member, MARKER_ATTR, marker)
    except (AttributeError, TypeError) as exc:
        raise TypeError(
            f'Cannot use "SubscribedService" on {member!r}: it does not accept attributes.'
        ) from exc
    return member


def subscribed_service(
    target: Any = None,
    /,
    *,
    key: str | None = None,
    type: str | None = None,
    nullable: bool = False,
    attributes: Any = None,
) -> Any:
    """
    Decorator marking a method or property as a subscribed service.

    Usable bare (``@subscribed_service``) or with arguments
    (``@subscribed_service(key="mailer")``), above or below ``@property``.

    Args:
        target: The decorated member when used without arguments
        key: Optional explicit service id
        type: Optional explicit service type name
        nullable: Mark the service as optional
        attributes: Optional extra attributes for the declaration
    Returns:
        The member, carrying the marker.
    """
    marker = SubscribedService(
        key=key, type=type, nullable=nullable, attributes=attributes
    )

    def decorator(member: F) -> F:
        return _mark(member, marker)

    if target is not None:
        return decorator(target)
    return decorator


def get_marker(member: Any) -> SubscribedService | None:
    """Return the SubscribedService marker attached to a class member, if any."""
    if isinstance(member, staticmethod | classmethod):
        member = member.__func__

    candidates = [member]
    if isinstance(member, property):
        candidates.append(member.fget)
    elif isinstance(member, functools.cached_property):
        candidates.append(member.func)

    for candidate in candidates:
        marker = getattr(candidate, MARKER_ATTR, None)
        if isinstance(marker, SubscribedService):
            return marker
    return None


def get_annotated_marker(hint: Any) -> tuple[SubscribedService, Any] | None:
    """Extract a marker and the underlying type from ``Annotated[T, marker]``."""
    if get_origin(hint) is not Annotated:
        return None
    base, *metadata = get_args(hint)
    for item in metadata:
        if isinstance(item, SubscribedService):
            return item, base
        if item is SubscribedService:
            return SubscribedService(), base
    return None


def required(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a setter to be called by the container when autowiring an instance."""
    setattr(func, REQUIRED_ATTR, True)
    return func


def is_required(member: Any) -> bool:
    return getattr(member, REQUIRED_ATTR, False) is True
