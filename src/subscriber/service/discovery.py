# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Subscribed service discovery.

Walks the methods and properties a class declares itself, reads their
SubscribedService markers and builds the service map a container uses to
decide what the class needs. Declarations of the nearest subscribing
ancestor seed the map, so inherited members are never scanned twice.

Service ids default to ``"module.Class::method"`` for methods and
``"module.Class::$property::get"`` for properties.
"""

from __future__ import annotations

import functools
import inspect
import itertools
from collections.abc import Iterator
from typing import Any, NamedTuple

from subscriber.config import SubscriberSettings, get_settings
from subscriber.logging import get_logger
from subscriber.service.attributes import (
    SubscribedService,
    get_annotated_marker,
    get_marker,
)
from subscriber.service.errors import ConfigurationError
from subscriber.service.protocols import ServiceMap
from subscriber.service.type_utils import (
    describe_annotation,
    get_eval_namespaces,
    is_generator,
    qualified_name,
    raw_annotations,
    required_parameter_count,
    resolve_annotation,
)

logger = get_logger(__name__)

_PROPERTY_TYPES = (property, functools.cached_property)


class _Member(NamedTuple):
    name: str
    value: Any
    marker: SubscribedService
    is_field: bool = False


def collect_service_declarations(
    cls: type[Any], settings: SubscriberSettings | None = None
) -> ServiceMap:
    """
    Build the service map declared by ``cls``.

    Args:
        cls: The class to inspect
        settings: Optional settings, defaults to the process-wide settings

    Returns:
        The ancestor's declarations followed by the class's own, in
        declaration order (methods first, then properties)

    Raises:
        ConfigurationError: If a marker is used on an unsupported member
    """
    settings = settings or get_settings()
    parent, services = _parent_declarations(cls)
    methods, properties = _marked_members(cls)

    for member in methods:
        key, annotation = _method_declaration(cls, member, settings)
        declared = _declared_key(member.marker, key)
        _drop_overridden(services, parent, member, declared)
        _merge(services, member.marker, key, annotation)

    for member in itertools.chain(properties, _annotated_fields(cls)):
        key, annotation = _property_declaration(cls, member, settings)
        declared = _declared_key(member.marker, key)
        _drop_overridden(services, parent, member, declared)
        _merge(services, member.marker, key, annotation)

    logger.debug(
        "Collected subscribed services",
        class_name=qualified_name(cls),
        count=len(services),
    )
    return services


def subscribed_key(cls: type[Any], member: str) -> str:
    """
    Return the service id declared for ``member`` of ``cls``.

    The member is looked up along the MRO, so an inherited accessor
    returns the id its declaring class registered.

    Raises:
        ConfigurationError: If no member with that name carries a marker
    """
    for owner in cls.__mro__:
        own = vars(owner)
        if member in own:
            value = own[member]
            marker = get_marker(value)
            if marker is None:
                # Unmarked override, the declaration lives further up
                continue
            if isinstance(value, _PROPERTY_TYPES):
                return _declared_key(marker, _property_key(owner, member))
            return _declared_key(marker, _method_key(owner, member))

        if member in raw_annotations(owner):
            for field in _annotated_fields(owner):
                if field.name == member:
                    return _declared_key(field.marker, _property_key(owner, member))

    raise ConfigurationError(
        f'"{qualified_name(cls)}" has no subscribed service named "{member}".',
        class_name=qualified_name(cls),
        member=member,
        reason="not_subscribed",
    )


def _parent_declarations(cls: type[Any]) -> tuple[type[Any] | None, ServiceMap]:
    for base in cls.__mro__[1:]:
        hook = getattr(base, "get_subscribed_services", None)
        if hook is not None:
            return base, dict(hook() or {})
    return None, {}


def _drop_overridden(
    services: ServiceMap, parent: type[Any] | None, member: _Member, key: str
) -> None:
    """Remove the inherited declaration of a member the class re-declares."""
    if parent is None:
        return
    try:
        inherited = subscribed_key(parent, member.name)
    except ConfigurationError:
        return
    if inherited == key:
        return

    services.pop(inherited, None)
    for index in [
        index
        for index, declaration in services.items()
        if isinstance(declaration, SubscribedService) and declaration.key == inherited
    ]:
        del services[index]


def _marked_members(cls: type[Any]) -> tuple[list[_Member], list[_Member]]:
    methods: list[_Member] = []
    properties: list[_Member] = []

    for name, value in vars(cls).items():
        marker = get_marker(value)
        if marker is None:
            continue
        if isinstance(value, _PROPERTY_TYPES):
            properties.append(_Member(name, value, marker))
        else:
            methods.append(_Member(name, value, marker))

    return methods, properties


def _annotated_fields(cls: type[Any]) -> Iterator[_Member]:
    """Yield ``name: Annotated[T, SubscribedService(...)]`` declarations of ``cls``."""
    own = vars(cls)
    globalns, localns = get_eval_namespaces(cls)

    for name, raw in raw_annotations(cls).items():
        if isinstance(own.get(name), _PROPERTY_TYPES):
            continue
        hint, resolved = resolve_annotation(raw, globalns, localns)
        if not resolved:
            if "SubscribedService" in hint:
                raise ConfigurationError(
                    f'Cannot evaluate the annotation of "{qualified_name(cls)}::${name}": {hint}',
                    class_name=qualified_name(cls),
                    member=name,
                    reason="unresolved_annotation",
                )
            continue
        found = get_annotated_marker(hint)
        if found is None:
            continue
        marker, _ = found
        yield _Member(name, own.get(name), marker, is_field=True)


def _method_declaration(
    cls: type[Any], member: _Member, settings: SubscriberSettings
) -> tuple[str, Any]:
    class_name = qualified_name(cls)
    value = member.value

    if not (callable(value) or isinstance(value, staticmethod | classmethod)):
        raise ConfigurationError(
            f"Unexpected member: {type(value).__name__}",
            class_name=class_name,
            member=member.name,
            reason="unexpected_member",
        )

    func = value.__func__ if isinstance(value, staticmethod | classmethod) else value
    reason = _unsupported_method_reason(value, func)
    if reason is not None:
        raise ConfigurationError(
            f'Cannot use "SubscribedService" on method "{class_name}::{member.name}()" '
            "(can only be used on non-static, non-abstract methods with no parameters).",
            class_name=class_name,
            member=member.name,
            reason=reason,
        )

    annotations = raw_annotations(func)
    if "return" not in annotations:
        raise ConfigurationError(
            f'Cannot use "SubscribedService" on methods without a return type in '
            f'"{class_name}::{member.name}()".',
            class_name=class_name,
            member=member.name,
            reason="missing_return_type",
        )

    _, localns = get_eval_namespaces(cls)
    annotation = _resolve(
        cls, member.name, annotations["return"], func.__globals__, localns, settings
    )
    return _method_key(cls, member.name), annotation


def _unsupported_method_reason(value: Any, func: Any) -> str | None:
    if isinstance(value, staticmethod | classmethod):
        return "static"
    if getattr(func, "__isabstractmethod__", False):
        return "abstract"
    if not inspect.isfunction(func):
        return "internal"
    if is_generator(func):
        return "generator"
    if inspect.iscoroutinefunction(func):
        return "coroutine"
    if required_parameter_count(func):
        return "parameters"
    return None


def _property_declaration(
    cls: type[Any], member: _Member, settings: SubscriberSettings
) -> tuple[str, Any]:
    class_name = qualified_name(cls)
    getter = _getter(member)

    if getter is None:
        raise ConfigurationError(
            f'Cannot use "SubscribedService" on property "{class_name}::${member.name}" '
            "(can only be used on properties with a getter).",
            class_name=class_name,
            member=member.name,
            reason="missing_getter",
        )

    annotations = raw_annotations(getter)
    if "return" not in annotations:
        raise ConfigurationError(
            f'Cannot use "SubscribedService" on properties without a type in '
            f'"{class_name}::${member.name}".',
            class_name=class_name,
            member=member.name,
            reason="missing_type",
        )

    _, localns = get_eval_namespaces(cls)
    annotation = _resolve(
        cls,
        member.name,
        annotations["return"],
        getattr(getter, "__globals__", {}),
        localns,
        settings,
    )
    return _property_key(cls, member.name), annotation


def _getter(member: _Member) -> Any:
    if member.is_field:
        return None
    if isinstance(member.value, functools.cached_property):
        return member.value.func
    return member.value.fget


def _resolve(
    cls: type[Any],
    name: str,
    raw: Any,
    globalns: dict[str, Any],
    localns: dict[str, Any],
    settings: SubscriberSettings,
) -> Any:
    annotation, resolved = resolve_annotation(raw, globalns, localns)
    if not resolved and settings.strict_annotations:
        raise ConfigurationError(
            f'Cannot evaluate the type of "{qualified_name(cls)}::{name}": {annotation}',
            class_name=qualified_name(cls),
            member=name,
            reason="unresolved_annotation",
        )
    return annotation


def _merge(
    services: ServiceMap, marker: SubscribedService, default_key: str, annotation: Any
) -> None:
    type_name, allows_null = describe_annotation(annotation)
    declaration = marker.model_copy(
        update={
            "key": _declared_key(marker, default_key),
            "type": marker.type if marker.type is not None else type_name,
            "nullable": marker.nullable or allows_null,
        }
    )

    if declaration.attributes:
        services[_next_index(services)] = declaration
    else:
        services[declaration.key] = declaration.type_string


def _next_index(services: ServiceMap) -> int:
    indexes = [key for key in services if isinstance(key, int)]
    return max(indexes) + 1 if indexes else 0


def _method_key(owner: type[Any], name: str) -> str:
    return f"{qualified_name(owner)}::{name}"


def _property_key(owner: type[Any], name: str) -> str:
    return f"{qualified_name(owner)}::${name}::get"


def _declared_key(marker: SubscribedService, default_key: str) -> str:
    return marker.key if marker.key is not None else default_key
