# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Service container for subscribers.

The container registers services by id, builds a ServiceLocator from a
subscriber's declarations and calls its @required setters.
"""

from __future__ import annotations

import contextvars
import functools
import inspect
import types
from typing import Any, TypeVar, Union, cast, get_args, get_origin

from subscriber.logging import get_logger
from subscriber.service.attributes import Autowire, SubscribedService, is_required
from subscriber.service.errors import (
    CircularDependencyError,
    DuplicateRegistrationError,
    ServiceCreationError,
    ServiceError,
    ServiceNotFoundError,
)
from subscriber.service.locator import ServiceLocator
from subscriber.service.protocols import (
    ContainerProtocol,
    ServiceProviderProtocol,
    ServiceSubscriberProtocol,
)
from subscriber.service.registration import ServiceLifetime, ServiceRegistration
from subscriber.service.type_utils import (
    describe_annotation,
    qualified_name,
    raw_annotations,
    resolve_annotation,
)

T = TypeVar("T")

logger = get_logger(__name__)

# Ids being created in the current call stack
_DEPENDENCY_CHAIN: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "_SERVICE_DEPENDENCY_CHAIN", default=()
)

_CONTAINER_TYPES = (ContainerProtocol, ServiceProviderProtocol, ServiceLocator)


class Container:
    """Service container keyed by service id.

    Classes are registered and resolved under their qualified name, the
    same name discovery writes into service maps.

    Attributes:
        _registrations: dict[str, ServiceRegistration]
            Service id to registration.
        _singletons: dict[str, Any]
            Created singleton instances.
    """

    def __init__(self) -> None:
        self._registrations: dict[str, ServiceRegistration[Any]] = {}
        self._singletons: dict[str, Any] = {}

    @staticmethod
    def service_id(interface: type[Any] | str) -> str:
        """Return the id a class or string is registered under."""
        if isinstance(interface, str):
            return interface
        return qualified_name(interface)

    def register_singleton(
        self, interface: type[Any] | str, implementation: Any, replace: bool = False
    ) -> None:
        self._register(interface, implementation, ServiceLifetime.SINGLETON, replace)

    def register_transient(
        self, interface: type[Any] | str, implementation: Any, replace: bool = False
    ) -> None:
        self._register(interface, implementation, ServiceLifetime.TRANSIENT, replace)

    def _register(
        self,
        interface: type[Any] | str,
        implementation: Any,
        lifetime: ServiceLifetime,
        replace: bool,
    ) -> None:
        service_id = self.service_id(interface)
        if service_id in self._registrations and not replace:
            raise DuplicateRegistrationError(service_id)

        self._singletons.pop(service_id, None)
        self._registrations[service_id] = ServiceRegistration(
            service_id, implementation, lifetime
        )
        logger.debug("Registered service", service_id=service_id, lifetime=lifetime)

    def get_registration_keys(self) -> list[str]:
        return list(self._registrations)

    def has(self, interface: type[Any] | str) -> bool:
        return self.service_id(interface) in self._registrations

    def get(self, interface: type[Any] | str) -> Any:
        """Resolve a service instance by class or id.

        Raises:
            ServiceNotFoundError: If the service is not registered
            CircularDependencyError: If a circular dependency is detected
            ServiceCreationError: If the implementation raised
        """
        service_id = self.service_id(interface)
        registration = self._registrations.get(service_id)
        if registration is None:
            raise ServiceNotFoundError(service_id, available=sorted(self._registrations))

        if service_id in self._singletons:
            return self._singletons[service_id]

        chain = _DEPENDENCY_CHAIN.get()
        if service_id in chain:
            raise CircularDependencyError([*chain, service_id])

        token = _DEPENDENCY_CHAIN.set((*chain, service_id))
        try:
            instance = self._create_service(registration)
        finally:
            _DEPENDENCY_CHAIN.reset(token)

        if registration.lifetime == ServiceLifetime.SINGLETON:
            self._singletons[service_id] = instance
        return instance

    def resolve(self, interface: type[T]) -> T:
        """Typed variant of get() for class lookups."""
        return cast(T, self.get(interface))

    def _create_service(self, registration: ServiceRegistration[Any]) -> Any:
        implementation = registration.implementation
        try:
            if registration.is_type:
                return implementation()
            if registration.is_factory:
                return implementation(self)
            return implementation
        except ServiceError:
            raise
        except Exception as exc:
            raise ServiceCreationError(registration.service_id, exc) from exc

    def locator_for(self, subscriber: type[ServiceSubscriberProtocol]) -> ServiceLocator:
        """Build the locator serving a subscriber's declared services.

        Nullable declarations resolve to None when their type is not
        registered. Records carrying an Autowire attribute resolve the id
        it names instead of their type.
        """
        factories: dict[str, Any] = {}
        provided: dict[str, str] = {}

        for key, declaration in subscriber.get_subscribed_services().items():
            if isinstance(declaration, SubscribedService):
                service_key = cast(str, declaration.key)
                target = _autowire_target(declaration) or cast(str, declaration.type)
                nullable = declaration.nullable
                provided[service_key] = declaration.type_string
            else:
                service_key = cast(str, key)
                nullable = declaration.startswith("?")
                target = declaration.removeprefix("?")
                provided[service_key] = declaration

            factories[service_key] = functools.partial(self._locate, target, nullable)

        logger.debug(
            "Built service locator",
            subscriber=qualified_name(subscriber),
            services=list(factories),
        )
        return ServiceLocator(factories, provided)

    def _locate(self, service_id: str, nullable: bool) -> Any:
        if nullable and not self.has(service_id):
            return None
        return self.get(service_id)

    def autowire(self, instance: T) -> T:
        """Call every @required method of the instance with resolved arguments.

        A method counts as required when any definition of it along the MRO
        is marked. Parameters annotated with a container type receive the
        locator built for the instance's class; other parameters receive
        the registered service of their annotated type.
        """
        cls = type(instance)
        for name in _required_methods(cls):
            method = getattr(instance, name)
            kwargs = self._setter_arguments(cls, method)
            logger.debug(
                "Calling required method",
                subscriber=qualified_name(cls),
                method=name,
            )
            method(**kwargs)
        return instance

    def _setter_arguments(self, cls: type[Any], method: Any) -> dict[str, Any]:
        func = inspect.unwrap(method.__func__ if inspect.ismethod(method) else method)
        annotations = raw_annotations(func)
        kwargs: dict[str, Any] = {}

        for parameter in inspect.signature(method).parameters.values():
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                continue
            if parameter.name not in annotations:
                if parameter.default is parameter.empty:
                    raise ServiceNotFoundError(
                        parameter.name, method=qualified_name(func)
                    )
                continue

            annotation, _ = resolve_annotation(
                annotations[parameter.name], func.__globals__, dict(vars(cls))
            )
            if _is_container_annotation(annotation):
                kwargs[parameter.name] = self.locator_for(cls)
                continue

            service_id, nullable = describe_annotation(annotation)
            if self.has(service_id):
                kwargs[parameter.name] = self.get(service_id)
            elif nullable:
                kwargs[parameter.name] = None
            elif parameter.default is parameter.empty:
                raise ServiceNotFoundError(
                    service_id,
                    available=sorted(self._registrations),
                    method=qualified_name(func),
                )
        return kwargs


def _required_methods(cls: type[Any]) -> list[str]:
    names: list[str] = []
    for owner in cls.__mro__:
        for name, value in vars(owner).items():
            if name not in names and is_required(value):
                names.append(name)
    return names


def _autowire_target(declaration: SubscribedService) -> str | None:
    for attribute in declaration.attributes:
        if isinstance(attribute, Autowire):
            return attribute.service
    return None


def _is_container_annotation(annotation: Any) -> bool:
    if get_origin(annotation) in (Union, types.UnionType):
        candidates = get_args(annotation)
    else:
        candidates = (annotation,)
    return any(candidate in _CONTAINER_TYPES for candidate in candidates)
