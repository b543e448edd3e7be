# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber

"""
Public API for subscribed services.
"""

from __future__ import annotations

from subscriber.service.attributes import (
    Autowire,
    SubscribedService,
    required,
    subscribed_service,
)
from subscriber.service.container import Container
from subscriber.service.discovery import collect_service_declarations, subscribed_key
from subscriber.service.errors import (
    CircularDependencyError,
    CircularReferenceError,
    ConfigurationError,
    DuplicateRegistrationError,
    ServiceCreationError,
    ServiceError,
    ServiceNotFoundError,
)
from subscriber.service.locator import ServiceLocator
from subscriber.service.protocols import (
    ContainerProtocol,
    ServiceMap,
    ServiceProviderProtocol,
    ServiceSubscriberProtocol,
)
from subscriber.service.registration import ServiceLifetime, ServiceRegistration
from subscriber.service.subscriber import ServiceMethodsSubscriber

__all__ = [
    "Autowire",
    "CircularDependencyError",
    "CircularReferenceError",
    "ConfigurationError",
    "Container",
    "ContainerProtocol",
    "DuplicateRegistrationError",
    "ServiceCreationError",
    "ServiceError",
    "ServiceLifetime",
    "ServiceLocator",
    "ServiceMap",
    "ServiceMethodsSubscriber",
    "ServiceNotFoundError",
    "ServiceProviderProtocol",
    "ServiceRegistration",
    "ServiceSubscriberProtocol",
    "SubscribedService",
    "collect_service_declarations",
    "required",
    "subscribed_key",
    "subscribed_service",
]
