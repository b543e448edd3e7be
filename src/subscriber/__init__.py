# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber

"""
Declare the services a class needs from a container by marking its
methods and properties.
"""

from subscriber.service import (
    Autowire,
    ConfigurationError,
    Container,
    ContainerProtocol,
    ServiceLocator,
    ServiceMethodsSubscriber,
    SubscribedService,
    required,
    subscribed_service,
)

__version__ = "0.1.0"

__all__ = [
    "Autowire",
    "ConfigurationError",
    "Container",
    "ContainerProtocol",
    "ServiceLocator",
    "ServiceMethodsSubscriber",
    "SubscribedService",
    "required",
    "subscribed_service",
]
