# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Mixin declaring subscribed services from marked methods and properties.

Service ids are available as ``"module.Class::method"``, so a subscriber
method body can be just
``return self.container.get(self.subscribed_key("method"))``.
"""

from __future__ import annotations

from subscriber.service import discovery
from subscriber.service.attributes import required
from subscriber.service.protocols import ContainerProtocol, ServiceMap


class ServiceMethodsSubscriber:
    """Determines subscribed services from members marked with SubscribedService.

    Attributes:
        container: The accessor set by the container through set_container()
    """

    container: ContainerProtocol

    @classmethod
    def get_subscribed_services(cls) -> ServiceMap:
        """Return the services this class and its subscribing ancestors need.

        Raises:
            ConfigurationError: If a marker is used on an unsupported member
        """
        return discovery.collect_service_declarations(cls)

    @classmethod
    def subscribed_key(cls, member: str) -> str:
        """Return the service id declared for a marked member."""
        return discovery.subscribed_key(cls, member)

    @required
    def set_container(self, container: ContainerProtocol) -> ContainerProtocol | None:
        """Store the container, forwarding to the next setter in the MRO.

        Returns:
            Whatever the next set_container() returned, or None
        """
        previous = None
        parent = getattr(super(), "set_container", None)
        if parent is not None:
            previous = parent(container)

        self.container = container

        return previous
