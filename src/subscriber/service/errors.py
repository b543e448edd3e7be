# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Error classes for subscribed services.

Discovery raises ConfigurationError for every misuse of the
SubscribedService marker. Locators and the container raise the
lookup and creation errors.
"""

from __future__ import annotations

from typing import Any, Final

from subscriber.errors.base import (
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
    SubscriberError,
)

# Prefix for all service error codes
ERROR_CODE_PREFIX: Final[str] = "SERVICE"

SERVICE: Final = ErrorCategory.get_or_create("SERVICE")


class ServiceError(SubscriberError):
    """Base class for all service-related errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        **context: Any,
    ) -> None:
        """Initialize a service error.

        Args:
            message: Human-readable error message
            code: Error code without prefix (will be prefixed with SERVICE_)
            severity: How severe this error is
            **context: Additional context information
        """
        name = f"{ERROR_CODE_PREFIX}_{code}" if code else f"{ERROR_CODE_PREFIX}_ERROR"
        super().__init__(
            message=message,
            code=ErrorCode.get_or_create(name, SERVICE),
            severity=severity,
            context=context,
        )


class ConfigurationError(ServiceError):
    """Raised when a class declares subscribed services incorrectly.

    This is a programming mistake surfaced at discovery time, never a
    condition to retry.
    """

    def __init__(
        self,
        message: str,
        class_name: str,
        member: str | None = None,
        reason: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(
            message,
            code="CONFIGURATION",
            severity=ErrorSeverity.FATAL,
            class_name=class_name,
            member=member,
            reason=reason,
            **context,
        )
        self.class_name = class_name
        self.member = member
        self.reason = reason


class ServiceNotFoundError(ServiceError):
    """Raised when a requested service id is unknown."""

    def __init__(
        self, service_id: str, available: list[str] | None = None, **context: Any
    ) -> None:
        message = f'Service "{service_id}" not found'
        if available:
            message += (
                ": the container inside only knows about the "
                + ", ".join(f'"{a}"' for a in available)
                + " services"
            )
        elif available is not None:
            message += ": the container is empty"
        super().__init__(
            message,
            code="NOT_FOUND",
            service_id=service_id,
            available=available or [],
            **context,
        )
        self.service_id = service_id


class CircularReferenceError(ServiceError):
    """Raised when a locator id is requested while it is being created."""

    def __init__(self, service_id: str, path: list[str], **context: Any) -> None:
        super().__init__(
            f'Circular reference detected for service "{service_id}", '
            f'path: "{" -> ".join(path)}"',
            code="CIRCULAR_REFERENCE",
            service_id=service_id,
            path=path,
            **context,
        )
        self.service_id = service_id
        self.path = path


class CircularDependencyError(ServiceError):
    """Raised when container resolution loops back on itself."""

    def __init__(self, dependency_chain: list[str], **context: Any) -> None:
        super().__init__(
            "Circular dependency detected: " + " -> ".join(dependency_chain),
            code="CIRCULAR_DEPENDENCY",
            dependency_chain=dependency_chain,
            **context,
        )
        self.dependency_chain = dependency_chain


class DuplicateRegistrationError(ServiceError):
    """Raised when a service id is registered twice without replace."""

    def __init__(self, service_id: str, **context: Any) -> None:
        super().__init__(
            f'Service "{service_id}" is already registered',
            code="DUPLICATE_REGISTRATION",
            service_id=service_id,
            **context,
        )
        self.service_id = service_id


class ServiceCreationError(ServiceError):
    """Raised when the container cannot create a service instance."""

    def __init__(
        self, service_id: str, original_error: Exception, **context: Any
    ) -> None:
        super().__init__(
            f'Failed to create service "{service_id}": {original_error}',
            code="CREATION",
            service_id=service_id,
            error_type=type(original_error).__name__,
            **context,
        )
        self.service_id = service_id
        self.__cause__ = original_error
