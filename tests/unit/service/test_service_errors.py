"""Tests for service error classes."""

from subscriber.errors import ErrorCategory, ErrorSeverity, SubscriberError
from subscriber.service.errors import (
    SERVICE,
    CircularDependencyError,
    ConfigurationError,
    DuplicateRegistrationError,
    ServiceCreationError,
    ServiceError,
    ServiceNotFoundError,
)


class TestServiceErrors:
    def test_service_error_defaults(self):
        error = ServiceError("Something failed", detail="x")

        assert isinstance(error, SubscriberError)
        assert error.code == "SERVICE_ERROR"
        assert error.category == SERVICE
        assert error.category is ErrorCategory.get_or_create("SERVICE")
        assert error.severity == ErrorSeverity.ERROR
        assert error.context == {"detail": "x"}

    def test_configuration_error(self):
        error = ConfigurationError(
            "Bad marker", class_name="app.Mailer", member="send", reason="parameters"
        )

        assert str(error) == "SERVICE_CONFIGURATION: Bad marker"
        assert error.severity == ErrorSeverity.FATAL
        assert error.context == {
            "class_name": "app.Mailer",
            "member": "send",
            "reason": "parameters",
        }
        assert error.to_dict()["category"] == "SERVICE"

    def test_not_found_without_available_list(self):
        error = ServiceNotFoundError("mailer")

        assert error.message == 'Service "mailer" not found'
        assert error.context["available"] == []

    def test_circular_dependency(self):
        error = CircularDependencyError(["a", "b", "a"])

        assert error.message == "Circular dependency detected: a -> b -> a"
        assert error.dependency_chain == ["a", "b", "a"]
        assert error.code == "SERVICE_CIRCULAR_DEPENDENCY"

    def test_duplicate_registration(self):
        error = DuplicateRegistrationError("mailer")

        assert error.code == "SERVICE_DUPLICATE_REGISTRATION"
        assert error.service_id == "mailer"

    def test_creation_error_chains_cause(self):
        cause = RuntimeError("boom")
        error = ServiceCreationError("mailer", cause)

        assert error.__cause__ is cause
        assert error.code == "SERVICE_CREATION"
        assert error.context["error_type"] == "RuntimeError"
        assert "boom" in error.message
