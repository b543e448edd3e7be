"""Tests for subscribed service discovery."""

import functools
from abc import ABC, abstractmethod
from collections.abc import Iterator
from types import SimpleNamespace
from typing import Annotated, Any, Optional

import pytest

from subscriber.config import SubscriberSettings, reset_settings
from subscriber.errors import ErrorSeverity
from subscriber.service import (
    Autowire,
    ConfigurationError,
    ServiceMethodsSubscriber,
    SubscribedService,
    collect_service_declarations,
    subscribed_service,
)

MODULE = __name__


class Foo:
    pass


class Bar:
    pass


def make_foo() -> Foo:
    return Foo()


# Subscribers used across the tests


class Plain(ServiceMethodsSubscriber):
    def helper(self) -> Foo:
        return Foo()


class Baz(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self) -> Foo:
        return self.container.get(self.subscribed_key("bar"))


class NullableReturn(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self) -> Foo | None:
        return self.container.get(self.subscribed_key("bar"))


class OptionalReturn(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self) -> Optional[Foo]:  # noqa: UP007
        return self.container.get(self.subscribed_key("bar"))


class ExplicitlyNullable(ServiceMethodsSubscriber):
    @subscribed_service(nullable=True)
    def bar(self) -> Foo:
        return self.container.get(self.subscribed_key("bar"))


class ExplicitlyNotNullable(ServiceMethodsSubscriber):
    @subscribed_service(nullable=False)
    def bar(self) -> Foo | None:
        return self.container.get(self.subscribed_key("bar"))


class CustomKey(ServiceMethodsSubscriber):
    @subscribed_service(key="custom")
    def bar(self) -> Foo:
        return self.container.get("custom")


class CustomType(ServiceMethodsSubscriber):
    @subscribed_service(type="app.Mailer")
    def bar(self) -> Foo:
        return self.container.get(self.subscribed_key("bar"))


class AnyAndNone(ServiceMethodsSubscriber):
    @subscribed_service
    def anything(self) -> Any:
        return self.container.get(self.subscribed_key("anything"))

    @subscribed_service
    def nothing(self) -> None:
        return self.container.get(self.subscribed_key("nothing"))


class WithAttributes(ServiceMethodsSubscriber):
    @subscribed_service
    def plain(self) -> Bar:
        return self.container.get(self.subscribed_key("plain"))

    @subscribed_service(attributes=Autowire("mailer.default"))
    def first(self) -> Foo:
        return self.container.get(self.subscribed_key("first"))

    @subscribed_service(key="second", attributes=["tagged", "extra"])
    def second(self) -> Bar | None:
        return self.container.get("second")


class DefaultedParameter(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self, name: str = "default", *args: Any, **kwargs: Any) -> Foo:
        return self.container.get(self.subscribed_key("bar"))


class WithProperties(ServiceMethodsSubscriber):
    @property
    @subscribed_service
    def mailer(self) -> Foo:
        return self.container.get(self.subscribed_key("mailer"))

    @subscribed_service(nullable=True)
    @property
    def audit(self) -> Bar:
        return self.container.get(self.subscribed_key("audit"))

    @functools.cached_property
    @subscribed_service(key="app.cache")
    def cache(self) -> Bar:
        return self.container.get("app.cache")


class PropertiesBeforeMethods(ServiceMethodsSubscriber):
    @property
    @subscribed_service
    def first(self) -> Foo:
        return self.container.get(self.subscribed_key("first"))

    @subscribed_service
    def second(self) -> Bar:
        return self.container.get(self.subscribed_key("second"))

    @subscribed_service
    def third(self) -> Foo:
        return self.container.get(self.subscribed_key("third"))


class Parent(ServiceMethodsSubscriber):
    @subscribed_service
    def foo(self) -> Foo:
        return self.container.get(self.subscribed_key("foo"))


class Child(Parent):
    @subscribed_service
    def bar(self) -> Bar:
        return self.container.get(self.subscribed_key("bar"))


class NoMarkersChild(Parent):
    def helper(self) -> Bar:
        return Bar()


class Overriding(Parent):
    @subscribed_service
    def foo(self) -> Bar:
        return self.container.get(self.subscribed_key("foo"))


class SharedKeyParent(ServiceMethodsSubscriber):
    @subscribed_service(key="shared")
    def foo(self) -> Foo:
        return self.container.get("shared")

    @subscribed_service
    def other(self) -> Foo:
        return self.container.get(self.subscribed_key("other"))


class SharedKeyChild(SharedKeyParent):
    @subscribed_service(key="shared")
    def foo(self) -> Bar:
        return self.container.get("shared")


class UnmarkedOverride(Parent):
    def foo(self) -> Foo:
        return super().foo()


class WithSetter(ServiceMethodsSubscriber):
    @subscribed_service
    @property
    def foo(self) -> Foo:
        return self._foo

    @foo.setter
    def foo(self, value: Foo) -> None:
        self._foo = value

    @foo.deleter
    def foo(self) -> None:
        del self._foo


class EmptyStrings(ServiceMethodsSubscriber):
    @subscribed_service(key="", type="")
    def foo(self) -> Foo:
        return self.container.get("")


class RecordParent(ServiceMethodsSubscriber):
    @subscribed_service(attributes=Autowire("foo.primary"))
    def foo(self) -> Foo:
        return self.container.get(self.subscribed_key("foo"))


class RecordChild(RecordParent):
    @subscribed_service
    def foo(self) -> Foo:
        return self.container.get(self.subscribed_key("foo"))


class Left(ServiceMethodsSubscriber):
    @subscribed_service
    def left(self) -> Foo:
        return self.container.get(self.subscribed_key("left"))


class Right(ServiceMethodsSubscriber):
    @subscribed_service
    def right(self) -> Bar:
        return self.container.get(self.subscribed_key("right"))


class Diamond(Left, Right):
    pass


class NotASubscriber:
    @subscribed_service
    def bar(self) -> Foo:
        return Foo()


class ForwardReference(ServiceMethodsSubscriber):
    @subscribed_service
    def missing(self) -> "Missing":  # noqa: F821
        return self.container.get(self.subscribed_key("missing"))

    @subscribed_service
    def maybe_missing(self) -> "Missing | None":  # noqa: F821
        return self.container.get(self.subscribed_key("maybe_missing"))


# Invalid subscribers


class RequiresParameter(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self, name: str) -> Foo:
        return self.container.get(name)


class KeywordOnlyParameter(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self, *, name: str) -> Foo:
        return self.container.get(name)


class StaticMethod(ServiceMethodsSubscriber):
    @staticmethod
    @subscribed_service
    def bar() -> Foo:
        return Foo()


class MarkedStaticMethod(ServiceMethodsSubscriber):
    @subscribed_service
    @staticmethod
    def bar() -> Foo:
        return Foo()


class ClassMethod(ServiceMethodsSubscriber):
    @classmethod
    @subscribed_service
    def bar(cls) -> Foo:
        return Foo()


class AbstractMethod(ServiceMethodsSubscriber, ABC):
    @subscribed_service
    @abstractmethod
    def bar(self) -> Foo: ...


class GeneratorMethod(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self) -> Iterator[Foo]:
        yield Foo()


class CoroutineMethod(ServiceMethodsSubscriber):
    @subscribed_service
    async def bar(self) -> Foo:
        return Foo()


class InternalMethod(ServiceMethodsSubscriber):
    bar = subscribed_service(functools.partial(make_foo))


class NoReturnType(ServiceMethodsSubscriber):
    @subscribed_service
    def bar(self):
        return Foo()


class NoPropertyType(ServiceMethodsSubscriber):
    @property
    @subscribed_service
    def bar(self):
        return Foo()


class NoGetter(ServiceMethodsSubscriber):
    bar = subscribed_service(property())


class AnnotatedField(ServiceMethodsSubscriber):
    cache: Annotated[Foo, SubscribedService(key="app.cache")]


class UnexpectedMember(ServiceMethodsSubscriber):
    bar = subscribed_service(SimpleNamespace())


class ValidThenInvalid(ServiceMethodsSubscriber):
    @subscribed_service
    def good(self) -> Foo:
        return self.container.get(self.subscribed_key("good"))

    @subscribed_service
    def bad(self, name: str) -> Foo:
        return self.container.get(name)


class TestServiceMap:
    """Tests for the shape of discovered service maps."""

    def test_no_markers_gives_empty_map(self):
        """A class without markers declares nothing."""
        assert Plain.get_subscribed_services() == {}
        assert ServiceMethodsSubscriber.get_subscribed_services() == {}

    def test_default_marker_on_method(self):
        """A marked method is declared under Class::method with its return type."""
        assert Baz.get_subscribed_services() == {f"{MODULE}.Baz::bar": f"{MODULE}.Foo"}

    @pytest.mark.parametrize(
        "cls",
        [NullableReturn, OptionalReturn, ExplicitlyNullable, ExplicitlyNotNullable],
    )
    def test_nullable_services(self, cls):
        """Nullability from the annotation or the marker adds a '?' prefix."""
        assert cls.get_subscribed_services() == {
            f"{MODULE}.{cls.__name__}::bar": f"?{MODULE}.Foo"
        }

    def test_explicit_key(self):
        assert CustomKey.get_subscribed_services() == {"custom": f"{MODULE}.Foo"}

    def test_explicit_type(self):
        assert CustomType.get_subscribed_services() == {
            f"{MODULE}.CustomType::bar": "app.Mailer"
        }

    def test_empty_key_and_type_are_kept(self):
        """An explicit empty string is a declared value, not a missing one."""
        assert EmptyStrings.get_subscribed_services() == {"": ""}
        assert EmptyStrings.subscribed_key("foo") == ""

    def test_any_and_none_are_nullable(self):
        assert AnyAndNone.get_subscribed_services() == {
            f"{MODULE}.AnyAndNone::anything": "?Any",
            f"{MODULE}.AnyAndNone::nothing": "?None",
        }

    def test_attributes_append_records(self):
        """Markers carrying attributes are appended as full records."""
        services = WithAttributes.get_subscribed_services()

        assert list(services) == [f"{MODULE}.WithAttributes::plain", 0, 1]
        assert services[f"{MODULE}.WithAttributes::plain"] == f"{MODULE}.Bar"

        first = services[0]
        assert isinstance(first, SubscribedService)
        assert first.key == f"{MODULE}.WithAttributes::first"
        assert first.type == f"{MODULE}.Foo"
        assert first.nullable is False
        assert first.attributes == [Autowire("mailer.default")]

        second = services[1]
        assert second.key == "second"
        assert second.type_string == f"?{MODULE}.Bar"
        assert second.attributes == ["tagged", "extra"]

        assert f"{MODULE}.WithAttributes::first" not in services
        assert "second" not in services

    def test_discovery_is_idempotent(self):
        assert WithAttributes.get_subscribed_services() == (
            WithAttributes.get_subscribed_services()
        )
        assert Child.get_subscribed_services() == Child.get_subscribed_services()

    def test_returns_a_fresh_map(self):
        """Mutating a returned map does not leak into later calls."""
        services = Baz.get_subscribed_services()
        services["extra"] = "int"

        assert "extra" not in Baz.get_subscribed_services()

    def test_defaulted_and_variadic_parameters_are_allowed(self):
        assert DefaultedParameter.get_subscribed_services() == {
            f"{MODULE}.DefaultedParameter::bar": f"{MODULE}.Foo"
        }

    def test_collect_works_without_the_mixin(self):
        """The collector accepts any class carrying markers."""
        assert collect_service_declarations(NotASubscriber) == {
            f"{MODULE}.NotASubscriber::bar": f"{MODULE}.Foo"
        }


class TestProperties:
    """Tests for markers on properties."""

    def test_property_keys_and_types(self):
        assert WithProperties.get_subscribed_services() == {
            f"{MODULE}.WithProperties::$mailer::get": f"{MODULE}.Foo",
            f"{MODULE}.WithProperties::$audit::get": f"?{MODULE}.Bar",
            "app.cache": f"{MODULE}.Bar",
        }

    def test_marked_property_still_reads_through_getter(self):
        class Container:
            def get(self, id):
                return f"service:{id}"

            def has(self, id):
                return True

        subscriber = WithProperties()
        subscriber.set_container(Container())

        assert subscriber.audit == f"service:{MODULE}.WithProperties::$audit::get"

    def test_setter_and_deleter_keep_the_marker(self):
        assert WithSetter.get_subscribed_services() == {
            f"{MODULE}.WithSetter::$foo::get": f"{MODULE}.Foo"
        }

        subscriber = WithSetter()
        foo = Foo()
        subscriber.foo = foo
        assert subscriber.foo is foo
        del subscriber.foo
        assert not hasattr(subscriber, "_foo")

    def test_methods_are_declared_before_properties(self):
        assert list(PropertiesBeforeMethods.get_subscribed_services()) == [
            f"{MODULE}.PropertiesBeforeMethods::second",
            f"{MODULE}.PropertiesBeforeMethods::third",
            f"{MODULE}.PropertiesBeforeMethods::$first::get",
        ]


class TestInheritance:
    """Tests for composing declarations along the class hierarchy."""

    def test_child_without_markers_keeps_parent_map(self):
        assert NoMarkersChild.get_subscribed_services() == (
            Parent.get_subscribed_services()
        )

    def test_inherited_declarations_pass_through(self):
        services = Child.get_subscribed_services()

        assert list(services.items()) == [
            (f"{MODULE}.Parent::foo", f"{MODULE}.Foo"),
            (f"{MODULE}.Child::bar", f"{MODULE}.Bar"),
        ]

    def test_redeclared_member_replaces_parent_entry(self):
        assert Overriding.get_subscribed_services() == {
            f"{MODULE}.Overriding::foo": f"{MODULE}.Bar"
        }

    def test_redeclared_member_with_same_key_overwrites_in_place(self):
        services = SharedKeyChild.get_subscribed_services()

        assert list(services.items()) == [
            ("shared", f"{MODULE}.Bar"),
            (f"{MODULE}.SharedKeyParent::other", f"{MODULE}.Foo"),
        ]

    def test_redeclared_member_replaces_parent_record(self):
        assert RecordChild.get_subscribed_services() == {
            f"{MODULE}.RecordChild::foo": f"{MODULE}.Foo"
        }

    def test_only_nearest_subscribing_base_is_composed(self):
        """Sibling branches of a diamond are not merged."""
        assert Diamond.get_subscribed_services() == {
            f"{MODULE}.Left::left": f"{MODULE}.Foo"
        }


class TestSubscribedKey:
    """Tests for looking up the id of a marked member."""

    def test_method_key(self):
        assert Baz.subscribed_key("bar") == f"{MODULE}.Baz::bar"

    def test_inherited_method_key_uses_declaring_class(self):
        assert Child.subscribed_key("foo") == f"{MODULE}.Parent::foo"
        assert Overriding.subscribed_key("foo") == f"{MODULE}.Overriding::foo"

    def test_unmarked_override_uses_parent_declaration(self):
        assert UnmarkedOverride.get_subscribed_services() == {
            f"{MODULE}.Parent::foo": f"{MODULE}.Foo"
        }
        assert UnmarkedOverride.subscribed_key("foo") == f"{MODULE}.Parent::foo"

    def test_property_and_explicit_keys(self):
        assert WithProperties.subscribed_key("mailer") == (
            f"{MODULE}.WithProperties::$mailer::get"
        )
        assert WithProperties.subscribed_key("cache") == "app.cache"
        assert CustomKey.subscribed_key("bar") == "custom"

    def test_annotated_field_key(self):
        assert AnnotatedField.subscribed_key("cache") == "app.cache"

    def test_unknown_member(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Plain.subscribed_key("helper")

        assert exc_info.value.reason == "not_subscribed"
        assert exc_info.value.member == "helper"


class TestConfigurationErrors:
    """Tests for invalid marker usage."""

    @pytest.mark.parametrize(
        ("cls", "reason"),
        [
            (RequiresParameter, "parameters"),
            (KeywordOnlyParameter, "parameters"),
            (StaticMethod, "static"),
            (MarkedStaticMethod, "static"),
            (ClassMethod, "static"),
            (AbstractMethod, "abstract"),
            (GeneratorMethod, "generator"),
            (CoroutineMethod, "coroutine"),
            (InternalMethod, "internal"),
            (NoReturnType, "missing_return_type"),
            (NoPropertyType, "missing_type"),
            (NoGetter, "missing_getter"),
            (UnexpectedMember, "unexpected_member"),
        ],
    )
    def test_invalid_member(self, cls, reason):
        with pytest.raises(ConfigurationError) as exc_info:
            cls.get_subscribed_services()

        error = exc_info.value
        assert error.reason == reason
        assert error.class_name == f"{MODULE}.{cls.__name__}"
        assert error.member == "bar"
        assert error.code == "SERVICE_CONFIGURATION"
        assert error.severity == ErrorSeverity.FATAL
        assert error.context["reason"] == reason

    def test_parameter_error_message(self):
        with pytest.raises(ConfigurationError, match="with no parameters"):
            RequiresParameter.get_subscribed_services()

    def test_annotation_only_field_has_no_getter(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AnnotatedField.get_subscribed_services()

        assert exc_info.value.reason == "missing_getter"
        assert exc_info.value.member == "cache"

    def test_invalid_member_in_subclass(self):
        class Broken(Parent):
            @subscribed_service
            def bar(self):
                return None

        with pytest.raises(ConfigurationError):
            Broken.get_subscribed_services()

    def test_error_aborts_discovery(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ValidThenInvalid.get_subscribed_services()

        assert exc_info.value.member == "bad"


class TestAnnotationResolution:
    """Tests for annotations that cannot be evaluated."""

    def test_unresolved_annotation_falls_back_to_string(self):
        assert ForwardReference.get_subscribed_services() == {
            f"{MODULE}.ForwardReference::missing": "Missing",
            f"{MODULE}.ForwardReference::maybe_missing": "?Missing",
        }

    def test_strict_settings_reject_unresolved_annotation(self):
        settings = SubscriberSettings(strict_annotations=True)

        with pytest.raises(ConfigurationError) as exc_info:
            collect_service_declarations(ForwardReference, settings)

        assert exc_info.value.reason == "unresolved_annotation"
        assert exc_info.value.member == "missing"

    def test_strict_annotations_from_environment(self, monkeypatch):
        monkeypatch.setenv("SUBSCRIBER_STRICT_ANNOTATIONS", "true")
        reset_settings()

        with pytest.raises(ConfigurationError):
            ForwardReference.get_subscribed_services()

    def test_resolved_annotations_pass_in_strict_mode(self):
        settings = SubscriberSettings(strict_annotations=True)

        assert collect_service_declarations(Baz, settings) == {
            f"{MODULE}.Baz::bar": f"{MODULE}.Foo"
        }
