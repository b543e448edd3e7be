# SPDX-FileCopyrightText: 2024-present Richard Dahl <richard@dahl.us>
# SPDX-License-Identifier: MIT
# SPDX-Package-Name: subscriber
"""
Type utility functions for subscribed service discovery.

These helpers provide qualified naming, safe annotation extraction and
evaluation, and the type name / nullability inference used to build
service maps.
"""

from __future__ import annotations

import builtins
import inspect
import re
import sys
import types
from typing import Annotated, Any, ForwardRef, Union, get_args, get_origin

NoneType = type(None)

_OPTIONAL_RE = re.compile(r"(?:typing\.)?Optional\[(?P<inner>.*)\]")
_ANY_NAMES = frozenset({"Any", "typing.Any"})


def qualified_name(obj: Any) -> str:
    """
    Return ``module.qualname`` for a class or function.

    Builtins use their bare name (``int``, ``str``).
    """
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if qualname is None:
        return repr(obj)
    if module in (None, "builtins"):
        return qualname
    return f"{module}.{qualname}"


def raw_annotations(obj: Any) -> dict[str, Any]:
    """
    Get the object's own annotations without evaluating string annotations.

    Unresolvable names under deferred evaluation come back as ForwardRef.
    """
    try:
        return dict(inspect.get_annotations(obj))
    except NameError:
        if sys.version_info < (3, 14):
            raise
        import annotationlib

        return dict(
            annotationlib.get_annotations(obj, format=annotationlib.Format.FORWARDREF)
        )


def get_eval_namespaces(owner: type[Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Get namespaces for evaluating annotations declared in ``owner``."""
    module = sys.modules.get(owner.__module__)
    globalns = module.__dict__ if module is not None else vars(builtins)
    localns = dict(vars(owner))
    localns.setdefault(owner.__name__, owner)
    return globalns, localns


def resolve_annotation(
    annotation: Any, globalns: dict[str, Any], localns: dict[str, Any]
) -> tuple[Any, bool]:
    """
    Evaluate a string or forward-reference annotation.

    Returns:
        ``(value, True)`` when evaluated, ``(raw_string, False)`` otherwise
    """
    if isinstance(annotation, ForwardRef):
        annotation = annotation.__forward_arg__
    if not isinstance(annotation, str):
        return annotation, True
    try:
        return eval(annotation, globalns, localns), True  # noqa: S307
    except Exception:
        return annotation, False


def render_annotation(annotation: Any) -> str:
    """Render an annotation as a type name string."""
    if annotation is None or annotation is NoneType:
        return "None"
    if annotation is Any:
        return "Any"
    if annotation is Ellipsis:
        return "..."
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, ForwardRef):
        return annotation.__forward_arg__

    origin = get_origin(annotation)
    if origin is Annotated:
        return render_annotation(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        return "|".join(render_annotation(arg) for arg in get_args(annotation))
    if origin is not None:
        args = get_args(annotation)
        base = render_annotation(origin)
        if not args:
            return base
        return f"{base}[{', '.join(render_annotation(arg) for arg in args)}]"
    if isinstance(annotation, list):
        return f"[{', '.join(render_annotation(arg) for arg in annotation)}]"
    if isinstance(annotation, type) or hasattr(annotation, "__qualname__"):
        return qualified_name(annotation)
    if hasattr(annotation, "__name__"):
        return annotation.__name__
    return repr(annotation).replace("typing.", "")


def describe_annotation(annotation: Any) -> tuple[str, bool]:
    """
    Infer the service type name and nullability of an annotation.

    ``Foo`` gives ``("pkg.Foo", False)``; ``Foo | None`` and ``Optional[Foo]``
    give ``("pkg.Foo", True)``. ``None`` and ``Any`` always allow null.
    """
    if isinstance(annotation, ForwardRef):
        annotation = annotation.__forward_arg__
    if isinstance(annotation, str):
        return describe_string_annotation(annotation)
    if annotation is None or annotation is NoneType:
        return "None", True
    if annotation is Any:
        return "Any", True

    origin = get_origin(annotation)
    if origin is Annotated:
        return describe_annotation(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        names = [render_annotation(arg) for arg in args if arg is not NoneType]
        if not names:
            return "None", True
        return "|".join(names), NoneType in args
    return render_annotation(annotation), False


def describe_string_annotation(annotation: str) -> tuple[str, bool]:
    """Best-effort inference for an annotation that could not be evaluated."""
    text = annotation.strip()
    match = _OPTIONAL_RE.fullmatch(text)
    if match:
        name, _ = describe_string_annotation(match.group("inner"))
        return name, True
    parts = split_top_level(text, "|")
    if len(parts) > 1:
        names = [part for part in parts if part != "None"]
        if not names:
            return "None", True
        return "|".join(names), len(names) != len(parts)
    if text == "None":
        return "None", True
    if text in _ANY_NAMES:
        return "Any", True
    return text, False


def split_top_level(text: str, separator: str) -> list[str]:
    """Split on a separator outside of brackets, stripping each part."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    parts.append("".join(current).strip())
    return parts


def required_parameter_count(func: Any) -> int:
    """
    Count the parameters after ``self`` that have no default.

    Variadic parameters are never required.
    """
    try:
        parameters = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return 0
    required_kinds = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.KEYWORD_ONLY,
    )
    return sum(
        1
        for parameter in parameters[1:]
        if parameter.kind in required_kinds
        and parameter.default is inspect.Parameter.empty
    )


def is_generator(func: Any) -> bool:
    return inspect.isgeneratorfunction(func) or inspect.isasyncgenfunction(func)
