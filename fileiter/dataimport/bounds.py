#!/usr/bin/env python3
"""Just-in-time resolution of size and date bounds.

Bound attributes are resolved at the start of every scan, so relative
values such as ``'NOW-1DAY'`` always refer to the scan's own start time.
A raw bound may be:

- a reference ``${name}`` whose value already has the right type
  (a number for sizes, a datetime for dates)
- a date-math expression in single quotes, e.g. ``'NOW-1DAY'``
- a literal: an integer for sizes, ``YYYY-MM-DD HH:MM:SS`` for dates

Resolution is a two-step affair. :func:`resolve_placeholder` either
produces the typed value (:class:`Resolved`) or hands back text for
literal parsing (:class:`WasString`).
"""

import re
from dataclasses import dataclass
from datetime import datetime
from numbers import Number
from typing import Generic, Optional, Type, TypeVar, Union

from fileiter.core.constants import DATE_FORMAT, NOW_TOKEN, EntityAttribute, ErrorCode
from fileiter.core.datemath import DateMathError
from fileiter.core.errors import ConfigurationError
from fileiter.infrastructure.context import PLACEHOLDER_PATTERN, EntityContext
from fileiter.rules.engine import ScanBounds

T = TypeVar("T")

IN_SINGLE_QUOTES_PATTERN = re.compile(r"^'(.*?)'$")


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """A reference that resolved to a value of the requested type."""

    value: T


@dataclass(frozen=True)
class WasString:
    """Text left over for literal parsing."""

    text: str


Resolution = Union[Resolved, WasString]


def resolve_placeholder(raw: str, expected: Type, context: EntityContext) -> Resolution:
    """First resolution step.

    If raw contains a ``${name}`` reference, the first one is resolved; a
    value of the expected type is returned as :class:`Resolved` and a string
    value is passed on as :class:`WasString`. Otherwise every reference in
    raw is substituted and the result is passed on.

    Raises:
        ConfigurationError: If the reference is unset or of another type
    """
    match = PLACEHOLDER_PATTERN.search(raw)
    if match is None:
        return WasString(context.replace_tokens(raw))

    name = match.group(1)
    value = context.resolve(name)
    if isinstance(value, expected) and not isinstance(value, bool):
        return Resolved(value)
    if isinstance(value, str):
        return WasString(context.replace_tokens(value))
    if value is None:
        raise ConfigurationError(f"Unresolvable reference: ${{{name}}}", ErrorCode.NOT_FOUND)
    raise ConfigurationError(
        f"Reference ${{{name}}} has type {type(value).__name__}, expected {expected.__name__}"
    )


def resolve_date(raw: Optional[str], context: EntityContext) -> Optional[datetime]:
    """Resolve a date bound to a timezone-aware datetime.

    Naive datetimes, whether referenced or parsed, are taken to be in the
    local zone.

    Args:
        raw: Raw attribute value, or None
        context: Entity context

    Returns:
        Resolved instant, or None if raw is None

    Raises:
        ConfigurationError: If the value cannot be resolved or parsed
    """
    if raw is None:
        return None

    resolution = resolve_placeholder(raw, datetime, context)
    if isinstance(resolution, Resolved):
        return _aware(resolution.value)

    text = resolution.text
    match = IN_SINGLE_QUOTES_PATTERN.search(text)
    if match:
        expression = match.group(1)
        if expression.startswith(NOW_TOKEN):
            expression = expression[len(NOW_TOKEN):]
        try:
            return _aware(context.parse_date_math(expression))
        except DateMathError as e:
            raise ConfigurationError(f"Invalid expression for date: {text}") from e

    try:
        return _aware(datetime.strptime(text, DATE_FORMAT))
    except ValueError as e:
        raise ConfigurationError(f"Invalid expression for date: {text}") from e


def resolve_size(raw: Optional[str], context: EntityContext) -> Optional[int]:
    """Resolve a size bound to a number of bytes.

    Args:
        raw: Raw attribute value, or None
        context: Entity context

    Returns:
        Size in bytes, or None if raw is None

    Raises:
        ConfigurationError: If the value is not an integer
    """
    if raw is None:
        return None

    resolution = resolve_placeholder(raw, Number, context)
    if isinstance(resolution, Resolved):
        return int(resolution.value)

    try:
        return int(resolution.text.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid expression for size: {resolution.text}") from e


def resolve_bounds(context: EntityContext) -> ScanBounds:
    """Resolve all four bound attributes of an entity."""
    return ScanBounds(
        bigger_than=resolve_size(context.get_entity_attribute(EntityAttribute.BIGGER_THAN), context),
        smaller_than=resolve_size(
            context.get_entity_attribute(EntityAttribute.SMALLER_THAN), context
        ),
        newer_than=resolve_date(context.get_entity_attribute(EntityAttribute.NEWER_THAN), context),
        older_than=resolve_date(context.get_entity_attribute(EntityAttribute.OLDER_THAN), context),
    )


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.astimezone()
    return value
