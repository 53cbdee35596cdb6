#!/usr/bin/env python3
"""Entity context handed to processors and data sources.

The context is the seam between fileiter and the ingestion pipeline that
drives it. It offers four services:
- raw attribute lookup for the current entity
- ``${name}`` token substitution inside attribute strings
- typed resolution of a single ``${name}`` reference
- date-math evaluation

Variables live in a dotted tree, usually the ``variables`` section of the
data-config file plus values recorded while the pipeline runs.

Example:
    >>> variables = VariableResolver({"dih": {"last_index_time": datetime(2024, 1, 1)}})
    >>> context = EntityContext({"newerThan": "${dih.last_index_time}"}, variables)
    >>> context.resolve("dih.last_index_time")
    datetime.datetime(2024, 1, 1, 0, 0)
"""

import re
from datetime import datetime, tzinfo
from typing import Any, Callable, Dict, Mapping, Optional

from fileiter.core.constants import DATE_FORMAT
from fileiter.core.datemath import evaluate

PLACEHOLDER_PATTERN = re.compile(r"\$\{(.*?)\}")

DateMathFunction = Callable[[Optional[tzinfo], str], datetime]


class VariableResolver:
    """Dotted-name lookup over a nested variable tree."""

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        self._variables: Dict[str, Any] = dict(variables or {})

    def resolve(self, name: str) -> Any:
        """Look up a variable by dotted name.

        An exact key match wins over dotted traversal, so flat keys such as
        ``"dih.last_index_time"`` work as well as nested ones.

        Returns:
            The stored value, or None if absent
        """
        name = name.strip()
        if name in self._variables:
            return self._variables[name]

        current: Any = self._variables
        for part in name.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, name: str, value: Any) -> None:
        """Record a value under a dotted name."""
        parts = name.split(".")
        current = self._variables
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value

    def replace_tokens(self, text: str) -> str:
        """Expand every ``${name}`` in text; unknown names expand to ''."""
        if text is None:
            return None
        return PLACEHOLDER_PATTERN.sub(lambda m: self._format(self.resolve(m.group(1))), text)

    @staticmethod
    def _format(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, datetime):
            return value.strftime(DATE_FORMAT)
        return str(value)


class EntityContext:
    """Context for one configured entity or data source."""

    def __init__(
        self,
        attributes: Optional[Mapping[str, Any]] = None,
        variables: Optional[VariableResolver] = None,
        name: Optional[str] = None,
        timezone: Optional[tzinfo] = None,
        date_math: DateMathFunction = evaluate,
    ):
        """Initialize context.

        Args:
            attributes: Raw entity attributes as configured
            variables: Variable tree for ``${...}`` references
            name: Entity name, used in log context
            timezone: Default zone for date math (None for local)
            date_math: Date-math evaluator ``(timezone, expression) -> datetime``
        """
        self._attributes = dict(attributes or {})
        self.variables = variables or VariableResolver()
        self.name = name or self._attributes.get("name")
        self.timezone = timezone
        self._date_math = date_math

    def get_entity_attribute(self, name: str) -> Optional[str]:
        """Get a raw attribute as a string, or None if absent."""
        value = self._attributes.get(name)
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, datetime):
            return value.strftime(DATE_FORMAT)
        return str(value)

    def replace_tokens(self, text: str) -> str:
        """Expand embedded ``${name}`` references."""
        return self.variables.replace_tokens(text)

    def resolve(self, name: str) -> Any:
        """Resolve a reference name to its typed value (None if absent)."""
        return self.variables.resolve(name)

    def parse_date_math(self, expression: str, timezone: Optional[tzinfo] = None) -> datetime:
        """Evaluate a date-math expression.

        Raises:
            DateMathError: If the expression is malformed
        """
        return self._date_math(timezone or self.timezone, expression)
