#!/usr/bin/env python3
"""Date-math expression evaluation.

Relative points in time are written the way Solr writes them, minus the
leading ``NOW`` token which callers strip before evaluation:

- ``+N<UNIT>`` / ``-N<UNIT>``: shift by N units
- ``/<UNIT>``: round down to the start of the unit

Operations apply left to right, so ``/DAY-1DAY`` means "start of
yesterday". All arithmetic happens in the supplied time zone, which
matters for rounding and for daylight-saving transitions.

Example:
    >>> parser = DateMathParser(tz.UTC, now=datetime(2024, 3, 15, 10, 30, tzinfo=tz.UTC))
    >>> parser.parse_math("-1DAY/DAY")
    datetime.datetime(2024, 3, 14, 0, 0, tzinfo=tzutc())
"""

import re
from datetime import datetime, tzinfo
from typing import Callable, Dict, Optional

from dateutil import tz
from dateutil.relativedelta import relativedelta


class DateMathError(ValueError):
    """Malformed date-math expression."""

    def __init__(self, message: str, expression: str, position: int = 0):
        self.message = message
        self.expression = expression
        self.position = position
        super().__init__(f"{message} in {expression!r} at position {position}")


# unit -> relativedelta keyword
_SHIFT_UNITS: Dict[str, str] = {
    "YEAR": "years",
    "YEARS": "years",
    "MONTH": "months",
    "MONTHS": "months",
    "DAY": "days",
    "DAYS": "days",
    "DATE": "days",
    "HOUR": "hours",
    "HOURS": "hours",
    "MINUTE": "minutes",
    "MINUTES": "minutes",
    "SECOND": "seconds",
    "SECONDS": "seconds",
    "MILLI": "milliseconds",
    "MILLIS": "milliseconds",
    "MILLISECOND": "milliseconds",
    "MILLISECONDS": "milliseconds",
}


def _round_milli(dt: datetime) -> datetime:
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


_ROUNDERS: Dict[str, Callable[[datetime], datetime]] = {
    "years": lambda dt: dt.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0),
    "months": lambda dt: dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0),
    "days": lambda dt: dt.replace(hour=0, minute=0, second=0, microsecond=0),
    "hours": lambda dt: dt.replace(minute=0, second=0, microsecond=0),
    "minutes": lambda dt: dt.replace(second=0, microsecond=0),
    "seconds": lambda dt: dt.replace(microsecond=0),
    "milliseconds": _round_milli,
}

_OPERATION = re.compile(r"(?P<sign>[+-])(?P<amount>\d+)(?P<unit>[A-Z]+)|/(?P<round>[A-Z]+)")


class DateMathParser:
    """Evaluates date-math expressions relative to a fixed "now"."""

    def __init__(self, timezone: Optional[tzinfo] = None, now: Optional[datetime] = None):
        """Initialize parser.

        Args:
            timezone: Zone used for arithmetic and rounding (default: local)
            now: Reference instant (default: current time)
        """
        self.timezone = timezone or tz.tzlocal()
        if now is None:
            now = datetime.now(self.timezone)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=self.timezone)
        self.now = now.astimezone(self.timezone)

    def parse_math(self, expression: str) -> datetime:
        """Apply an expression to the reference instant.

        Args:
            expression: Operations such as "-1DAY" or "/HOUR+2HOURS"

        Returns:
            Timezone-aware datetime

        Raises:
            DateMathError: If the expression is malformed
        """
        result = self.now
        position = 0

        while position < len(expression):
            match = _OPERATION.match(expression, position)
            if match is None:
                raise DateMathError("Unexpected text", expression, position)

            if match.group("round") is not None:
                unit = self._unit(match.group("round"), expression, match.start("round"))
                result = _ROUNDERS[unit](result)
            else:
                unit = self._unit(match.group("unit"), expression, match.start("unit"))
                amount = int(match.group("amount"))
                if match.group("sign") == "-":
                    amount = -amount
                result = self._shift(result, unit, amount)

            position = match.end()

        return result

    def _unit(self, name: str, expression: str, position: int) -> str:
        try:
            return _SHIFT_UNITS[name]
        except KeyError:
            raise DateMathError(f"Unknown unit {name!r}", expression, position) from None

    def _shift(self, value: datetime, unit: str, amount: int) -> datetime:
        if unit == "milliseconds":
            delta = relativedelta(microseconds=amount * 1000)
        else:
            delta = relativedelta(**{unit: amount})
        # arithmetic on wall-clock time, then re-resolve the offset
        shifted = value.replace(tzinfo=None) + delta
        return shifted.replace(tzinfo=self.timezone)


def evaluate(timezone: Optional[tzinfo], expression: str) -> datetime:
    """Evaluate an expression against the current time.

    Args:
        timezone: Default time zone (None for local)
        expression: Date-math expression without the leading NOW

    Returns:
        Timezone-aware datetime
    """
    return DateMathParser(timezone).parse_math(expression)
