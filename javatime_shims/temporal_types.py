"""
javatime_shims/temporal_types.py
════════════════════════════════

The closed family of temporal value types the checker knows about.

Two libraries contribute types:

  * ``java.time``           : the JDK date/time API
  * ``org.threeten.extra``  : ThreeTen-Extra, which adds AmPm, Quarter, ...

Every type in the family implements ``java.time.temporal.TemporalAccessor``
and exposes a static ``from(TemporalAccessor)`` factory.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

TEMPORAL_ACCESSOR: str = "java.time.temporal.TemporalAccessor"

JAVA_TIME: str = "java.time"
THREETEN_EXTRA: str = "org.threeten.extra"

# Libraries whose types the checker judges (receiver check).
TEMPORAL_LIBRARIES: Tuple[str, ...] = (JAVA_TIME, THREETEN_EXTRA)

# Packages whose own code is exempt: the libraries themselves plus the
# java.time TCK, which deliberately exercises failing conversions.
TRUSTED_NAMESPACES: Tuple[str, ...] = (JAVA_TIME, THREETEN_EXTRA, "tck.java.time")


class TemporalTypeTag(Enum):
    """One member per supported temporal value type.

    The value is the fully-qualified class name.
    """

    DAY_OF_WEEK = "java.time.DayOfWeek"
    INSTANT = "java.time.Instant"
    LOCAL_DATE = "java.time.LocalDate"
    LOCAL_DATE_TIME = "java.time.LocalDateTime"
    LOCAL_TIME = "java.time.LocalTime"
    MONTH = "java.time.Month"
    MONTH_DAY = "java.time.MonthDay"
    OFFSET_DATE_TIME = "java.time.OffsetDateTime"
    OFFSET_TIME = "java.time.OffsetTime"
    YEAR = "java.time.Year"
    YEAR_MONTH = "java.time.YearMonth"
    ZONED_DATE_TIME = "java.time.ZonedDateTime"
    ZONE_OFFSET = "java.time.ZoneOffset"
    AM_PM = "org.threeten.extra.AmPm"
    DAY_OF_MONTH = "org.threeten.extra.DayOfMonth"
    DAY_OF_YEAR = "org.threeten.extra.DayOfYear"
    QUARTER = "org.threeten.extra.Quarter"
    YEAR_QUARTER = "org.threeten.extra.YearQuarter"
    YEAR_WEEK = "org.threeten.extra.YearWeek"

    @property
    def qualified_name(self) -> str:
        return self.value

    @property
    def simple_name(self) -> str:
        return self.value.rsplit(".", 1)[1]

    @property
    def library(self) -> str:
        return self.value.rsplit(".", 1)[0]

    @classmethod
    def lookup(cls, type_name: str) -> Optional["TemporalTypeTag"]:
        """Map a fully-qualified type name to its tag, or ``None``."""
        return _BY_NAME.get(type_name)

    @classmethod
    def parse(cls, name: str) -> "TemporalTypeTag":
        """
        Accept a qualified name, a simple name or a member name.

        Used by the CLI, where ``LocalDate``, ``java.time.LocalDate`` and
        ``LOCAL_DATE`` all mean the same thing.  Raises ``ValueError``.
        """
        tag = _BY_NAME.get(name) or _BY_SIMPLE_NAME.get(name)
        if tag is None and name in cls.__members__:
            tag = cls.__members__[name]
        if tag is None:
            raise ValueError(f"unknown temporal type: {name!r}")
        return tag

    def __str__(self) -> str:
        return self.simple_name


_BY_NAME: Dict[str, TemporalTypeTag] = {t.value: t for t in TemporalTypeTag}
_BY_SIMPLE_NAME: Dict[str, TemporalTypeTag] = {
    t.simple_name: t for t in TemporalTypeTag
}


def in_namespace(type_or_package: str, prefixes: Tuple[str, ...]) -> bool:
    """Plain string-prefix test against any of ``prefixes``."""
    return any(type_or_package.startswith(p) for p in prefixes)


__all__ = [
    "TEMPORAL_ACCESSOR",
    "JAVA_TIME",
    "THREETEN_EXTRA",
    "TEMPORAL_LIBRARIES",
    "TRUSTED_NAMESPACES",
    "TemporalTypeTag",
    "in_namespace",
]
