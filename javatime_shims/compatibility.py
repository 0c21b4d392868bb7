"""
javatime_shims/compatibility.py
═══════════════════════════════

Compatibility knowledge base for ``Target.from(source)`` conversions.

Each row below names a *source* type (the static type of the argument)
and the *target* types (the receiver of ``from``) that can never be built
from it: the source lacks a field the target requires, so the factory
always throws ``DateTimeException``.

The relation is directional.  ``Month.from(localDate)`` is fine because a
date carries a month; ``LocalDate.from(month)`` always fails.  Types with
no common refinement (DayOfWeek vs. Month) fail in both directions.

Rows that are empty, or absent, mean "no known incompatibility"; they are
conservative omissions, never proofs of validity.  ``OffsetDateTime`` and
``ZonedDateTime`` carry every field and have empty rows.

Same-type conversions are not stored here: they are *redundant*, not
*impossible*, and the matcher handles them separately.

Usage
-----
>>> from javatime_shims.compatibility import DEFAULT_TABLE
>>> from javatime_shims.temporal_types import TemporalTypeTag as T
>>> DEFAULT_TABLE.is_known_incompatible(T.LOCAL_DATE, T.MONTH)
True
>>> DEFAULT_TABLE.is_known_incompatible(T.MONTH, T.LOCAL_DATE)
False
"""

from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Set,
    Tuple,
)

from javatime_shims.errors import TableError
from javatime_shims.temporal_types import TemporalTypeTag

T = TemporalTypeTag


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: TABLE DATA (source → targets that always throw)
# ═════════════════════════════════════════════════════════════════════════

_INCOMPATIBLE_TARGETS_BY_SOURCE: Dict[TemporalTypeTag, Tuple[TemporalTypeTag, ...]] = {
    T.DAY_OF_WEEK: (
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.INSTANT: (
        T.DAY_OF_WEEK,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.LOCAL_DATE: (
        T.INSTANT,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
    ),
    T.LOCAL_DATE_TIME: (
        T.INSTANT,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
    ),
    T.LOCAL_TIME: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.MONTH: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.MONTH_DAY: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_YEAR,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    # TODO: OffsetDateTime and ZonedDateTime rows await domain-expert review;
    # keep them empty until each pair is confirmed.
    T.OFFSET_DATE_TIME: (),
    T.OFFSET_TIME: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.YEAR: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.YEAR_MONTH: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.YEAR_WEEK,
    ),
    T.ZONED_DATE_TIME: (),
    T.ZONE_OFFSET: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.AM_PM: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.DAY_OF_MONTH: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.DAY_OF_YEAR: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.QUARTER,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.QUARTER: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.YEAR_QUARTER,
        T.YEAR_WEEK,
    ),
    T.YEAR_QUARTER: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.YEAR_WEEK,
    ),
    T.YEAR_WEEK: (
        T.DAY_OF_WEEK,
        T.INSTANT,
        T.LOCAL_DATE,
        T.LOCAL_DATE_TIME,
        T.LOCAL_TIME,
        T.MONTH,
        T.MONTH_DAY,
        T.OFFSET_DATE_TIME,
        T.OFFSET_TIME,
        T.YEAR,
        T.YEAR_MONTH,
        T.ZONED_DATE_TIME,
        T.ZONE_OFFSET,
        T.AM_PM,
        T.DAY_OF_MONTH,
        T.DAY_OF_YEAR,
        T.QUARTER,
        T.YEAR_QUARTER,
    ),
}


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: TABLE
# ═════════════════════════════════════════════════════════════════════════

_EMPTY: FrozenSet[TemporalTypeTag] = frozenset()


class CompatibilityTable:
    """
    Immutable, directional (target, source) → "always fails" relation.

    Build with :meth:`from_source_rows`; both the source-keyed and the
    derived target-keyed views are frozen at construction.
    """

    __slots__ = ("_targets_by_source", "_sources_by_target", "_size")

    def __init__(
        self,
        targets_by_source: Mapping[TemporalTypeTag, FrozenSet[TemporalTypeTag]],
    ) -> None:
        sources_by_target: Dict[TemporalTypeTag, Set[TemporalTypeTag]] = defaultdict(set)
        frozen: Dict[TemporalTypeTag, FrozenSet[TemporalTypeTag]] = {}
        size = 0
        for source, targets in targets_by_source.items():
            if source in targets:
                raise TableError(
                    f"self-pair {source.simple_name}.from({source.simple_name}) "
                    f"belongs to the redundancy rule, not the table"
                )
            frozen[source] = frozenset(targets)
            for target in targets:
                sources_by_target[target].add(source)
            size += len(targets)

        self._targets_by_source: Mapping[
            TemporalTypeTag, FrozenSet[TemporalTypeTag]
        ] = MappingProxyType(frozen)
        self._sources_by_target: Mapping[
            TemporalTypeTag, FrozenSet[TemporalTypeTag]
        ] = MappingProxyType({t: frozenset(s) for t, s in sources_by_target.items()})
        self._size = size

    @classmethod
    def from_source_rows(
        cls,
        rows: Mapping[TemporalTypeTag, Iterable[TemporalTypeTag]],
    ) -> "CompatibilityTable":
        """Build a table from ``{source: [targets that always throw]}``."""
        checked: Dict[TemporalTypeTag, FrozenSet[TemporalTypeTag]] = {}
        for source, targets in rows.items():
            targets = tuple(targets)
            if len(set(targets)) != len(targets):
                raise TableError(f"duplicate target in row {source.simple_name}")
            checked[source] = frozenset(targets)
        return cls(checked)

    # ── Lookups ──────────────────────────────────────────────────────────

    def is_known_incompatible(
        self, target: TemporalTypeTag, source: TemporalTypeTag
    ) -> bool:
        """True if ``target.from(<source>)`` always throws."""
        return target in self._targets_by_source.get(source, _EMPTY)

    def incompatible_sources(self, target: TemporalTypeTag) -> FrozenSet[TemporalTypeTag]:
        """Source types that can never supply enough fields for ``target``."""
        return self._sources_by_target.get(target, _EMPTY)

    def incompatible_targets(self, source: TemporalTypeTag) -> FrozenSet[TemporalTypeTag]:
        """Target types that can never be built from ``source``."""
        return self._targets_by_source.get(source, _EMPTY)

    def pairs(self) -> Iterator[Tuple[TemporalTypeTag, TemporalTypeTag]]:
        """Yield every incompatible ``(target, source)`` pair in tag order."""
        for source in TemporalTypeTag:
            for target in TemporalTypeTag:
                if target in self._targets_by_source.get(source, _EMPTY):
                    yield target, source

    @property
    def sources(self) -> List[TemporalTypeTag]:
        """Source tags that have a row (possibly empty)."""
        return [t for t in TemporalTypeTag if t in self._targets_by_source]

    def __len__(self) -> int:
        return self._size

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        target, source = pair
        return self.is_known_incompatible(target, source)

    def __repr__(self) -> str:
        return (
            f"<CompatibilityTable {len(self._targets_by_source)} sources, "
            f"{self._size} incompatible pairs>"
        )

    # ── Rendering (for review) ───────────────────────────────────────────

    def to_dict(self) -> Dict[str, List[str]]:
        """``{target: [sources]}`` keyed by simple name, in tag order."""
        return {
            target.simple_name: [
                s.simple_name for s in TemporalTypeTag
                if s in self.incompatible_sources(target)
            ]
            for target in TemporalTypeTag
        }

    def render_grid(self) -> str:
        """
        Text matrix: rows are targets, columns are sources.

        ``X`` marks an always-failing conversion, ``=`` the diagonal
        (redundant, handled outside the table), ``.`` everything else.
        """
        tags = list(TemporalTypeTag)
        width = max(len(t.simple_name) for t in tags)
        header = " " * (width + 1) + " ".join(
            f"{i:>2}" for i in range(len(tags))
        )
        lines = [header]
        for target in tags:
            cells = []
            for source in tags:
                if source is target:
                    cells.append(" =")
                elif self.is_known_incompatible(target, source):
                    cells.append(" X")
                else:
                    cells.append(" .")
            lines.append(f"{target.simple_name:<{width}} " + " ".join(cells))
        lines.append("")
        for i, tag in enumerate(tags):
            lines.append(f"{i:>2} = {tag.simple_name}")
        return "\n".join(lines)


DEFAULT_TABLE: CompatibilityTable = CompatibilityTable.from_source_rows(
    _INCOMPATIBLE_TARGETS_BY_SOURCE
)


__all__ = [
    "CompatibilityTable",
    "DEFAULT_TABLE",
]
