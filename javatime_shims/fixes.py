"""
javatime_shims/fixes.py
═══════════════════════

Fix descriptors attached to diagnostics, and their application to
source text.

A fix is a list of ``TextEdit``s over character offsets of the source
as the compiler saw it.  Disjoint edits are applied from the highest
offset down so earlier offsets stay valid.

Nested redundant calls (``Instant.from(Instant.from(now))``) produce an
outer edit that contains the inner one.  When the outer edit records
where its replacement text was copied from (``origin``), the inner edit
is rebased into that text and composed; any other overlap is an error.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from javatime_shims.errors import FixError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextEdit:
    """
    Replace ``source[start:end]`` with ``replacement``.

    ``origin`` is the offset in the same source that ``replacement`` was
    copied from, when it is a verbatim slice (``None`` otherwise).
    """
    start: int
    end: int
    replacement: str
    origin: Optional[int] = None

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise FixError(f"invalid edit span [{self.start}, {self.end})")
        if self.origin is not None and self.origin < 0:
            raise FixError(f"invalid edit origin {self.origin}")

    def carries(self, other: "TextEdit") -> bool:
        """True if ``other`` falls inside the copied replacement text."""
        return (
            self.origin is not None
            and self.origin <= other.start
            and other.end <= self.origin + len(self.replacement)
        )

    def rebased(self, offset: int) -> "TextEdit":
        return TextEdit(
            self.start - offset,
            self.end - offset,
            self.replacement,
            None if self.origin is None else self.origin - offset,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "start": self.start, "end": self.end, "replacement": self.replacement,
        }
        if self.origin is not None:
            out["origin"] = self.origin
        return out


@dataclass(frozen=True)
class SuggestedFix:
    """A safe, semantics-preserving patch for one finding."""
    edits: Tuple[TextEdit, ...] = ()

    @classmethod
    def replace(
        cls, start: int, end: int, replacement: str, origin: Optional[int] = None
    ) -> "SuggestedFix":
        return cls(edits=(TextEdit(start, end, replacement, origin),))

    @property
    def is_empty(self) -> bool:
        return not self.edits

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.edits]


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """
    Apply ``edits`` to ``text``.

    Identical edits (same span, same replacement) are applied once, which
    happens when two diagnostics carry the same fix.  An edit lying inside
    the copied replacement of an enclosing edit is composed into it.

    Raises
    ------
    FixError
        If an edit falls outside ``text``, or two edits overlap in a way
        that cannot be composed.
    """
    # outermost first among edits sharing a start
    ordered = sorted(set(edits), key=lambda e: (e.start, -e.end))
    for edit in ordered:
        if edit.end > len(text):
            raise FixError(
                f"edit [{edit.start}, {edit.end}) exceeds source length {len(text)}"
            )

    top: List[TextEdit] = []
    nested: Dict[TextEdit, List[TextEdit]] = defaultdict(list)
    for edit in ordered:
        if top and edit.start < top[-1].end:
            outer = top[-1]
            if edit.end > outer.end or not outer.carries(edit):
                raise FixError(
                    f"overlapping edits [{outer.start}, {outer.end}) and "
                    f"[{edit.start}, {edit.end})"
                )
            nested[outer].append(edit)
            continue
        top.append(edit)

    out = text
    for edit in reversed(top):
        replacement = edit.replacement
        inner = nested.get(edit)
        if inner and edit.origin is not None:
            replacement = apply_edits(
                replacement, [e.rebased(edit.origin) for e in inner]
            )
            logger.debug(
                "composed %d nested edit(s) into [%d, %d)",
                len(inner), edit.start, edit.end,
            )
        out = out[:edit.start] + replacement + out[edit.end:]
    logger.debug("applied %d edit(s)", len(ordered))
    return out


def apply_fixes(text: str, fixes: Iterable[SuggestedFix]) -> str:
    """Apply every edit of every fix in ``fixes`` to ``text``."""
    return apply_edits(text, (e for fix in fixes for e in fix.edits))


def apply_fixes_to_unit(unit: Any, fixes: Iterable[SuggestedFix], root: Optional[Path] = None) -> str:
    """
    Patched source text of a dump unit.

    The text comes from ``unit.read_source(root)``: the dump's embedded
    source, or the file on disk.
    """
    return apply_fixes(unit.read_source(root), fixes)


__all__ = [
    "TextEdit",
    "SuggestedFix",
    "apply_edits",
    "apply_fixes",
    "apply_fixes_to_unit",
]
