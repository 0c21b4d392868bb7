"""
javatime_shims/matcher.py
═════════════════════════

Call-site matcher for ``Target.from(TemporalAccessor)``.

For every call expression the host presents, ``evaluate`` runs a fixed
sequence of cheap rejections before it ever looks at the compatibility
table; nearly every call in a real code base falls out at step 1.

  1. shape      : static ``from(java.time.temporal.TemporalAccessor)``, one argument
  2. namespace  : calls inside java.time / ThreeTen-Extra / the TCK are exempt
  3. receiver   : receiver must be a java.time or ThreeTen-Extra type
  4. unnarrowed : argument typed as plain ``TemporalAccessor`` proves nothing
  5. redundant  : result type == argument type → replace call with argument
  6. table      : (receiver, argument) known incompatible → always throws

Only exact static type identity is used.  Whenever the host cannot supply
a fact, the verdict is ``NO_FINDING``: the matcher reports only what it
can prove.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from javatime_shims.compatibility import DEFAULT_TABLE, CompatibilityTable
from javatime_shims.errors import UnresolvedTypeError
from javatime_shims.fixes import SuggestedFix
from javatime_shims.host import CallShapeMatcher, CallSite, SourceReader, TypeResolver
from javatime_shims.temporal_types import (
    TEMPORAL_ACCESSOR,
    TEMPORAL_LIBRARIES,
    TRUSTED_NAMESPACES,
    TemporalTypeTag,
    in_namespace,
)

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: VERDICT
# ═════════════════════════════════════════════════════════════════════════

class VerdictKind(Enum):
    NO_FINDING = "no-finding"
    ALWAYS_REDUNDANT = "always-redundant"
    ALWAYS_INVALID = "always-invalid"


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of evaluating one call site.

    ``replacement`` and ``fix`` are set only for ``ALWAYS_REDUNDANT``.
    ``reason`` names the step that decided the verdict.
    """
    kind: VerdictKind
    replacement: Optional[str] = None
    fix: Optional[SuggestedFix] = None
    reason: str = ""

    @classmethod
    def no_finding(cls, reason: str = "") -> "Verdict":
        return cls(VerdictKind.NO_FINDING, reason=reason)

    @classmethod
    def always_redundant(
        cls, replacement: str, fix: Optional[SuggestedFix] = None
    ) -> "Verdict":
        return cls(
            VerdictKind.ALWAYS_REDUNDANT,
            replacement=replacement,
            fix=fix,
            reason="redundant",
        )

    @classmethod
    def always_invalid(cls) -> "Verdict":
        return cls(VerdictKind.ALWAYS_INVALID, reason="incompatible")

    @property
    def is_finding(self) -> bool:
        return self.kind is not VerdictKind.NO_FINDING


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: MATCHER
# ═════════════════════════════════════════════════════════════════════════

class FromTemporalAccessorMatcher:
    """
    Judge ``Target.from(argument)`` calls using static type facts only.

    Parameters
    ----------
    shape              : recognizes ``static from(TemporalAccessor)`` calls
    types              : static type resolution
    source             : argument text and spans (for the redundancy fix)
    table              : compatibility table (default: built-in table)
    trusted_namespaces : package prefixes exempt from the check

    The matcher holds no per-call state; ``evaluate`` may be called from
    several threads as long as the host objects allow it.
    """

    def __init__(
        self,
        shape: CallShapeMatcher,
        types: TypeResolver,
        source: SourceReader,
        table: CompatibilityTable = DEFAULT_TABLE,
        trusted_namespaces: Tuple[str, ...] = TRUSTED_NAMESPACES,
        libraries: Tuple[str, ...] = TEMPORAL_LIBRARIES,
    ) -> None:
        self.shape = shape
        self.types = types
        self.source = source
        self.table = table
        self.trusted_namespaces = tuple(trusted_namespaces)
        self.libraries = tuple(libraries)

    @classmethod
    def for_host(cls, host: Any, **kwargs: Any) -> "FromTemporalAccessorMatcher":
        """Build a matcher over a host that implements all three protocols."""
        return cls(shape=host, types=host, source=host, **kwargs)

    def evaluate(self, call: Any) -> Verdict:
        """Produce exactly one verdict for ``call``; never raises on bad facts."""
        # exit early if this isn't a `from(TemporalAccessor)` call
        if not self.shape.is_static_from_temporal_accessor(call):
            return Verdict.no_finding("shape")
        try:
            site = CallSite.resolve(call, self.types, self.source)
            return self.judge(site)
        except UnresolvedTypeError as exc:
            logger.debug("no verdict: %s", exc)
            return Verdict.no_finding("unresolved")

    def judge(self, site: CallSite) -> Verdict:
        """Steps 2-6 on an already resolved call site."""
        if in_namespace(site.enclosing_package, self.trusted_namespaces):
            return Verdict.no_finding("trusted-namespace")

        if not in_namespace(site.receiver_type, self.libraries):
            return Verdict.no_finding("foreign-receiver")

        if self._is_unnarrowed(site):
            return Verdict.no_finding("unnarrowed-argument")

        # Instant.from(instant) and similar
        if self.types.is_same_type(site.result_type, site.argument_type):
            start, end = site.call_span
            fix = None
            if end > start:
                fix = SuggestedFix.replace(
                    start, end, site.argument_text, self._argument_origin(site),
                )
            return Verdict.always_redundant(site.argument_text, fix)

        target = TemporalTypeTag.lookup(site.receiver_type)
        source = TemporalTypeTag.lookup(site.argument_type)
        if target is None or source is None:
            return Verdict.no_finding("untracked-type")
        if self.table.is_known_incompatible(target, source):
            return Verdict.always_invalid()
        return Verdict.no_finding("compatible")

    @staticmethod
    def _argument_origin(site: CallSite) -> Optional[int]:
        """Start of the argument inside the call, if its span matches its text."""
        arg_start, arg_end = site.argument_span
        call_start, call_end = site.call_span
        if (
            arg_end - arg_start == len(site.argument_text) > 0
            and call_start <= arg_start
            and arg_end <= call_end
        ):
            return arg_start
        return None

    def _is_unnarrowed(self, site: CallSite) -> bool:
        """Argument statically typed as the bare ``TemporalAccessor`` interface."""
        return self.types.is_same_type(site.argument_type, TEMPORAL_ACCESSOR)


__all__ = [
    "VerdictKind",
    "Verdict",
    "FromTemporalAccessorMatcher",
]
