"""
javatime_shims/checkers.py
══════════════════════════

Checker framework that turns matcher verdicts into actionable,
cppcheck-addon-style diagnostics.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                   CheckerRunner                         │
  │  ┌───────────────────────────────────────────────────┐  │
  │  │           FromTemporalAccessorChecker             │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │   FromTemporalAccessorMatcher  +  DumpHost        │  │
  │  │   (compatibility table, signature grammar)        │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │           SuppressionManager                      │  │
  │  │  @SuppressWarnings │  file-level  │  global       │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │        Diagnostic Formatter (JSON / gcc)          │  │
  │  └───────────────────────────────────────────────────┘  │
  └─────────────────────────────────────────────────────────┘

Each Checker follows a four-phase lifecycle:

  1. **configure()**        : read options, build helpers
  2. **collect_evidence()** : evaluate call sites, gather verdicts
  3. **diagnose()**         : turn verdicts into diagnostics
  4. **report()**           : emit Diagnostics (filtered by suppressions)
"""

from __future__ import annotations

import json
import logging
import sys
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    TextIO,
    Tuple,
    Type,
)

from javatime_shims.dump import CallSiteDump, DumpCall, DumpHost, SourceUnit, parsedump
from javatime_shims.errors import DumpError
from javatime_shims.fixes import SuggestedFix
from javatime_shims.matcher import FromTemporalAccessorMatcher, Verdict, VerdictKind
from javatime_shims.temporal_types import TRUSTED_NAMESPACES

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """cppcheck-compatible severity levels."""
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single diagnostic finding.

    Attributes
    ----------
    error_id     : Unique identifier (e.g., "fromTemporalAccessorThrows")
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Primary source location
    checker_name : Name of the checker that produced this
    addon        : Addon name for the JSON protocol
    extra        : Additional context string
    fix          : Optional suggested fix
    evidence     : Machine-readable evidence dict for downstream tooling
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    checker_name: str = ""
    addon: str = "javatime-shims"
    extra: str = ""
    fix: Optional[SuggestedFix] = None
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_cppcheck_json(self) -> Dict[str, Any]:
        """Serialize to the cppcheck-style JSON addon output format."""
        result: Dict[str, Any] = {
            "file": self.location.file,
            "linenr": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "addon": self.addon,
            "errorId": self.error_id,
            "extra": self.extra,
        }
        if self.fix is not None and not self.fix.is_empty:
            result["fix"] = self.fix.to_list()
        return result

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_cppcheck_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. ``@SuppressWarnings("...")`` recorded in the dump, covering the
         line range of the annotated element
      2. File-level suppressions (passed programmatically)
      3. Global suppressions (command-line or config)

    A suppression id matches either a diagnostic's error id or the name
    of the checker that produced it, so ``@SuppressWarnings("FromTemporalAccessor")``
    silences both of that checker's error ids.

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.load_inline_suppressions(unit)
    >>> sm.add_file_suppression("fromTemporalAccessorRedundant", "legacy/*.java")
    >>> sm.add_global_suppression("FromTemporalAccessor")
    >>> if not sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        # file → (first line, last line, id) of each annotated element
        self._inline: Dict[str, List[Tuple[int, int, str]]] = defaultdict(list)
        # file pattern → set of ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        self._global: Set[str] = set()

    def load_inline_suppressions(self, unit: SourceUnit) -> None:
        """Register the unit's recorded ``@SuppressWarnings`` ranges."""
        self._inline[unit.file].extend(unit.suppressions)

    def add_file_suppression(self, error_id: str, file_pattern: str) -> None:
        """Suppress ``error_id`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(error_id)

    def add_global_suppression(self, error_id: str) -> None:
        """Globally suppress ``error_id``."""
        self._global.add(error_id)

    @staticmethod
    def _hits(ids: Set[str], diag: Diagnostic) -> bool:
        return (
            diag.error_id in ids
            or (bool(diag.checker_name) and diag.checker_name in ids)
            or "*" in ids
        )

    def is_suppressed(self, diag: Diagnostic) -> bool:
        """Check whether a diagnostic should be suppressed."""
        if self._hits(self._global, diag):
            return True

        loc = diag.location

        # Inline: the diagnostic lies within an annotated element
        for first, last, warning_id in self._inline.get(loc.file, ()):
            if first <= loc.line <= last and self._hits({warning_id}, diag):
                return True

        for pattern, ids in self._file_level.items():
            if not self._hits(ids, diag):
                continue
            if pattern == loc.file or loc.file.endswith(pattern) or fnmatch(loc.file, pattern):
                return True

        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: CHECKER BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

class Checker(ABC):
    """
    Abstract base class for all checkers.

    Lifecycle
    ─────────
      1. ``configure(ctx)``        : receive context, read options
      2. ``collect_evidence(ctx)`` : evaluate the unit
      3. ``diagnose(ctx)``         : correlate evidence into diagnostics
      4. ``report(ctx)``           : return final diagnostics

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Implement ``collect_evidence()`` and ``diagnose()``
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base-checker"
    description: ClassVar[str] = ""
    explanation: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.WARNING

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        """Called before evidence collection.  Default does nothing."""
        pass

    @abstractmethod
    def collect_evidence(self, ctx: CheckerContext) -> None:
        ...

    @abstractmethod
    def diagnose(self, ctx: CheckerContext) -> None:
        """Append diagnostics to ``self._diagnostics``."""
        ...

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Return final diagnostics, filtered by suppressions."""
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(
        self,
        error_id: str,
        message: str,
        file: str,
        line: int,
        column: int = 0,
        severity: Optional[DiagnosticSeverity] = None,
        extra: str = "",
        fix: Optional[SuggestedFix] = None,
        evidence: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Helper to create and store a diagnostic."""
        self._diagnostics.append(Diagnostic(
            error_id=error_id,
            message=message,
            severity=severity or self.default_severity,
            location=SourceLocation(file=file, line=line, column=column),
            checker_name=self.name,
            extra=extra,
            fix=fix,
            evidence=evidence or {},
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


@dataclass
class CheckerContext:
    """
    Shared context passed to every checker during execution.

    Attributes
    ----------
    unit         : the SourceUnit being checked
    suppressions : SuppressionManager
    options      : user-provided options dict (see ``CheckConfig.to_options``)
    stats        : mutable dict for timing / counting statistics
    """
    unit: SourceUnit
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    options: Dict[str, Any] = field(default_factory=dict)
    stats: Dict[str, Any] = field(default_factory=dict)

    def get_option(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)


# ═════════════════════════════════════════════════════════════════════════
#  PART 4: CHECKER REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """
    Registry of available checkers with discovery and filtering.

    Usage
    -----
    >>> registry = CheckerRegistry()
    >>> registry.register(FromTemporalAccessorChecker)
    >>> checkers = registry.get_enabled()
    """

    def __init__(self) -> None:
        self._checkers: Dict[str, Type[Checker]] = {}
        self._disabled: Set[str] = set()

    def register(self, checker_cls: Type[Checker]) -> None:
        self._checkers[checker_cls.name] = checker_cls

    def disable(self, name: str) -> None:
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        self._disabled.discard(name)

    def get_all(self) -> List[Type[Checker]]:
        return list(self._checkers.values())

    def get_enabled(self) -> List[Type[Checker]]:
        return [
            cls for name, cls in self._checkers.items()
            if name not in self._disabled
        ]

    def get_by_name(self, name: str) -> Optional[Type[Checker]]:
        return self._checkers.get(name)

    def filter_by_error_id(self, error_id: str) -> List[Type[Checker]]:
        """Return checkers that can produce the given error_id."""
        return [
            cls for cls in self._checkers.values()
            if error_id in cls.error_ids
        ]

    @property
    def names(self) -> List[str]:
        return sorted(self._checkers.keys())


# ═════════════════════════════════════════════════════════════════════════
#  PART 5: FROM(TEMPORALACCESSOR) CHECKER
# ═════════════════════════════════════════════════════════════════════════

class FromTemporalAccessorChecker(Checker):
    """
    Bans ``javaTimeType.from(temporalAccessor)`` calls that are guaranteed
    to either throw ``DateTimeException`` (``LocalDate.from(month)``) or
    return their argument unchanged (``Instant.from(instant)``).

    Options
    ───────
      trusted_namespaces : extra package prefixes exempt from the check
      report_redundant   : emit fromTemporalAccessorRedundant (default True)
      report_invalid     : emit fromTemporalAccessorThrows (default True)
    """

    name: ClassVar[str] = "FromTemporalAccessor"
    description: ClassVar[str] = (
        "Certain combinations of javaTimeType.from(TemporalAccessor) will "
        "always throw a DateTimeException or return the parameter directly."
    )
    explanation: ClassVar[str] = (
        "Not all java.time types can be created via from(TemporalAccessor). "
        "For example, you can create a Month from a LocalDate "
        "(Month.from(localDate)) because a LocalDate consists of a year, "
        "month, and day. However, you cannot create a LocalDate from a Month "
        "(since it doesn't have the year or day information). Instead of "
        "throwing a DateTimeException at runtime, this checker validates the "
        "type transformations at compile time using static type information."
    )
    error_ids: ClassVar[FrozenSet[str]] = frozenset({
        "fromTemporalAccessorThrows", "fromTemporalAccessorRedundant",
    })
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.ERROR

    def __init__(self) -> None:
        super().__init__()
        self._matcher: Optional[FromTemporalAccessorMatcher] = None
        self._report_redundant = True
        self._report_invalid = True
        self._findings: List[Tuple[DumpCall, Verdict]] = []

    def configure(self, ctx: CheckerContext) -> None:
        self._report_redundant = bool(ctx.get_option("report_redundant", True))
        self._report_invalid = bool(ctx.get_option("report_invalid", True))
        self._matcher = self._build_matcher(ctx)

    @staticmethod
    def _build_matcher(ctx: CheckerContext) -> FromTemporalAccessorMatcher:
        extra = tuple(ctx.get_option("trusted_namespaces", ()) or ())
        return FromTemporalAccessorMatcher.for_host(
            DumpHost(ctx.unit),
            trusted_namespaces=TRUSTED_NAMESPACES + extra,
        )

    def collect_evidence(self, ctx: CheckerContext) -> None:
        matcher = self._matcher
        if matcher is None:
            matcher = self._matcher = self._build_matcher(ctx)
        evaluated = 0
        for call in ctx.unit.calls:
            verdict = matcher.evaluate(call)
            evaluated += 1
            if verdict.is_finding:
                self._findings.append((call, verdict))
        ctx.stats[f"{self.name}_calls"] = ctx.stats.get(f"{self.name}_calls", 0) + evaluated

    def diagnose(self, ctx: CheckerContext) -> None:
        for call, verdict in self._findings:
            receiver = (call.receiver_type or call.owner or "").rsplit(".", 1)[-1]
            arg = call.arguments[0]
            arg_type = (arg.type or "").rsplit(".", 1)[-1]
            evidence = {
                "receiverType": call.receiver_type,
                "argumentType": arg.type,
                "verdict": verdict.kind.value,
            }
            if verdict.kind is VerdictKind.ALWAYS_REDUNDANT and self._report_redundant:
                self._emit(
                    error_id="fromTemporalAccessorRedundant",
                    message=(
                        f"{receiver}.from({arg.text}) returns its {arg_type} "
                        f"argument unchanged; use '{verdict.replacement}' directly"
                    ),
                    file=call.file, line=call.line, column=call.column,
                    extra=self.description,
                    fix=verdict.fix,
                    evidence=evidence,
                )
            elif verdict.kind is VerdictKind.ALWAYS_INVALID and self._report_invalid:
                self._emit(
                    error_id="fromTemporalAccessorThrows",
                    message=(
                        f"{receiver}.from({arg.text}) always throws "
                        f"DateTimeException: a {arg_type} does not carry "
                        f"enough information to build a {receiver}"
                    ),
                    file=call.file, line=call.line, column=call.column,
                    extra=self.description,
                    evidence=evidence,
                )


# ═════════════════════════════════════════════════════════════════════════
#  PART 6: CHECKER RUNNER
# ═════════════════════════════════════════════════════════════════════════

_DEFAULT_REGISTRY = CheckerRegistry()
_DEFAULT_REGISTRY.register(FromTemporalAccessorChecker)


def default_registry() -> CheckerRegistry:
    return _DEFAULT_REGISTRY


@dataclass
class CheckerRunResults:
    """
    Aggregate results from running a suite of checkers.

    Attributes
    ----------
    diagnostics            : All diagnostics from all checkers
    diagnostics_by_checker : Diagnostics grouped by checker name
    stats                  : Timing and counting statistics
    checker_names          : Names of checkers that were run
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.ERROR
        )

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def by_error_id(self, error_id: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.error_id == error_id]

    def fixes(self) -> Dict[str, List[SuggestedFix]]:
        """Suggested fixes grouped by file."""
        out: Dict[str, List[SuggestedFix]] = defaultdict(list)
        for d in self.diagnostics:
            if d.fix is not None and not d.fix.is_empty:
                out[d.location.file].append(d.fix)
        return dict(out)

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Checker run complete: {self.total_count} diagnostics "
            f"({self.error_count} errors)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs a suite of checkers against call-site dump units.

    Usage
    -----
    >>> runner = CheckerRunner()
    >>> results = runner.run_all_units(parsedump("build/calls.json"))
    >>> print(results.summary())

    Parameters for constructor
    ─────────────────────────
    registry    : CheckerRegistry, source of checker classes
    suppressions: SuppressionManager, pre-loaded suppression rules
    options     : dict, per-checker configuration
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.registry = registry or _DEFAULT_REGISTRY
        self.suppressions = suppressions or SuppressionManager()
        self.options = options or {}

    def _select(self, checkers: Optional[Sequence[str]]) -> List[Type[Checker]]:
        if checkers is None:
            return self.registry.get_enabled()
        selected: List[Type[Checker]] = []
        for name in checkers:
            cls = self.registry.get_by_name(name)
            if cls is None:
                logger.warning("unknown checker %r ignored", name)
                continue
            selected.append(cls)
        return selected

    def run(
        self,
        unit: SourceUnit,
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """
        Run checkers against a single unit.

        Parameters
        ----------
        unit     : SourceUnit
        checkers : list of checker names to run (None = all enabled)
        """
        results = CheckerRunResults()

        self.suppressions.load_inline_suppressions(unit)

        ctx = CheckerContext(
            unit=unit,
            suppressions=self.suppressions,
            options=self.options,
        )

        for cls in self._select(checkers):
            checker = cls()
            checker_name = cls.name
            results.checker_names.append(checker_name)

            t0 = time.monotonic()
            try:
                checker.configure(ctx)
                checker.collect_evidence(ctx)
                checker.diagnose(ctx)
                diags = checker.report(ctx)
            except Exception as exc:
                # Graceful degradation: report the failure, don't crash
                logger.debug("checker %s failed on %s", checker_name, unit.file, exc_info=True)
                diags = [Diagnostic(
                    error_id="checkerInternalError",
                    message=f"Checker '{checker_name}' failed: {exc}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=SourceLocation(file=unit.file),
                    checker_name=checker_name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0

            results.diagnostics.extend(diags)
            results.diagnostics_by_checker[checker_name].extend(diags)
            results.stats[f"{checker_name}_elapsed_ms"] = elapsed_ms

        results.stats.update(
            {k: v for k, v in ctx.stats.items() if k not in results.stats}
        )
        return results

    def run_all_units(
        self,
        dump: CallSiteDump,
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """Run checkers across all units of a dump."""
        combined = CheckerRunResults()
        for unit in dump.units:
            partial = self.run(unit, checkers=checkers)
            combined.diagnostics.extend(partial.diagnostics)
            for name, diags in partial.diagnostics_by_checker.items():
                combined.diagnostics_by_checker[name].extend(diags)
            for key, val in partial.stats.items():
                # accumulate times and counts
                if key in combined.stats:
                    combined.stats[key] += val
                else:
                    combined.stats[key] = val
            for name in partial.checker_names:
                if name not in combined.checker_names:
                    combined.checker_names.append(name)
        logger.info(
            "checked %d unit(s): %d diagnostic(s)",
            len(dump.units), combined.total_count,
        )
        return combined


# ═════════════════════════════════════════════════════════════════════════
#  PART 7: ADDON ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════

def write_results(results: CheckerRunResults, output: str, stream: TextIO) -> None:
    """Write ``results`` as JSON lines, GCC-style lines or a summary."""
    if output == "json":
        for diag in results.diagnostics:
            stream.write(diag.to_json_str() + "\n")
    elif output == "gcc":
        for diag in results.diagnostics:
            stream.write(diag.to_gcc_format() + "\n")
    else:
        for diag in results.diagnostics:
            stream.write(diag.to_gcc_format() + "\n")
        stream.write(results.summary() + "\n")


def run_addon(
    dump_file: str,
    checkers: Optional[Sequence[str]] = None,
    output: str = "json",
    suppress: Optional[Sequence[str]] = None,
    options: Optional[Dict[str, Any]] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Run the checker suite over a call-site dump file.

    Parameters
    ----------
    dump_file : path to the JSON call-site dump
    checkers  : checker names to run (None = all)
    output    : "json", "gcc" or "summary"
    suppress  : ids (error ids or checker names) to suppress globally
    options   : checker options (see ``CheckConfig.to_options``)
    stream    : where to write (default: stdout)

    Returns
    -------
    Exit code (0 = no errors, 1 = errors found, 2 = unreadable dump)
    """
    try:
        dump = parsedump(dump_file)
    except DumpError as exc:
        logger.error("%s", exc)
        return 2

    sm = SuppressionManager()
    for eid in suppress or ():
        sm.add_global_suppression(eid)

    runner = CheckerRunner(suppressions=sm, options=options)
    results = runner.run_all_units(dump, checkers=checkers)
    write_results(results, output, stream or sys.stdout)

    return 1 if results.error_count > 0 else 0


__all__ = [
    # Diagnostic model
    "Diagnostic",
    "DiagnosticSeverity",
    "SourceLocation",
    # Suppression
    "SuppressionManager",
    # Checker framework
    "Checker",
    "CheckerContext",
    "CheckerRegistry",
    "default_registry",
    # Checkers
    "FromTemporalAccessorChecker",
    # Runner
    "CheckerRunner",
    "CheckerRunResults",
    # Entry point
    "write_results",
    "run_addon",
]
