"""
javatime_shims: static checks for java.time ``from(TemporalAccessor)``
=====================================================================

Flags ``Target.from(argument)`` calls over java.time and ThreeTen-Extra
types whose outcome is fixed by the static types alone:

* the call always throws ``DateTimeException`` (``LocalDate.from(month)``)
* the call returns its argument unchanged (``Instant.from(instant)``)

Core modules
------------
temporal_types
    Type tags for the java.time / ThreeTen-Extra types the check knows.
compatibility
    The (target, argument) pairs whose ``from()`` always throws.
signature
    parsimonious grammar for resolved Java method signatures.
host
    Capability protocols the matcher consumes from its host compiler.
matcher
    ``FromTemporalAccessorMatcher``: one verdict per call site.
dump
    JSON call-site dump loader and its host adapter.
fixes
    Text edits attached to redundant-call findings.
checkers
    cppcheck-addon-style checker framework, runner and diagnostics.
config / main
    Run configuration and the ``javatime-check`` CLI.

Quick start
-----------
>>> from javatime_shims import parsedump, CheckerRunner
>>> results = CheckerRunner().run_all_units(parsedump("build/calls.json"))
>>> print(results.summary())
"""

from __future__ import annotations

import logging

__version__ = "0.3.0"

from javatime_shims.checkers import (  # noqa: E402
    CheckerRunner,
    CheckerRunResults,
    Diagnostic,
    DiagnosticSeverity,
    FromTemporalAccessorChecker,
    SuppressionManager,
    run_addon,
)
from javatime_shims.compatibility import DEFAULT_TABLE, CompatibilityTable  # noqa: E402
from javatime_shims.dump import CallSiteDump, DumpHost, SourceUnit, loads, parsedump  # noqa: E402
from javatime_shims.errors import (  # noqa: E402
    DumpError,
    FixError,
    ShimsError,
    SignatureError,
    TableError,
    UnresolvedTypeError,
)
from javatime_shims.matcher import FromTemporalAccessorMatcher, Verdict, VerdictKind  # noqa: E402
from javatime_shims.temporal_types import TemporalTypeTag  # noqa: E402

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "TemporalTypeTag",
    "CompatibilityTable",
    "DEFAULT_TABLE",
    "FromTemporalAccessorMatcher",
    "Verdict",
    "VerdictKind",
    "CallSiteDump",
    "SourceUnit",
    "DumpHost",
    "loads",
    "parsedump",
    "CheckerRunner",
    "CheckerRunResults",
    "Diagnostic",
    "DiagnosticSeverity",
    "FromTemporalAccessorChecker",
    "SuppressionManager",
    "run_addon",
    "ShimsError",
    "TableError",
    "SignatureError",
    "DumpError",
    "UnresolvedTypeError",
    "FixError",
]
