#!/usr/bin/env python3
"""javatime_shims/main.py: CLI entry-point for ``javatime-check``.

Usage examples
--------------
    # Check every call recorded in a call-site dump
    javatime-check check build/calls.json

    # JSON lines for tooling, redundant calls only
    javatime-check check build/calls.json -f json --no-invalid

    # Rewrite redundant calls in place
    javatime-check check build/calls.json --fix

    # Review the compatibility matrix
    javatime-check table
    javatime-check table --target LocalDate -f json

    # Show what the checker is about
    javatime-check explain

Exit codes
----------
    0   Success (no ERROR diagnostics).
    1   One or more diagnostics with severity ERROR were emitted.
    2   Infrastructure failure (bad dump file, unwritable output, etc.).
  130   Interrupted.

The module doubles as ``python -m javatime_shims`` via the companion
``javatime_shims/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

from javatime_shims import __version__
from javatime_shims.checkers import (
    CheckerRunner,
    SuppressionManager,
    default_registry,
    write_results,
)
from javatime_shims.compatibility import DEFAULT_TABLE
from javatime_shims.config import OUTPUT_FORMATS, CheckConfig
from javatime_shims.dump import CallSiteDump, SourceUnit, parsedump
from javatime_shims.errors import ShimsError
from javatime_shims.fixes import SuggestedFix, apply_fixes_to_unit
from javatime_shims.temporal_types import TemporalTypeTag

_log = logging.getLogger("javatime_shims")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2
EXIT_INTERRUPTED: int = 130


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``javatime_shims`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("javatime_shims")
    root.setLevel(level)
    # repeated main() calls in one process must not stack handlers
    for old in list(root.handlers):
        if getattr(old, "_javatime_cli", False):
            root.removeHandler(old)
    handler._javatime_cli = True  # type: ignore[attr-defined]
    root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _config_from_args(args: argparse.Namespace) -> CheckConfig:
    return CheckConfig(
        checkers=args.checkers,
        suppress=list(args.suppress or []),
        extra_trusted_namespaces=list(args.trusted or []),
        report_redundant=not args.no_redundant,
        report_invalid=not args.no_invalid,
        output_format=args.format,
        apply_fixes=args.fix,
    )


def _write_fixes(
    dump: CallSiteDump,
    fixes: Dict[str, List[SuggestedFix]],
) -> int:
    """Patch each unit's source on disk.  Returns the number of files written.

    Every file is patched in memory first, so a fix that cannot be applied
    leaves all sources untouched.  Line endings are written back as read.
    """
    units: Dict[str, SourceUnit] = {u.file: u for u in dump.units}
    patched: List[Tuple[Path, str, int]] = []
    for file, file_fixes in sorted(fixes.items()):
        unit = units[file]
        text = apply_fixes_to_unit(unit, file_fixes, dump.root)
        patched.append((unit.source_path(dump.root), text, len(file_fixes)))
    for target, text, count in patched:
        with open(target, "w", encoding="utf-8", newline="") as fp:
            fp.write(text)
        _log.info("applied %d fix(es) to %s", count, target)
    return len(patched)


# ===========================================================================
# Sub-command implementations
# ===========================================================================

# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

def cmd_check(args: argparse.Namespace) -> int:
    """Run the checkers over a call-site dump.

    Workflow:
        1. Build and validate a ``CheckConfig`` from the flags.
        2. Load the dump via ``parsedump()``.
        3. Run every selected checker over every unit.
        4. Emit diagnostics; with ``--fix``, rewrite redundant calls.
    """
    config = _config_from_args(args)
    for warning in config.validate():
        _log.warning("config: %s", warning)

    dump_path = _resolve_path(args.dump_file, "dump file")
    _log.info("Parsing dump file: %s", dump_path)
    try:
        dump = parsedump(dump_path)
    except ShimsError as exc:
        _log.error("Failed to parse dump file: %s", exc)
        return EXIT_INFRA

    sm = SuppressionManager()
    for eid in config.suppress:
        sm.add_global_suppression(eid)

    runner = CheckerRunner(suppressions=sm, options=config.to_options())
    results = runner.run_all_units(dump, checkers=config.checkers)
    _log.info("%s", results.summary())

    out = _open_output(args.output)
    try:
        write_results(results, config.output_format, out)
    finally:
        if out is not sys.stdout:
            out.close()

    if config.apply_fixes:
        try:
            written = _write_fixes(dump, results.fixes())
        except (ShimsError, OSError) as exc:
            _log.error("Failed to apply fixes: %s", exc)
            return EXIT_INFRA
        _log.info("rewrote %d file(s)", written)

    return EXIT_ERROR if results.error_count > 0 else EXIT_OK


# ---------------------------------------------------------------------------
# table
# ---------------------------------------------------------------------------

def cmd_table(args: argparse.Namespace) -> int:
    """Print the compatibility matrix, or one row / column of it."""
    try:
        target = TemporalTypeTag.parse(args.target) if args.target else None
        source = TemporalTypeTag.parse(args.source) if args.source else None
    except ValueError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    out = _open_output(args.output)
    try:
        if target is not None:
            names = sorted(t.simple_name for t in DEFAULT_TABLE.incompatible_sources(target))
            if args.format == "json":
                out.write(json.dumps({target.simple_name: names}, indent=2) + "\n")
            else:
                out.write(f"{target.simple_name}.from(x) always throws for x of type:\n")
                for name in names:
                    out.write(f"  {name}\n")
        elif source is not None:
            names = sorted(t.simple_name for t in DEFAULT_TABLE.incompatible_targets(source))
            if args.format == "json":
                out.write(json.dumps({source.simple_name: names}, indent=2) + "\n")
            else:
                out.write(f"T.from({source.simple_name}) always throws for T in:\n")
                for name in names:
                    out.write(f"  {name}\n")
        elif args.format == "json":
            out.write(json.dumps(DEFAULT_TABLE.to_dict(), indent=2) + "\n")
        else:
            out.write(DEFAULT_TABLE.render_grid() + "\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ---------------------------------------------------------------------------
# explain / list-checkers
# ---------------------------------------------------------------------------

def cmd_explain(args: argparse.Namespace) -> int:
    """Print a checker's summary and explanation."""
    cls = default_registry().get_by_name(args.checker)
    if cls is None:
        _log.error("Unknown checker: %s", args.checker)
        return EXIT_INFRA
    sys.stdout.write(f"{cls.name} ({cls.default_severity.value})\n\n")
    sys.stdout.write(textwrap.fill(cls.description, width=72) + "\n\n")
    sys.stdout.write(textwrap.fill(cls.explanation, width=72) + "\n")
    return EXIT_OK


def cmd_list_checkers(args: argparse.Namespace) -> int:
    """List registered checkers and the error ids they emit."""
    registry = default_registry()
    for cls in sorted(registry.get_all(), key=lambda c: c.name):
        ids = ", ".join(sorted(cls.error_ids))
        sys.stdout.write(f"  {cls.name:<24s} {ids}\n")
    return EXIT_OK


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    parser = argparse.ArgumentParser(
        prog="javatime-check",
        description=(
            "Static checks for java.time / ThreeTen-Extra from(TemporalAccessor)\n"
            "calls that always throw or always return their argument."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              javatime-check check build/calls.json
              javatime-check check build/calls.json -f json --fix
              javatime-check table --source Month
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Check the calls recorded in a call-site dump.",
        description=(
            "Load a JSON call-site dump and report from(TemporalAccessor) "
            "calls that always throw or are redundant."
        ),
    )
    p_check.add_argument(
        "dump_file",
        metavar="DUMP",
        help="Path to the JSON call-site dump.",
    )
    p_check.add_argument(
        "--checkers",
        nargs="*",
        default=None,
        metavar="NAME",
        help="Checker names to run (default: all).",
    )
    p_check.add_argument(
        "--suppress",
        nargs="*",
        default=None,
        metavar="ID",
        help="Error ids or checker names to suppress globally.",
    )
    p_check.add_argument(
        "--trusted",
        nargs="*",
        default=None,
        metavar="PREFIX",
        help="Extra package prefixes exempt from checking.",
    )
    p_check.add_argument(
        "--no-redundant",
        action="store_true",
        help="Do not report calls that return their argument.",
    )
    p_check.add_argument(
        "--no-invalid",
        action="store_true",
        help="Do not report calls that always throw.",
    )
    p_check.add_argument(
        "-f", "--format",
        choices=list(OUTPUT_FORMATS),
        default="gcc",
        help="Output format (default: gcc).",
    )
    p_check.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_check.add_argument(
        "--fix",
        action="store_true",
        help="Rewrite redundant calls in the source files.",
    )
    p_check.set_defaults(func=cmd_check)

    # --- table -------------------------------------------------------------
    p_table = subparsers.add_parser(
        "table",
        help="Print the compatibility table.",
        description="Print the (target, argument) pairs whose from() always throws.",
    )
    which = p_table.add_mutually_exclusive_group()
    which.add_argument(
        "--target",
        metavar="TYPE",
        default=None,
        help="Only argument types incompatible with this target.",
    )
    which.add_argument(
        "--source",
        metavar="TYPE",
        default=None,
        help="Only targets this argument type cannot produce.",
    )
    p_table.add_argument(
        "-f", "--format",
        choices=["grid", "json"],
        default="grid",
        help="Table format (default: grid).",
    )
    p_table.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_table.set_defaults(func=cmd_table)

    # --- explain -----------------------------------------------------------
    p_explain = subparsers.add_parser(
        "explain",
        help="Explain what a checker reports.",
    )
    p_explain.add_argument(
        "checker",
        nargs="?",
        default="FromTemporalAccessor",
        metavar="NAME",
        help="Checker name (default: FromTemporalAccessor).",
    )
    p_explain.set_defaults(func=cmd_explain)

    # --- list-checkers -----------------------------------------------------
    p_list = subparsers.add_parser(
        "list-checkers",
        help="List available checkers.",
    )
    p_list.set_defaults(func=cmd_list_checkers)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the ``javatime-check`` CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return EXIT_INTERRUPTED
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except ShimsError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
