"""
javatime_shims/dump.py
══════════════════════

Call-site dump model: the offline host for the checker.

A compiler front-end (javac plugin, IDE indexer, ...) writes one JSON
document per build, recording static facts about every ``X.from(...)``
call it saw.  This module loads that document and exposes each
compilation unit through the capability protocols of
``javatime_shims.host``, the way cppcheck addons consume ``.dump`` files.

Document layout::

    {
      "version": 1,
      "units": [
        {
          "file": "src/main/java/com/example/Dates.java",
          "package": "com.example",
          "source": "...",                      # optional full text
          "suppressions": [                      # @SuppressWarnings ranges
            {"startLine": 8, "endLine": 20, "id": "FromTemporalAccessor"}
          ],
          "calls": [
            {
              "line": 12, "column": 20, "start": 310, "end": 331,
              "method": "public static java.time.LocalDate from(java.time.temporal.TemporalAccessor)",
              "owner": "java.time.LocalDate",
              "receiverType": "java.time.LocalDate",
              "resultType": "java.time.LocalDate",
              "package": "com.example",          # optional, overrides the unit's
              "arguments": [
                {"type": "java.time.Month", "text": "month", "start": 325, "end": 330}
              ]
            }
          ]
        }
      ]
    }

Missing or ``null`` types are not load errors: they raise
``UnresolvedTypeError`` when the matcher asks for them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from javatime_shims.errors import DumpError, UnresolvedTypeError
from javatime_shims.host import SignatureShapeMatcher, Span

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS: Tuple[int, ...] = (1,)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: DUMP MODEL
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DumpArgument:
    """One argument expression of a recorded call."""
    type: Optional[str]
    text: str
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class DumpCall:
    """One recorded method invocation."""
    file: str
    line: int
    column: int
    start: int
    end: int
    method: Optional[str]
    owner: Optional[str]
    receiver_type: Optional[str]
    result_type: Optional[str]
    package: Optional[str]
    arguments: Tuple[DumpArgument, ...] = ()


@dataclass
class SourceUnit:
    """
    One compilation unit (source file) of the dump.

    Attributes
    ----------
    file         : path of the source file, as recorded
    package      : package declared by the unit ("" = default package)
    source       : full source text, if the dump embeds it
    suppressions : ``(first line, last line, warning id)`` of each element
                   annotated with ``@SuppressWarnings``
    calls        : recorded call sites
    """
    file: str
    package: str = ""
    source: Optional[str] = None
    suppressions: List[Tuple[int, int, str]] = field(default_factory=list)
    calls: List[DumpCall] = field(default_factory=list)

    def source_path(self, root: Optional[Path] = None) -> Path:
        """Location of the unit on disk (``root``-relative when not absolute)."""
        path = Path(self.file)
        if root is not None and not path.is_absolute():
            path = root / path
        return path

    def read_source(self, root: Optional[Path] = None) -> str:
        """
        Embedded source text, or the file read from disk.

        Line endings are kept as-is: the dump's character offsets count
        ``\\r\\n`` as two characters.
        """
        if self.source is not None:
            return self.source
        path = self.source_path(root)
        try:
            with open(path, encoding="utf-8", newline="") as fp:
                return fp.read()
        except OSError as exc:
            raise DumpError(f"cannot read source for {self.file}: {exc}", cause=exc) from exc


@dataclass
class CallSiteDump:
    """A whole dump document."""
    version: int
    units: List[SourceUnit] = field(default_factory=list)
    path: Optional[Path] = None

    def __iter__(self) -> Iterator[SourceUnit]:
        return iter(self.units)

    @property
    def call_count(self) -> int:
        return sum(len(u.calls) for u in self.units)

    @property
    def root(self) -> Optional[Path]:
        """Directory that relative unit paths are resolved against."""
        return self.path.parent if self.path is not None else None


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: LOADING
# ═════════════════════════════════════════════════════════════════════════

def _require(obj: Dict[str, Any], key: str, kind: Union[type, Tuple[type, ...]], where: str) -> Any:
    if key not in obj:
        raise DumpError(f"{where}: missing required field {key!r}")
    value = obj[key]
    if not isinstance(value, kind) or isinstance(value, bool) and kind is int:
        raise DumpError(f"{where}: field {key!r} has wrong type {type(value).__name__}")
    return value


def _optional(obj: Dict[str, Any], key: str, kind: Union[type, Tuple[type, ...]], where: str, default: Any = None) -> Any:
    value = obj.get(key, default)
    if value is None:
        return default
    if not isinstance(value, kind) or isinstance(value, bool) and kind is int:
        raise DumpError(f"{where}: field {key!r} has wrong type {type(value).__name__}")
    return value


def _load_argument(obj: Any, where: str) -> DumpArgument:
    if not isinstance(obj, dict):
        raise DumpError(f"{where}: argument must be an object")
    return DumpArgument(
        type=_optional(obj, "type", str, where),
        text=_require(obj, "text", str, where),
        start=_optional(obj, "start", int, where, 0),
        end=_optional(obj, "end", int, where, 0),
    )


def _load_call(obj: Any, file: str, index: int) -> DumpCall:
    where = f"{file}: call #{index}"
    if not isinstance(obj, dict):
        raise DumpError(f"{where}: call must be an object")
    args = _optional(obj, "arguments", list, where, [])
    return DumpCall(
        file=file,
        line=_require(obj, "line", int, where),
        column=_optional(obj, "column", int, where, 0),
        start=_optional(obj, "start", int, where, 0),
        end=_optional(obj, "end", int, where, 0),
        method=_optional(obj, "method", str, where),
        owner=_optional(obj, "owner", str, where),
        receiver_type=_optional(obj, "receiverType", str, where),
        result_type=_optional(obj, "resultType", str, where),
        package=_optional(obj, "package", str, where),
        arguments=tuple(
            _load_argument(a, f"{where} argument #{i}") for i, a in enumerate(args)
        ),
    )


def _load_suppression(obj: Any, file: str) -> Tuple[int, int, str]:
    """
    ``{"startLine", "endLine", "id"}`` for an annotated element, or the
    short form ``{"line", "id"}`` for an annotation whose element is the
    next line.
    """
    if not isinstance(obj, dict):
        raise DumpError(f"{file}: suppression must be an object")
    warning_id = _require(obj, "id", str, file)
    if "line" in obj:
        line = _require(obj, "line", int, file)
        return line, line + 1, warning_id
    first = _require(obj, "startLine", int, file)
    last = _require(obj, "endLine", int, file)
    if last < first:
        raise DumpError(f"{file}: suppression endLine {last} before startLine {first}")
    return first, last, warning_id


def _load_unit(obj: Any, index: int) -> SourceUnit:
    where = f"unit #{index}"
    if not isinstance(obj, dict):
        raise DumpError(f"{where}: unit must be an object")
    file = _require(obj, "file", str, where)
    suppressions = [
        _load_suppression(s, file)
        for s in _optional(obj, "suppressions", list, file, [])
    ]
    calls = [
        _load_call(c, file, i)
        for i, c in enumerate(_optional(obj, "calls", list, file, []))
    ]
    return SourceUnit(
        file=file,
        package=_optional(obj, "package", str, file, ""),
        source=_optional(obj, "source", str, file),
        suppressions=suppressions,
        calls=calls,
    )


def loads(text: str, path: Optional[Path] = None) -> CallSiteDump:
    """Parse a dump document from a string."""
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DumpError(f"invalid JSON at line {exc.lineno}: {exc.msg}", cause=exc) from exc
    if not isinstance(doc, dict):
        raise DumpError("dump document must be a JSON object")
    version = _require(doc, "version", int, "document")
    if version not in SUPPORTED_VERSIONS:
        raise DumpError(f"unsupported dump version {version}")
    units = [_load_unit(u, i) for i, u in enumerate(_require(doc, "units", list, "document"))]
    dump = CallSiteDump(version=version, units=units, path=path)
    logger.info("loaded %d unit(s), %d call(s)", len(units), dump.call_count)
    return dump


def parsedump(path: Union[str, Path]) -> CallSiteDump:
    """Load a dump file."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise DumpError(f"cannot read dump file {p}: {exc}", cause=exc) from exc
    return loads(text, path=p)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: HOST ADAPTER
# ═════════════════════════════════════════════════════════════════════════

def _method_text(call: DumpCall) -> Optional[str]:
    """Signature text, qualified with ``owner`` when the dump gives it apart."""
    if not call.method:
        return None
    if call.owner and "(" in call.method:
        head, _, tail = call.method.partition("(")
        parts = head.split()
        if parts and "." not in parts[-1]:
            parts[-1] = f"{call.owner}.{parts[-1]}"
            return " ".join(parts) + "(" + tail
    return call.method


class DumpHost:
    """
    Implements ``CallShapeMatcher``, ``TypeResolver`` and ``SourceReader``
    over the calls of one ``SourceUnit``.
    """

    def __init__(self, unit: SourceUnit) -> None:
        self.unit = unit
        self._shape = SignatureShapeMatcher(_method_text)

    # ── CallShapeMatcher ─────────────────────────────────────────────

    def is_static_from_temporal_accessor(self, call: DumpCall) -> bool:
        return len(call.arguments) == 1 and self._shape.is_static_from_temporal_accessor(call)

    # ── TypeResolver ─────────────────────────────────────────────────

    def receiver_type(self, call: DumpCall) -> str:
        receiver = call.receiver_type
        if not receiver:
            # a static call's receiver is the method's owner
            sig = self._shape.signature(call)
            receiver = sig.owner if sig is not None else None
        if not receiver:
            raise UnresolvedTypeError(f"receiver of call at {call.file}:{call.line}")
        return receiver

    def argument_types(self, call: DumpCall) -> Sequence[str]:
        types: List[str] = []
        for i, arg in enumerate(call.arguments):
            if not arg.type:
                raise UnresolvedTypeError(
                    f"argument #{i} ({arg.text!r}) at {call.file}:{call.line}"
                )
            types.append(arg.type)
        return types

    def result_type(self, call: DumpCall) -> str:
        if not call.result_type:
            raise UnresolvedTypeError(f"result of call at {call.file}:{call.line}")
        return call.result_type

    def enclosing_package(self, call: DumpCall) -> str:
        return call.package if call.package is not None else self.unit.package

    def is_same_type(self, left: str, right: str) -> bool:
        return left == right

    # ── SourceReader ─────────────────────────────────────────────────

    def argument_nodes(self, call: DumpCall) -> Sequence[DumpArgument]:
        return call.arguments

    def source_for(self, node: DumpArgument) -> str:
        return node.text

    def span_of(self, node: Union[DumpCall, DumpArgument]) -> Span:
        return (node.start, node.end)


__all__ = [
    "SUPPORTED_VERSIONS",
    "DumpArgument",
    "DumpCall",
    "SourceUnit",
    "CallSiteDump",
    "loads",
    "parsedump",
    "DumpHost",
]
