# tests/conftest.py
"""
Shared fakes and fixtures.

``FakeCall`` / ``FakeHost`` stand in for a compiler host so matcher tests
can state static types directly.  ``make_dump_call`` and ``dump_document``
build the JSON call-site dump the CLI and the checkers consume.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pytest

from javatime_shims.dump import DumpArgument, DumpCall, SourceUnit
from javatime_shims.errors import UnresolvedTypeError
from javatime_shims.temporal_types import TEMPORAL_ACCESSOR


FROM_SIGNATURE = "public static {ret} from(" + TEMPORAL_ACCESSOR + ")"


def from_signature(receiver: str) -> str:
    return FROM_SIGNATURE.format(ret=receiver)


# ── In-memory host ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class FakeCall:
    receiver: Optional[str]
    argument: Optional[str]
    result: Optional[str] = None
    text: str = "arg"
    package: str = "com.example"
    is_from: bool = True
    arity: int = 1
    span: Tuple[int, int] = (0, 0)
    arg_span: Tuple[int, int] = (0, 0)


class FakeHost:
    """Implements all three host protocols from ``FakeCall`` fields."""

    def is_static_from_temporal_accessor(self, call: FakeCall) -> bool:
        return call.is_from

    def receiver_type(self, call: FakeCall) -> str:
        if call.receiver is None:
            raise UnresolvedTypeError("receiver")
        return call.receiver

    def argument_types(self, call: FakeCall) -> List[str]:
        if call.argument is None:
            raise UnresolvedTypeError("argument")
        return [call.argument] * call.arity

    def result_type(self, call: FakeCall) -> str:
        result = call.result if call.result is not None else call.receiver
        if result is None:
            raise UnresolvedTypeError("result")
        return result

    def enclosing_package(self, call: FakeCall) -> str:
        return call.package

    def is_same_type(self, left: str, right: str) -> bool:
        return left == right

    def argument_nodes(self, call: FakeCall) -> List[FakeCall]:
        return [call] * call.arity

    def source_for(self, node: FakeCall) -> str:
        return node.text

    def span_of(self, node: FakeCall) -> Tuple[int, int]:
        # the same object stands for the call and its argument
        return node.span


@pytest.fixture
def host():
    return FakeHost()


# ── Dump builders ────────────────────────────────────────────────────────

def make_dump_call(
    receiver: Optional[str],
    arg_type: Optional[str],
    arg_text: str = "value",
    result: Optional[str] = "",
    file: str = "src/Dates.java",
    line: int = 10,
    column: int = 5,
    start: int = 0,
    end: int = 0,
    package: Optional[str] = None,
    method: Optional[str] = "",
    arg_start: int = 0,
    arg_end: int = 0,
) -> DumpCall:
    """``DumpCall`` for ``receiver.from(arg_text)``; ``""`` means "derive"."""
    return DumpCall(
        file=file,
        line=line,
        column=column,
        start=start,
        end=end,
        method=from_signature(receiver or "java.lang.Object") if method == "" else method,
        owner=receiver,
        receiver_type=receiver,
        result_type=receiver if result == "" else result,
        package=package,
        arguments=(DumpArgument(type=arg_type, text=arg_text, start=arg_start, end=arg_end),),
    )


def make_unit(calls, file: str = "src/Dates.java", package: str = "com.example",
              source: Optional[str] = None, suppressions=None) -> SourceUnit:
    return SourceUnit(
        file=file,
        package=package,
        source=source,
        suppressions=list(suppressions or []),
        calls=list(calls),
    )


def call_json(
    receiver: str,
    arg_type: Optional[str],
    arg_text: str,
    line: int,
    start: int = 0,
    end: int = 0,
    arg_start: int = 0,
    arg_end: int = 0,
) -> Dict[str, Any]:
    return {
        "line": line,
        "column": 1,
        "start": start,
        "end": end,
        "method": from_signature(receiver),
        "owner": receiver,
        "receiverType": receiver,
        "resultType": receiver,
        "arguments": [
            {"type": arg_type, "text": arg_text, "start": arg_start, "end": arg_end},
        ],
    }


def dump_document(units: List[Dict[str, Any]], version: int = 1) -> str:
    return json.dumps({"version": version, "units": units})


@pytest.fixture
def write_dump(tmp_path):
    """Write a dump document into ``tmp_path`` and return its path."""
    def _write(units, name="calls.json"):
        path = tmp_path / name
        path.write_text(dump_document(units), encoding="utf-8")
        return path
    return _write
