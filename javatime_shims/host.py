"""
javatime_shims/host.py
══════════════════════

Read-only capabilities the matcher consumes from its host compiler.

The matcher never touches a syntax tree directly.  Whatever the host is
(an in-process compiler plugin, or the call-site dump in
``javatime_shims.dump``), it hands over opaque ``call`` / ``node`` objects
and answers questions about them through these protocols.

Types are exchanged as fully-qualified names (``"java.time.LocalDate"``).
Any resolution method may raise ``UnresolvedTypeError``; the matcher
turns that into a "no finding" verdict.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from javatime_shims.errors import SignatureError, UnresolvedTypeError
from javatime_shims.signature import MethodSignature, parse_signature
from javatime_shims.temporal_types import TEMPORAL_ACCESSOR

logger = logging.getLogger(__name__)

Span = Tuple[int, int]


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: CAPABILITY PROTOCOLS
# ═════════════════════════════════════════════════════════════════════════

@runtime_checkable
class CallShapeMatcher(Protocol):
    """Does a call look like ``SomeType.from(TemporalAccessor)``?"""

    def is_static_from_temporal_accessor(self, call: Any) -> bool:
        ...


@runtime_checkable
class TypeResolver(Protocol):
    """Static type facts about a call and its arguments."""

    def receiver_type(self, call: Any) -> str:
        ...

    def argument_types(self, call: Any) -> Sequence[str]:
        ...

    def result_type(self, call: Any) -> str:
        ...

    def enclosing_package(self, call: Any) -> str:
        ...

    def is_same_type(self, left: str, right: str) -> bool:
        ...


@runtime_checkable
class SourceReader(Protocol):
    """Literal source text and spans of the call and its arguments."""

    def argument_nodes(self, call: Any) -> Sequence[Any]:
        ...

    def source_for(self, node: Any) -> str:
        ...

    def span_of(self, node: Any) -> Span:
        ...


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: CALL SITE VIEW
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CallSite:
    """
    Per-evaluation view of one ``Target.from(argument)`` call.

    Attributes
    ----------
    receiver_type    : static type of the receiver (``Target``)
    argument_type    : static type of the sole argument
    result_type      : static type of the call expression itself
    argument_text    : literal source text of the argument
    enclosing_package: package the call appears in
    call_span        : ``(start, end)`` of the full call expression
    argument_span    : ``(start, end)`` of the argument expression
    """
    receiver_type: str
    argument_type: str
    result_type: str
    argument_text: str
    enclosing_package: str = ""
    call_span: Span = (0, 0)
    argument_span: Span = (0, 0)

    @classmethod
    def resolve(
        cls,
        call: Any,
        types: TypeResolver,
        source: SourceReader,
    ) -> "CallSite":
        """
        Collect every fact the matcher needs for ``call``.

        Raises
        ------
        UnresolvedTypeError
            When the host lacks a type, or the call does not have exactly
            one argument.
        """
        arg_types = list(types.argument_types(call))
        arg_nodes = list(source.argument_nodes(call))
        if len(arg_types) != 1 or len(arg_nodes) != 1:
            raise UnresolvedTypeError(
                f"expected exactly one argument, found {len(arg_nodes)}"
            )
        arg = arg_nodes[0]
        return cls(
            receiver_type=types.receiver_type(call),
            argument_type=arg_types[0],
            result_type=types.result_type(call),
            argument_text=source.source_for(arg),
            enclosing_package=types.enclosing_package(call),
            call_span=source.span_of(call),
            argument_span=source.span_of(arg),
        )


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: SIGNATURE-BASED SHAPE MATCHER
# ═════════════════════════════════════════════════════════════════════════

class SignatureShapeMatcher:
    """
    ``CallShapeMatcher`` driven by resolved method signature strings.

    Parameters
    ----------
    signature_of   : call → signature text (``None`` if unresolved)
    method_name    : required simple name (default ``"from"``)
    parameters     : required erased parameter types
    """

    def __init__(
        self,
        signature_of: Callable[[Any], Optional[str]],
        method_name: str = "from",
        parameters: Tuple[str, ...] = (TEMPORAL_ACCESSOR,),
    ) -> None:
        self._signature_of = signature_of
        self._method_name = method_name
        self._parameters = parameters
        # signature text → parsed signature (None for unparsable text)
        self._cache: Dict[str, Optional[MethodSignature]] = {}

    def signature(self, call: Any) -> Optional[MethodSignature]:
        text = self._signature_of(call)
        if not text:
            return None
        if text not in self._cache:
            try:
                self._cache[text] = parse_signature(text)
            except SignatureError as exc:
                logger.debug("ignoring call with bad signature: %s", exc)
                self._cache[text] = None
        return self._cache[text]

    def is_static_from_temporal_accessor(self, call: Any) -> bool:
        sig = self.signature(call)
        if sig is None:
            return False
        if sig.matches(self._method_name, self._parameters):
            return True
        if sig.name == self._method_name and sig.parameters == self._parameters:
            logger.debug("ignoring non-static %s", sig)
        return False


__all__ = [
    "Span",
    "CallShapeMatcher",
    "TypeResolver",
    "SourceReader",
    "CallSite",
    "SignatureShapeMatcher",
]
