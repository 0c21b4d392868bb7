"""
javatime_shims/signature.py
═══════════════════════════

Resolved method signatures, as recorded by the host compiler for each
call site, e.g.::

    public static java.time.LocalDate from(java.time.temporal.TemporalAccessor)
    static java.time.LocalDate java.time.LocalDate.from(java.time.temporal.TemporalAccessor temporal)
    static <T> T query(java.time.temporal.TemporalQuery<T> query)

The shape check only needs four facts out of such a string: whether the
method is static, its simple name, its owner (when qualified) and its
erased parameter types.  A signature without the ``static`` modifier never
passes the check, so hosts must record modifiers.  Generic arguments are
erased; array and varargs suffixes are kept as ``[]``.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, FrozenSet, List, Optional, Tuple

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from javatime_shims.errors import SignatureError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1: SIGNATURE GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

SIGNATURE_GRAMMAR = Grammar(r'''
    signature       = _ modifier_list type_params? return_type? method_ref _ "(" _ params? _ ")" _

    modifier_list   = (modifier __)*
    modifier        = ("public" / "protected" / "private" / "static" / "final"
                       / "synchronized" / "native" / "abstract" / "default"
                       / "strictfp") !ident_char

    type_params     = "<" _ type_param (_ "," _ type_param)* _ ">" _
    type_param      = identifier (__ "extends" __ bound_list)?
    bound_list      = type_name (_ "&" _ type_name)*

    return_type     = type_name __ &(method_ref _ "(")
    method_ref      = qualified_name

    params          = param (_ "," _ param)*
    param           = type_name (__ identifier)?

    type_name       = qualified_name type_args? array_suffix* varargs?
    type_args       = _ "<" _ type_arg (_ "," _ type_arg)* _ ">"
    type_arg        = wildcard / type_name
    wildcard        = "?" (__ ("extends" / "super") __ type_name)?
    array_suffix    = _ "[" _ "]"
    varargs         = _ "..."

    qualified_name  = identifier ("." identifier)*
    identifier      = ~r"[A-Za-z_$][A-Za-z0-9_$]*"
    ident_char      = ~r"[A-Za-z0-9_$]"

    __              = ~r"\s+"
    _               = ~r"\s*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2: SIGNATURE MODEL
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class MethodSignature:
    """A parsed, erased method signature."""
    name: str
    parameters: Tuple[str, ...] = ()
    modifiers: FrozenSet[str] = frozenset()
    owner: Optional[str] = None
    return_type: Optional[str] = None

    @property
    def is_static(self) -> bool:
        return "static" in self.modifiers

    def matches(self, name: str, parameters: Tuple[str, ...]) -> bool:
        """Static method called ``name`` with exactly ``parameters``."""
        return self.is_static and self.name == name and self.parameters == parameters

    def __str__(self) -> str:
        mods = " ".join(sorted(self.modifiers))
        qual = f"{self.owner}.{self.name}" if self.owner else self.name
        params = ", ".join(self.parameters)
        ret = f"{self.return_type} " if self.return_type else ""
        return f"{mods + ' ' if mods else ''}{ret}{qual}({params})"


# ═══════════════════════════════════════════════════════════════════
#  PART 3: VISITOR (Parse Tree → MethodSignature)
# ═══════════════════════════════════════════════════════════════════

def _items(value: Any) -> List[Any]:
    """Children of an optional / repeated match; empty when nothing matched."""
    return value if isinstance(value, list) else []


class SignatureBuilder(NodeVisitor):
    """Transforms a Parsimonious parse tree into a ``MethodSignature``."""

    grammar = SIGNATURE_GRAMMAR

    def generic_visit(self, node: Node, visited_children: List[Any]) -> Any:
        return visited_children or node

    def visit_signature(self, node, visited_children):
        (_, modifiers, _, return_type, method_ref,
         _, _, _, params, _, _, _) = visited_children
        owner, _, name = method_ref.rpartition(".")
        return MethodSignature(
            name=name,
            parameters=tuple(_items(params)[0]) if _items(params) else (),
            modifiers=modifiers,
            owner=owner or None,
            return_type=_items(return_type)[0] if _items(return_type) else None,
        )

    def visit_modifier_list(self, node, visited_children):
        return frozenset(item[0] for item in visited_children)

    def visit_modifier(self, node, visited_children):
        return node.text

    def visit_return_type(self, node, visited_children):
        return visited_children[0]

    def visit_method_ref(self, node, visited_children):
        return visited_children[0]

    def visit_params(self, node, visited_children):
        first, rest = visited_children
        return [first] + [item[3] for item in _items(rest)]

    def visit_param(self, node, visited_children):
        return visited_children[0]

    def visit_type_name(self, node, visited_children):
        qualified, _, arrays, varargs = visited_children
        return qualified + "[]" * (len(_items(arrays)) + len(_items(varargs)))

    def visit_qualified_name(self, node, visited_children):
        return node.text


# ═══════════════════════════════════════════════════════════════════
#  PART 4: PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse_signature(text: str) -> MethodSignature:
    """
    Parse a resolved method signature.

    Raises
    ------
    SignatureError
        When ``text`` is not a well-formed signature.
    """
    try:
        return SignatureBuilder().parse(text)
    except ParseError as exc:
        logger.debug("signature parse failed at %d: %r", exc.pos, text)
        raise SignatureError(
            f"malformed method signature {text!r} at column {exc.pos}",
            text=text, position=exc.pos, cause=exc,
        ) from exc
    except VisitationError as exc:
        raise SignatureError(
            f"cannot interpret method signature {text!r}",
            text=text, cause=exc,
        ) from exc


__all__ = [
    "SIGNATURE_GRAMMAR",
    "MethodSignature",
    "SignatureBuilder",
    "parse_signature",
]
