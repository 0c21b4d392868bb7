# javatime_shims/errors.py
"""
Exception hierarchy for javatime-shims.

Error Hierarchy
───────────────
  ShimsError (base)
  ├── TableError           - malformed compatibility table
  ├── SignatureError       - method signature text does not parse
  ├── DumpError            - call-site dump cannot be loaded
  ├── UnresolvedTypeError  - host could not supply a static type
  └── FixError             - suggested fixes cannot be applied

Error Codes
───────────
Each error carries a code of the form ``JTS-XXXX``:
  - 1000-1999: compatibility table
  - 2000-2999: signature parsing
  - 3000-3999: dump loading / host resolution
  - 4000-4999: fix application

The matcher never lets ``UnresolvedTypeError`` or ``SignatureError``
escape: both degrade to a "no finding" verdict.  The others surface to
the CLI, which reports them and exits with the infrastructure code.
"""

from __future__ import annotations

from typing import Optional


class ShimsError(Exception):
    """Base exception for all javatime-shims errors."""

    default_code: str = "JTS-0000"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.cause = cause

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TableError(ShimsError):
    """A compatibility table violates one of its construction invariants."""

    default_code = "JTS-1001"


class SignatureError(ShimsError):
    """A resolved method signature could not be parsed."""

    default_code = "JTS-2001"

    def __init__(
        self,
        message: str,
        text: str = "",
        position: int = -1,
        code: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause)
        self.text = text
        self.position = position


class DumpError(ShimsError):
    """A call-site dump document is malformed or unreadable."""

    default_code = "JTS-3001"


class UnresolvedTypeError(ShimsError):
    """The host has no static type for an expression."""

    default_code = "JTS-3100"

    def __init__(self, what: str, code: Optional[str] = None) -> None:
        super().__init__(f"unresolved static type: {what}", code=code)
        self.what = what


class FixError(ShimsError):
    """Suggested fixes overlap or fall outside the source text."""

    default_code = "JTS-4001"


__all__ = [
    "ShimsError",
    "TableError",
    "SignatureError",
    "DumpError",
    "UnresolvedTypeError",
    "FixError",
]
