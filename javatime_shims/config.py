"""
javatime_shims/config.py
════════════════════════

Run configuration for ``javatime-check``, built from CLI flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from javatime_shims.temporal_types import TRUSTED_NAMESPACES

OUTPUT_FORMATS = ("json", "gcc", "summary")


@dataclass
class CheckConfig:
    """Tuning knobs for one checker run."""
    checkers: Optional[List[str]] = None
    suppress: List[str] = field(default_factory=list)
    extra_trusted_namespaces: List[str] = field(default_factory=list)
    report_redundant: bool = True
    report_invalid: bool = True
    output_format: str = "gcc"
    apply_fixes: bool = False

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.output_format not in OUTPUT_FORMATS:
            warnings.append(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}"
            )
        if not self.report_redundant and not self.report_invalid:
            warnings.append("both report_redundant and report_invalid are off; nothing will be reported")
        for prefix in self.extra_trusted_namespaces:
            if not prefix or prefix != prefix.strip():
                warnings.append(f"trusted namespace {prefix!r} is empty or padded")
            elif prefix in TRUSTED_NAMESPACES:
                warnings.append(f"trusted namespace {prefix!r} is already built in")
        if self.apply_fixes and not self.report_redundant:
            warnings.append("apply_fixes has no effect while report_redundant is off")
        if self.checkers is not None and not self.checkers:
            warnings.append("checkers is an empty list; no checker will run")
        return warnings

    def to_options(self) -> Dict[str, Any]:
        """Options dict handed to ``CheckerContext``."""
        return {
            "trusted_namespaces": tuple(self.extra_trusted_namespaces),
            "report_redundant": self.report_redundant,
            "report_invalid": self.report_invalid,
        }


__all__ = ["OUTPUT_FORMATS", "CheckConfig"]
