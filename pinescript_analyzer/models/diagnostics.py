"""
Diagnostic models (static analysis findings for generated Pine Script).

These models are part of the contract with the chat-agent and template
validation collaborators: they read a ValidationReport back to decide whether
to present a script to the user or ask the language model to regenerate it.
Field names serialise to camelCase (``isValid``, ``quickFix``...) so the
frontend can consume them unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Severity level for a diagnostic."""

    ERROR = "error"      # Blocking: must be fixed before the script is shown
    WARNING = "warning"  # Advisory
    INFO = "info"        # Optional polish


class RuleCategory(str, Enum):
    """What kind of problem a rule looks for."""

    SYNTAX = "syntax"
    LOGIC = "logic"
    PERFORMANCE = "performance"
    SECURITY = "security"
    STYLE = "style"


class _ContractModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FixRange(_ContractModel):
    """Span addressed by a quick fix (1-based lines and columns, end column exclusive)."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int


class QuickFix(_ContractModel):
    """A machine-generated replacement that resolves one diagnostic."""

    title: str
    description: str
    replacement_text: str
    range: FixRange


class Diagnostic(_ContractModel):
    """A single issue detected in a script."""

    # 1-based line and column
    line: int
    column: int
    message: str
    severity: Severity

    # Stable identifier; upstream callers switch on it
    code: str
    category: Optional[RuleCategory] = None

    suggestion: Optional[str] = None
    quick_fix: Optional[QuickFix] = None


class ValidationReport(_ContractModel):
    """
    Aggregated findings for one script.

    ``is_valid`` is derived from ``errors`` and never stored on its own.
    """

    errors: List[Diagnostic] = Field(default_factory=list)
    warnings: List[Diagnostic] = Field(default_factory=list)
    suggestions: List[Diagnostic] = Field(default_factory=list)
    security_issues: List[Diagnostic] = Field(default_factory=list)

    detected_version: str = "unknown"
    performance_score: int = 100

    @computed_field(alias="isValid")  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        return not self.errors

    def all_diagnostics(self) -> List[Diagnostic]:
        """Every diagnostic, bucket by bucket (errors, warnings, security, suggestions)."""
        return [*self.errors, *self.warnings, *self.security_issues, *self.suggestions]

    def codes(self) -> List[str]:
        return [d.code for d in self.all_diagnostics()]

    def get_llm_guidance(self) -> str:
        """
        Format blocking errors as guidance for a regeneration request.

        Returns:
            One block per error with its location and suggestion, or an empty
            string when the report is valid.
        """
        guidance_lines = []

        for diagnostic in self.errors:
            guidance_lines.append(f"[{diagnostic.code}] line {diagnostic.line}: {diagnostic.message}")
            if diagnostic.suggestion:
                guidance_lines.append(f"  Suggestion: {diagnostic.suggestion}")
            guidance_lines.append("")

        return "\n".join(guidance_lines)

    def summary(self) -> str:
        """Get a human-readable summary of the report."""
        if self.is_valid and not self.warnings and not self.security_issues:
            return f"Script is valid (performance score {self.performance_score}/100)"

        parts = []
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warning(s)")
        if self.security_issues:
            parts.append(f"{len(self.security_issues)} security issue(s)")

        return f"Validation found {', '.join(parts)} (performance score {self.performance_score}/100)"
