"""
Declarative rule model.

A Rule maps a per-line regular expression to a diagnostic. Rules are data:
adding one never requires changes to the rule engine. They are validated when
constructed so a broken rule set fails at engine construction, not while a
script is being analysed.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Pattern, Union

from .diagnostics import QuickFix, RuleCategory, Severity


class RuleConfigurationError(ValueError):
    """Raised when a rule (built-in or from a rule pack) cannot be used by the engine."""


QuickFixGenerator = Callable[["re.Match[str]", int], QuickFix]


@dataclass(frozen=True)
class Rule:
    """
    An immutable pattern-to-diagnostic mapping evaluated against each line.

    ``message`` and ``suggestion`` are format templates: ``{0}`` is the whole
    match, ``{1}``... the capture groups, ``{replacement}`` the value of
    ``replacements`` keyed by the first capture group.
    """

    id: str
    name: str
    category: RuleCategory
    severity: Severity
    pattern: Pattern[str]
    message: str
    description: str = ""
    suggestion: Optional[str] = None
    quick_fix: Optional[QuickFixGenerator] = None
    skip_comments: bool = True
    # Match against raw text; otherwise string literals and comments are blanked first
    include_literals: bool = False
    # Matches are only reported when the reference checker rejects the identifier
    checks_references: bool = False
    replacements: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise RuleConfigurationError("Rule is missing an id")
        if self.pattern is None:
            raise RuleConfigurationError(f"Rule '{self.id}' has no pattern")
        if isinstance(self.pattern, str):
            # Frozen dataclass: compile through object.__setattr__
            object.__setattr__(self, "pattern", compile_pattern(self.id, self.pattern))
        if not isinstance(self.pattern, re.Pattern):
            raise RuleConfigurationError(f"Rule '{self.id}' pattern must be a regular expression")
        try:
            object.__setattr__(self, "category", RuleCategory(self.category))
            object.__setattr__(self, "severity", Severity(self.severity))
        except ValueError as e:
            raise RuleConfigurationError(f"Rule '{self.id}': {e}") from e
        if not isinstance(self.message, str) or not self.message:
            raise RuleConfigurationError(f"Rule '{self.id}' has no message")
        if self.suggestion is not None and not isinstance(self.suggestion, str):
            raise RuleConfigurationError(f"Rule '{self.id}' suggestion must be a string")
        object.__setattr__(self, "replacements", MappingProxyType(dict(self.replacements)))
        for template in (self.message, self.suggestion):
            if template is not None:
                self._check_template(template)

    def _check_template(self, template: str) -> None:
        try:
            fields = [name for _, name, _, _ in string.Formatter().parse(template) if name is not None]
        except ValueError as e:
            raise RuleConfigurationError(f"Rule '{self.id}' has a malformed template: {e}") from e
        for name in fields:
            if name == "replacement":
                continue
            if not name.isdigit() or int(name) > self.pattern.groups:
                raise RuleConfigurationError(
                    f"Rule '{self.id}' template field '{{{name}}}' does not match a capture group"
                )

    def format_message(self, match: "re.Match[str]") -> str:
        return self._render(self.message, match)

    def format_suggestion(self, match: "re.Match[str]") -> Optional[str]:
        if self.suggestion is None:
            return None
        return self._render(self.suggestion, match)

    def _render(self, template: str, match: "re.Match[str]") -> str:
        groups = [match.group(0), *(g or "" for g in match.groups())]
        key = match.group(1) if match.re.groups and match.group(1) is not None else match.group(0)
        return template.format(*groups, replacement=self.replacements.get(key, ""))


def compile_pattern(rule_id: str, pattern: Union[str, Pattern[str]], flags: int = 0) -> Pattern[str]:
    """Compile a rule pattern, turning regex errors into RuleConfigurationError."""
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise RuleConfigurationError(f"Rule '{rule_id}' has an invalid pattern: {e}") from e
