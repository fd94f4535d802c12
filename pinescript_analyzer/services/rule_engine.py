"""
Rule engine: evaluates the declarative rule set against each line.

Design intent:
- Rules are data. The engine has one loop and one dispatch on severity; adding
  a rule never touches this module.
- Output order is deterministic: line by line, then rule construction order,
  then match position.
- One diagnostic per match. A rule matching every line of a large script
  produces one diagnostic per line per match, without deduplication.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from ..models.diagnostics import Diagnostic, RuleCategory, Severity
from ..models.rules import Rule, RuleConfigurationError
from ..models.source import SourceLine
from .reference_checker import ReferenceChecker
from .scanner import code_only, is_blank_line, is_comment_line
from .symbol_table import SymbolTable

logger = logging.getLogger(__name__)


@dataclass
class RuleFindings:
    """Diagnostics produced by the rule engine, already sorted into report buckets."""

    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)
    suggestions: List[Diagnostic] = field(default_factory=list)
    security_issues: List[Diagnostic] = field(default_factory=list)

    def add(self, rule: Rule, diagnostic: Diagnostic) -> None:
        if rule.severity is Severity.ERROR:
            self.errors.append(diagnostic)
        elif rule.severity is Severity.WARNING:
            # Security warnings are routed to their own bucket
            if rule.category is RuleCategory.SECURITY:
                self.security_issues.append(diagnostic)
            else:
                self.warnings.append(diagnostic)
        else:
            self.suggestions.append(diagnostic)


class RuleEngine:
    """Applies an immutable, ordered rule set to every line of a script."""

    def __init__(self, rules: Iterable[Rule], reference_checker: ReferenceChecker):
        rules = tuple(rules)
        seen = set()
        for rule in rules:
            if not isinstance(rule, Rule):
                raise RuleConfigurationError(f"Expected a Rule, got {type(rule).__name__}")
            if rule.id in seen:
                raise RuleConfigurationError(f"Duplicate rule id: '{rule.id}'")
            seen.add(rule.id)

        self._rules = rules
        self._reference_checker = reference_checker

    @property
    def rules(self) -> Sequence[Rule]:
        return self._rules

    def evaluate(self, lines: Sequence[SourceLine], symbols: SymbolTable) -> RuleFindings:
        findings = RuleFindings()

        for line in lines:
            skippable = is_comment_line(line.text) or is_blank_line(line.text)
            masked = code_only(line.text)

            for rule in self._rules:
                if skippable and rule.skip_comments:
                    continue
                subject = line.text if rule.include_literals else masked

                for match in rule.pattern.finditer(subject):
                    if not match.group(0):
                        # Zero-width matches carry no location information
                        continue
                    # Group 1 locates the finding unless it did not take part in the match
                    anchored = bool(match.re.groups) and match.start(1) >= 0
                    column = (match.start(1) if anchored else match.start()) + 1

                    if rule.checks_references:
                        name = match.group(1) if anchored else match.group(0)
                        if self._reference_checker.is_valid_reference(name, masked, column, symbols):
                            continue

                    findings.add(rule, self._diagnostic(rule, match, line.number, column))

        return findings

    @staticmethod
    def _diagnostic(rule: Rule, match, line_number: int, column: int) -> Diagnostic:
        quick_fix = None
        if rule.quick_fix is not None:
            try:
                quick_fix = rule.quick_fix(match, line_number)
            except (IndexError, KeyError, ValueError) as e:
                # A broken fix generator must not hide the finding itself
                logger.warning(f"Quick fix for rule {rule.id} failed on line {line_number}: {e}")

        return Diagnostic(
            line=line_number,
            column=column,
            message=rule.format_message(match),
            severity=rule.severity,
            code=rule.id,
            category=rule.category,
            suggestion=rule.format_suggestion(match),
            quick_fix=quick_fix,
        )
