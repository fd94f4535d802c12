"""
Safe autofix engine (deterministic, offline).

This is intentionally conservative:
- Only allowlisted diagnostic codes are fixed; unknown codes are ignored.
- Transformations are line-based and never touch string literals or comments.
- Every fix is idempotent: running it on already-fixed text changes nothing.
- Fixes do not read a ValidationReport. Re-validating after a fix is the
  caller's job.
"""

from __future__ import annotations

import difflib
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config import AnalyzerSettings
from ..models.autofix import AutofixChange, AutofixReport
from .document_checker import VERSION_MARKER
from .rules import BARE_BUILTIN_CALL_RE, DEPRECATED_CALL_RE, DEPRECATED_FUNCTIONS
from .scanner import code_only, is_comment_line

logger = logging.getLogger(__name__)

_LEADING_TABS_RE = re.compile(r"^(\t+)")
_DECLARATION_RE = re.compile(r"(?<![\w.])(?:strategy|indicator|library|study)\s*\(")


@dataclass(frozen=True)
class _LineEdit:
    line_no: int  # 1-based
    new_line: str


FixFunction = Callable[[List[str]], Tuple[List[str], List[AutofixChange]]]


class AutofixService:
    """Apply allowlisted text rewrites keyed by diagnostic code."""

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or AnalyzerSettings()
        version_fix = self._fix_version
        indentation_fix = self._fix_indentation
        self._fixes: Dict[str, FixFunction] = {
            "MISSING_VERSION": version_fix,
            "WRONG_VERSION": version_fix,
            "version_required": version_fix,
            "DEPRECATED_FUNCTION": self._fix_deprecated_functions,
            "inconsistent_indentation": indentation_fix,
            "INDENTATION": indentation_fix,
            "missing_parentheses": self._fix_missing_parentheses,
            "MISSING_DECLARATION": self._fix_missing_declaration,
        }

    @property
    def supported_codes(self) -> List[str]:
        return sorted(self._fixes)

    def auto_fix(self, code: str, codes: Iterable[str]) -> str:
        """Return ``code`` with the fixes for ``codes`` applied, in the order given."""
        return self.apply_fixes(code, codes).fixed_code

    def apply_fixes(self, code: str, codes: Iterable[str]) -> AutofixReport:
        """
        Apply fixes and describe what changed.

        Args:
            code: Pine Script source
            codes: diagnostic codes to fix; duplicates and unknown codes are ignored

        Returns:
            AutofixReport with the fixed code, a change list and a unified diff
            (diff is None when nothing changed).
        """
        requested = list(dict.fromkeys(codes))
        report = AutofixReport(requested_codes=requested, original_code=code, fixed_code=code)

        lines = code.split("\n")
        applied_fixes = set()
        for diagnostic_code in requested:
            fix = self._fixes.get(diagnostic_code)
            if fix is None:
                logger.debug(f"No autofix registered for {diagnostic_code}, skipping")
                continue
            # Aliases share one fix function; run it once
            if fix in applied_fixes:
                continue
            applied_fixes.add(fix)
            lines, changes = fix(lines)
            report.changes.extend(changes)

        fixed_code = "\n".join(lines)
        if fixed_code == code:
            return report

        report.applied = True
        report.fixed_code = fixed_code
        report.diff = "\n".join(
            difflib.unified_diff(
                code.splitlines(),
                fixed_code.splitlines(),
                fromfile="before.pine",
                tofile="after.pine",
                lineterm="",
            )
        )
        logger.info(f"Autofix applied {len(report.changes)} change(s) for {', '.join(requested)}")
        return report

    def _fix_version(self, lines: List[str]) -> Tuple[List[str], List[AutofixChange]]:
        header = self.settings.version_header
        first_line = lines[0].strip() if lines else ""

        if first_line == header:
            return lines, []
        if first_line.startswith(VERSION_MARKER):
            change = AutofixChange(code="WRONG_VERSION", message=f"Replaced '{first_line}' with '{header}'", line=1)
            return [header, *lines[1:]], [change]

        change = AutofixChange(code="MISSING_VERSION", message=f"Inserted '{header}' as the first line", line=1)
        return [header, *lines], [change]

    def _fix_deprecated_functions(self, lines: List[str]) -> Tuple[List[str], List[AutofixChange]]:
        changes: List[AutofixChange] = []

        def rewrite(idx: int, line: str) -> Optional[str]:
            matches = list(DEPRECATED_CALL_RE.finditer(code_only(line)))
            if not matches:
                return None
            new_line = line
            # Right to left so earlier offsets stay valid
            for match in reversed(matches):
                old = match.group(1)
                new_line = new_line[:match.start(1)] + DEPRECATED_FUNCTIONS[old] + new_line[match.end(1):]
            for match in matches:
                old = match.group(1)
                changes.append(
                    AutofixChange(
                        code="DEPRECATED_FUNCTION",
                        message=f"Replaced deprecated '{old}' with '{DEPRECATED_FUNCTIONS[old]}'",
                        line=idx,
                    )
                )
            return new_line

        return self._apply_line_edits(lines, rewrite), changes

    def _fix_missing_parentheses(self, lines: List[str]) -> Tuple[List[str], List[AutofixChange]]:
        changes: List[AutofixChange] = []

        def rewrite(idx: int, line: str) -> Optional[str]:
            matches = list(BARE_BUILTIN_CALL_RE.finditer(code_only(line)))
            if not matches:
                return None
            new_line = line
            for match in reversed(matches):
                new_line = new_line[:match.end(1)] + "()" + new_line[match.end(1):]
                changes.append(
                    AutofixChange(code="missing_parentheses", message=f"Added () to {match.group(1)}", line=idx)
                )
            return new_line

        return self._apply_line_edits(lines, rewrite), changes

    def _fix_indentation(self, lines: List[str]) -> Tuple[List[str], List[AutofixChange]]:
        changes: List[AutofixChange] = []
        unit = " " * self.settings.indent_width

        def rewrite(idx: int, line: str) -> Optional[str]:
            m_tabs = _LEADING_TABS_RE.match(line)
            if not m_tabs:
                return None
            tabs = m_tabs.group(1)
            changes.append(
                AutofixChange(
                    code="inconsistent_indentation",
                    message=f"Replaced {len(tabs)} tab(s) with spaces",
                    line=idx,
                )
            )
            return unit * len(tabs) + line[len(tabs):]

        return self._apply_line_edits(lines, rewrite, skip_comments=False), changes

    def _fix_missing_declaration(self, lines: List[str]) -> Tuple[List[str], List[AutofixChange]]:
        if any(_DECLARATION_RE.search(code_only(line)) for line in lines if not is_comment_line(line)):
            return lines, []

        declaration = f'indicator("{self.settings.declaration_title}")'
        insert_at = 1 if lines and lines[0].strip().startswith(VERSION_MARKER) else 0
        change = AutofixChange(
            code="MISSING_DECLARATION",
            message=f"Inserted {declaration} declaration",
            line=insert_at + 1,
        )
        return [*lines[:insert_at], declaration, *lines[insert_at:]], [change]

    @staticmethod
    def _apply_line_edits(
        lines: List[str],
        rewrite: Callable[[int, str], Optional[str]],
        skip_comments: bool = True,
    ) -> List[str]:
        edits: List[_LineEdit] = []
        for idx, line in enumerate(lines, start=1):
            if skip_comments and is_comment_line(line):
                continue
            new_line = rewrite(idx, line)
            if new_line is not None and new_line != line:
                edits.append(_LineEdit(line_no=idx, new_line=new_line))

        if not edits:
            return lines

        edited = lines[:]
        for e in edits:
            edited[e.line_no - 1] = e.new_line
        return edited
