"""
Validation Service for generated Pine Script

Orchestrates the static analysis pipeline:
1. Scanner splits the script into lines
2. Symbol table is built for the whole file
3. Structural, rule, logic and document checks run over the lines
4. Scoring summarises the result into a 0-100 performance score

The service is a pure function over text. It holds only immutable tables
(rules, keywords, functions, settings) built at construction, so one instance
can serve concurrent validate() calls from several threads.
"""

import logging
from typing import Iterable, List, Optional

from ..config import AnalyzerSettings, config
from ..models.autofix import AutofixReport
from ..models.diagnostics import Diagnostic, ValidationReport
from ..models.rules import Rule
from .autofix_service import AutofixService
from .document_checker import check_document, detect_version
from .logic_checker import check_logic
from .reference_checker import ReferenceChecker
from .rule_engine import RuleEngine
from .rule_loader import load_rule_packs
from .rules import BUILTIN_FUNCTIONS, BUILTIN_VARIABLES, DEPRECATED_FUNCTIONS, KEYWORDS, default_rules
from .scanner import split_lines
from .scoring import calculate_performance_score
from .structural_checker import check_structure
from .symbol_table import build_symbol_table

logger = logging.getLogger(__name__)


class ScriptValidator:
    """
    Static analysis engine for Pine Script.

    Primary contract for the chat-agent and template collaborators:
        validate(source) -> ValidationReport
        auto_fix(source, codes) -> source
    """

    def __init__(
        self,
        rules: Optional[Iterable[Rule]] = None,
        settings: Optional[AnalyzerSettings] = None,
        load_custom_rules: bool = True,
    ):
        """
        Initialize the validator.

        Args:
            rules: rule set to use instead of the built-in catalogue
            settings: engine settings (defaults to the project configuration)
            load_custom_rules: also load YAML rule packs from settings.rules_dir

        Raises:
            RuleConfigurationError: a rule or rule pack is invalid
        """
        self.settings = settings or config.get_settings()

        active_rules = list(default_rules() if rules is None else rules)
        if load_custom_rules and self.settings.rules_dir:
            active_rules.extend(load_rule_packs(self.settings.rules_dir))

        self.keywords = KEYWORDS
        # Legacy call names are still functions; DEPRECATED_FUNCTION reports them
        self.functions = BUILTIN_FUNCTIONS | frozenset(DEPRECATED_FUNCTIONS)
        self.builtin_variables = BUILTIN_VARIABLES

        self.rule_engine = RuleEngine(active_rules, ReferenceChecker(self.keywords, self.functions))
        self.autofix_service = AutofixService(self.settings)

        logger.info(
            f"Initialized ScriptValidator with {len(self.rule_engine.rules)} rule(s) "
            f"(required version v{self.settings.required_version})"
        )

    @property
    def rules(self):
        return self.rule_engine.rules

    def validate(self, source: str) -> ValidationReport:
        """
        Analyse a script.

        Never raises for malformed input: every problem in the text is reported
        as a diagnostic.
        """
        lines = split_lines(source)
        symbols = build_symbol_table(lines, self.builtin_variables)

        findings = self.rule_engine.evaluate(lines, symbols)
        document_errors, document_suggestions = check_document(lines, self.settings.required_version)
        logic_errors, logic_warnings = check_logic(lines, self.settings.exit_keywords)

        errors = [*document_errors, *check_structure(lines), *findings.errors, *logic_errors]
        warnings = [*findings.warnings, *logic_warnings]
        suggestions = [*findings.suggestions, *document_suggestions]

        report = ValidationReport(
            errors=errors,
            warnings=warnings,
            suggestions=suggestions,
            security_issues=findings.security_issues,
            detected_version=detect_version(source),
            performance_score=calculate_performance_score(lines, warnings, self.settings.scoring),
        )
        logger.debug(f"Validated {len(lines)} line(s): {report.summary()}")
        return report

    def validate_syntax(self, source: str) -> bool:
        return self.validate(source).is_valid

    def auto_fix(self, source: str, codes: Iterable[str]) -> str:
        """Apply the fixes for ``codes``. Does not re-validate."""
        return self.autofix_service.auto_fix(source, codes)

    def apply_fixes(self, source: str, codes: Iterable[str]) -> AutofixReport:
        return self.autofix_service.apply_fixes(source, codes)

    def get_quick_fixes(self, diagnostic: Diagnostic) -> List[str]:
        """Textual fix options for a diagnostic, for display next to it."""
        fixes: List[str] = []

        if diagnostic.quick_fix is not None:
            # Option text, not an edit: drop the line break an insertion carries
            fixes.append(diagnostic.quick_fix.replacement_text.rstrip("\n"))
        elif diagnostic.code in ("MISSING_VERSION", "WRONG_VERSION"):
            fixes.append(self.settings.version_header)
        elif diagnostic.code == "DEPRECATED_FUNCTION" and diagnostic.suggestion:
            fixes.append(diagnostic.suggestion)
        elif diagnostic.code == "UNCLOSED_BRACKET":
            fixes.append("Add closing bracket")
        elif diagnostic.code == "UNCLOSED_STRING":
            fixes.append("Add closing quote")

        return fixes

    def get_suggestions(self, source: str) -> List[str]:
        """High-level advice that does not point at a single line."""
        suggestions: List[str] = []

        if "for " in source and "ta." in source:
            suggestions.append("Consider using vectorized operations instead of loops for better performance")

        if "//" not in source.replace(self.settings.version_header, "", 1):
            suggestions.append("Add comments to explain your strategy logic")

        if "request.security" in source:
            suggestions.append("Be cautious with external data requests for security")

        return suggestions


_default_validator: Optional[ScriptValidator] = None


def get_validator() -> ScriptValidator:
    """Shared validator built from the project configuration."""
    global _default_validator
    if _default_validator is None:
        _default_validator = ScriptValidator()
    return _default_validator


def validate(source: str) -> ValidationReport:
    return get_validator().validate(source)


def auto_fix(source: str, codes: Iterable[str]) -> str:
    return get_validator().auto_fix(source, codes)
