from .autofix import AutofixChange, AutofixReport
from .diagnostics import Diagnostic, FixRange, QuickFix, RuleCategory, Severity, ValidationReport
from .rules import Rule, RuleConfigurationError
from .source import SourceLine, Token, TokenKind

__all__ = [
    "AutofixChange",
    "AutofixReport",
    "Diagnostic",
    "FixRange",
    "QuickFix",
    "Rule",
    "RuleCategory",
    "RuleConfigurationError",
    "Severity",
    "SourceLine",
    "Token",
    "TokenKind",
    "ValidationReport",
]
