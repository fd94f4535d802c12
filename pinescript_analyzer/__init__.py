"""
Static analysis engine for generated Pine Script.

    from pinescript_analyzer import validate, auto_fix

    report = validate(script)
    if not report.is_valid:
        script = auto_fix(script, report.codes())
"""

from ._version import __version__
from .models import Diagnostic, QuickFix, RuleCategory, RuleConfigurationError, Severity, ValidationReport
from .services.validation_service import ScriptValidator, auto_fix, validate

__all__ = [
    "__version__",
    "Diagnostic",
    "QuickFix",
    "RuleCategory",
    "RuleConfigurationError",
    "ScriptValidator",
    "Severity",
    "ValidationReport",
    "auto_fix",
    "validate",
]
