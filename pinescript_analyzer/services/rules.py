"""
Built-in rule catalogue and seed vocabulary for Pine Script v6.

Everything here is constructed once and shared read-only by every validator
instance; nothing in this module is mutated after import.
"""

from __future__ import annotations

import re
from typing import List

from ..models.diagnostics import FixRange, QuickFix, RuleCategory, Severity
from ..models.rules import Rule

KEYWORDS = frozenset({
    # declarations
    "strategy", "indicator", "library", "import", "export", "as", "method", "type", "enum",
    "var", "varip", "const", "simple", "series",
    # control flow
    "if", "else", "for", "in", "to", "by", "while", "switch", "break", "continue", "return",
    "and", "or", "not",
    # literals
    "true", "false", "na",
    # types
    "int", "float", "bool", "string", "color",
    # namespaces
    "math", "ta", "str", "array", "matrix", "map", "request", "input", "syminfo", "timeframe",
    "barstate", "session", "currency", "chart", "ticker", "runtime", "log", "barmerge",
    "position", "location", "shape", "size", "extend", "xloc", "yloc", "text", "font",
    "format", "scale", "display", "dayofweek", "order", "alert", "adjustment", "splits",
    "dividends", "earnings",
    # drawing and output
    "plot", "hline", "plotshape", "plotchar", "plotcandle", "plotbar", "plotarrow", "bgcolor", "barcolor",
    "fill", "table", "label", "line", "box", "polyline", "linefill", "alertcondition",
    # common built-in functions called without a namespace
    "nz", "fixnan", "timestamp", "max_bars_back",
})

BUILTIN_VARIABLES = frozenset({
    "open", "high", "low", "close", "volume", "time", "time_close", "timenow",
    "bar_index", "last_bar_index", "last_bar_time",
    "hl2", "hlc3", "hlcc4", "ohlc4",
    "year", "month", "weekofyear", "dayofmonth", "hour", "minute", "second",
})

BUILTIN_FUNCTIONS = frozenset({
    # Technical analysis
    "ta.sma", "ta.ema", "ta.wma", "ta.rma", "ta.vwma", "ta.hma", "ta.rsi", "ta.macd",
    "ta.bb", "ta.atr", "ta.stoch", "ta.cci", "ta.mfi", "ta.adx", "ta.dmi", "ta.obv",
    "ta.crossover", "ta.crossunder", "ta.cross", "ta.highest", "ta.lowest",
    "ta.valuewhen", "ta.barssince", "ta.change", "ta.mom", "ta.roc", "ta.stdev",
    "ta.supertrend", "ta.pivothigh", "ta.pivotlow", "ta.cum", "ta.tr",
    # Math
    "math.abs", "math.max", "math.min", "math.round", "math.floor", "math.ceil",
    "math.pow", "math.sqrt", "math.log", "math.exp", "math.sin", "math.cos",
    "math.tan", "math.avg", "math.sum", "math.sign",
    # Strings
    "str.tostring", "str.tonumber", "str.length", "str.substring", "str.contains",
    "str.startswith", "str.endswith", "str.replace", "str.format",
    # Arrays
    "array.new", "array.push", "array.pop", "array.get", "array.set", "array.size",
    "array.clear", "array.slice", "array.sort",
    # Strategy
    "strategy.entry", "strategy.exit", "strategy.close", "strategy.close_all",
    "strategy.cancel", "strategy.order",
    # Requests
    "request.security",
})

# Built-in namespace members that are values, not functions
BUILTIN_MEMBER_VALUES = (
    "pi", "e", "phi", "rphi", "tr", "vwap", "obv", "accdist", "iii", "nvi", "pvi", "pvt",
    "wad", "wvad", "newline",
)

# Legacy (pre-v5) call names and their namespaced replacements
DEPRECATED_FUNCTIONS = {
    "security": "request.security",
    "study": "indicator",
    "rsi": "ta.rsi",
    "sma": "ta.sma",
    "ema": "ta.ema",
    "crossover": "ta.crossover",
    "crossunder": "ta.crossunder",
}

DEPRECATED_CALL_RE = re.compile(
    r"(?<![\w.])(" + "|".join(DEPRECATED_FUNCTIONS) + r")(?=\s*\()"
)

BARE_BUILTIN_CALL_RE = re.compile(
    r"\b((?:ta|math|str)\.(?!(?:" + "|".join(BUILTIN_MEMBER_VALUES) + r")\b)[A-Za-z_]\w*)\b(?!\s*\()"
)


def _deprecated_fix(match: "re.Match[str]", line: int) -> QuickFix:
    old = match.group(1)
    new = DEPRECATED_FUNCTIONS[old]
    return QuickFix(
        title=f"Replace with {new}",
        description=f"Rename deprecated '{old}' to '{new}'",
        replacement_text=new,
        range=FixRange(
            start_line=line,
            start_column=match.start(1) + 1,
            end_line=line,
            end_column=match.end(1) + 1,
        ),
    )


def _parentheses_fix(match: "re.Match[str]", line: int) -> QuickFix:
    return QuickFix(
        title="Add parentheses",
        description="Add () to complete function call",
        replacement_text=f"{match.group(1)}()",
        range=FixRange(
            start_line=line,
            start_column=match.start(1) + 1,
            end_line=line,
            end_column=match.end(1) + 1,
        ),
    )


def _indentation_fix(match: "re.Match[str]", line: int) -> QuickFix:
    indent = match.group(1)
    width = indent.count("\t") * 4 + indent.count(" ")
    # Round up to the next multiple of four
    normalized = " " * (-(-width // 4) * 4)
    return QuickFix(
        title="Normalize indentation",
        description="Use 4 spaces per indentation level",
        replacement_text=normalized,
        range=FixRange(start_line=line, start_column=1, end_line=line, end_column=len(indent) + 1),
    )


def _credentials_fix(match: "re.Match[str]", line: int) -> QuickFix:
    name = match.group(1)
    return QuickFix(
        title="Use an input parameter",
        description=f"Read '{name}' from an input instead of a literal",
        replacement_text=f'{name} = input.string("", "{name}")',
        range=FixRange(
            start_line=line,
            start_column=match.start(0) + 1,
            end_line=line,
            end_column=match.end(0) + 1,
        ),
    )


def default_rules() -> List[Rule]:
    """Return the built-in rule set, in evaluation order."""
    return [
        # Syntax
        Rule(
            id="missing_parentheses",
            name="Missing Parentheses",
            description="Built-in function references must be called",
            category=RuleCategory.SYNTAX,
            severity=Severity.ERROR,
            pattern=BARE_BUILTIN_CALL_RE,
            message="Function calls must include parentheses",
            suggestion="Add () after '{1}'",
            quick_fix=_parentheses_fix,
        ),
        Rule(
            id="invalid_variable_name",
            name="Invalid Variable Name",
            description="Variable names must follow Pine Script naming rules",
            category=RuleCategory.SYNTAX,
            severity=Severity.ERROR,
            pattern=re.compile(r"(?<![\w.])(\d+[A-Za-z_]\w*|[A-Za-z_]\w*-[A-Za-z_][\w-]*)\s*:?=(?![=>])"),
            message="Variable names cannot start with numbers or contain hyphens",
            suggestion="Use valid variable names (letters, numbers, underscores)",
        ),
        Rule(
            id="DEPRECATED_FUNCTION",
            name="Deprecated Function",
            description="Legacy call names replaced by namespaced v5+ functions",
            category=RuleCategory.SYNTAX,
            severity=Severity.WARNING,
            pattern=DEPRECATED_CALL_RE,
            message="Deprecated function '{1}' used",
            suggestion="Use '{replacement}' instead",
            quick_fix=_deprecated_fix,
            replacements=DEPRECATED_FUNCTIONS,
        ),
        # Logic
        Rule(
            id="undefined_variable",
            name="Undefined Variable",
            description="Variable used before declaration",
            category=RuleCategory.LOGIC,
            severity=Severity.ERROR,
            pattern=re.compile(r"(?<![\w.#])([A-Za-z_]\w*)\b"),
            message="Variable '{1}' used before declaration",
            suggestion="Declare variable before use or check spelling",
            checks_references=True,
        ),
        Rule(
            id="recursive_reference",
            name="Recursive Reference",
            description="Variable references itself in its own declaration",
            category=RuleCategory.LOGIC,
            severity=Severity.ERROR,
            pattern=re.compile(
                r"^\s*(?:varip\s+|var\s+)?(?:(?:int|float|bool|string|color)\s+)?"
                r"([A-Za-z_]\w*)\s*=(?![=>]).*?(?<![\w.])\1\b(?!\s*\[)"
            ),
            message="Variable '{1}' cannot reference itself directly",
            suggestion="Use previous value with {1}[1] or different logic",
        ),
        # Performance
        Rule(
            id="inefficient_loop",
            name="Inefficient Loop",
            description="Loop with a large literal bound",
            category=RuleCategory.PERFORMANCE,
            severity=Severity.WARNING,
            pattern=re.compile(r"\bfor\s+\w+\s*=\s*\d+\s+to\s+\d{3,}"),
            message="Large loops can impact performance",
            suggestion="Consider using built-in functions or reducing iterations",
        ),
        Rule(
            id="redundant_calculation",
            name="Redundant Calculation",
            description="Same calculation performed multiple times on one line",
            category=RuleCategory.PERFORMANCE,
            severity=Severity.WARNING,
            pattern=re.compile(r"(ta\.\w+\([^)]+\)).*\1"),
            message="Redundant calculation detected: {1}",
            suggestion="Store result in variable and reuse",
        ),
        # Security
        Rule(
            id="hardcoded_credentials",
            name="Hardcoded Credentials",
            description="Potential hardcoded credentials or API keys",
            category=RuleCategory.SECURITY,
            severity=Severity.WARNING,
            pattern=re.compile(r"(?i)\b(api[_-]?key|password|secret|token)\s*=\s*[\"'][^\"']+[\"']"),
            message="Avoid hardcoding credentials in scripts",
            suggestion="Use input parameters for sensitive data",
            quick_fix=_credentials_fix,
            include_literals=True,
        ),
        Rule(
            id="lookahead_bias",
            name="Lookahead Bias",
            description="request.security with lookahead enabled reads future bars",
            category=RuleCategory.SECURITY,
            severity=Severity.WARNING,
            pattern=re.compile(r"lookahead\s*=\s*barmerge\.lookahead_on"),
            message="Lookahead on external data requests can leak future values",
            suggestion="Use barmerge.lookahead_off or offset the series with [1]",
        ),
        # Style
        Rule(
            id="inconsistent_indentation",
            name="Inconsistent Indentation",
            description="Tab indentation or spaces not a multiple of four",
            category=RuleCategory.STYLE,
            severity=Severity.INFO,
            pattern=re.compile(r"^(\t+[ \t]*|(?:    )* {1,3})(?=\S)"),
            message="Use consistent indentation (4 spaces recommended)",
            suggestion="Use 4 spaces for indentation",
            quick_fix=_indentation_fix,
        ),
        Rule(
            id="NAMING_CONVENTION",
            name="Naming Convention",
            description="Variable names should be camelCase",
            category=RuleCategory.STYLE,
            severity=Severity.INFO,
            pattern=re.compile(r"^\s*((?=\w*_)(?![a-z])\w+)\s*=(?![=>])"),
            message="Variable name '{1}' doesn't follow camelCase convention",
            suggestion="Use camelCase for variable names",
        ),
        Rule(
            id="RESERVED_KEYWORD",
            name="Reserved Keyword",
            description="Assignment to a reserved keyword or built-in namespace",
            category=RuleCategory.STYLE,
            severity=Severity.INFO,
            pattern=re.compile(
                r"^\s*(" + "|".join(sorted(KEYWORDS - {"na"})) + r")\s*=(?![=>])"
            ),
            message="Variable name '{1}' is a reserved keyword",
            suggestion="Choose a different variable name",
        ),
        Rule(
            id="missing_comments",
            name="Missing Comments",
            description="Dense operator sequences should be commented",
            category=RuleCategory.STYLE,
            severity=Severity.INFO,
            pattern=re.compile(r"^(?!.*//).*?[{}()=+\-*/]{3,}"),
            message="Consider adding comments for complex logic",
            suggestion="Add explanatory comments",
            include_literals=True,
        ),
    ]
