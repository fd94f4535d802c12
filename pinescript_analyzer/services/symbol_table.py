"""
Symbol table builder.

A first pass collects user `type` names, a second records every identifier
the script declares. The resulting table is a fresh value per validate()
call and is handed to the reference checker explicitly; it is never stored
on the validator.

Visibility is whole-file: a name declared on line 40 is considered declared
on line 3 as well. Generated scripts declare at top level, so hoisting keeps
out-of-order but otherwise valid scripts free of false positives.
"""

from __future__ import annotations

import re
from typing import AbstractSet, Iterable, List, Optional, Pattern, Set

from ..models.source import SourceLine
from .scanner import code_only, is_comment_line

_ASSIGNMENT_RE = re.compile(r"(?<![\w.])([A-Za-z_]\w*)\s*(?::=|=(?![=>]))")
_VAR_DECLARATION_RE = re.compile(r"\b(?:varip|var)\s+(?:[A-Za-z_][\w.]*\s+)?([A-Za-z_]\w*)\b")
_TUPLE_RE = re.compile(r"^\s*\[([^\]]+)\]\s*(?::=|=(?![=>]))")
_FUNCTION_RE = re.compile(r"^\s*(?:export\s+|method\s+)?([A-Za-z_]\w*)\s*\(([^)]*)\)\s*=>")
_FOR_IN_RE = re.compile(r"^\s*for\s+(?:\[([^\]]+)\]|([A-Za-z_]\w*))\s+in\b")
_IMPORT_ALIAS_RE = re.compile(r"^\s*import\s+\S+\s+as\s+([A-Za-z_]\w*)")
_TYPE_RE = re.compile(r"^\s*(?:export\s+)?(?:type|enum)\s+([A-Za-z_]\w*)")
_NAME_RE = re.compile(r"[A-Za-z_]\w*")

BUILTIN_TYPES = (
    "int", "float", "bool", "string", "color",
    "line", "label", "box", "table", "linefill", "polyline", "chart.point",
    "array", "matrix", "map",
)


class SymbolTable:
    """
    Set of identifiers considered declared for one analysis.

    Builtins are seeded at construction and can never be removed; declare()
    is idempotent.
    """

    def __init__(self, builtins: Iterable[str] = ()):
        self._builtins: AbstractSet[str] = frozenset(builtins)
        self._declared: Set[str] = set()

    def declare(self, name: str) -> None:
        if name:
            self._declared.add(name)

    def __contains__(self, name: object) -> bool:
        return name in self._builtins or name in self._declared

    def __len__(self) -> int:
        return len(self._builtins | self._declared)

    @property
    def builtins(self) -> AbstractSet[str]:
        return self._builtins

    @property
    def declared_names(self) -> AbstractSet[str]:
        return frozenset(self._declared)

    @property
    def names(self) -> AbstractSet[str]:
        return self._builtins | self._declared

    def __repr__(self) -> str:
        return f"<SymbolTable(builtins={len(self._builtins)}, declared={sorted(self._declared)})>"


def _last_name(fragment: str) -> str:
    """`float src = close` -> `src`; `len` -> `len`."""
    head = fragment.split("=", 1)[0]
    names = _NAME_RE.findall(head)
    return names[-1] if names else ""


def _typed_declaration_pattern(type_names: Iterable[str]) -> Pattern[str]:
    """`float price`, `const int len = 5`, `array<Pivot> items` (type name first)."""
    types = sorted({*BUILTIN_TYPES, *type_names}, key=len, reverse=True)
    return re.compile(
        r"^\s*(?:const\s+|simple\s+|series\s+)*"
        r"(?:" + "|".join(re.escape(t) for t in types) + r")"
        r"(?:<[^>]*>)?(?:\[\])?\s+([A-Za-z_]\w*)\s*(?:=(?![=>])|$)"
    )


_BUILTIN_TYPED_DECLARATION_RE = _typed_declaration_pattern(())


def declared_on_line(text: str, typed_declaration_re: Optional[Pattern[str]] = None) -> List[str]:
    """
    Names a single line declares, in order of appearance (may repeat).

    ``typed_declaration_re`` recognises `<type> <name>` declarations; the
    default knows the built-in types only.
    """
    code = code_only(text)
    names: List[str] = []

    m_typed = (typed_declaration_re or _BUILTIN_TYPED_DECLARATION_RE).match(code)
    if m_typed:
        names.append(m_typed.group(1))

    m_function = _FUNCTION_RE.match(code)
    if m_function:
        names.append(m_function.group(1))
        names.extend(_last_name(param) for param in m_function.group(2).split(","))

    m_tuple = _TUPLE_RE.match(code)
    if m_tuple:
        names.extend(_last_name(part) for part in m_tuple.group(1).split(","))

    m_for_in = _FOR_IN_RE.match(code)
    if m_for_in:
        if m_for_in.group(1):
            names.extend(_last_name(part) for part in m_for_in.group(1).split(","))
        else:
            names.append(m_for_in.group(2))

    for pattern in (_IMPORT_ALIAS_RE, _TYPE_RE):
        m = pattern.match(code)
        if m:
            names.append(m.group(1))

    names.extend(m.group(1) for m in _VAR_DECLARATION_RE.finditer(code))
    names.extend(m.group(1) for m in _ASSIGNMENT_RE.finditer(code))

    return [name for name in names if name]


def build_symbol_table(lines: Iterable[SourceLine], builtins: Iterable[str]) -> SymbolTable:
    """
    Build the declared-identifier set for a whole script.

    Args:
        lines: every line of the script
        builtins: names that are always declared (price and time series)

    Returns:
        A new SymbolTable owned by the caller.
    """
    code_lines = [line.text for line in lines if not is_comment_line(line.text)]

    # User types first, so `Pivot last` declares `last` even above `type Pivot`
    user_types = [m.group(1) for m in map(_TYPE_RE.match, map(code_only, code_lines)) if m]
    typed_declaration_re = _typed_declaration_pattern(user_types) if user_types else None

    table = SymbolTable(builtins)
    for text in code_lines:
        for name in declared_on_line(text, typed_declaration_re):
            table.declare(name)
    return table
