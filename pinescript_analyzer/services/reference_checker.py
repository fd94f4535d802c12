"""
Reference checker: decides whether an identifier occurrence is a valid reference.
"""

from __future__ import annotations

import re
from typing import AbstractSet

from .symbol_table import SymbolTable


class ReferenceChecker:
    """
    Flags identifiers used before declaration.

    An occurrence is valid when the name is a keyword or built-in function,
    is declared on the same line, is the object of a member access
    (``name.field``), or is anywhere in the whole-file symbol table.
    """

    def __init__(self, keywords: AbstractSet[str], functions: AbstractSet[str]):
        self._keywords = frozenset(keywords)
        self._functions = frozenset(functions)
        # `ta.sma` also makes `ta` a known namespace
        self._namespaces = frozenset(name.split(".", 1)[0] for name in self._functions if "." in name)

    def is_valid_reference(self, name: str, line: str, column: int, symbols: SymbolTable) -> bool:
        """
        Args:
            name: identifier text
            line: full text of the line it occurs on
            column: 1-based column of the occurrence
            symbols: table built for the whole script
        """
        if name in self._keywords or name in self._functions or name in self._namespaces:
            return True

        if self._is_declared_on_line(name, line):
            return True

        if self._is_member_access(line, column, name):
            return True

        return name in symbols

    @staticmethod
    def _is_declared_on_line(name: str, line: str) -> bool:
        escaped = re.escape(name)
        if re.search(rf"(?<![\w.]){escaped}\s*(?::=|=(?![=>]))", line):
            return True
        return re.search(rf"\b(?:varip|var)\s+(?:[\w.]+\s+)?{escaped}\b", line) is not None

    @staticmethod
    def _is_member_access(line: str, column: int, name: str) -> bool:
        start = column - 1
        if start > 0 and line[start - 1] == ".":
            return True
        rest = line[start + len(name):]
        return rest.startswith(".")
