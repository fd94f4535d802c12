"""
Tests for the symbol table builder and reference checker.

Declarations are visible to the whole file (hoisting), so a name used above
its assignment is not reported.
"""

from __future__ import annotations

from pinescript_analyzer.services.reference_checker import ReferenceChecker
from pinescript_analyzer.services.rules import BUILTIN_FUNCTIONS, BUILTIN_VARIABLES, KEYWORDS
from pinescript_analyzer.services.scanner import split_lines
from pinescript_analyzer.services.symbol_table import SymbolTable, build_symbol_table, declared_on_line


def test_builtins_are_seeded():
    table = build_symbol_table(split_lines(""), BUILTIN_VARIABLES)

    assert "close" in table
    assert "bar_index" in table
    assert table.declared_names == frozenset()


def test_declare_is_idempotent():
    table = SymbolTable(["close"])
    table.declare("fast")
    size = len(table)
    table.declare("fast")

    assert len(table) == size
    assert table.declared_names == frozenset({"fast"})


def test_declaring_a_builtin_keeps_it():
    table = SymbolTable(["close"])
    table.declare("close")

    assert "close" in table.builtins
    assert "close" in table


def test_assignment_forms():
    assert declared_on_line("fast = ta.sma(close, 9)") == ["fast"]
    assert declared_on_line("count := count + 1") == ["count"]
    assert "total" in declared_on_line("var float total = 0.0")
    assert "state" in declared_on_line("varip int state = 0")


def test_comparison_is_not_assignment():
    assert declared_on_line("isUp = close == open") == ["isUp"]
    assert declared_on_line("plot(close >= open ? 1 : 0)") == []


def test_tuple_destructuring():
    names = declared_on_line("[macdLine, signalLine, hist] = ta.macd(close, 12, 26, 9)")

    assert {"macdLine", "signalLine", "hist"} <= set(names)


def test_function_definition_and_parameters():
    names = declared_on_line("f(float src, int len = 14) => ta.sma(src, len)")

    assert names[:3] == ["f", "src", "len"]


def test_for_in_import_and_type_declarations():
    assert declared_on_line("for [i, price] in prices") == ["i", "price"]
    assert declared_on_line("for p in prices") == ["p"]
    assert declared_on_line("import TradingView/ta/7 as tvta") == ["tvta"]
    assert declared_on_line("type Pivot") == ["Pivot"]


def test_typed_declarations_without_initializer():
    assert declared_on_line("    float price") == ["price"]
    assert declared_on_line("const int len = 5") == ["len", "len"]
    assert declared_on_line("array<float> levels") == ["levels"]
    assert declared_on_line("float[] closes") == ["closes"]
    assert declared_on_line("label.new(bar_index, high)") == []
    assert declared_on_line("if ready") == []


def test_user_type_fields_and_declarations():
    source = "\n".join([
        "Pivot last = na",
        "type Pivot",
        "    float price",
        "    int idx",
        "    Pivot previous",
    ])

    table = build_symbol_table(split_lines(source), BUILTIN_VARIABLES)

    assert {"Pivot", "price", "idx", "previous", "last"} <= table.declared_names


def test_script_with_user_type_is_valid(validator):
    source = "\n".join([
        "//@version=6",
        'indicator("Pivots", overlay=true)',
        "type Pivot",
        "    float price",
        "    int idx",
        "var array<Pivot> pivots = array.new<Pivot>()",
        "ph = ta.pivothigh(high, 5, 5)",
        "if not na(ph)",
        "    array.push(pivots, Pivot.new(ph, bar_index - 5))",
        "plot(ph)",
    ])

    report = validator.validate(source)

    assert "undefined_variable" not in report.codes()
    assert report.is_valid is True


def test_strings_do_not_declare_names():
    assert declared_on_line('label = "x = 1"') == ["label"]


def test_comment_lines_are_ignored():
    table = build_symbol_table(split_lines("// ghost = 1\nreal = 2"), BUILTIN_VARIABLES)

    assert "real" in table
    assert "ghost" not in table


def test_whole_file_hoisting():
    table = build_symbol_table(split_lines("plot(later)\nlater = close * 2"), BUILTIN_VARIABLES)

    assert "later" in table


def _checker() -> ReferenceChecker:
    return ReferenceChecker(KEYWORDS, BUILTIN_FUNCTIONS)


def test_reference_checker_accepts_keywords_and_namespaces():
    table = SymbolTable(BUILTIN_VARIABLES)
    checker = _checker()

    assert checker.is_valid_reference("strategy", "strategy('x')", 1, table)
    assert checker.is_valid_reference("ta", "x = ta.sma(close, 5)", 5, table)
    assert checker.is_valid_reference("close", "plot(close)", 6, table)


def test_reference_checker_accepts_member_access_object():
    table = SymbolTable(BUILTIN_VARIABLES)

    assert _checker().is_valid_reference("myLib", "plot(myLib.value)", 6, table)


def test_reference_checker_accepts_same_line_declaration():
    table = SymbolTable(BUILTIN_VARIABLES)

    assert _checker().is_valid_reference("fresh", "fresh = 1", 1, table)
    assert _checker().is_valid_reference("acc", "var acc = 0", 5, table)


def test_reference_checker_rejects_unknown_name():
    table = SymbolTable(BUILTIN_VARIABLES)

    assert not _checker().is_valid_reference("mystery", "plot(mystery)", 6, table)
