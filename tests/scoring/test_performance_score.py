"""
Tests for the performance score heuristic.
"""

from __future__ import annotations

from pinescript_analyzer.config import ScoringWeights
from pinescript_analyzer.models.diagnostics import Diagnostic, RuleCategory, Severity
from pinescript_analyzer.services.scanner import split_lines
from pinescript_analyzer.services.scoring import calculate_performance_score


def _warning(category):
    return Diagnostic(line=1, column=1, message="m", severity=Severity.WARNING, code="w", category=category)


def _score(source, warnings=(), weights=None):
    return calculate_performance_score(split_lines(source), list(warnings), weights or ScoringWeights())


def test_empty_source_scores_100():
    assert _score("") == 100


def test_performance_warnings_cost_ten_points_each():
    assert _score("x = 1", [_warning(RuleCategory.PERFORMANCE)] * 2) == 80


def test_non_performance_warnings_are_free():
    assert _score("x = 1", [_warning(RuleCategory.SYNTAX), _warning(RuleCategory.LOGIC)]) == 100


def test_performance_penalty_is_capped():
    assert _score("x = 1", [_warning(RuleCategory.PERFORMANCE)] * 20) == 50


def test_control_flow_penalty_and_builtin_bonus():
    source = "\n".join([
        "for i = 0 to 5",
        "while x > 1",
        "a = ta.sma(close, 5)",
    ])

    # 100 - 2 * 5 + 1 * 2
    assert _score(source) == 92


def test_nested_if_on_one_line_counts_once():
    assert _score("if a and (if b)") == 95


def test_comments_and_strings_do_not_count():
    assert _score('// for each bar use ta.sma\nt = "for while"') == 100


def test_score_is_clamped_to_range():
    heavy = "\n".join(["for i = 0 to 5"] * 40)
    bonus = "\n".join(["a = ta.sma(close, 5) + math.abs(x)"] * 40)

    assert _score(heavy, [_warning(RuleCategory.PERFORMANCE)] * 40) == 20
    assert _score(bonus) == 100
    assert 0 <= _score(heavy, [_warning(RuleCategory.PERFORMANCE)] * 40, ScoringWeights(performance_warning_cap=500)) <= 100


def test_custom_weights():
    weights = ScoringWeights(performance_warning_penalty=30, performance_warning_cap=100)

    assert _score("x = 1", [_warning(RuleCategory.PERFORMANCE)] * 4, weights) == 0
