"""
Performance score heuristic.

Not a complexity metric: the only guarantees are that the score lies in
[0, 100] and that the same text always yields the same score.
"""

from __future__ import annotations

import re
from typing import Iterable, Sequence

from ..config import ScoringWeights
from ..models.diagnostics import Diagnostic, RuleCategory
from ..models.source import SourceLine
from .scanner import code_only, is_comment_line

_CONTROL_FLOW_RE = re.compile(r"\bfor\s+|\bwhile\s+|\bif\s+.*\bif\s+")
_BUILTIN_CALL_RE = re.compile(r"\b(?:ta|math|str)\.")

MAX_SCORE = 100


def calculate_performance_score(
    lines: Sequence[SourceLine],
    warnings: Iterable[Diagnostic],
    weights: ScoringWeights,
) -> int:
    score = MAX_SCORE

    performance_warnings = sum(1 for w in warnings if w.category is RuleCategory.PERFORMANCE)
    score -= min(performance_warnings * weights.performance_warning_penalty, weights.performance_warning_cap)

    code = "\n".join(code_only(line.text) for line in lines if not is_comment_line(line.text))

    control_flow = len(_CONTROL_FLOW_RE.findall(code))
    score -= min(control_flow * weights.control_flow_penalty, weights.control_flow_cap)

    builtin_calls = len(_BUILTIN_CALL_RE.findall(code))
    score += min(builtin_calls * weights.builtin_bonus, weights.builtin_bonus_cap)

    return max(0, min(MAX_SCORE, score))
