"""
Pytest configuration for the Pine Script analyzer.

Why this exists:
- Tests import `pinescript_analyzer` directly from the checkout.
- Depending on pytest import mode / environment, the repository root may not be on `sys.path`,
  which makes `import pinescript_analyzer` fail during collection when the package is not installed.

This file ensures the repo root is available on `sys.path` for all tests in a deterministic way,
and provides validators that ignore the developer's local config.json / environment.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Ensure the repository root is importable (so `import pinescript_analyzer` works).
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pinescript_analyzer.config import AnalyzerSettings  # noqa: E402
from pinescript_analyzer.services.validation_service import ScriptValidator  # noqa: E402


CLEAN_STRATEGY = """//@version=6
strategy("MA Cross", overlay=true)
fastLength = input.int(9, "Fast", minval=1, maxval=50)
slowLength = input.int(21, "Slow", minval=1, maxval=200)
fastMa = ta.sma(close, fastLength)
slowMa = ta.sma(close, slowLength)
if ta.crossover(fastMa, slowMa)
    strategy.entry("Long", strategy.long)
if ta.crossunder(fastMa, slowMa)
    strategy.close("Long")
plot(fastMa, color=color.blue)
plot(slowMa, color=color.red)
"""


@pytest.fixture
def settings() -> AnalyzerSettings:
    return AnalyzerSettings()


@pytest.fixture
def validator(settings) -> ScriptValidator:
    """Validator with built-in rules and default settings only."""
    return ScriptValidator(settings=settings, load_custom_rules=False)


@pytest.fixture
def clean_strategy() -> str:
    return CLEAN_STRATEGY
