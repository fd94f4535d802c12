"""
Autofix models (deterministic text rewrites keyed by diagnostic code).

Autofix is a trust boundary: whenever we rewrite a script, the change list and
diff make the rewrite explicit and auditable.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class AutofixChange(BaseModel):
    """A single applied autofix change."""

    code: str
    message: str
    line: Optional[int] = None


class AutofixReport(BaseModel):
    """Outcome of applying a set of fix codes to a script."""

    requested_codes: List[str] = Field(default_factory=list)
    applied: bool = False

    original_code: str
    fixed_code: str
    diff: Optional[str] = None

    changes: List[AutofixChange] = Field(default_factory=list)
