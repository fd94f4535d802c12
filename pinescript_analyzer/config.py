"""
Configuration management for the Pine Script analyzer.

Handles loading engine-level settings (required script version, custom rule
pack directory, unreachable-code keywords, scoring weights).

Configuration priority (highest to lowest):
1. Environment variables (for container deployments next to the chat backend)
2. config.json file (for local development)
3. Built-in defaults

Settings are read once when a validator is constructed; a running validator
never re-reads them.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Config file path at project root
CONFIG_FILE = Path(__file__).parent.parent / "config.json"

# Default values (used when neither env var nor config.json specifies)
DEFAULT_REQUIRED_VERSION = 6
DEFAULT_EXIT_KEYWORDS = ("return",)
DEFAULT_INDENT_WIDTH = 4
DEFAULT_DECLARATION_TITLE = "My Script"


@dataclass(frozen=True)
class ScoringWeights:
    """Penalties and bonuses used by the performance score heuristic."""

    performance_warning_penalty: int = 10
    performance_warning_cap: int = 50
    control_flow_penalty: int = 5
    control_flow_cap: int = 30
    builtin_bonus: int = 2
    builtin_bonus_cap: int = 20


@dataclass(frozen=True)
class AnalyzerSettings:
    """
    Immutable snapshot of engine settings.

    A validator captures one of these at construction time and shares it
    read-only across every validate() call.
    """

    required_version: int = DEFAULT_REQUIRED_VERSION
    exit_keywords: Tuple[str, ...] = DEFAULT_EXIT_KEYWORDS
    indent_width: int = DEFAULT_INDENT_WIDTH
    declaration_title: str = DEFAULT_DECLARATION_TITLE
    rules_dir: Optional[str] = None
    scoring: ScoringWeights = field(default_factory=ScoringWeights)

    @property
    def version_header(self) -> str:
        return f"//@version={self.required_version}"


class Config:
    """
    Project-level configuration manager.

    Priority: ENV > config.json > defaults

    Environment variables:
      - PINE_REQUIRED_VERSION: Pine Script version required in the header (e.g. 6)
      - PINE_RULES_DIR: Directory of YAML rule packs loaded at construction
      - PINE_EXIT_KEYWORDS: Comma-separated keywords that end a block unconditionally
    """

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self.data = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load config: {e}")
                return self._default_config()
        else:
            return self._default_config()

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "analyzer": {
                "required_version": DEFAULT_REQUIRED_VERSION,
                "exit_keywords": list(DEFAULT_EXIT_KEYWORDS),
            }
        }

    def get_required_version(self) -> int:
        """
        Get the Pine Script version required in the script header.

        Priority: PINE_REQUIRED_VERSION env var > config.json > default
        """
        env_version = os.getenv('PINE_REQUIRED_VERSION')
        if env_version:
            try:
                return int(env_version)
            except ValueError:
                logger.warning(f"Ignoring non-numeric PINE_REQUIRED_VERSION: {env_version!r}")

        return int(self.data.get("analyzer", {}).get("required_version", DEFAULT_REQUIRED_VERSION))

    def get_rules_dir(self) -> Optional[str]:
        """Get custom rule pack directory (ENV > config.json > none)."""
        env_path = os.getenv('PINE_RULES_DIR')
        if env_path:
            return env_path

        return self.data.get("analyzer", {}).get("rules_dir")

    def get_exit_keywords(self) -> Tuple[str, ...]:
        """Get unconditional exit keywords used by the unreachable-code check."""
        env_keywords = os.getenv('PINE_EXIT_KEYWORDS')
        if env_keywords:
            return tuple(k.strip() for k in env_keywords.split(",") if k.strip())

        keywords = self.data.get("analyzer", {}).get("exit_keywords", DEFAULT_EXIT_KEYWORDS)
        return tuple(keywords)

    def get_scoring_weights(self) -> ScoringWeights:
        """Get scoring weights, overriding defaults with any config.json values."""
        overrides = self.data.get("analyzer", {}).get("scoring", {}) or {}
        known = {k: int(v) for k, v in overrides.items() if k in ScoringWeights.__dataclass_fields__}
        return ScoringWeights(**known)

    def get_settings(self) -> AnalyzerSettings:
        """Build an immutable settings snapshot from the current configuration."""
        analyzer = self.data.get("analyzer", {})
        return AnalyzerSettings(
            required_version=self.get_required_version(),
            exit_keywords=self.get_exit_keywords(),
            indent_width=int(analyzer.get("indent_width", DEFAULT_INDENT_WIDTH)),
            declaration_title=analyzer.get("declaration_title", DEFAULT_DECLARATION_TITLE),
            rules_dir=self.get_rules_dir(),
            scoring=self.get_scoring_weights(),
        )


# Global config instance
config = Config()
