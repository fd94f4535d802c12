"""
YAML rule pack loader.

Loads declarative rules from .yaml files so teams can add house rules without
writing Python. Packs are read once, when a validator is constructed; the
active rule set never changes afterwards and nothing is ever registered from
the script being analysed.

Pack schema::

    version: "1.0"
    rules:
      - id: no_plot_in_loop
        name: Plot Inside Loop
        category: performance      # syntax | logic | performance | security | style
        severity: warning          # error | warning | info
        pattern: "^\\s+plot\\("
        flags: [IGNORECASE]        # optional, one name or a list of names from `re`
        message: "plot() cannot be called from a local scope"
        suggestion: "Move plot() to the global scope"
        skip_comments: true        # optional
        include_literals: false    # optional
        enabled: true              # optional

A broken pack is a configuration error: it raises RuleConfigurationError
instead of being skipped.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from ..models.rules import Rule, RuleConfigurationError, compile_pattern

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA_VERSIONS = ("1.0",)

_REQUIRED_FIELDS = ("id", "category", "severity", "pattern", "message")


def load_rule_pack(path: Union[str, Path]) -> List[Rule]:
    """
    Load the enabled rules of one YAML pack.

    Raises:
        RuleConfigurationError: unreadable file, invalid YAML or invalid rule
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise RuleConfigurationError(f"Failed to parse {path.name}: {e}") from e
    except OSError as e:
        raise RuleConfigurationError(f"Failed to read {path}: {e}") from e

    if not isinstance(document, dict):
        raise RuleConfigurationError(f"{path.name}: expected a mapping at the top level")

    version = str(document.get('version', '1.0'))
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise RuleConfigurationError(f"{path.name}: unsupported rule pack version {version}")

    entries = document.get('rules')
    if not isinstance(entries, list):
        raise RuleConfigurationError(f"{path.name}: no 'rules' list found")

    rules = [_build_rule(entry, path.name) for entry in entries if _is_enabled(entry)]
    logger.info(f"Loaded {len(rules)} rule(s) from {path.name}")
    return rules


def load_rule_packs(directory: Union[str, Path]) -> List[Rule]:
    """Load every *.yaml / *.yml pack in a directory, in file name order."""
    directory = Path(directory)
    if not directory.exists():
        logger.warning(f"Rule pack directory does not exist: {directory}")
        return []

    pack_files = sorted([*directory.glob("*.yaml"), *directory.glob("*.yml")])
    if not pack_files:
        logger.warning(f"No rule packs found in {directory}")
        return []

    rules: List[Rule] = []
    for pack_file in pack_files:
        rules.extend(load_rule_pack(pack_file))

    logger.info(f"Total custom rules loaded: {len(rules)}")
    return rules


def _is_enabled(entry: Any) -> bool:
    return not isinstance(entry, dict) or entry.get('enabled', True)


def _build_rule(entry: Dict[str, Any], source_name: str) -> Rule:
    if not isinstance(entry, dict):
        raise RuleConfigurationError(f"{source_name}: each rule must be a mapping")

    rule_id = entry.get('id') or "<unnamed>"
    missing = [key for key in _REQUIRED_FIELDS if entry.get(key) in (None, "")]
    if missing:
        raise RuleConfigurationError(f"{source_name}: rule '{rule_id}' is missing {', '.join(missing)}")

    flag_names = entry.get('flags') or []
    if isinstance(flag_names, str):
        flag_names = [flag_names]
    elif not isinstance(flag_names, list):
        raise RuleConfigurationError(f"{source_name}: rule '{rule_id}' flags must be a name or a list of names")

    flags = 0
    for flag_name in flag_names:
        flag = getattr(re, str(flag_name).upper(), None)
        if not isinstance(flag, re.RegexFlag):
            raise RuleConfigurationError(f"{source_name}: rule '{rule_id}' has unknown flag {flag_name}")
        flags |= flag

    return Rule(
        id=str(entry['id']),
        name=str(entry.get('name', entry['id'])),
        description=str(entry.get('description', "")),
        category=entry['category'],
        severity=entry['severity'],
        pattern=compile_pattern(rule_id, str(entry['pattern']), flags),
        message=str(entry['message']),
        suggestion=entry.get('suggestion'),
        skip_comments=bool(entry.get('skip_comments', True)),
        include_literals=bool(entry.get('include_literals', False)),
    )
