#!/usr/bin/env python3
"""
Rule table for JSON to graph conversion.

The table is data: it lives in graph_rules.yaml next to this module and can be
replaced through GRAPH_RULES_PATH. It is parsed with PyYAML and validated with
pydantic so a broken file fails at load time rather than mid-build.
"""

import logging
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).with_name("graph_rules.yaml")


class RuleTableError(Exception):
    """Raised when a rule table file cannot be read or does not validate."""
    pass


class TypeRule(BaseModel):
    type: str
    keys: list[str] = []
    parent_keys: list[str] = []
    kind: Literal["object", "array"] = "object"

    def matches(self, value: Any, parent_key: Optional[str]) -> bool:
        kind = "array" if isinstance(value, list) else "object"
        if kind != self.kind:
            return False
        if parent_key is not None and parent_key in self.parent_keys:
            return True
        return isinstance(value, dict) and any(key in value for key in self.keys)


class SequenceReference(BaseModel):
    field: str
    target: str


class NestedReference(BaseModel):
    path: list[str]
    field: str
    target: str


class IdListReference(BaseModel):
    node_type: str
    field: str


class SequenceListReference(BaseModel):
    node_type: str
    field: str
    target: str


class AmendmentRule(BaseModel):
    field: str = "amendedDetails"
    new_id: str = "newId"
    old_id: str = "oldId"


class GraphRules(BaseModel):
    domain_markers: list[str] = []
    type_rules: list[TypeRule] = []
    label_fields: list[str] = []
    sequence_fields: dict[str, list[str]] = {}
    default_sequence_field: Optional[str] = "sequenceNumber"
    indexed_types: list[str] = []
    business_id_fields: dict[str, list[str]] = {}
    status_fields: list[str] = []
    sequence_references: list[SequenceReference] = []
    nested_references: list[NestedReference] = []
    id_list_references: list[IdListReference] = []
    sequence_list_references: list[SequenceListReference] = []
    amendment: Optional[AmendmentRule] = None

    def classify(self, value: Any, parent_key: Optional[str]) -> str:
        """Return the type tag of the first matching rule, or 'object'/'array'."""
        for rule in self.type_rules:
            if rule.matches(value, parent_key):
                return rule.type
        return "array" if isinstance(value, list) else "object"

    def chain_fields(self, entity_type: str) -> list[str]:
        """Candidate fields for ordering siblings of one entity type."""
        fields = list(self.sequence_fields.get(entity_type, []))
        if self.default_sequence_field and self.default_sequence_field not in fields:
            fields.append(self.default_sequence_field)
        return fields


# Cache of loaded tables keyed by resolved path
_rules_cache: dict[Path, GraphRules] = {}


def parse_rules(raw: Any, source: str = "<memory>") -> GraphRules:
    """Validate a rule table mapping.

    Args:
        raw: Mapping loaded from YAML (or built in code)
        source: Where the mapping came from, for error messages

    Returns:
        Validated GraphRules

    Raises:
        RuleTableError: If the mapping does not validate
    """
    if not isinstance(raw, dict):
        raise RuleTableError(f"Rule table {source} must be a mapping, got {type(raw).__name__}")
    try:
        rules = GraphRules.model_validate(raw)
    except ValidationError as e:
        raise RuleTableError(f"Invalid rule table {source}: {e}") from e

    # A rule with no predicate would never match
    for rule in rules.type_rules:
        if not rule.keys and not rule.parent_keys:
            raise RuleTableError(f"Invalid rule table {source}: type rule {rule.type!r} needs keys or parent_keys")
    return rules


def load_graph_rules(path: Optional[str | Path] = None) -> GraphRules:
    """Load (and cache) a rule table.

    A custom path that does not exist falls back to the packaged table with a
    warning; a file that exists but does not parse is an error.

    Args:
        path: Optional path to a YAML rule table

    Returns:
        Validated GraphRules
    """
    rules_path = Path(path) if path else DEFAULT_RULES_PATH
    if not rules_path.exists() and rules_path != DEFAULT_RULES_PATH:
        logger.warning(f"Rule table not found at {rules_path}, using packaged defaults")
        rules_path = DEFAULT_RULES_PATH

    rules_path = rules_path.resolve()
    cached = _rules_cache.get(rules_path)
    if cached is not None:
        return cached

    try:
        with open(rules_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RuleTableError(f"Cannot read rule table {rules_path}: {e}") from e

    rules = parse_rules(raw, str(rules_path))
    _rules_cache[rules_path] = rules
    logger.info(f"Loaded graph rule table from {rules_path}")
    return rules


def clear_rules_cache():
    """Forget loaded rule tables (used by tests and after editing a custom table)."""
    _rules_cache.clear()
