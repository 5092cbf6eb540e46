"""Conversion between Style records and the two external rule shapes."""

from tokenpaint.codec.scope_rules import (
    decode_scope_settings,
    encode_scope_rules,
    encode_scope_settings,
    find_scope_rule_style,
    is_owned_rule,
    owned_rule_name,
)
from tokenpaint.codec.semantic import (
    decode_semantic_rule,
    encode_semantic_rule,
    encode_semantic_rules,
)

__all__ = [
    "decode_scope_settings",
    "encode_scope_rules",
    "encode_scope_settings",
    "find_scope_rule_style",
    "is_owned_rule",
    "owned_rule_name",
    "decode_semantic_rule",
    "encode_semantic_rule",
    "encode_semantic_rules",
]
