"""
Parsing Module

Provides utilities for parsing JSON from LLM responses.

Usage:
    from vsl_vibes.services.infrastructure.parsing import parse_llm_json
"""

from .json_parser import (
    parse_llm_json,
    extract_largest_balanced_json,
    fix_json_escapes,
    strip_code_fences,
)

__all__ = [
    "parse_llm_json",
    "extract_largest_balanced_json",
    "fix_json_escapes",
    "strip_code_fences",
]
