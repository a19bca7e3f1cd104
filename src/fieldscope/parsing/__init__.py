"""
Spec loading.

Turns OpenAPI documents (JSON or YAML) into the typed SpecTree consumed by
the index builder.
"""

from .openapi import load_spec, parse_document

__all__ = ["load_spec", "parse_document"]
