"""
Global Configuration and Safety Defaults.

This module centralizes the defaults used by the index builder and the
explorer. It protects the resolver from reference loops, keeps huge specs
from being loaded by accident, and holds the fixed method semantics used
for criticality and colouring.

Project-level overrides live in `.fieldscope/config.yaml`; a few values can
also be set through environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Dict, FrozenSet

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# --- Safety Limits ---
# Maximum number of schema-reference hops followed before a cycle is assumed
MAX_RESOLUTION_DEPTH = 10

# Spec documents larger than this are refused by the loader
MAX_SPEC_SIZE_BYTES = 20 * 1024 * 1024  # 20MB

# --- Reporting ---
DEFAULT_TOP_N = 10

# --- HTTP Semantics ---

# Methods that change server state; a field reachable from one is critical
MUTATING_METHODS: FrozenSet[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})

# Canonical display order for methods
METHOD_ORDER = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE")

# Operation keys recognised inside an OpenAPI path item
HTTP_METHODS: FrozenSet[str] = frozenset(m.lower() for m in METHOD_ORDER)

# Fixed semantic colours handed to the renderer
METHOD_COLORS: Dict[str, str] = {
    "GET": "green",
    "POST": "yellow",
    "PUT": "blue",
    "PATCH": "magenta",
    "DELETE": "red",
}
DEFAULT_METHOD_COLOR = "white"

# --- Schema Vocabulary ---
KNOWN_FIELD_TYPES: FrozenSet[str] = frozenset({
    "string", "integer", "number", "boolean", "array", "object",
})

CONFIG_PATH = Path(".fieldscope/config.yaml")


class ExplorerConfig(BaseModel):
    """
    Tunable settings for index building and reporting.

    Loaded from `.fieldscope/config.yaml` when present:

        max_resolution_depth: 12
        top_n: 15
        mutating_methods: [POST, PUT, PATCH, DELETE]
    """
    max_resolution_depth: int = Field(default=MAX_RESOLUTION_DEPTH, ge=1)
    top_n: int = Field(default=DEFAULT_TOP_N, ge=1)
    mutating_methods: FrozenSet[str] = Field(default=MUTATING_METHODS)
    known_field_types: FrozenSet[str] = Field(default=KNOWN_FIELD_TYPES)

    def is_mutating(self, method: str) -> bool:
        return method.upper() in self.mutating_methods


def load_config(config_path: Path | None = None) -> ExplorerConfig:
    """
    Load the explorer configuration.

    Resolution order (later wins):
        1. Built-in defaults.
        2. The YAML config file, if it exists.
        3. FIELDSCOPE_MAX_DEPTH / FIELDSCOPE_TOP_N environment variables.

    A malformed file is logged and ignored rather than aborting startup.

    Args:
        config_path: Explicit config file. Defaults to `.fieldscope/config.yaml`.

    Returns:
        ExplorerConfig: The merged configuration.
    """
    path = config_path or CONFIG_PATH
    data: Dict = {}

    if path.exists():
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
            data = {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: expected a mapping")
        data = {}

    if "mutating_methods" in data:
        data["mutating_methods"] = frozenset(str(m).upper() for m in data["mutating_methods"] or [])

    env_depth = os.getenv("FIELDSCOPE_MAX_DEPTH")
    if env_depth:
        data["max_resolution_depth"] = env_depth
    env_top = os.getenv("FIELDSCOPE_TOP_N")
    if env_top:
        data["top_n"] = env_top

    try:
        return ExplorerConfig(**data)
    except ValidationError as e:
        logger.warning(f"Invalid configuration, using defaults: {e}")
        return ExplorerConfig()
