"""Pydantic configuration schemas for the pbropt pipeline.

This module provides strictly typed configuration models for the
reconciliation pipeline. All configuration validation, coercion, and
normalization happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from pbropt.schemas.resolve import resolve_config
from pbropt.schemas.internal import InternalConfig
from pbropt.schemas.param import ParamConfig
from pbropt.schemas.user import UserConfig
from pbropt.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
