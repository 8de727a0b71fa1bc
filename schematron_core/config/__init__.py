"""
Configuration Management
========================

Configuration utilities for the Schematron template compiler.
"""

from schematron_core.config.settings import (
    CompilerConfig,
    PIPELINE_STAGES,
    DEFAULT_STAGE_FILES,
    load_config,
    save_config,
    get_default_config,
    configure_logging,
)

__all__ = [
    "CompilerConfig",
    "PIPELINE_STAGES",
    "DEFAULT_STAGE_FILES",
    "load_config",
    "save_config",
    "get_default_config",
    "configure_logging",
]
