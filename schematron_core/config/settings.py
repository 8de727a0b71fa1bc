"""
Configuration Settings
======================

Configuration dataclass for the Schematron template compiler.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any
import json
import logging

import yaml

logger = logging.getLogger(__name__)


# Fixed pipeline order: include expansion, abstract pattern expansion,
# SVRL stylesheet generation.
PIPELINE_STAGES = ("include-expand", "abstract-expand", "svrl-generate")

DEFAULT_STAGE_FILES: Dict[str, str] = {
    "include-expand": "iso_dsdl_include.xsl",
    "abstract-expand": "iso_abstract_expand.xsl",
    "svrl-generate": "iso_svrl_for_xslt1.xsl",
}


@dataclass
class CompilerConfig:
    """
    Schematron compiler configuration.

    Attributes:
        source_line_numbering: Annotate rule elements with their source line
            so later failures can be traced back to the rules document
        resource_root: Directory holding the pipeline stylesheets. Empty means
            the ISO Schematron stylesheets bundled with lxml
        stage_files: Stylesheet file name for each pipeline stage
        svrl_params: String parameters passed to the SVRL generation stage
            (e.g. ``phase``, ``allow-foreign``)
        log_level: Level applied to the package logger

    Example:
        config = CompilerConfig(svrl_params={"phase": "#ALL"})
        save_config(config, Path("schematron.yaml"))
    """

    source_line_numbering: bool = True
    resource_root: str = ""
    stage_files: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_STAGE_FILES)
    )
    svrl_params: Dict[str, str] = field(default_factory=dict)
    log_level: str = "INFO"

    def __post_init__(self):
        missing = [stage for stage in PIPELINE_STAGES if stage not in self.stage_files]
        if missing:
            raise ValueError(f"No stylesheet configured for stage(s): {', '.join(missing)}")
        unknown = sorted(set(self.stage_files) - set(PIPELINE_STAGES))
        if unknown:
            raise ValueError(f"Unknown pipeline stage(s): {', '.join(unknown)}")

    def stylesheet_for(self, stage: str) -> str:
        """Return the stylesheet file name configured for a stage."""
        return self.stage_files[stage]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'source_line_numbering': self.source_line_numbering,
            'resource_root': self.resource_root,
            'stage_files': dict(self.stage_files),
            'svrl_params': dict(self.svrl_params),
            'log_level': self.log_level,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CompilerConfig':
        """Create from dictionary. Missing keys keep their defaults."""
        kwargs: Dict[str, Any] = {}

        if 'source_line_numbering' in data:
            kwargs['source_line_numbering'] = bool(data['source_line_numbering'])
        if 'resource_root' in data:
            kwargs['resource_root'] = str(data['resource_root'] or "")
        if 'stage_files' in data:
            stage_files = dict(DEFAULT_STAGE_FILES)
            stage_files.update(data['stage_files'] or {})
            kwargs['stage_files'] = stage_files
        if 'svrl_params' in data:
            kwargs['svrl_params'] = {
                str(k): str(v) for k, v in (data['svrl_params'] or {}).items()
            }
        if 'log_level' in data:
            kwargs['log_level'] = data['log_level']

        return cls(**kwargs)


_YAML_SUFFIXES = ('.yaml', '.yml')
_JSON_SUFFIXES = ('.json',)


def _config_format(config_path: Path) -> str:
    suffix = config_path.suffix.lower()
    if suffix in _YAML_SUFFIXES:
        return 'yaml'
    if suffix in _JSON_SUFFIXES:
        return 'json'
    raise ValueError(f"Unsupported config format: {suffix}")


def load_config(config_path: Path) -> CompilerConfig:
    """
    Load compiler configuration from a YAML or JSON file.

    An empty file yields the default configuration. Keys left out keep
    their defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the format is unsupported or the file does not hold
            a mapping of settings
    """
    fmt = _config_format(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) if fmt == 'yaml' else json.load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(
            f"{config_path} must contain a mapping of settings, "
            f"got {type(data).__name__}"
        )
    for key in ('stage_files', 'svrl_params'):
        if data.get(key) is not None and not isinstance(data[key], dict):
            raise ValueError(f"'{key}' in {config_path} must be a mapping")

    logger.info(f"Loaded {fmt.upper()} configuration from {config_path}")
    return CompilerConfig.from_dict(data)


def save_config(config: CompilerConfig, config_path: Path) -> None:
    """
    Write compiler configuration as YAML or JSON, chosen by file extension.

    Raises:
        ValueError: If file format is not supported
    """
    fmt = _config_format(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if fmt == 'json':
            json.dump(config.to_dict(), f, indent=2)
        else:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved {fmt.upper()} configuration to {config_path}")


def get_default_config() -> CompilerConfig:
    """Get default configuration."""
    return CompilerConfig()


def configure_logging(config: CompilerConfig) -> None:
    """Apply the configured log level to the schematron_core logger."""
    level = logging.getLevelName(str(config.log_level).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {config.log_level}")
    logging.getLogger("schematron_core").setLevel(level)
