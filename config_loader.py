"""Configuration loader with YAML support and environment variable substitution."""

import copy
import math
import os
import re
from typing import Any, Dict, Iterable, List, Tuple, Union

import yaml

from models import ExclusionConfig, ExportConfig, ExportFormats

# Keys that only carry identifiers, rendering hints or module bookkeeping
DEFAULT_EXCLUDED_KEYS: Tuple[str, ...] = (
    '_id', 'uuid', 'key', 'group', 'img', 'startingEquipment', 'tint',
    'chris-premades', 'betterRolls5e', 'midi-qol', 'magicitems', 'prototypeToken',
    'ActiveAuras', 'scene-packer', 'ddbimporter', 'dae', 'ownership', '_stats',
    'sort', 'midiProperties', 'folder', 'tagger', 'flags', 'texture', 'thumb',
    'src', 'sourceId', 'coreVersion', 'systemId', 'systemVersion', 'cssClass'
)

# Markup and separator fragments that never occur in prose
DEFAULT_EXCLUDED_SUBSTRINGS: Tuple[str, ...] = (
    '@UUID[', '@Compendium[', '@Embed[', '&Reference[', '@Check[', '@Template[',
    '[[', ']]', '{{', '---'
)

SOURCE_TYPES = ('directory',)
FORMAT_NAMES = ('yaml', 'json', 'txt')

DEFAULT_BATCH_SIZE = 100
DEFAULT_OUTPUT_DIRECTORY = './export'


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        # An empty file is a valid configuration with every default
        if config_data is None:
            return {}

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        return cls._substitute_env_vars_recursive(config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        for section in ('source', 'export', 'logging'):
            if not isinstance(config.get(section, {}), dict):
                raise ValueError(f"'{section}' must be a mapping")

        source_type = get_nested(config, 'source.type', 'directory')
        if source_type not in SOURCE_TYPES:
            raise ValueError(f"source.type must be one of: {list(SOURCE_TYPES)}")

        source_directory = get_nested(config, 'source.directory')
        if source_directory is not None and not isinstance(source_directory, str):
            raise ValueError("source.directory must be a string path")

        output_dir = get_nested(config, 'export.output_directory')
        if output_dir and os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        batch_size = get_nested(config, 'export.batch_size', DEFAULT_BATCH_SIZE)
        # bool is an int subclass; True is not a batch size
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise ValueError("export.batch_size must be a positive integer")

        min_wait_ms = get_nested(config, 'export.min_wait_ms', 0)
        if (isinstance(min_wait_ms, bool) or not isinstance(min_wait_ms, (int, float))
                or min_wait_ms < 0 or not math.isfinite(min_wait_ms)):
            raise ValueError("export.min_wait_ms must be a non-negative number")

        formats = get_nested(config, 'export.formats', {})
        if not isinstance(formats, dict):
            raise ValueError("export.formats must be a mapping of format name to boolean")
        for name, enabled in formats.items():
            if name not in FORMAT_NAMES:
                raise ValueError(f"Unknown export format '{name}'. Must be one of: {list(FORMAT_NAMES)}")
            if not isinstance(enabled, bool):
                raise ValueError(f"export.formats.{name} must be a boolean")
        if not _resolve_formats(formats).any_enabled():
            raise ValueError("At least one export format (YAML, JSON or TXT) must be enabled")

        show_progress = get_nested(config, 'export.show_progress', True)
        if not isinstance(show_progress, bool):
            raise ValueError("export.show_progress must be a boolean")

        for field in ('export.excluded_keys', 'export.excluded_substrings', 'export.collections'):
            value = get_nested(config, field)
            if value is None:
                continue
            if isinstance(value, list):
                if not all(isinstance(item, str) for item in value):
                    raise ValueError(f"{field} must only contain strings")
            elif not isinstance(value, str):
                raise ValueError(f"{field} must be a comma-separated string or a list of strings")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        # Ensure nested dictionaries exist
        for section in ('source', 'export', 'logging'):
            if not isinstance(merged.get(section), dict):
                merged[section] = {}
        if not isinstance(merged['export'].get('formats'), dict):
            merged['export']['formats'] = {}

        # Merge source settings
        if getattr(args, 'source_dir', None):
            merged['source']['directory'] = args.source_dir

        # Merge export settings
        if getattr(args, 'output_dir', None):
            merged['export']['output_directory'] = args.output_dir

        if getattr(args, 'collections', None):
            merged['export']['collections'] = args.collections

        for name in FORMAT_NAMES:
            value = getattr(args, name, None)
            if value is not None:
                merged['export']['formats'][name] = value

        if getattr(args, 'batch_size', None) is not None:
            merged['export']['batch_size'] = args.batch_size

        if getattr(args, 'min_wait_ms', None) is not None:
            merged['export']['min_wait_ms'] = args.min_wait_ms

        if getattr(args, 'exclude_keys', None) is not None:
            merged['export']['excluded_keys'] = args.exclude_keys

        if getattr(args, 'exclude_substrings', None) is not None:
            merged['export']['excluded_substrings'] = args.exclude_substrings

        if getattr(args, 'report', None):
            merged['export']['report_path'] = args.report

        if getattr(args, 'no_progress', False):
            merged['export']['show_progress'] = False

        # Merge logging settings
        verbose = getattr(args, 'verbose', 0) or 0
        if verbose >= 2:
            merged['logging']['level'] = 'DEBUG'
        elif verbose == 1:
            merged['logging']['level'] = 'INFO'

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)


def parse_list_setting(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Split a comma-separated setting into trimmed, non-empty entries.

    Args:
        value: Comma-separated string, list of strings, or None

    Returns:
        List of entries in their original order

    Example:
        >>> parse_list_setting(" _id, uuid,, flags ")
        ['_id', 'uuid', 'flags']
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(',')
    else:
        items = list(value)
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def build_export_config(config: Dict[str, Any]) -> ExportConfig:
    """
    Freeze the 'export' section of a validated configuration into an ExportConfig.

    Missing exclusion lists fall back to the built-in defaults; an explicit
    empty list or string disables them.

    Raises:
        ValueError: If the settings do not describe a valid run
    """
    excluded_keys = get_nested(config, 'export.excluded_keys')
    excluded_substrings = get_nested(config, 'export.excluded_substrings')

    exclusions = ExclusionConfig(
        excluded_keys=tuple(
            DEFAULT_EXCLUDED_KEYS if excluded_keys is None else parse_list_setting(excluded_keys)
        ),
        excluded_substrings=tuple(
            DEFAULT_EXCLUDED_SUBSTRINGS if excluded_substrings is None
            else parse_list_setting(excluded_substrings)
        )
    )

    return ExportConfig(
        formats=_resolve_formats(get_nested(config, 'export.formats', {}) or {}),
        exclusions=exclusions,
        batch_size=get_nested(config, 'export.batch_size', DEFAULT_BATCH_SIZE),
        min_wait_ms=get_nested(config, 'export.min_wait_ms', 0),
        show_progress=get_nested(config, 'export.show_progress', True)
    )


def _resolve_formats(formats: Dict[str, Any]) -> ExportFormats:
    defaults = ExportFormats()
    return ExportFormats(
        yaml=bool(formats.get('yaml', defaults.yaml)),
        json=bool(formats.get('json', defaults.json)),
        txt=bool(formats.get('txt', defaults.txt))
    )


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "export.batch_size")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = [
    'ConfigLoader',
    'build_export_config',
    'parse_list_setting',
    'get_nested',
    'DEFAULT_EXCLUDED_KEYS',
    'DEFAULT_EXCLUDED_SUBSTRINGS'
]
