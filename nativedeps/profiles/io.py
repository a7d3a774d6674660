"""Preset table loading.

Loads a replacement preset table from a YAML file and validates it against
PresetTableSchema before use.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from nativedeps.errors import ConfigurationError
from nativedeps.profiles.schema import PresetTableSchema


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_preset_table(path: Path) -> PresetTableSchema:
    """Load and validate a preset table file.

    Args:
        path: Path to the YAML preset table.

    Returns:
        Validated PresetTableSchema.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid.
    """
    try:
        data = load_yaml(path)
        return PresetTableSchema.model_validate(data)
    except FileNotFoundError:
        raise ConfigurationError(f"Preset file not found: {path}") from None
    except (yaml.YAMLError, ValueError, ValidationError) as e:
        raise ConfigurationError(f"Invalid preset file {path}: {e}") from e


def preset_table_to_yaml_string(table: PresetTableSchema) -> str:
    """Render a preset table as YAML."""
    data = table.model_dump(mode="json", exclude_none=True)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


__all__ = ["load_preset_table", "load_yaml", "preset_table_to_yaml_string"]
