# yaml_parser.py
import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def normalize_keys_recursive(data: Any) -> Any:
    """
    Recursively normalizes keys in a dictionary to lowercase and replaces spaces with underscores.
    Pattern files may use "Genre" or "Arc" headings; lookups expect lowercase keys.
    """
    if isinstance(data, dict):
        return {
            str(key).lower().replace(" ", "_"): normalize_keys_recursive(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [normalize_keys_recursive(item) for item in data]
    return data


def load_yaml_file(filepath: str, normalize_keys: bool = True) -> dict[str, Any] | None:
    """
    Loads and parses a YAML file whose root element is a mapping.

    Args:
        filepath: Path to the YAML file.
        normalize_keys: Whether to recursively normalize dictionary keys
                        (lowercase, spaces to underscores). Defaults to True.

    Returns:
        A dictionary representing the YAML content, ``{}`` for an empty file,
        or None if the file is missing, unreadable or not a mapping.
    """
    if not filepath.endswith((".yaml", ".yml")):
        logger.error(f"File specified is not a YAML file: {filepath}")
        return None
    try:
        with open(filepath, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"YAML file '{filepath}' not found.")
        return None
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file {filepath}: {e}", exc_info=True)
        return None
    except OSError as e:
        logger.error(f"Could not read YAML file {filepath}: {e}", exc_info=True)
        return None

    if content is None:
        return {}
    if not isinstance(content, dict):
        logger.error(
            f"YAML file {filepath} must have a dictionary as its root element. Parsed type: {type(content)}"
        )
        return None

    if normalize_keys:
        return normalize_keys_recursive(content)
    return content
