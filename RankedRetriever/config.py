import copy
import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
DEFAULT_LOCALISATION_FILE = os.path.join(DATA_DIR, "localisation.txt")
DEFAULT_STOPWORDS_FILE = os.path.join(DATA_DIR, "stopwords.txt")

DEFAULT_CONFIG = {
    "preprocessing": {
        "encoding": "utf-8",
        # null means the bundled British -> American list
        "localisation_file": None
    },
    "index": {
        "file_name": "index.txt",
        "idf_decimals": 3,
        "idf_rounding": "ceiling"
    },
    "search": {
        "document_matching": "anchored"
    },
    "relevance_feedback": {
        "relevant_weight": 0.5,
        "non_relevant_weight": 0.25
    }
}

IDF_ROUNDING_MODES = ("ceiling", "half_up", "half_even")
DOCUMENT_MATCHING_MODES = ("anchored", "substring")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _strip_comments(content: str) -> str:
    filtered_lines = []
    for line in content.splitlines():
        # Remove comment from line if exists
        line_without_comment = line.split("//")[0]
        if line_without_comment.strip():
            filtered_lines.append(line_without_comment)
    return "\n".join(filtered_lines)


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check the values that select an algorithm variant.

    Args:
        config: Configuration dictionary

    Raises:
        ValueError: If a mode name is not recognised
    """
    rounding = config["index"]["idf_rounding"]
    if rounding not in IDF_ROUNDING_MODES:
        raise ValueError(f"Unknown idf_rounding '{rounding}', expected one of {IDF_ROUNDING_MODES}")

    matching = config["search"]["document_matching"]
    if matching not in DOCUMENT_MATCHING_MODES:
        raise ValueError(
            f"Unknown document_matching '{matching}', expected one of {DOCUMENT_MATCHING_MODES}"
        )


def load_config(config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a JSON file, handling // comments.

    Values from the file are merged over DEFAULT_CONFIG, so a file only needs
    the keys it changes. A missing or unreadable file falls back to the
    defaults.

    Args:
        config_file: Path to configuration file, or None for the defaults

    Returns:
        Configuration dictionary
    """
    if not config_file:
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            content = f.read()
    except FileNotFoundError:
        logger.warning("Configuration file %s not found. Using default settings.", config_file)
        return copy.deepcopy(DEFAULT_CONFIG)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Error reading configuration file %s: %s. Using default settings.", config_file, e)
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        user_config = json.loads(_strip_comments(content))
    except json.JSONDecodeError as e:
        logger.warning("Error loading configuration file %s: %s. Using default settings.", config_file, e)
        return copy.deepcopy(DEFAULT_CONFIG)

    config = _merge(DEFAULT_CONFIG, user_config)
    validate_config(config)
    return config


def localisation_file(config: Dict[str, Any]) -> str:
    """Path of the localisation list selected by ``config``."""
    return config["preprocessing"].get("localisation_file") or DEFAULT_LOCALISATION_FILE
