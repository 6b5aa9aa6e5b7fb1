import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "store": "json",  # "json" | "memory"
    "inline_comments_file": "inline-comments.json",
    "general_comments_file": "general-comments.json",
    "rubrics_file": "rubrics.json",
    "confirm_delete": True,
}

CONFIG_FILE_NAME = ".reviewmark.yml"


def load_config(config_path: str = CONFIG_FILE_NAME, cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .reviewmark.yml in the current directory
      3. CLI argument overrides

    The workspace root comes from REVIEWMARK_ROOT, falling back to the
    current directory. Comment files are resolved relative to it.
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path, encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if not config.get("root"):
        config["root"] = os.environ.get("REVIEWMARK_ROOT") or os.getcwd()

    return config


def resolve_path(config: dict, key: str) -> Path:
    """Return the absolute location of a configured workspace file."""
    value = Path(config[key])
    if value.is_absolute():
        return value
    return Path(config["root"]) / value
