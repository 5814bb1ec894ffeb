"""Contains utility functions for working with YAML files."""

from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

yaml = YAML(typ="safe")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Loads a YAML file and returns a dictionary (empty for an empty file)."""
    with open(path, encoding="utf-8") as f:
        data = yaml.load(f)
    return data or {}  # type: ignore[no-any-return]
