"""Repository configuration file handling for commitpost.

Handles reading .commitpost/config.yaml in a repository. The
file holds non-secret options (backend, gate, allowlist, ...); credentials
always come from the environment or .env.
"""

from pathlib import Path

import yaml

from commitpost.errors import ConfigError


CONFIG_DIR_NAME = ".commitpost"
CONFIG_FILE_NAME = "config.yaml"


def get_config_file(repo_root: Path) -> Path:
    """Get the path to the repository config file.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to .commitpost/config.yaml (which may not exist).
    """
    return repo_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_file_config(repo_root: Path) -> dict:
    """Load the repository config file.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Configuration dictionary. Empty if the file doesn't exist.

    Raises:
        ConfigError: If the file exists but is not valid YAML mapping.
    """
    config_file = get_config_file(repo_root)

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise ConfigError(f"Expected a mapping in {config_file}, got {type(config).__name__}")

    return config

