"""
CLI module for the GA engine.

Handles run configuration loading, validation, and algorithm dispatching.
"""

from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import ConfigValidationError

ALGORITHMS = ('standard', 'divergent')


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    return config


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Strategy values are validated later, when the strategy is built.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    algorithm = config.get('algorithm', 'standard')
    if algorithm not in ALGORITHMS:
        raise ConfigValidationError(
            f"Invalid algorithm: '{algorithm}'. Must be 'standard' or 'divergent'"
        )

    for section in ('strategy', 'problem', 'output'):
        if section not in config:
            raise ConfigValidationError(f"Missing required field: '{section}'")
        if not isinstance(config[section], dict):
            raise ConfigValidationError(f"'{section}' must be a dictionary")

    from .problems import PROBLEMS

    problem_name = config['problem'].get('name')
    if problem_name not in PROBLEMS:
        raise ConfigValidationError(
            f"Invalid problem: '{problem_name}'. Must be one of {sorted(PROBLEMS)}"
        )

    if 'root' not in config['output']:
        raise ConfigValidationError("Missing required field: 'output.root'")


def run_from_config(config_path: str) -> None:
    """
    Load run configuration and execute the configured algorithm.

    This is the main entry point called by ga_cli.py.

    Args:
        config_path: Path to run configuration YAML file

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
        Various exceptions from the algorithm run
    """
    print(f"Loading configuration from: {config_path}")
    config = load_run_config(config_path)

    print("Validating configuration...")
    validate_run_config(config)

    algorithm = config.get('algorithm', 'standard')
    print(f"Algorithm: {algorithm}\n")

    from .orchestration import run_divergent, run_standard

    if algorithm == 'standard':
        run_standard(config)
    else:
        run_divergent(config)

    print("\nRun completed successfully!")
