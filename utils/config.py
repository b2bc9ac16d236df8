import yaml
import os
import platform
from typing import Any, Dict

# Defaults for the blocking analysis (overridden by config.yaml > blocking_analysis)
BLOCKING_DEFAULTS: Dict[str, Any] = {
    "long_task_threshold_ms": 100,
    "task_limit": 10,
    "throttling_method": "provided",
    "blocking_time_threshold_ms": 50,
    "input_folder": "pageload",
    "trace_file": "trace.json",
    "tasks_file": "main_thread_tasks.json",
    "network_file": "network_records.json",
    "write_outputs": True,
}

ARTIFACTS_PATH_ENV = "PAGEBLOCKING_ARTIFACTS_PATH"


def load_config():
    # Assuming this file is at 'repo/utils/config.py', we go up one level.
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

    # Platform-specific config mapping
    config_map = {
        'Darwin': 'config.mac.yaml',
        'Windows': 'config.windows.yaml'
    }

    system = platform.system()
    platform_config = config_map.get(system)

    # Use platform-specific config if it exists, otherwise fall back to config.yaml
    candidate_files = [platform_config, 'config.yaml'] if platform_config else ['config.yaml']

    for filename in candidate_files:
        config_path = os.path.join(repo_root, filename)
        if os.path.exists(config_path):
            with open(config_path, 'r') as file:
                try:
                    return yaml.safe_load(file) or {}
                except yaml.YAMLError as e:
                    raise ValueError(f"Error parsing '{filename}': {e}")

    raise FileNotFoundError("No valid configuration file found (checked platform-specific and default).")


def get_artifacts_path(config: Dict[str, Any]) -> str:
    """
    Resolve the artifacts root folder.

    The PAGEBLOCKING_ARTIFACTS_PATH environment variable (or .env entry) wins
    over artifacts.artifacts_path from config.yaml.
    """
    env_path = os.getenv(ARTIFACTS_PATH_ENV)
    if env_path:
        return env_path
    return config.get("artifacts", {}).get("artifacts_path", "./artifacts")


def load_blocking_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge blocking analysis defaults with values from config.yaml."""
    overrides = config.get("blocking_analysis") or {}
    if not isinstance(overrides, dict):
        raise ValueError("Invalid config.yaml format: 'blocking_analysis' must be a mapping")

    unknown = set(overrides) - set(BLOCKING_DEFAULTS)
    if unknown:
        raise ValueError(
            f"Unknown blocking_analysis settings: {', '.join(sorted(unknown))}. "
            f"Valid keys: {', '.join(sorted(BLOCKING_DEFAULTS))}"
        )

    return {**BLOCKING_DEFAULTS, **{k: v for k, v in overrides.items() if v is not None}}


if __name__ == '__main__':
    # For testing purposes, print both configurations.
    config = load_config()
    print("Loaded general configuration:")
    print(config)
    print("Resolved blocking analysis configuration:")
    print(load_blocking_config(config))
