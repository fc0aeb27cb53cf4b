"""Runtime configuration for depviz - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from depviz.utils.logging import logger

DEFAULTS = {
    "scan": {
        "ignore_dirs": ["node_modules", ".git", ".next", "dist", "build", "coverage", ".vercel", "out"],
        # Order matters: the resolver probes extensions in this order.
        "extensions": [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"],
    },
    "classify": {
        "utility_markers": ["util", "helper"],
        "fan_in_threshold": 3,
    },
    "layout": {
        "strategy": "layered",
        # Layered strategy
        "node_width": 200,
        "node_height": 80,
        "rank_sep": 100,
        "node_sep": 80,
        # Zoned strategy
        "canvas_width": 1600,
        "canvas_height": 1000,
        "core_zone": [800, 500, 900, 700],
        "utility_zone": [150, 500, 200, 900],
        "standalone_zone": [1450, 500, 200, 900],
        "box_width": 160,
        "box_height": 24,
        "box_spacing": 40,
        "iterations": 300,
        "link_distance": 200.0,
        "link_strength": 1.0,
        "charge_strength": -400.0,
        "charge_distance_min": 100.0,
        "charge_distance_max": 400.0,
        "grid_pull_size": 60,
        "grid_pull_strength": 0.5,
        "snap_grid": 20,
        "min_separation": 64.0,
        "velocity_decay": 0.4,
    },
    "limits": {
        "workers": 8,
        "max_file_size": 2 * 1024 * 1024,
    },
}

CONFIG_RELATIVE_PATH = Path(".depviz") / "config.json"


def _coerce_env(value: str, default_value: Any) -> Any:
    """Convert an environment string to the type of the default it overrides."""
    if isinstance(default_value, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default_value, int):
        return int(value)
    if isinstance(default_value, float):
        return float(value)
    if isinstance(default_value, list):
        items = [v.strip() for v in value.split(",") if v.strip()]
        if default_value and isinstance(default_value[0], (int, float)):
            return [type(default_value[0])(v) for v in items]
        return items
    return value


def _accepts(default_value: Any, value: Any) -> bool:
    """True if a JSON value may replace the default (ints are accepted for floats)."""
    if isinstance(default_value, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type(default_value))


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """
    Load runtime configuration from <root>/.depviz/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (DEPVIZ_<SECTION>_<KEY>)
    2. .depviz/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for the config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / CONFIG_RELATIVE_PATH
    try:
        if path.is_file():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and _accepts(cfg[section][key], value):
                                cfg[section][key] = value
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not load config file from {}: {}", path, e)
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"DEPVIZ_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce_env(value, cfg[section][key])
                except (ValueError, AttributeError) as e:
                    logger.warning("Invalid value for environment variable {}: '{}' - {}", env_var, value, e)
                    logger.info("Using default value: {}", cfg[section][key])

    return cfg


__all__ = ["DEFAULTS", "load_runtime_config"]
