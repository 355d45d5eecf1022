"""
Configuration loader for the Cloudways cache client.

Configuration comes from three places, in increasing priority:
1. Built-in defaults (the public Cloudways API root, 30 polling attempts every 5 seconds).
2. `config.json` next to this module.
3. Process environment variables, including anything placed in a local `.env` file, which is
   loaded with python-dotenv at import time.

Two top-level objects are exported:
- ENV: secrets read from the environment (`CLOUDWAYS_EMAIL`, `CLOUDWAYS_API_KEY`). They are
  never written back to disk or into CONFIG.
- CONFIG: the structured runtime configuration (`cloudways`, `polling`, `logging` sections).

Nothing is validated on import so that the client library can be used without credentials;
the CLI calls `validate_config()` before it talks to the provider.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

CONFIG_DIR = Path(__file__).parent
CONFIG_PATH = CONFIG_DIR / "config.json"

logger = logging.getLogger(__name__)


def _read_env() -> Dict[str, Optional[str]]:
    """Read the credential variables; missing ones are left as None."""
    return {
        "CLOUDWAYS_EMAIL": os.getenv("CLOUDWAYS_EMAIL"),
        "CLOUDWAYS_API_KEY": os.getenv("CLOUDWAYS_API_KEY"),
    }


def _load_json_config(path: Path = CONFIG_PATH) -> Dict[str, Any]:
    """
    Load `config.json`, returning an empty mapping when the file is absent.

    A malformed file is an error and is raised, since silently ignoring it would point the
    client at defaults the operator did not ask for.
    """
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def get_config_value(json_cfg: Mapping[str, Any], json_keys: list, env_var_name: str, default_value: Any = None):
    """
    Retrieve a configuration value.

    Priority:
    1. Environment variable (if env_var_name is provided and variable is set).
    2. Value from the JSON mapping (using json_keys).
    3. default_value.

    Environment strings are converted to match the type of default_value when it is a bool,
    int, or float; a string that does not convert falls through to the JSON value.
    """
    if env_var_name:
        env_value = os.getenv(env_var_name)
        if env_value is not None:
            if isinstance(default_value, bool):
                if env_value.lower() in ("true", "1", "yes"):
                    return True
                if env_value.lower() in ("false", "0", "no"):
                    return False
            elif isinstance(default_value, (int, float)):
                try:
                    return type(default_value)(env_value)
                except ValueError:
                    logger.warning("Ignoring non-numeric %s=%r", env_var_name, env_value)
            else:
                return env_value

    current_level: Any = json_cfg
    try:
        for key in json_keys:
            current_level = current_level[key]
        if current_level is not None:
            return current_level
    except (KeyError, TypeError):
        pass

    return default_value


def load_config(path: Path = CONFIG_PATH) -> Dict[str, Any]:
    """
    Build the CONFIG mapping from defaults, `config.json`, and environment overrides.

    Returns:
        Dict[str, Any]: Mapping with `cloudways`, `polling`, and `logging` sections.
    """
    json_cfg = _load_json_config(path)
    return {
        "cloudways": {
            "base_url": get_config_value(
                json_cfg, ["cloudways", "base_url"], "CLOUDWAYS_BASE_URL",
                "https://api.cloudways.com/api/v1",
            ),
            "request_timeout_s": get_config_value(
                json_cfg, ["cloudways", "request_timeout_s"], "CLOUDWAYS_TIMEOUT_S", 30.0
            ),
        },
        "polling": {
            "max_attempts": get_config_value(
                json_cfg, ["polling", "max_attempts"], "CLOUDWAYS_MAX_ATTEMPTS", 30
            ),
            "interval_ms": get_config_value(
                json_cfg, ["polling", "interval_ms"], "CLOUDWAYS_INTERVAL_MS", 5000
            ),
        },
        "logging": {
            "level": get_config_value(json_cfg, ["logging", "level"], "LOG_LEVEL", "INFO"),
            "file_path": get_config_value(json_cfg, ["logging", "file_path"], "LOG_FILE_PATH", None),
            "max_bytes": get_config_value(json_cfg, ["logging", "max_bytes"], "LOG_MAX_BYTES", 5 * 1024 * 1024),
            "backup_count": get_config_value(json_cfg, ["logging", "backup_count"], "LOG_BACKUP_COUNT", 3),
        },
    }


def validate_config(env: Optional[Mapping[str, Optional[str]]] = None) -> None:
    """
    Check that the credentials needed to talk to the provider are present.

    Raises:
        EnvironmentError: Listing every missing variable.
    """
    env = ENV if env is None else env
    missing_env_vars = [key for key, value in env.items() if not value]
    if missing_env_vars:
        raise EnvironmentError(
            f"Missing required environment variables: {', '.join(missing_env_vars)}\n"
            f"Please check your .env file."
        )


ENV: Dict[str, Optional[str]] = _read_env()
CONFIG: Dict[str, Any] = load_config()
