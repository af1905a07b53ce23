"""Configuration management for Hookify."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .hooks.schema import DEFAULT_PRIORITY, DEFAULT_TIMEOUT_MS
from .hooks.store import DEFAULT_STORE_PATH
from .hooks.sync import DEFAULT_MAX_DEPTH, DEFAULT_SEARCH_PATHS


DEFAULT_CONFIG_PATH = "~/.config/hookify/config.yaml"

_log = logging.getLogger(__name__)

_DEFAULTS: Dict[str, Any] = {
    "paths": {
        "store": DEFAULT_STORE_PATH,
        "log_dir": "~/.chitty/logs",
        "hook_dir": "~/.chitty/hooks",
    },
    "defaults": {
        "priority": DEFAULT_PRIORITY,
        "timeout": DEFAULT_TIMEOUT_MS,
        "scope": "repo",
    },
    "discovery": {
        "search_paths": list(DEFAULT_SEARCH_PATHS),
        "max_depth": DEFAULT_MAX_DEPTH,
    },
    "governance": {
        "mode": "none",
        "require_territory": False,
        "territories": {
            "operations": ["git", "terminal", "custom"],
        },
        "rules": {},
        "url": "${HOOKIFY_GOVERNANCE_URL}",
        "token": "${HOOKIFY_GOVERNANCE_TOKEN}",
        "timeout": 10,
    },
}


class ConfigManager:
    """Manage Hookify configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(
            config_path or os.getenv("HOOKIFY_CONFIG") or DEFAULT_CONFIG_PATH
        ).expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self._create_default_config()
        return self._read_yaml()

    def _read_yaml(self) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            with open(self.config_path, "r") as f:
                content = yaml.safe_load(f)
                return content if isinstance(content, dict) else {}
        except (OSError, yaml.YAMLError) as e:
            _log.warning("Error reading config %s: %s", self.config_path, e)
            return {}

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as f:
                yaml.dump(_DEFAULTS, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            _log.warning("Could not write default config %s: %s", self.config_path, e)

    def _section(self, name: str) -> Dict[str, Any]:
        defaults = copy.deepcopy(_DEFAULTS[name])
        config = self.data.get(name) or {}
        return {**defaults, **config} if isinstance(config, dict) else defaults

    def _resolve_env_var(self, value: str) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not isinstance(value, str):
            return value
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_paths_config(self) -> Dict[str, Path]:
        """Get store, log, and hook script locations (expanded)."""
        return {
            key: Path(self._resolve_env_var(value)).expanduser()
            for key, value in self._section("paths").items()
        }

    def get_defaults_config(self) -> Dict[str, Any]:
        """Get registration defaults (priority, timeout, scope)."""
        return self._section("defaults")

    def get_discovery_config(self) -> Dict[str, Any]:
        """Get repository discovery settings for --all-repos."""
        return self._section("discovery")

    def get_search_paths(self) -> List[Path]:
        paths = self.get_discovery_config().get("search_paths") or []
        return [Path(self._resolve_env_var(p)).expanduser() for p in paths]

    def get_governance_config(self) -> Dict[str, Any]:
        """Get governance settings with ${VAR} references resolved."""
        config = self._section("governance")
        config["url"] = self._resolve_env_var(config.get("url", ""))
        config["token"] = self._resolve_env_var(config.get("token", ""))
        return config
