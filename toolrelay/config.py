"""Configuration management for ToolRelay."""

import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any

import yaml

from .errors import ConfigurationError
from .providers.base import ProviderConfig
from .providers.gemini import DEFAULT_MODEL
from .servers.stdio import ServerEndpoint
from .tools.schema import DEFAULT_MAX_DEPTH

_log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/toolrelay/config.yaml"


class ConfigManager:
    """Manage ToolRelay configuration from YAML."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser()
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
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error reading config {self.config_path}: {e}") from e
        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigurationError(f"Config {self.config_path} must be a mapping")
        return content

    def _create_default_config(self) -> None:
        """Create default configuration file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        default_config = {
            "gemini": {
                "api_key": "${GEMINI_API_KEY}",
                "model": DEFAULT_MODEL,
                "temperature": 0.7,
            },
            "servers": [],
            "prompts": {
                "system_prompt": "",
            },
            "tools": {
                "propagate_required": False,
                "max_schema_depth": DEFAULT_MAX_DEPTH,
            },
            "logging": {
                "level": "WARNING",
            },
        }

        with open(self.config_path, "w") as f:
            yaml.dump(default_config, f, default_flow_style=False)
        _log.info("Created default config at %s", self.config_path)

    def get_provider_config(self, model: Optional[str] = None) -> ProviderConfig:
        """Build the Gemini provider config.

        The API key may be empty here; ``ConversationClient`` rejects it.
        """
        gemini = self.data.get("gemini", {})
        return ProviderConfig(
            api_key=self._resolve_env_var(str(gemini.get("api_key", "${GEMINI_API_KEY}"))),
            model=model or gemini.get("model", DEFAULT_MODEL),
            base_url=gemini.get("base_url"),
            temperature=gemini.get("temperature", 0.7),
            max_tokens=gemini.get("max_tokens"),
        )

    def _resolve_env_var(self, value: str) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if not value.startswith("${") or not value.endswith("}"):
            return value

        var_name = value[2:-1]
        return os.getenv(var_name, "")

    def get_server_endpoints(self) -> list[ServerEndpoint]:
        """Configured tool servers, in connection order."""
        entries = self.data.get("servers") or []
        if not isinstance(entries, list):
            raise ConfigurationError("'servers' must be a list")
        return [ServerEndpoint.from_config(entry) for entry in entries]

    def get_system_prompt(self) -> Optional[str]:
        return self.data.get("prompts", {}).get("system_prompt") or None

    def get_tools_config(self) -> Dict[str, Any]:
        """Get schema translation settings."""
        defaults = {
            "propagate_required": False,
            "max_schema_depth": DEFAULT_MAX_DEPTH,
        }
        config = self.data.get("tools", {})
        return {**defaults, **config} if config else defaults

    def get_log_level(self) -> str:
        return str(self.data.get("logging", {}).get("level", "WARNING")).upper()
