"""Configuration management for dreamdup."""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from dreamdup.core.errors import ConfigError

SCORER_CHOICES = ("levenshtein", "embedding", "auto")

# Config attribute -> environment variable
ENV_VARS = {
    "openai_api_key": "OPENAI_API_KEY",
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_KEY",
}


class Config:
    """Configuration manager with hierarchy: CLI args > project config > user config > env > defaults."""

    def __init__(self):
        """Initialize configuration with default values."""
        self.scorer: str = "levenshtein"
        self.threshold: float = 0.9
        self.embedding_model: str = "text-embedding-3-small"
        self.openai_api_key: Optional[str] = None
        self.supabase_url: Optional[str] = None
        self.supabase_key: Optional[str] = None
        self.table: str = "dreams"
        self.corpus_file: Optional[str] = None
        self.cache_dir: Optional[str] = None
        self.request_timeout: float = 10.0

    @classmethod
    def load(cls, cli_args: Optional[dict[str, Any]] = None) -> "Config":
        """
        Load configuration from hierarchy: CLI args > project config > user config > env > defaults.

        Args:
            cli_args: Dictionary of CLI arguments to override config

        Returns:
            Config instance with loaded values
        """
        config = cls()
        config._load_env()

        # ~/.dreamdup/config.yaml
        user_config_path = Path.home() / ".dreamdup" / "config.yaml"
        if user_config_path.exists():
            config._load_file(user_config_path, config)

        # .dreamdup.yaml in the current directory
        project_config_path = Path.cwd() / ".dreamdup.yaml"
        if project_config_path.exists():
            config._load_file(project_config_path, config)

        if cli_args:
            for key, value in cli_args.items():
                if value is not None:
                    setattr(config, key, value)

        return config

    def _load_env(self) -> None:
        for attr, env_var in ENV_VARS.items():
            value = os.getenv(env_var)
            if value:
                setattr(self, attr, value.strip())

    def _load_file(self, config_path: Path, config: "Config") -> None:
        """Load configuration from a YAML or JSON file, ignoring unreadable files."""
        try:
            content = config_path.read_text(encoding="utf-8")
            if config_path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(content)
            elif config_path.suffix == ".json":
                data = json.loads(content)
            else:
                return
        except (OSError, ValueError, yaml.YAMLError):
            return

        if not isinstance(data, dict):
            return

        for key, value in data.items():
            if hasattr(config, key) and value is not None:
                setattr(config, key, value)

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigError: If a value is out of range or unknown
        """
        try:
            threshold = float(self.threshold)
        except (TypeError, ValueError):
            raise ConfigError(f"threshold must be a number, got {self.threshold!r}")
        if not 0.0 <= threshold <= 1.0:
            raise ConfigError(f"threshold must be between 0.0 and 1.0, got {threshold}")
        self.threshold = threshold

        if self.scorer not in SCORER_CHOICES:
            raise ConfigError(
                f"Unknown scorer: {self.scorer}. Supported scorers: {', '.join(SCORER_CHOICES)}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "scorer": self.scorer,
            "threshold": self.threshold,
            "embedding_model": self.embedding_model,
            "openai_api_key": self.openai_api_key,
            "supabase_url": self.supabase_url,
            "supabase_key": self.supabase_key,
            "table": self.table,
            "corpus_file": self.corpus_file,
            "cache_dir": self.cache_dir,
            "request_timeout": self.request_timeout,
        }

    def save(self, path: Path, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            path: Path to save config file
            format: Format to save as ('yaml' or 'json')
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {k: v for k, v in self.to_dict().items() if v is not None}

        if format == "yaml":
            content = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
        else:
            content = json.dumps(data, indent=2, ensure_ascii=False)

        path.write_text(content, encoding="utf-8")

    def get_cache_dir(self) -> Optional[Path]:
        """Embedding cache directory, or None when disk caching is off."""
        if not self.cache_dir:
            return None
        dir_path = Path(self.cache_dir).expanduser()
        dir_path.mkdir(parents=True, exist_ok=True)
        return dir_path
