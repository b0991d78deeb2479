"""Configuration management for loading settings from YAML."""

from pathlib import Path
from typing import Any
import yaml

VALID_POLICIES = ("strict", "best_effort")


class ConfigManager:

    def __init__(self, config_path: str = "settings.yaml"):
        self.config_path = Path(config_path)
        self.config = {}
        self.load()
        self.validate()

    def load(self) -> None:
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Please copy settings-template.yaml to settings.yaml and configure your values."
            )

        with open(self.config_path, 'r') as f:
            self.config = yaml.safe_load(f)

        if not self.config:
            raise ValueError(f"Configuration file is empty: {self.config_path}")

    def validate(self) -> None:
        user_id = self.get("ingest.user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise ValueError(
                f"Required field 'ingest.user_id' is missing or invalid.\n"
                f"Description: Id of the user committing results, stored on every transaction\n"
                f"Please update {self.config_path}"
            )

        if self.policy not in VALID_POLICIES:
            raise ValueError(
                f"Field 'ingest.policy' must be one of {', '.join(VALID_POLICIES)}, got {self.policy!r}.\n"
                f"Please update {self.config_path}"
            )

    def get(self, key_path: str, default: Any = None) -> Any:
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        keys = key_path.split('.')
        config = self.config
        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]
        config[keys[-1]] = value

    @property
    def database_path(self) -> str:
        return self.get("database.path", "data/exam_results.db")

    @property
    def user_id(self) -> int:
        return self.get("ingest.user_id")

    @property
    def policy(self) -> str:
        """Either 'strict' (all-or-nothing) or 'best_effort' (commit what parses)."""
        return self.get("ingest.policy", "strict")

    @property
    def encoding(self) -> str:
        return self.get("ingest.encoding", "utf-8")

    @property
    def failure_log(self) -> str:
        return self.get("logging.failure_log", "logs/parse_failure.log")
