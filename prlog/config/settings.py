"""Configuration management for prlog."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigError
from ..releasenote.formatter import OUTPUT_MODES
from ..releasenote.reconciler import DEFAULT_MAX_SKIPS, DUPLICATE_POLICIES
from ..releasenote.source import DEFAULT_PAGE_SIZE

PROVIDERS = ("github", "gitlab")
MAX_PAGE_SIZE = 100

# Tokens commonly exported by CI systems, used when no prlog setting is given
TOKEN_FALLBACK_ENV = {
    'github_token': 'GITHUB_TOKEN',
    'gitlab_token': 'GITLAB_TOKEN',
}


class Config(BaseSettings):
    """Configuration settings for prlog."""

    model_config = SettingsConfigDict(env_prefix="PRLOG_", case_sensitive=False)

    provider: str = "github"
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    gitlab_host: str = "https://gitlab.com"
    gitlab_token: Optional[str] = None
    project: Optional[str] = None
    branch: Optional[str] = None
    mode: str = "list"
    max_skips: int = DEFAULT_MAX_SKIPS
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = 30.0
    keep: str = "first"

    @field_validator('github_api_url', 'gitlab_host')
    @classmethod
    def normalize_host(cls, v):
        """Ensure hosts have a protocol and no trailing slash."""
        if v and not v.startswith(('http://', 'https://')):
            v = f"https://{v}"
        return v.rstrip('/')

    @field_validator('provider')
    @classmethod
    def check_provider(cls, v):
        v = v.lower()
        if v not in PROVIDERS:
            raise ValueError(f"unknown provider {v!r}, expected one of {', '.join(PROVIDERS)}")
        return v

    @field_validator('mode')
    @classmethod
    def check_mode(cls, v):
        if v not in OUTPUT_MODES:
            raise ValueError(f"unknown output mode {v!r}, expected one of {', '.join(OUTPUT_MODES)}")
        return v

    @field_validator('keep')
    @classmethod
    def check_keep(cls, v):
        if v not in DUPLICATE_POLICIES:
            raise ValueError(f"unknown duplicate policy {v!r}, expected one of {', '.join(DUPLICATE_POLICIES)}")
        return v

    @field_validator('max_skips')
    @classmethod
    def check_max_skips(cls, v):
        if v < 1:
            raise ValueError("max_skips must be at least 1")
        return v

    @field_validator('page_size')
    @classmethod
    def check_page_size(cls, v):
        if not 1 <= v <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        return v

    @field_validator('timeout')
    @classmethod
    def check_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @property
    def token(self) -> Optional[str]:
        """API token for the selected provider."""
        if self.provider == "gitlab":
            return self.gitlab_token
        return self.github_token


def load_json_config(config_path: str) -> dict:
    """Load configuration from JSON file.

    Args:
        config_path: Path to JSON configuration file

    Returns:
        Configuration dictionary
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Error loading config file {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a JSON object")
    return data


def find_config_file() -> Optional[str]:
    """Find configuration file in common locations.

    Returns:
        Path to config file or None if not found
    """
    search_paths = [
        "prlog.json",
        ".prlog.json",
        "~/.prlog.json",
        "~/.config/prlog/config.json",
    ]

    for path_str in search_paths:
        path = Path(path_str).expanduser()
        if path.exists() and path.is_file():
            return str(path)

    return None


def get_config(config_file: Optional[str] = None, **overrides) -> Config:
    """Load configuration from a JSON file, the environment and explicit overrides.

    Later sources win: JSON file, then ``PRLOG_*`` environment variables,
    then non-None ``overrides`` (command line options).

    Args:
        config_file: Optional path to JSON config file
        **overrides: Setting values that take precedence over everything else

    Returns:
        Configuration object
    """
    config_data = {}

    json_config_path = config_file or find_config_file()
    if json_config_path:
        config_data.update(load_json_config(json_config_path))

    for name in Config.model_fields:
        value = os.getenv(f"PRLOG_{name.upper()}")
        if value is not None:
            config_data[name] = value

    for name, env_name in TOKEN_FALLBACK_ENV.items():
        if not config_data.get(name) and os.getenv(env_name):
            config_data[name] = os.getenv(env_name)

    config_data.update({k: v for k, v in overrides.items() if v is not None})

    unknown = set(config_data) - set(Config.model_fields)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_sample_config(path: str = "prlog.json") -> None:
    """Create a sample configuration file.

    Args:
        path: Path where to create the sample config file
    """
    sample_config = {
        "provider": "github",
        "github_token": "your-github-token-here",
        "project": "owner/repository",
        "max_skips": DEFAULT_MAX_SKIPS,
        "page_size": DEFAULT_PAGE_SIZE,
    }

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample_config, f, indent=2)
