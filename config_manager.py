"""
Configuration management for the care coordination console.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    admin_user_ids: list[str]


@dataclass
class ScoringServiceConfig:
    """External scoring service settings."""
    base_url: str
    api_token: str
    timeout_seconds: float
    proxy_url: str


@dataclass
class CacheConfig:
    """Recommendation cache settings."""
    ttl_seconds: float
    max_entries: int


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "care_console_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        # Start with default config
        self._config = self._get_default_config()

        # Load base config from file
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        # Override with environment variables
        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 8090,
                "debug": False,
                "admin_user_ids": []
            },
            "scoring_service": {
                "base_url": "http://localhost:8088",
                "api_token": "",
                "timeout_seconds": 30.0,
                "proxy_url": ""
            },
            "cache": {
                "ttl_seconds": 300,
                "max_entries": 1000
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("ADMIN_USER_IDS"):
            self._config["app"]["admin_user_ids"] = [
                uid.strip() for uid in os.getenv("ADMIN_USER_IDS").split(",") if uid.strip()
            ]

        # Scoring service settings
        if os.getenv("SCORING_API_BASE_URL"):
            self._config["scoring_service"]["base_url"] = os.getenv("SCORING_API_BASE_URL")

        if os.getenv("SCORING_API_TOKEN"):
            self._config["scoring_service"]["api_token"] = os.getenv("SCORING_API_TOKEN")

        if os.getenv("SCORING_API_TIMEOUT"):
            self._config["scoring_service"]["timeout_seconds"] = float(os.getenv("SCORING_API_TIMEOUT"))

        if os.getenv("SCORING_API_PROXY"):
            self._config["scoring_service"]["proxy_url"] = os.getenv("SCORING_API_PROXY")

        # Cache settings
        if os.getenv("RECOMMENDATION_CACHE_TTL"):
            self._config["cache"]["ttl_seconds"] = float(os.getenv("RECOMMENDATION_CACHE_TTL"))

        if os.getenv("RECOMMENDATION_CACHE_MAX_ENTRIES"):
            self._config["cache"]["max_entries"] = int(os.getenv("RECOMMENDATION_CACHE_MAX_ENTRIES"))

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            admin_user_ids=[str(uid) for uid in app_config["admin_user_ids"]]
        )

    def get_scoring_service_config(self) -> ScoringServiceConfig:
        """Get scoring service configuration."""
        scoring_config = self._config["scoring_service"]
        return ScoringServiceConfig(
            base_url=scoring_config["base_url"],
            api_token=scoring_config["api_token"],
            timeout_seconds=float(scoring_config["timeout_seconds"]),
            proxy_url=scoring_config["proxy_url"]
        )

    def get_cache_config(self) -> CacheConfig:
        """Get recommendation cache configuration."""
        cache_config = self._config["cache"]
        ttl = float(cache_config["ttl_seconds"])
        if ttl < 0:
            raise ValueError(f"cache.ttl_seconds must be non-negative, got {ttl}")
        max_entries = int(cache_config["max_entries"])
        if max_entries < 1:
            raise ValueError(f"cache.max_entries must be positive, got {max_entries}")
        return CacheConfig(ttl_seconds=ttl, max_entries=max_entries)

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_scoring_service_config() -> ScoringServiceConfig:
    """Get scoring service configuration."""
    return config_manager.get_scoring_service_config()


def get_cache_config() -> CacheConfig:
    """Get recommendation cache configuration."""
    return config_manager.get_cache_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()
