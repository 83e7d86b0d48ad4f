"""
Configuration Management Module

This module defines the configuration schema for the Venmo Sync application
using Pydantic. It handles:
1.  Loading configuration from YAML files (e.g., `config.yaml`).
2.  Overriding settings via environment variables (prefixed with `VENMO_SYNC_`).
3.  Defining default values for all settings.
4.  Providing typed configuration objects for the rest of the application.
"""

from typing import Optional, Dict, Any
from pathlib import Path
from pydantic import Field, BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from .models import Currency

DEFAULT_DAYS_TO_FETCH = 30
DEFAULT_BATCH_SIZE = 50

class VenmoConfig(BaseModel):
    """Credentials and options for the Venmo account being synced."""
    enabled: bool = True
    profile_id: int = Field(default=0, description="Venmo profile ID of the account")
    api_token: str = Field(default="", description="Value of the api_access_token cookie")
    days_to_fetch: int = DEFAULT_DAYS_TO_FETCH
    currency: Currency = Field(default_factory=Currency)

class LunchMoneyConfig(BaseModel):
    """Credentials and options for the Lunch Money budget."""
    api_token: str = Field(default="", description="Lunch Money developer access token")
    asset_id: Optional[int] = Field(default=None, description="Lunch Money asset that mirrors the Venmo balance")
    apply_rules: bool = True
    check_for_recurring: bool = True
    batch_size: int = DEFAULT_BATCH_SIZE

class Config(BaseSettings):
    """
    Global configuration for the venmo-sync application.

    Settings are resolved from:
    1.  Environment variables (prefixed with VENMO_SYNC_, nested with __)
    2.  Configuration files (YAML)
    3.  Default values defined in this class
    """

    transactions_path: Path = Field(
        default=Path("./transactions"),
        description="Directory where dry-run exports are saved"
    )
    timeout: int = Field(
        default=30000,
        description="Timeout for HTTP requests in milliseconds"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (print tracebacks on error)"
    )

    venmo: VenmoConfig = Field(default_factory=VenmoConfig)
    lunchmoney: LunchMoneyConfig = Field(default_factory=LunchMoneyConfig)

    model_config = SettingsConfigDict(
        env_prefix='VENMO_SYNC_',
        env_nested_delimiter='__',
        extra='ignore'
    )

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """
        Load configuration, optionally from a YAML file.
        """
        search_paths = [
            config_path,
            Path("config.yaml"),
            Path("config.yml"),
            Path.home() / ".venmo_sync" / "config.yaml",
            Path.home() / ".venmo_sync" / "config.yml",
        ]

        config_data: Dict[str, Any] = {}

        found_path = None
        for path in search_paths:
            if path and path.exists() and path.is_file():
                found_path = path.resolve()
                break

        if found_path:
            try:
                with open(found_path, 'r', encoding='utf-8') as f:
                    file_data = yaml.safe_load(f)
                if file_data:
                    # Relative paths are relative to the config file
                    if 'transactions_path' in file_data:
                        path_val = Path(file_data['transactions_path'])
                        if not path_val.is_absolute():
                            file_data['transactions_path'] = found_path.parent / path_val
                    config_data = file_data
                print(f"Loaded configuration from: {found_path}")
            except (OSError, yaml.YAMLError) as e:
                print(f"Warning: Error loading config file {found_path}: {e}")
        else:
            print("No config file found. Using default configuration.")

        # Pydantic merges init kwargs (file data) with env vars and defaults
        return cls(**config_data)

# Global config instance
settings = Config.load()
