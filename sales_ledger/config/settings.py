"""
Retail Sales Ledger
Centralized Configuration Management

Configuration is read with Pydantic settings from environment variables and
an optional .env file, validated and cached for the lifetime of the process.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ErrorPolicy(str, Enum):
    """How the sale assembler reacts to a bad sale-line row"""
    FAIL_FAST = "fail_fast"
    COLLECT = "collect"


class DatabaseSettings(BaseSettings):
    """Relational Store Configuration"""

    model_config = SettingsConfigDict(env_prefix="SALES_DB_")

    url: Optional[str] = Field(default=None, description="Full SQLAlchemy URL (overrides host/port)")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="sales_ledger", alias="database", description="Database name")
    user: str = Field(default="sales", description="Database user")
    password: SecretStr = Field(default="sales_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")

    @property
    def sync_url(self) -> str:
        """Sync database URL for psycopg2 - uses url if set"""
        if self.url:
            return self.url
        return f"postgresql+psycopg2://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class DataFileSettings(BaseSettings):
    """Input Record Files Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    data_dir: Path = Field(default=Path("./data"), description="Directory holding the record files")
    items_file: str = Field(default="Items.csv", description="Catalog items file")
    persons_file: str = Field(default="Persons.csv", description="Persons file")
    stores_file: str = Field(default="Stores.csv", description="Stores file")
    sales_file: str = Field(default="Sales.csv", description="Sale headers file")
    sale_items_file: str = Field(default="SaleItems.csv", description="Sale-line items file")
    delimiter: str = Field(default=",", description="Field delimiter")
    encoding: str = Field(default="utf-8", description="File encoding")

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Delimiter must be a single character"""
        if len(v) != 1:
            raise ValueError("Delimiter must be exactly one character")
        return v

    def path_for(self, file_name: str) -> Path:
        return Path(self.data_dir) / file_name


class AssemblySettings(BaseSettings):
    """Sale Assembly Configuration"""

    model_config = SettingsConfigDict(env_prefix="ASSEMBLY_")

    error_policy: ErrorPolicy = Field(
        default=ErrorPolicy.FAIL_FAST,
        description="fail_fast aborts on the first bad row, collect reports all bad rows",
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format value"""
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="sales-ledger", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    data_files: DataFileSettings = Field(default_factory=DataFileSettings)
    assembly: AssemblySettings = Field(default_factory=AssemblySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
