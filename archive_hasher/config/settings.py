from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_username: str = "archive"
    db_password: str = "secret"
    db_pool_max_size: int = 4
    db_connect_timeout_seconds: float = 10.0

    ledger_db_database: str = "archive_ledger"
    hashes_db_database: str = "archive_hashes"

    archive_base_url: str = "https://archive.org"
    archive_timeout_seconds: int = 60

    batch_size: int = 1000
    item_delay_seconds: float = 1.0
    retry_failed_page: bool = True

    def conninfo(self, database: str) -> str:
        """Build a libpq connection string for one of the stores."""
        return (
            f"host={self.db_host} "
            f"port={self.db_port} "
            f"dbname={database} "
            f"user={self.db_username} "
            f"password={self.db_password}"
        )
