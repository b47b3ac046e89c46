
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Vendor Hub"
    app_env: str = "development"
    app_port: int = 8000
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    frontend_url: str = "http://localhost:3000"

    # Database (Postgres via asyncpg in production or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./vendor_hub_dev.db",
        alias="DATABASE_URL",
    )

    # Plan limit applied when no subscription collaborator is wired in
    default_vendor_limit: int = Field(
        default=-1, alias="DEFAULT_VENDOR_LIMIT",
    )  # -1 = unbounded

    # Credential storage
    verify_credential_writes: bool = Field(
        default=True, alias="VERIFY_CREDENTIAL_WRITES",
    )  # Re-read after every save and compare key sets
    credential_mask_char: str = Field(default="•", alias="CREDENTIAL_MASK_CHAR")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def vendor_limit(self) -> int | None:
        """Plan limit as used by the provisioner (None = unbounded)."""
        return None if self.default_vendor_limit < 0 else self.default_vendor_limit

settings = Settings()
