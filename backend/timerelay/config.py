"""
TimeRelay Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Read by the application factory, which hands the values to the
       remote clients and services it constructs.
When:  Loaded once at module import time; checked again during startup.

Credential handling:
    GOOGLE_PRIVATE_KEY is usually pasted into hosting dashboards as a single
    line with literal "\\n" sequences. The validator below turns them back into
    real newlines before the key reaches google-auth.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings default to empty/development values so the process can boot
    without credentials. Missing Google credentials only disable the report
    endpoint; missing Notion values are reported at startup.

    Attributes are grouped by concern for readability.
    """

    # ── Notion (record store) ─────────────────────────────────────────────
    # What: Integration token for the Notion API
    # How to obtain: https://www.notion.so/my-integrations
    notion_api_key: str = Field(default="", description="Notion integration token")

    # What: Database ids of the three collections the timer app works with
    clients_db_id: str = Field(default="", description="Notion database holding clients")
    demands_db_id: str = Field(default="", description="Notion database holding demands")
    time_log_db_id: str = Field(default="", description="Notion database holding time entries")

    # What: Property names inside the Notion databases
    # Defaults match the workspace the timer app was built against
    client_name_property: str = Field(default="Nome")
    demand_name_property: str = Field(default="Nome da Demanda")
    demand_client_property: str = Field(default="Cliente")
    entry_task_property: str = Field(default="Tarefa")
    entry_demand_property: str = Field(default="Demanda")
    entry_duration_property: str = Field(default="Duração")
    entry_date_property: str = Field(default="Data")

    # ── Google Sheets (report destination) ────────────────────────────────
    google_sheet_id: str = Field(default="", description="Spreadsheet receiving the reports")
    google_client_email: str = Field(default="", description="Service account e-mail")
    google_private_key: str = Field(default="", description="Service account private key (PEM)")

    @field_validator("google_private_key")
    @classmethod
    def unescape_private_key(cls, v: str) -> str:
        """Turns literal backslash-n sequences into real newlines."""
        return v.replace("\\n", "\n")

    @property
    def sheets_configured(self) -> bool:
        """True when every value needed to reach Google Sheets is present."""
        return bool(
            self.google_sheet_id and self.google_client_email and self.google_private_key
        )

    # ── Reports ───────────────────────────────────────────────────────────
    # What: Length of the trailing window used to select time entries
    report_window_days: int = Field(default=7, ge=1, le=366)

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Allowed origins for cross-origin requests
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # What: Verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # NOTION_API_KEY and notion_api_key both work
        "extra": "ignore",
    }

    def missing_notion_settings(self) -> List[str]:
        """
        What:  Lists the Notion variables that are still unset.
        When:  Called during app startup (lifespan) to warn early.
        """
        required = {
            "NOTION_API_KEY": self.notion_api_key,
            "CLIENTS_DB_ID": self.clients_db_id,
            "DEMANDS_DB_ID": self.demands_db_id,
            "TIME_LOG_DB_ID": self.time_log_db_id,
        }
        return [name for name, value in required.items() if not value]


# Singleton instance — the application factory falls back to it when no
# explicit Settings object is passed in
settings = Settings()
