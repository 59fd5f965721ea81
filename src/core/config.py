from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("procurement-approval-engine", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Storage backend for the threshold matrix and the approval ledger
    storage_backend: Literal["memory", "sqlite"] = Field("memory", alias="STORAGE_BACKEND")
    approvals_db_path: str = Field("approvals.db", alias="APPROVALS_DB_PATH")

    # Load the demo project / authorization matrix on startup
    seed_demo_data: bool = Field(True, alias="SEED_DEMO_DATA")

    # Teams
    teams_webhook_url: str | None = Field(default=None, alias="TEAMS_WEBHOOK_URL")

    # API Base URL (for links in Teams cards)
    api_base_url: str = Field("http://127.0.0.1:8000", alias="API_BASE_URL")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Azure Service Bus (approval events)
    service_bus_connection_string: str | None = Field(default=None, alias="SERVICE_BUS_CONNECTION_STRING")
    service_bus_entity: str = Field("approval-events", alias="SERVICE_BUS_ENTITY")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "populate_by_name": True}

settings = Settings()
