from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- app ---
    app_name: str = "Docker Web Server"
    version: str = "1.0.0"
    environment: str = "production"
    log_level: str = "INFO"

    # --- server ---
    host: str = "0.0.0.0"
    port: int = Field(default=3000, validation_alias=AliasChoices("PORT", "DWS_PORT"))
    cors_origins: list[str] = ["*"]

    # --- container runtime ---
    docker_binary: str = "docker"
    docker_timeout: float = 5.0  # seconds before a docker CLI call is killed

    # --- health sampling ---
    health_source: Literal["simulated", "psutil"] = "simulated"
    disk_path: str = "/"

    model_config = {
        "env_file": ".env",
        "env_prefix": "DWS_",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def expose_error_details(self) -> bool:
        return self.environment == "development"


settings = Settings()
