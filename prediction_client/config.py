"""Configuration management for the prediction client."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Endpoint selection
    server: Literal["development", "live"] = "development"
    development_base_url: str = "http://127.0.0.1:8000/"
    production_base_url: str = "http://192.168.1.237:8000/"
    predict_path: str = "predict"

    # Multipart upload
    upload_field_name: str = "file"
    # "auto" guesses the type from the filename; the service expects the
    # fixed JSON marker
    upload_content_type: str = "application/json"

    # Lock-wait polling
    poll_interval: float = Field(0.5, gt=0)  # seconds between lock probes
    lock_timeout: Optional[float] = Field(None, ge=0)  # None waits forever

    # HTTP client
    request_timeout: float = 60.0
    max_workers: int = 4

    log_level: str = "INFO"

    model_config = {
        "env_prefix": "PREDICT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @property
    def base_url(self) -> str:
        """Base URL of the selected server."""
        if self.server == "live":
            return self.production_base_url
        return self.development_base_url

    @property
    def predict_url(self) -> str:
        """Full URL of the prediction endpoint."""
        return self.base_url.rstrip("/") + "/" + self.predict_path.lstrip("/")


settings = Settings()
