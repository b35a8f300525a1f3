"""
SupportDesk - Configuration Management
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # FastAPI
    fastapi_env: str = "development"
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000
    application_name: str = "customer-support-saas"

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: str = ""
    tickets_table: str = "tickets"
    profiles_table: str = "profiles"

    # Storage
    attachments_bucket: str = "ticket-attachments"
    max_attachment_bytes: int = 5242880  # 5MB
    signed_url_ttl_seconds: int = 300

    # Connection guard
    connection_check_interval_seconds: float = 30.0
    health_probe_timeout_seconds: Optional[float] = None

    # Triage
    embedding_enabled: bool = True
    embedding_model: str = "sentence-transformers/distiluse-base-multilingual-cased-v2"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        return self.fastapi_env.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
