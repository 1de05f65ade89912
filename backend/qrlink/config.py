"""
Application configuration using Pydantic Settings.
All environment variables are loaded here with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"

    # Cloudflare R2 / S3-compatible storage
    # Browser uploads go straight to R2 through presigned URLs
    r2_account_id: Optional[str] = None  # Also used for the KV REST API
    r2_endpoint: Optional[str] = None  # e.g., https://<account_id>.r2.cloudflarestorage.com
    r2_bucket: str = "qrlink-uploads"
    r2_access_key: Optional[str] = None
    r2_secret_key: Optional[str] = None
    r2_region: str = "auto"  # R2 uses "auto" for region
    r2_public_domain: Optional[str] = None  # Custom domain, makes GET URLs public and unsigned
    upload_url_expiration: int = 300  # 5 min
    download_url_expiration: int = 3600  # 1 hour
    max_upload_size: int = 10 * 1024 * 1024  # 10MB
    download_strategy: Literal["redirect", "stream"] = "redirect"

    # Cloudflare KV (short links)
    cf_api_base_url: str = "https://api.cloudflare.com/client/v4"
    cf_kv_namespace_id: Optional[str] = None
    cf_kv_api_token: Optional[str] = None
    short_link_ttl: int = 7 * 24 * 60 * 60  # 7 days

    # Shared secret for uploads and short link creation (unset = open)
    access_password: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def resolved_r2_endpoint(self) -> Optional[str]:
        """Explicit endpoint, or the account-scoped R2 endpoint."""
        if self.r2_endpoint:
            return self.r2_endpoint
        if self.r2_account_id:
            return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"
        return None


# Global settings instance
settings = Settings()
