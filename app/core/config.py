"""
Application configuration.
All settings are loaded from environment variables.
Use env.example as a reference for the available variables.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Credentials default to empty strings so the service can boot for local
    checks; /health reports which of them are missing.
    """

    # ===========================================
    # APPLICATION
    # ===========================================
    app_env: str = "local"
    # CORS: comma-separated origins. Empty = "*" (the public upload page is served from another origin).
    cors_origins: str = ""
    # Public site that hosts download.html; used for Stripe success/cancel URLs.
    base_url: str = "https://diacriticefix.ro"
    admin_api_key: str | None = None

    # ===========================================
    # ARTIFACTS
    # ===========================================
    artifact_ttl_seconds: int = 600  # 10 minutes from creation, not from payment
    sweep_interval_seconds: int = 60  # 0 disables the background sweep
    max_upload_mb: int = 10
    default_download_name: str = "document_reparat.txt"

    # ===========================================
    # PDF.CO (Document Processor)
    # ===========================================
    pdfco_api_key: str = ""
    pdfco_api_url: str = "https://api.pdf.co/v1"
    processor_timeout_seconds: float = 60.0

    # ===========================================
    # STRIPE (Payment Gateway)
    # ===========================================
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_api_version: str = "2024-06-20"
    payment_currency: str = "eur"
    payment_unit_amount: int = 199  # 1.99 EUR in cents
    payment_product_name: str = "PDF cu diacritice reparate"
    payment_timeout_seconds: float = 15.0

    # ===========================================
    # CIRCUIT BREAKER
    # ===========================================
    cb_failure_threshold: int = 5
    cb_open_seconds: int = 30

    # ===========================================
    # LOGGING
    # ===========================================
    request_id_header: str = "X-Request-Id"
    log_level: str = "INFO"
    log_file: str | None = None
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("artifact_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("artifact_ttl_seconds must be positive")
        return v

    @field_validator("payment_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.lower().strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list; falls back to wildcard."""
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
