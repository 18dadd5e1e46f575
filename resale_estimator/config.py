"""Application configuration using Pydantic settings."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # eBay credentials (client-credentials grant for the Buy APIs)
    ebay_client_id: str = ""
    ebay_client_secret: str = ""
    ebay_token_url: str = "https://api.ebay.com/identity/v1/oauth2/token"

    # Legacy Finding API only needs an app id; falls back to the client id
    ebay_finding_app_id: str = ""

    ebay_marketplace_id: str = Field(
        default="EBAY_US",
        validation_alias=AliasChoices("ebay_marketplace_id", "x_ebay_marketplace_id"),
    )
    ebay_global_id: str = "EBAY-US"

    # Etsy (optional current-listing fallback)
    etsy_api_key: str = ""
    etsy_oauth_token: str = ""

    # Query behaviour
    result_limit: int = 50
    request_timeout_seconds: float = 12.0
    token_safety_margin_seconds: float = 60.0

    # Cascade toggles
    sold_fallback_enabled: bool = True
    etsy_fallback_enabled: bool = True

    # Response cache (cache-aside in front of the orchestrator)
    response_cache_enabled: bool = False
    response_cache_ttl_seconds: int = 600
    redis_url: str = "redis://localhost:6379/0"

    # App Settings
    debug: bool = False
    log_level: str = "INFO"
    log_dir: str = ""
    app_host: str = "0.0.0.0"
    app_port: int = 8001

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def finding_app_id(self) -> str:
        """App id used for the Finding API."""
        return self.ebay_finding_app_id or self.ebay_client_id


settings = Settings()
