"""
Configuration management for the bookstall storefront
"""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


FEED_PLACEHOLDER = "YOUR_GOOGLE_SHEET"


class Config(BaseSettings):
    """Storefront configuration loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # Service
    service_name: str = "bookstall"
    http_port: int = 8080
    log_level: str = "INFO"
    log_json: bool = True
    
    # Catalog feed (published Google Sheet CSV)
    feed_url: str = f"https://docs.google.com/spreadsheets/d/e/{FEED_PLACEHOLDER}/pub?output=csv"
    feed_timeout_seconds: float = 10.0
    placeholder_image_url: str = "https://via.placeholder.com/300x400?text=No+Cover"
    
    # Order notifier webhook (empty = manual payment only)
    notifier_url: str = ""
    notifier_timeout_seconds: float = 10.0
    
    # Payment
    domestic_country: str = "India"
    default_country: str = "India"
    currency_code: str = "INR"
    currency_symbol: str = "₹"
    upi_id: str = "seller@upi"
    payee_name: str = "Bookstall"
    seller_contact: str = "the seller"
    
    # Checkout surface
    dismiss_delay_seconds: float = 3.0
    
    @property
    def feed_configured(self) -> bool:
        """True when the feed URL points at a real published sheet"""
        return bool(self.feed_url) and FEED_PLACEHOLDER not in self.feed_url
    
    @property
    def notifier_configured(self) -> bool:
        return bool(self.notifier_url.strip())


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create configuration singleton"""
    global _config
    if _config is None:
        _config = Config()
    return _config
