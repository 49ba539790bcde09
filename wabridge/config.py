from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Follows 12-factor app configuration principles.
    """

    # Pydantic v2 settings config
    # env_file is only used as fallback, env vars take precedence
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_empty=True,
    )

    # Logging Configuration
    LOG_LEVEL: str = "INFO"

    # WhatsApp session database, owned by the client library
    SESSION_DB_PATH: str = "whatsmeow.db"

    # Flat files written by the bridge
    CSV_PATH: str = "messages.csv"
    QR_CODE_PATH: str = "qrcode.txt"
    MEDIA_DIR: str = "media"

    # Freshly issued login codes are forwarded here (empty disables forwarding)
    QR_FORWARD_URL: str = "https://devapi.courstore.com/v1/qr/for_login"
    QR_FORWARD_TIMEOUT_SECONDS: float = 10.0

    # Outbound send bound
    SEND_TIMEOUT_SECONDS: float = 60.0

    # Side length of the PNG served by /qr/photo
    QR_IMAGE_SIZE: int = 256

    # HTTP server
    HOST: str = "0.0.0.0"
    PORT: int = 8080


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every call.
    """
    return Settings()


# Global settings instance
settings = get_settings()
