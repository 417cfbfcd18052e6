"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_env: str = "development"
    app_debug: bool = True

    # Bookkeeping backend
    api_base_url: str = "http://localhost:4000"
    api_token: str = ""  # sent as "Authorization: Bearer ..." when set
    api_cookie: str = ""  # raw Cookie header forwarded to the backend when set
    backend_timeout: float = 30.0  # seconds per request

    # Review sessions
    review_session_idle_minutes: int = 240
    max_review_sessions: int = 500

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Upload
    max_upload_size_mb: int = 10
    allowed_upload_extensions: str = ".pdf,.csv"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def allowed_upload_extensions_list(self) -> list[str]:
        return [ext.strip().lower() for ext in self.allowed_upload_extensions.split(",") if ext.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "LEDGERDESK_",
        "extra": "ignore",
        "frozen": True,
    }


settings = Settings()
