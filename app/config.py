from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Database
    database_url: str = "sqlite:///./licenses.db"

    # Challenge / response integrity
    challenge_freshness_window_seconds: int = 300  # 5 minutes, must match verifiers
    challenge_random_length: int = 24
    expired_challenge_offset_seconds: int = 360  # used to exercise the rejection path

    # Access tokens (issued by the auth service)
    jwt_secret: str = "dev-only-secret-change-me-in-production"
    jwt_algorithm: str = "HS256"

    # Rate Limiting
    rate_limit_enabled: bool = True
    trust_forwarded_for: bool = False  # enable only behind a reverse proxy
    rate_limit_challenges: str = "30/minute"
    rate_limit_validations: str = "60/minute"

    # CORS
    cors_origins: list[str] | str = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    log_level: str = "info"
    log_format: str = "console"  # "json" in production

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


settings = Settings()
