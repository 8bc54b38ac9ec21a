import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)
load_dotenv()

# Development-only fallbacks. Both are refused when APP_ENV=production.
DEV_SECRET_KEY = "your-secret-key"
DEV_DATABASE_URL = "sqlite:///./teenme.db"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Every field can be overridden by keyword, which is how the tests build
    isolated apps.
    """

    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    database_url: Optional[str] = field(default_factory=lambda: os.getenv("DATABASE_URL"))
    secret_key: Optional[str] = field(default_factory=lambda: os.getenv("SECRET_KEY"))
    algorithm: str = field(default_factory=lambda: os.getenv("JWT_ALGORITHM", "HS256"))
    access_token_expire_minutes: int = field(
        default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    )
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5000")))
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))
    static_dir: Optional[str] = field(default_factory=lambda: os.getenv("STATIC_DIR", "public"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    verify_token_user: bool = field(default_factory=lambda: _env_bool("VERIFY_TOKEN_USER"))
    atomic_chat_writes: bool = field(default_factory=lambda: _env_bool("ATOMIC_CHAT_WRITES"))
    max_audio_bytes: int = field(
        default_factory=lambda: int(os.getenv("MAX_AUDIO_BYTES", str(5 * 1024 * 1024)))
    )

    def __post_init__(self):
        if not self.secret_key:
            if self.is_production:
                raise EnvironmentError("SECRET_KEY must be set in the environment.")
            logger.warning("SECRET_KEY is not set; using the insecure development fallback.")
            self.secret_key = DEV_SECRET_KEY

        if not self.database_url:
            if self.is_production:
                raise EnvironmentError("DATABASE_URL must be set in the environment.")
            self.database_url = DEV_DATABASE_URL

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in {"prod", "production"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
