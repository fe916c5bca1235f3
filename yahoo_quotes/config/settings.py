import os
from functools import lru_cache

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0"
)


class Settings(BaseModel):
    YF_SESSION_TTL_SEC: int = Field(default=60, gt=0)
    YF_CACHE_TTL_SEC: int = Field(default=300, gt=0)
    YF_CACHE_MAX_ENTRIES: int = Field(default=100, gt=0)
    YF_MAX_RETRIES: int = Field(default=2, ge=0)
    YF_BATCH_SIZE: int = Field(default=50, gt=0)
    YF_HTTP_TIMEOUT_SEC: float = Field(default=5.0, gt=0)
    YF_BATCH_WORKERS: int = Field(default=1, ge=1)
    YF_USER_AGENT: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "Settings":
        raw = {
            name: os.getenv(name)
            for name in cls.model_fields
        }
        # unset or blank variables fall back to field defaults
        return cls.model_validate(
            {name: value.strip() for name, value in raw.items() if value and value.strip()}
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
