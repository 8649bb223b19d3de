from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

class Settings(BaseSettings):
    APP_NAME: str = "AR Copilot"
    APP_VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False # ConsoleRenderer by default, JSONRenderer when True

    # Comment / export timestamps. None means server local time.
    COMMENT_TIMEZONE: Optional[str] = Field(
        None,
        description="IANA timezone name used when stamping generated comments and exports, e.g. 'Asia/Kolkata'."
    )

    @field_validator("COMMENT_TIMEZONE")
    @classmethod
    def timezone_must_exist(cls, v: Optional[str]) -> Optional[str]:
        if v:
            try:
                ZoneInfo(v)
            except ZoneInfoNotFoundError:
                raise ValueError(f"Unknown timezone: {v}")
        return v

    # Session / account defaults
    SESSION_ID_PREFIX: str = "session-"
    NEW_ACCOUNT_PATIENT_NAME: str = "New Patient"
    NEW_ACCOUNT_DEFAULT_INSURANCE: str = Field(
        "other",
        min_length=1,
        description="Insurance option value given to placeholder accounts when none is carried over."
    )

    # Audit trail
    AUDIT_LOG_MAX_ENTRIES: int = Field(
        1000,
        gt=0,
        description="Number of audit entries kept in memory before the oldest are dropped."
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", env_file_encoding='utf-8')

@lru_cache()
def get_settings():
    return Settings()
