from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    # Policy resolution
    default_policy_preset: str = Field(default="STANDARD", alias="DEFAULT_POLICY_PRESET")

    # Number of reload-and-reapply attempts for callers that opt into retries
    conflict_retry_attempts: int = Field(default=3, alias="CONFLICT_RETRY_ATTEMPTS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Frontend URL for CORS
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")

    @field_validator("default_policy_preset", mode="before")
    @classmethod
    def normalize_preset_name(cls, v: str | None) -> str:
        """Preset names are matched case-insensitively; empty means STANDARD."""
        if not v:
            return "STANDARD"
        name = v.strip().upper()
        if name not in ("STANDARD", "STRICT", "PERMISSIVE"):
            raise ValueError(f"Unknown DEFAULT_POLICY_PRESET '{v}'")
        return name

    @field_validator("conflict_retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("CONFLICT_RETRY_ATTEMPTS must be at least 1")
        return v

    @field_validator("frontend_url", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional string fields."""
        if v == "":
            return None
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
