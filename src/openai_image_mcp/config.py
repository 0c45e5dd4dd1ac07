from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional

DEFAULT_API_BASE = "https://api.openai.com/v1"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OPENAI_IMAGE_MCP__",
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str = Field(
        "",
        validation_alias=AliasChoices("OPENAI_IMAGE_MCP__API_KEY", "OPENAI_API_KEY"),
        description="API key for the OpenAI Images API.",
    )
    base_url: Optional[HttpUrl] = Field(
        None, description="Base URL for the API (for OpenAI-compatible endpoints)."
    )
    timeout: float = Field(
        300.0, gt=0, description="Deadline in seconds for each API request."
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "WARNING", description="Log level for stderr logging."
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @property
    def api_base(self) -> str:
        if self.base_url:
            return str(self.base_url).rstrip("/")
        return DEFAULT_API_BASE


def get_settings() -> Settings:
    return Settings()
