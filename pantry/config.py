from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/"
    ai_gateway_api_key: str | None = None
    # None means no client side timeout.
    ai_gateway_timeout: float | None = None
    core_model: str = "google/gemini-2.5-flash"
    validate_recipes: bool = False
    db_url: str = "sqlite+aiosqlite:///pantry.db"
    log_level: str = "INFO"
