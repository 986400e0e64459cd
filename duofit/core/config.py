from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./duofit.db"

    # all date keys are civil days in this timezone
    timezone: str = "America/Sao_Paulo"

    calorie_goal_points: int = 2
    default_calorie_goal: float = 2000
    default_protein_goal: float = 150
    default_carbs_goal: float = 250
    default_fat_goal: float = 65
    max_users: int = 2

    # True adds a saved meal to the day in place instead of recomputing it
    incremental_day_updates: bool = False

    openai_api_key: Optional[str] = None
    vision_model: str = "gpt-4o-mini"
    openfoodfacts_base_url: str = "https://world.openfoodfacts.org"
    external_timeout_seconds: float = 5.0
    search_cache_size: int = 256
    search_cache_ttl_seconds: float = 3600

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
