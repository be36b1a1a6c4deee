from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "postgresql+asyncpg://localhost:5432/outlate"
    cors_origins: str = "http://localhost:3000"
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_recycle: int = 300
    log_level: str = "INFO"
    currency_symbol: str = "$"
    # Allowed gap in cents between subtotal + tax + tip and the printed total.
    total_tolerance_cents: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("total_tolerance_cents", "rounding_tolerance_cents")
    )
    min_people_per_outing: int = 2
    max_people_per_outing: int = 50
    max_receipts_per_outing: int = 20


settings = Settings()
