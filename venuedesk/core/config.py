from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    BUSINESS_TIMEZONE: str = "Asia/Kolkata"

    STORE_BACKEND: str = "memory"  # "memory", "json", "http"
    STORE_BASE_URL: str | None = None
    STORE_API_TOKEN: str | None = None
    STORE_TIMEOUT_SECONDS: float = 10.0
    STORE_DATA_PATH: str = "./data/pipeline.json"

    FOLLOW_UP_DEFAULT_TIME: str = "12:00"
    FOLLOW_UP_MAX_REPEATS: int = 52

    DISCOUNT_LIMIT_PERCENT: float = 10.0
    VENUE_GST_RATE: float = 0.18
    MENU_GST_RATE: float = 0.18
    ROOM_GST_LOW_RATE: float = 0.05
    ROOM_GST_HIGH_RATE: float = 0.18
    ROOM_GST_THRESHOLD: float = 7500.0


settings = Settings()
