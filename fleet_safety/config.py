import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    api_url: str = os.getenv("API_URL", "http://localhost:8000")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Economics
    fuel_price_default: float = 1650.0
    co2_per_liter: float = 2.31

    # Risk classification (rank percent is 0 for the worst driver)
    red_rank_percent: float = 20.0
    red_score_threshold: float = 0.25
    yellow_rank_percent: float = 50.0
    yellow_score_threshold: float = 0.08

    # Optional JSON/CSV table overriding the default behavior coefficients
    behavior_catalog_path: Optional[str] = os.getenv("BEHAVIOR_CATALOG_PATH") or None

    # Narrative insights
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_model: str = "gemini-1.5-flash"
    insight_temperature: float = 0.3

    # Upload limits
    max_upload_mb: int = 10

    class Config:
        env_file = ".env"


settings = Settings()
