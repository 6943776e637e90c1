"""Application configuration loaded from environment variables and .env file."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Scenario scripts (*.csv) imported at startup
    SCENARIO_DIR: str = str(DATA_DIR / "scenarios")
    # Card templates (JSON)
    CARD_DATA_PATH: str = str(DATA_DIR / "cards.json")
    # guest_join 동료 원형 (JSON)
    GUEST_DATA_PATH: str = str(DATA_DIR / "guests.json")

    # Engine dice seed. None = nondeterministic
    RANDOM_SEED: Optional[int] = None

    # World danger tier applied to battle decks when the caller gives none
    DEFAULT_WORLD_TIER: str = "Stagnant"


settings = Settings()
