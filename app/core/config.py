from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from backend project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    # Create tables and seed the status catalog on startup (local/dev); prefer Alembic in production
    auto_create_schema: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Clinic wall clock; appointment times are stored as naive local times in this zone
    clinic_timezone: str = "Africa/Cairo"

    # Slot grid: 12 half-hour slots from 16:00 to 21:30
    first_slot_hour: int = 16
    first_slot_minute: int = 0
    slot_duration_minutes: int = 30
    slots_per_day: int = 12
    # Bookable from tomorrow up to this many calendar days ahead
    booking_window_days: int = 7

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
