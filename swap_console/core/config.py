from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    # Remote battery-swap backend; the console keeps no state of its own
    BACKEND_API_URL: str = "https://ev-battery-backend.onrender.com/api"
    BACKEND_TIMEOUT_SECONDS: float = 15.0

    # Wall-clock zone of the stations. Shift times are entered and stored in it.
    FACILITY_TIMEZONE: str = "Asia/Ho_Chi_Minh"

    # Scheduling policy
    MAX_SHIFT_HOURS: int = 16
    SCHEDULE_FETCH_LIMIT: int = 100

    # Warehouse
    LOW_HEALTH_THRESHOLD: int = 70

    # Session: access tokens expiring within this window are treated as expired
    TOKEN_EXPIRY_LEEWAY_SECONDS: int = 0

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
