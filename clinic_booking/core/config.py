from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKING_API_BASE_URL: str | None = None
    BOOKING_API_TOKEN: str | None = None
    BOOKING_API_TIMEOUT_SECONDS: float = 15.0

    CLINIC_TIMEZONE: str = "Africa/Cairo"
    SLOT_REFRESH_INTERVAL_SECONDS: float = 30.0
    BOOKING_WINDOW_DAYS: int = 30

    SESSION_IDLE_TIMEOUT_SECONDS: float = 1800.0
    SESSION_SWEEP_INTERVAL_SECONDS: float = 60.0

    BOOKING_FAILED_MESSAGE: str = "Failed to book the appointment."
    BOOKING_CONFLICT_MESSAGE: str = (
        "This time was just booked by someone else. Available times have been refreshed."
    )
    AVAILABILITY_LOAD_FAILED_MESSAGE: str = "Failed to load the doctor's availability."
    DATE_OUT_OF_WINDOW_MESSAGE: str = "Please choose a date within the booking window."


settings = Settings()
