from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="UNISPACE_", env_file=".env", extra="ignore"
    )

    database_url: str = "sqlite:///./data/unispace.db"
    log_level: str = "INFO"

    jwt_secret_key: str = "change-me-unispace-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: float = 60

    # Booking policy
    break_time_minutes: int = 15
    min_advance_minutes: int = 30
    max_advance_days: int = 30
    min_duration_minutes: int = 30
    max_duration_hours: int = 24
    reject_note_min_length: int = 10
    purpose_max_length: int = 500

    # Schedule policy
    schedule_break_time_minutes: int = 15
    max_schedule_break_time_minutes: int = 120
    schedule_title_max_length: int = 200

    # Room issue reports
    report_issue_type_max_length: int = 100
    report_description_min_length: int = 10
    report_description_max_length: int = 1000

    # Opening hours used when listing free slots
    day_start_hour: int = 7
    day_end_hour: int = 22

    # Completion sweep
    completion_worker_enabled: bool = True
    completion_interval_seconds: float = 300
    completion_retry_seconds: float = 60


settings = Settings()
