"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "PondWatch"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    database_url: str = "postgresql+psycopg://pond:pond@db:5432/pond"
    # Telemetry controller (ESP board). Update ESP_IP when the board moves.
    esp_ip: str = "192.168.1.127"
    telemetry_url: str | None = None
    telemetry_timeout: float = 30.0
    telemetry_pond_id: int = 1
    # Scheduler
    scheduler_enabled: bool = True
    feeding_scan_interval_seconds: float = 60.0
    condition_scan_interval_seconds: float = 60.0
    archival_interval_seconds: float = 6 * 60 * 60
    feeding_lookahead_minutes: int = 15
    feeding_reminder_email: bool = False
    # Realtime broadcast
    realtime_feeding_event: str = "feeding-reminder"
    realtime_alert_event: str = "pond-alert"
    # Firebase Cloud Messaging
    firebase_service_account: str | None = None  # raw service-account JSON
    firebase_credentials_path: str | None = None
    firebase_use_application_default: bool = False
    push_feeding_topic: str = "feeding"
    push_alert_topic: str = "all"
    # SMTP
    email_host: str = "smtp.gmail.com"
    email_port: int = 587
    email_user: str | None = None
    email_pass: str | None = None
    email_sender: str | None = None
    email_use_tls: bool = True
    email_timeout: float = 20.0
    dispatch_history_size: int = 50
    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def resolved_telemetry_url(self) -> str:
        return self.telemetry_url or f"http://{self.esp_ip}/sensors"


settings = Settings()

__all__ = ["settings", "Settings"]
