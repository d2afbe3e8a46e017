from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Database
    database_url: str = Field(default="sqlite:///./aurora_go.db")

    # Logging
    log_level: str = Field(default="INFO")

    # NOAA SWPC products (DSCOVR/ACE real-time solar wind)
    plasma_url: str = Field(default="https://services.swpc.noaa.gov/products/solar-wind/plasma-7-day.json")
    mag_url: str = Field(default="https://services.swpc.noaa.gov/products/solar-wind/mag-7-day.json")
    scales_url: str = Field(default="https://services.swpc.noaa.gov/products/noaa-scales.json")
    ovation_url: str = Field(default="https://services.swpc.noaa.gov/json/ovation_aurora_latest.json")

    # Open-Meteo cloud cover
    open_meteo_url: str = Field(default="https://api.open-meteo.com/v1/forecast")

    # Upstream timeouts (seconds)
    telemetry_timeout: float = Field(default=15.0)
    secondary_timeout: float = Field(default=10.0)

    # Cache TTLs (seconds)
    telemetry_cache_ttl: int = Field(default=120)
    cloud_cache_ttl: int = Field(default=900)
    ovation_cache_ttl: int = Field(default=600)

    # Observer defaults (Seattle) and reference timezone for the daily digest
    observer_latitude: float = Field(default=47.6)
    observer_longitude: float = Field(default=-122.3)
    observer_timezone: str = Field(default="America/Los_Angeles")

    # Alerts are darkness-gated at this location, independent of any visitor
    alert_latitude: float = Field(default=47.6)
    alert_longitude: float = Field(default=-122.3)
    alert_poll_interval: int = Field(default=5)  # minutes

    # Email
    email_enabled: bool = Field(default=False)
    smtp_host: str = Field(default="smtp.gmail.com")
    smtp_port: int = Field(default=587)
    smtp_user: str = Field(default="")
    smtp_pass: str = Field(default="")
    from_email: str = Field(default="")
    email_recipients: str = Field(default="")
    email_cooldown: int = Field(default=60)  # minutes

    # Daily summary (local time in observer_timezone)
    daily_summary_hour: int = Field(default=8)
    daily_summary_window_minutes: int = Field(default=5)

    # CORS
    cors_origins: str = Field(default="http://localhost:5173,http://localhost:3000,http://localhost:8000")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def recipient_list(self) -> list[str]:
        return [r.strip() for r in self.email_recipients.split(",") if r.strip()]


settings = Settings()
