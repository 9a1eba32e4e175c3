from pydantic import BaseModel, Field, SecretStr, field_validator


class StravaCredentials(BaseModel):
    """Application credentials and the seed refresh token"""

    client_id: str = Field(..., min_length=1)
    client_secret: SecretStr
    refresh_token: SecretStr

    @field_validator("client_id", "client_secret", "refresh_token", mode="before")
    @classmethod
    def coerce_numbers(cls, v):
        # YAML reads an all-digit value as int
        return str(v) if isinstance(v, int) else v

    @field_validator("client_secret", "refresh_token")
    @classmethod
    def validate_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("must not be empty")
        return v


class BotSettings(BaseModel):
    """Runtime settings; defaults match the reference deployment"""

    # Cron minute field: every 15 minutes at :00, :15, :30, :45
    schedule_minute: str = Field("*/15", min_length=1)
    timezone: str = "UTC"

    page: int = Field(1, ge=1)
    page_size: int = Field(200, ge=1, le=200)
    match_window_seconds: int = Field(3600, ge=0)
    refresh_buffer_seconds: int = Field(300, ge=0)
    request_timeout_seconds: float = Field(10.0, gt=0)

    api_base_url: str = "https://www.strava.com/api/v3"
    token_url: str = "https://www.strava.com/oauth/token"

    log_level: str = "INFO"
    json_logs: bool = True

    enable_health_server: bool = True
    health_host: str = "0.0.0.0"
    health_port: int = Field(8000, ge=1, le=65535)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class BotConfig(BaseModel):
    """Complete bot configuration"""

    strava: StravaCredentials
    settings: BotSettings = Field(default_factory=BotSettings)
