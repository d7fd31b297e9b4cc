from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    # Remote provider (xAI Grok)
    grok_api_key: str = ""
    grok_url: str = "https://api.x.ai/v1/chat/completions"

    # Local provider (Ollama)
    ollama_url: str = "http://localhost:11434/api/chat"

    # Outbound calls
    request_timeout_seconds: float = 300.0

    # Clients whose User-Agent matches exactly get a streaming upstream response
    streaming_user_agent: str = "Js/JS 5.23.2"  # JetBrains Continue plugin

    # App
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 11435

    # CORS
    allowed_origins: str = "*"  # comma-separated

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs
    log_file: str = "log/proxy.log"  # empty disables the file handler

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable

    @property
    def remote_credential_present(self) -> bool:
        """True when the remote provider can be called at all."""
        return bool(self.grok_api_key and self.grok_api_key.strip())


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup."""
    errors: list[str] = []

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")

    if settings.request_timeout_seconds <= 0:
        errors.append("REQUEST_TIMEOUT_SECONDS must be positive")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
