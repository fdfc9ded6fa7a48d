from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8098
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_PATH: str = "gumboard.db"
    SQL_ECHO: bool = False

    # Sessions are issued by the sign-in service; we only verify them
    AUTH_JWT_SECRET: str = "gumboard-dev-secret"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_TOKEN_HEADERS: str = "authorization,x-auth-token"

    # Slack bot messaging
    SLACK_API_BASE: str = "https://slack.com/api"
    SLACK_BOT_USERNAME: str = "Gumboard"
    SLACK_ICON_EMOJI: str = ":clipboard:"
    SLACK_TIMEOUT_SECONDS: float = 8.0

    # Checklist notification debounce
    NOTIFY_DEBOUNCE_SECONDS: int = 60
    NOTIFY_DEBOUNCE_MAX_ENTRIES: int = 1000
    NOTIFY_PRUNE_INTERVAL_SECONDS: int = 60

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
