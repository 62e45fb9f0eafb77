from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    ENV: str = "prod"

    # Storage
    DATA_DIR: str = "data"
    DATABASE_URL: str | None = None
    STORAGE_BACKENDS: str = "json"  # comma separated, tried in order: sql,json,memory

    # Auth
    JWT_SECRET: str | None = None
    JWT_ACCESS_HOURS: int = 24
    ADMIN_PASSWORD_HASH: str | None = None  # bcrypt hash or legacy "salt:hex"
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_RATE_LIMIT_WINDOW_SECONDS: int = 900

    # Publish
    GITHUB_TOKEN: str | None = None
    GITHUB_OWNER: str | None = None
    GITHUB_REPO: str | None = None
    GITHUB_BRANCH: str = "main"
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TIMEOUT_SECONDS: int = 20

    ALLOWED_HOSTS: str = "localhost,127.0.0.1,testserver"
    SECURITY_HEADERS_ENABLED: bool = True

settings = Settings()
