"""Service configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./jwt_pizza.db"

    # Service port
    rest_port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # JWT Auth
    jwt_secret: str = "change-me-in-production-use-a-long-random-string"
    jwt_algorithm: str = "HS256"
    token_expire_minutes: int | None = None  # tokens never expire unless set

    # Pizza factory
    factory_url: str = "https://pizza-factory.cs329.click"
    factory_api_key: str = ""
    factory_timeout_seconds: float = 10.0

    # Optional admin account created at startup
    bootstrap_admin_email: str | None = None
    bootstrap_admin_password: str | None = None
    bootstrap_admin_name: str = "pizza admin"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
