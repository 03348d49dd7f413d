"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "School Cooperative Ordering API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./coop.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "120"))
    order_code_prefix: str = getenv("ORDER_CODE_PREFIX", "KOP")
    order_code_max_attempts: int = int(getenv("ORDER_CODE_MAX_ATTEMPTS", "5"))
    low_stock_threshold: int = int(getenv("LOW_STOCK_THRESHOLD", "10"))
    admin_email: str = getenv("ADMIN_EMAIL", "admin@coop.local")
    admin_password: str = getenv("ADMIN_PASSWORD", "")
    admin_name: str = getenv("ADMIN_NAME", "Admin")


settings: Settings = Settings()
