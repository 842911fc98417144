from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Hotel Admin"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/errors.log"

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    # auto -> supabase when credentials are present, memory otherwise
    STORE_BACKEND: str = "auto"

    # Auth
    JWT_SECRET: str = "dev_secret_key"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7
    AUTH_COOKIE: str = "hotel_admin_auth"

    # First admin bootstrap
    SEED_TOKEN: Optional[str] = None
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "Admin@123"

    CURRENCY_SYMBOL: str = "₹"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
