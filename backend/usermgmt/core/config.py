from pydantic_settings import BaseSettings
from typing import Optional, Union


class Settings(BaseSettings):
    # Database connection parts - combined into a SQLAlchemy URL by get_database_url()
    DB_DRIVER: str = "mysql+pymysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASS: str = ""
    DB_NAME: str = "user_management"
    # Full connection string - overrides the DB_* parts when set (tests use sqlite://)
    DATABASE_URL: Optional[str] = None

    # Outbound email (SendGrid)
    # Without an API key the send path fails, the rest of the service keeps working
    SENDGRID_APIKEY: str = ""
    SENDGRID_FROM_EMAIL: str = "noreply@example.com"
    SENDGRID_FROM_NAME: str = "UserManagement"

    # Email verification
    VERIFY_BASE_URL: str = "http://localhost:8080"
    VERIFICATION_TOKEN_TTL_MINUTES: int = 5

    # Password hashing cost - bcrypt work factor (2^rounds iterations)
    BCRYPT_ROUNDS: int = 12

    CORS_ORIGINS: Union[str, list[str]
                        ] = "http://localhost:5173,http://localhost:3000"

    LOG_LEVEL: str = "INFO"

    def get_database_url(self) -> str:
        """Return DATABASE_URL or build one from the DB_* parts"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASS}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    def get_cors_origins(self) -> list[str]:
        """Parse CORS_ORIGINS string into list"""
        if isinstance(self.CORS_ORIGINS, str):
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return self.CORS_ORIGINS if isinstance(self.CORS_ORIGINS, list) else []

    class Config:
        # Load settings from .env file if it exists
        # Environment variables override defaults
        env_file = ".env"
        case_sensitive = True


settings = Settings()
