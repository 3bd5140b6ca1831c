# klassflow/core/config.py
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    SECRET_KEY: str = "your-super-secret-jwt-key-change-in-prod"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    DATABASE_URL: str = "sqlite:///./klassflow.db"

    # Base URL used to build the links sent by email
    APP_URL: str = "http://localhost:3000"

    # Without a key the mailer only logs the message
    RESEND_API_KEY: str | None = None
    MAIL_FROM: str = '"KlassFlow" <noreply@klassflow.app>'

    CORS_ORIGINS: list[str] = [
        "http://localhost",
        "http://127.0.0.1",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"


# Created once per process
settings = Settings()
