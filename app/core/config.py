# app/core/config.py
import os
from decimal import Decimal
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    host = os.getenv("DB_HOST")
    if not host:
        return "sqlite:///./cmcs.db"

    # URL-encode password to handle special characters like @ $ !
    encoded_password = quote_plus(os.getenv("DB_PASSWORD", ""))
    return (
        f"postgresql+psycopg2://{os.getenv('DB_USER')}:"
        f"{encoded_password}@"
        f"{host}:"
        f"{os.getenv('DB_PORT', '5432')}/"
        f"{os.getenv('DB_NAME')}"
        f"?sslmode={os.getenv('DB_SSLMODE', 'require')}"
    )


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Contract Monthly Claim System")
    ENV: str = os.getenv("ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # DB
    DATABASE_URL: str = _build_database_url()
    STORE_LOCK_TIMEOUT: float = float(os.getenv("STORE_LOCK_TIMEOUT", "5"))

    # UPLOADS
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
    ALLOWED_UPLOAD_EXTENSIONS: tuple = tuple(
        ext.strip().lower()
        for ext in os.getenv("ALLOWED_UPLOAD_EXTENSIONS", ".pdf,.docx,.xlsx").split(",")
        if ext.strip()
    )

    # CLAIMS
    DEFAULT_HOURLY_RATE: Decimal = Decimal(os.getenv("DEFAULT_HOURLY_RATE", "350"))

    # AUTH
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_MINUTES: int = int(os.getenv("ACCESS_TOKEN_MINUTES", "60"))

    # FRONTEND
    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    # STAFF SEED (only used when the user table is empty)
    SEED_PASSWORD: str = os.getenv("SEED_PASSWORD", "")
    SEED_COORDINATOR_EMAIL: str = os.getenv("SEED_COORDINATOR_EMAIL", "coordinator@cmcs.local")
    SEED_MANAGER_EMAIL: str = os.getenv("SEED_MANAGER_EMAIL", "manager@cmcs.local")
    SEED_HR_EMAIL: str = os.getenv("SEED_HR_EMAIL", "hr@cmcs.local")


settings = Settings()
