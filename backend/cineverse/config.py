import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # SQLite as default for local development
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./cineverse.db")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    SESSION_HTTPS_ONLY: bool = os.getenv("SESSION_HTTPS_ONLY", "false").lower() == "true"

    APP_URL: str = os.getenv("APP_URL", "http://localhost:8000")

    # Posters and subtitles land here, served under /uploads
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

settings = Settings()
