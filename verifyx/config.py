from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # API Configuration
    APP_NAME: str = "VerifyX"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # SQLite by default; mysql+pymysql://... works with the "mysql" extra
    DATABASE_URL: str = "sqlite:///./verifyx.db"

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Request Limits
    MAX_VALUE_KB: int = 200
    REPORTS_LIMIT: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
