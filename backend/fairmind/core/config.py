"""
Application configuration
"""

from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Basics
    APP_NAME: str = "FairMind"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # Database
    DATABASE_URL: str = "sqlite:///./fairmind.db"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Auth
    JWT_SECRET: str = "fallback-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_DAYS: int = 7

    # Resolution generation
    AI_API_URL: str = "https://api-inference.huggingface.co/models"
    AI_MODEL_ID: str = "mistralai/Mistral-7B-Instruct-v0.2"
    AI_API_KEY: Optional[str] = None
    AI_TIMEOUT: int = 60  # seconds, per attempt

    # Rooms
    RESOLUTION_DAILY_LIMIT: int = 3
    MIN_MESSAGES_FOR_RESOLUTION: int = 4
    MAX_MESSAGE_LENGTH: int = 5000
    AUDIO_DIR: str = "./audio"

    class Config:
        env_file = ".env"
        case_sensitive = True

# Global settings instance
settings = Settings()
