from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # MongoDB Configuration
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "cart_db"
    
    # Store behaviour
    STORE_TIMEOUT_SECONDS: float = 5.0  # Deadline for a whole cart operation
    MERGE_RETRY_ATTEMPTS: int = 3
    
    # Application Settings
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Cart Service"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
