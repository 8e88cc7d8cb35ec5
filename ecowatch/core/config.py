"""
Configuration settings for the EcoWatch sync client
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client settings"""
    
    # Backend Configuration
    API_BASE_URL: str = "http://localhost:5000"
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    
    # Polling Configuration
    POLL_INTERVAL_MS: int = 3000
    REPORT_POLL_INTERVAL_MS: int = 3000
    HISTORY_HOURS: int = 24
    
    # Storage Configuration
    STORAGE_DIR: str = "data"
    STORAGE_FILE: str = "client_storage.json"
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    class Config:
        env_file = "config.env"
        case_sensitive = False


# Create settings instance
settings = Settings()
