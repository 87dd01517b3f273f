"""
Application configuration settings
FILE: quizgen/core/config.py
"""
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    # Remote generation service
    generation_service_url: str = "http://localhost:3000"
    
    # Per-strategy deadlines (seconds)
    quick_timeout: float = 15.0
    optimized_timeout: float = 60.0
    batch_timeout: float = 90.0
    
    # Health probe
    health_monitor_enabled: bool = True
    health_check_interval: float = 30.0
    health_check_timeout: float = 5.0
    
    # Cache admin calls
    admin_timeout: float = 10.0
    
    # Request defaults
    default_question_count: int = 25
    max_question_count: int = 50
    default_fast_mode: bool = True
    default_use_cache: bool = True
    
    cors_origins: List[str] = [
        "http://localhost:4000",
        "http://localhost:3000",
    ]
    
    class Config:
        env_file = ".env"
        case_sensitive = False  # This allows case-insensitive matching
        extra = "allow"  # This allows extra fields


settings = Settings()
