from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of examprep folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = "sqlite:///./examprep.db"
    
    # Scheduling defaults used when the caller omits a value
    default_exam_days: int = 7
    default_session_size: int = 10
    
    log_level: str = "INFO"
    
    class Config:
        env_file = str(PROJECT_ROOT / ".env")

settings = Settings()
