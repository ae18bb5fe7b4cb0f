from pydantic_settings import BaseSettings
from typing import List, Union

import os

class Settings(BaseSettings):
    # backend/scrs/core/config.py -> backend/
    BASE_DIR: str = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    PROJECT_ROOT: str = os.path.dirname(BASE_DIR)

    # Strip to handle trailing whitespace from shell scripts
    DATA_DIR: str = os.path.normpath(os.getenv("DATA_DIR", os.path.join(PROJECT_ROOT, "data")).strip())

    # Database
    DATABASE_URL: str = f"sqlite:///{os.path.join(DATA_DIR, 'scrs.db')}"

    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480  # 8 hours

    # CORS - can be comma-separated string or list
    CORS_ORIGINS: Union[str, List[str]] = "http://localhost:3000"

    # Complaint workflow
    DEFAULT_DEPARTMENT_NAME: str = "General"
    ENFORCE_STATUS_TRANSITIONS: bool = False
    TOP_VOTED_LIMIT: int = 10

    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS_ORIGINS to list format"""
        if not self.CORS_ORIGINS:
            return ["http://localhost:3000"]
        if isinstance(self.CORS_ORIGINS, list):
            origins = self.CORS_ORIGINS
        else:
            origins = [
                origin.strip()
                for origin in self.CORS_ORIGINS.split(",")
                if origin.strip()
            ]
        if "*" in origins:
            raise ValueError(
                "CORS_ORIGINS cannot contain '*' when allow_credentials=True. "
                "Use explicit origins like http://localhost:3000"
            )
        return origins

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
