from pydantic_settings import BaseSettings
from pydantic import model_validator, Field
import logging

class Settings(BaseSettings):
    REDIS_HOST: str = Field(default="redis", description="Redis host")
    REDIS_PORT: int = Field(default=6379, description="Redis port")

    HOST: str = Field(default="0.0.0.0", description="Address the HTTP server binds to")
    PORT: int = Field(default=3000, description="Port the HTTP server listens on")

    VISITS_KEY: str = Field(default="visits", description="Redis key holding the visit counter")
    ATOMIC_INCREMENT: bool = Field(
        default=False,
        description="Use Redis INCR instead of read-modify-write"
    )

    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")
    DEBUG: bool = Field(default=False, description="Debug mode flag")
    PROJECT_NAME: str = Field(default="Visit Counter Service", description="Project name")

    @model_validator(mode='after')
    def validate_settings(self):
        """Validate ports and log level"""
        for name in ("REDIS_PORT", "PORT"):
            port = getattr(self, name)
            if not 1 <= port <= 65535:
                raise ValueError(f"{name} must be between 1 and 65535, got {port}")

        level = self.LOG_LEVEL.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid LOG_LEVEL: {self.LOG_LEVEL}")

        if not self.VISITS_KEY:
            raise ValueError("VISITS_KEY must not be empty")

        return self

    def get_log_level(self) -> int:
        """Get LOG_LEVEL as a logging module constant"""
        return logging.getLevelName(self.LOG_LEVEL.upper())

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
