"""
Configuration management for indsketch
"""
from pydantic import validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "indsketch"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # HyperLogLog Settings
    HLL_ERROR_RATE: float = 0.01  # 1% relative error

    # Promotion Settings
    PROMOTION_THRESHOLD: int = 0  # uncovered distinct fingerprints kept before promotion

    # Sampling Settings
    SAMPLE_SIZE: int = 500  # rows per table
    SAMPLE_SEED: int = 42

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @validator("HLL_ERROR_RATE")
    def check_error_rate(cls, v):
        """Error rate must be a proper fraction"""
        if not 0 < v < 1:
            raise ValueError("HLL_ERROR_RATE must be between 0 and 1")
        return v

    @validator("PROMOTION_THRESHOLD", "SAMPLE_SIZE")
    def check_non_negative(cls, v):
        """Counts cannot be negative"""
        if v < 0:
            raise ValueError("must not be negative")
        return v

    def get_log_level(self) -> str:
        """Get effective logging level"""
        if self.DEBUG:
            return "DEBUG"
        return self.LOG_LEVEL.upper()


# Global settings instance
settings = Settings()
