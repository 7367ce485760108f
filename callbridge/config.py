"""Application configuration using Pydantic settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    environment: str = Field(default="development", description="Environment")
    frontend_url: str = Field(default="http://localhost:9002", description="Frontend URL")

    # MongoDB
    use_mongodb: bool = Field(default=True, description="Try MongoDB for the shared store")
    mongodb_host: str = Field(default="localhost", description="MongoDB host")
    mongodb_port: int = Field(default=27017, description="MongoDB port")
    mongodb_database: str = Field(default="callbridge", description="MongoDB database name")
    mongodb_username: Optional[str] = Field(default=None, description="MongoDB username")
    mongodb_password: Optional[str] = Field(default=None, description="MongoDB password")

    # Redis
    use_redis: bool = Field(default=True, description="Try Redis for cross-instance events")
    broker_redis_host: str = Field(default="localhost", description="Redis host")
    broker_redis_port: int = Field(default=6379, description="Redis port")
    broker_redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_db: int = Field(default=0, description="Redis database number")

    # Game Configuration
    default_winning_score: int = Field(default=50, description="Default winning score")
    total_rounds: int = Field(default=10, description="Rounds in an offline game")
    next_trick_delay_seconds: float = Field(
        default=3.0, description="Pause between a completed trick and the next one"
    )
    bot_think_seconds: float = Field(default=0.5, description="Delay before a bot plays")
    max_transaction_retries: int = Field(
        default=5, description="Attempts before a conflicting write is given up"
    )

    # Offline scorekeeper
    local_store_dir: Path = Field(
        default=Path.home() / ".callbridge", description="Directory of the local JSON store"
    )

    @property
    def mongodb_uri(self) -> str:
        """Build MongoDB connection URI."""
        if self.mongodb_username and self.mongodb_password:
            return f"mongodb://{self.mongodb_username}:{self.mongodb_password}@{self.mongodb_host}:{self.mongodb_port}"
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}"

    @property
    def redis_url(self) -> str:
        """Build Redis connection URL."""
        if self.broker_redis_password:
            return f"redis://:{self.broker_redis_password}@{self.broker_redis_host}:{self.broker_redis_port}/{self.redis_db}"
        return f"redis://{self.broker_redis_host}:{self.broker_redis_port}/{self.redis_db}"


# Global settings instance
settings = Settings()
