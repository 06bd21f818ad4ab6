from typing import Annotated, List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Floodline"
    # Only the exact value "development" unlocks the admin bootstrap path
    ENVIRONMENT: str = "production"
    API_PREFIX: str = "/api"
    PORT: int = 3000

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            v = v.strip("[").strip("]").strip('"').strip("'")
            if not v:
                return []
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./floodline.db"

    # Government data feed
    GOV_FLOOD_API_URL: str = "https://gov-api.example.com/floods"
    GOV_SHELTER_API_URL: str = ""
    GOV_API_KEY: str = ""
    GOV_API_TIMEOUT: float = 10.0

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    FLOOD_SYNC_INTERVAL_SECONDS: int = 60 * 60
    SHELTER_SYNC_INTERVAL_SECONDS: int = 2 * 60 * 60

    # Bootstrap admin (development only)
    DEFAULT_ADMIN_EMAIL: str = "admin@flood.lk"
    DEFAULT_ADMIN_NAME: str = "Admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"

    # Logging
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Colombo"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

settings = Settings()
