from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Dropzone API"
    # Comma-separated origins for CORS (e.g. https://store.skydive.example,https://admin.skydive.example). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    # Credential codes: "{prefix}-{year}-{XXXXXX}"
    DEFAULT_BOOKING_CODE_PREFIX: str = "TKT"
    DEFAULT_VOUCHER_CODE_PREFIX: str = "TDM"
    CODE_GENERATION_ATTEMPTS: int = 10

    # Re-sequence attempts when a member number collides on insert
    MEMBER_NUMBER_ATTEMPTS: int = 3

    # Seed (start_api.py); empty password skips the board user
    SEED_BOARD_EMAIL: str = "board@dropzone.local"
    SEED_BOARD_PASSWORD: str = ""


settings = Settings()
