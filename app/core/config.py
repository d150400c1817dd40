from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "SAFARIA API"
    # Comma-separated origins for CORS (e.g. https://safaria.ma,https://admin.safaria.ma). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # Pricing (Moroccan dirham)
    CURRENCY: str = "MAD"
    SERVICE_FEE_RATE: str = "0.10"
    TAX_RATE: str = "0.05"

    # Identifiers
    RECEIPT_PREFIX: str = "SAF"
    ID_MAX_ATTEMPTS: int = 3

    # Receipt storage: local | gcs
    RECEIPT_STORAGE: str = "local"
    RECEIPT_LOCAL_DIR: str = "./data/receipts"
    GCS_BUCKET_NAME: str = ""
    GCS_RECEIPT_PREFIX: str = "safaria/receipts"
    GOOGLE_APPLICATION_CREDENTIALS: str = ""
    RECEIPT_URL_EXPIRE_MINUTES: int = 60
    STORAGE_TIMEOUT_SECONDS: float = 20.0
    RECEIPT_MAX_ATTEMPTS: int = 5
    # TTF for customer text Helvetica cannot encode (e.g. Arabic); empty keeps Helvetica
    RECEIPT_FONT_PATH: str = ""

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() in ("prod", "production")


settings = Settings()
