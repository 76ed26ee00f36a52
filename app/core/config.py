from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App settings
    PROJECT_NAME: str = "ClarityDash"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CLIENT_URL: str = Field(default="http://localhost:5173")

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: Optional[str] = Field(default=None)  # e.g. http://localhost:8000 for DynamoDB Local
    DYNAMO_USERS_TABLE: str = Field(default="clarity-users", validation_alias="DYNAMO_TABLE_USERS")
    DYNAMO_TRANSACTIONS_TABLE: str = Field(
        default="clarity-transactions", validation_alias="DYNAMO_TABLE_TRANSACTIONS"
    )

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(
        default="clarity-dash-local-dev-secret-key-change-in-production", validation_alias="JWT_SECRET"
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # CSV import
    CSV_MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024


settings = Settings()
