from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ApplicationSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    base_url: str

    @field_validator("base_url")
    @classmethod
    def base_url_must_be_absolute(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an absolute http(s) URL")
        return v.rstrip("/")


class DatabaseSettings(BaseModel):
    path: str = "./data/mailing_list.db"
    migrations_dir: str = "migrations"
    timeout_seconds: float = Field(default=5.0, gt=0)


class EmailClientSettings(BaseModel):
    provider: Literal["dev", "http"] = "dev"
    base_url: str = ""
    sender_email: str = "newsletter@example.com"
    authorization_token: str = ""
    timeout_milliseconds: int = Field(default=10_000, gt=0)

    @model_validator(mode="after")
    def http_provider_needs_endpoint(self) -> "EmailClientSettings":
        if self.provider != "http":
            return self
        if not self.base_url.strip().startswith(("http://", "https://")):
            raise ValueError("email_client.base_url must be an absolute http(s) URL for provider 'http'")
        if not self.authorization_token.strip():
            raise ValueError("email_client.authorization_token is required for provider 'http'")
        return self

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_milliseconds / 1000


class SubscriptionSettings(BaseModel):
    token_length: int = Field(default=25, ge=16, le=128)
    confirmation_path: str = "/subscriptions/confirm"
    email_subject: str = "Welcome!"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_logs: bool = Field(default=False, alias="json")

    model_config = ConfigDict(populate_by_name=True)


class Settings(BaseModel):
    application: ApplicationSettings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email_client: EmailClientSettings = Field(default_factory=EmailClientSettings)
    subscriptions: SubscriptionSettings = Field(default_factory=SubscriptionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
