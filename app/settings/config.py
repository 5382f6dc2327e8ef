# app/settings/config.py  (Pydantic v2)
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    # ---------- pydantic-settings config ----------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # allow lower/upper env names
        extra="ignore",
    )

    # ---------- Email / SMTP ----------
    EMAIL_TRANSPORT: Literal["smtp", "dummy"] = Field(
        default="smtp",
        env=["EMAIL_TRANSPORT"],
    )
    SMTP_HOST: str = Field(default="smtp.gmail.com", env=["SMTP_HOST"])
    SMTP_PORT: int = Field(default=587, env=["SMTP_PORT"])
    SMTP_USERNAME: Optional[str] = Field(default=None, env=["SMTP_USERNAME"])
    SMTP_PASSWORD: Optional[str] = Field(default=None, env=["SMTP_PASSWORD"])
    SMTP_FROM: Optional[str] = Field(default=None, env=["SMTP_FROM"])
    SMTP_USE_TLS: bool = Field(default=True, env=["SMTP_USE_TLS"])
    SMTP_USE_SSL: bool = Field(default=False, env=["SMTP_USE_SSL"])

    # ---------- Book compilation ----------
    # Operator inbox that receives compiled books; falls back to the built-in address
    BOOK_RECIPIENT_EMAIL: Optional[str] = Field(default=None, env=["BOOK_RECIPIENT_EMAIL"])
    # "sync" = caller waits for delivery, "background" = delivery runs as a supervised task
    BOOK_DELIVERY_MODE: Literal["sync", "background"] = Field(
        default="sync",
        env=["BOOK_DELIVERY_MODE"],
    )
    WKHTMLTOPDF_PATH: str = Field(default="wkhtmltopdf", env=["WKHTMLTOPDF_PATH"])


settings = Settings()
