"""Shared configuration management for the invoicing tool.

Based on Pydantic Settings v2 best practices:
https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with the prefix 'APP_'.
    Example: APP_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    service_name: str = Field(
        default="paypal-invoicer",
        description="Service identifier for logs",
    )
    service_version: str = Field(
        default="0.1.0",
        description="Service version",
    )

    # PayPal REST credentials
    paypal_client_id: str = Field(
        default="",
        description="PayPal REST app client id (use env var APP_PAYPAL_CLIENT_ID)",
    )
    paypal_client_secret: str = Field(
        default="",
        description="PayPal REST app secret (use env var APP_PAYPAL_CLIENT_SECRET)",
    )
    paypal_environment: Literal["SANDBOX", "PRODUCTION"] = Field(
        default="SANDBOX",
        description="PayPal environment: SANDBOX (api-m.sandbox) or PRODUCTION (api-m)",
    )
    paypal_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for PayPal API calls",
    )

    # Business identity (invoicer)
    business_name: str = Field(
        default="Digital Marketing Services",
        description="Business display name shown on invoices",
    )
    business_email: str = Field(
        default="billing@example.com",
        description="Business billing email",
    )
    business_phone: str = Field(default="", description="Business phone number")
    business_website: str = Field(default="", description="Business website")
    business_contact_given_name: str = Field(
        default="Digital Marketing",
        description="Invoicer given name as printed by PayPal",
    )
    business_contact_surname: str = Field(
        default="Services",
        description="Invoicer surname as printed by PayPal",
    )
    business_address_line_1: str = Field(default="", description="Business address line 1")
    business_address_line_2: str = Field(default="", description="Business address line 2")
    business_city: str = Field(default="", description="Business city")
    business_state: str = Field(default="", description="Business state or region")
    business_postal_code: str = Field(default="", description="Business postal code")
    business_country: str = Field(
        default="",
        description="Business ISO 3166-1 alpha-2 country code (builder falls back to IN)",
    )

    # Customer substituted for documents that only list services
    default_customer_email: str = Field(default="customer@example.com")
    default_customer_given_name: str = Field(default="Example")
    default_customer_surname: str = Field(default="Customer")
    default_customer_business_name: str = Field(default="Example Company")

    # Invoice defaults
    currency_code: str = Field(
        default="USD",
        description="Default ISO 4217 currency for items and invoice",
    )
    due_in_days: int = Field(
        default=3,
        ge=0,
        description="Days between invoice date and due date",
    )
    send_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Pause between create and send so PayPal can settle the new invoice",
    )
    phone_country_code: str = Field(
        default="1",
        description="Dialing code attached to customer phone numbers",
    )


def get_settings() -> Settings:
    """Factory function to get settings instance.

    Returns:
        Configured Settings instance
    """
    return Settings()
