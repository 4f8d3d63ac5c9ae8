"""
Configuration Management for Fintrax

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here: the backends Fintrax talks to and the
limits the validator enforces are all read at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Category sets shipped with the app. "standard" is the default; "compact"
# is the shorter list offered on the expenses page.
CATEGORY_SETS: dict[str, tuple[str, ...]] = {
    "standard": (
        "Food",
        "Shopping",
        "Transportation",
        "Entertainment",
        "Bills",
        "Healthcare",
        "Other",
    ),
    "compact": (
        "Food",
        "Transport",
        "Shopping",
        "Bills",
        "Entertainment",
        "Other",
    ),
}


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    expenses_sheet_name: str = Field(
        default="Expenses",
        description="Name of the sheet for expenses"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class FirebaseSettings(BaseSettings):
    """Firebase Authentication (identity provider) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Firebase Web API key"
    )
    auth_base_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Identity Toolkit REST endpoint"
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Timeout for each identity request"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINTRAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Categories
    category_set: str = Field(
        default="standard",
        description="'standard', 'compact', or a comma-separated custom list"
    )

    # Validation limits
    max_amount: float = Field(
        default=10_000_000.0,
        gt=0,
        description="Largest amount accepted for a single expense"
    )
    max_title_length: int = Field(
        default=100,
        ge=1,
        description="Maximum title length after sanitization"
    )
    max_notes_length: int = Field(
        default=500,
        ge=0,
        description="Maximum notes length after sanitization"
    )
    retention_years: int = Field(
        default=100,
        ge=1,
        description="Oldest accepted expense date, in years before today"
    )
    strip_sql_keywords: bool = Field(
        default=True,
        description="Remove SQL keywords from free text during sanitization"
    )
    search_includes_category: bool = Field(
        default=True,
        description="Free-text search also matches the category name"
    )

    # Presentation
    currency_symbol: str = Field(
        default="₦",
        description="Symbol used for every rendered amount"
    )
    recent_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of recent transactions on the dashboard"
    )

    # Accounts
    min_password_length: int = Field(
        default=6,
        ge=6,
        description="Minimum password length accepted by the forms"
    )

    @property
    def categories(self) -> tuple[str, ...]:
        """Resolve the configured category set to its list of names."""
        key = self.category_set.strip()
        if key.lower() in CATEGORY_SETS:
            return CATEGORY_SETS[key.lower()]
        custom = tuple(c.strip() for c in key.split(",") if c.strip())
        return custom or CATEGORY_SETS["standard"]

    @property
    def default_category(self) -> str:
        return self.categories[0]


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def firebase(self) -> FirebaseSettings:
        return FirebaseSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "firebase", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
