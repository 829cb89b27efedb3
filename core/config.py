from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulingSettings(BaseSettings):
    # Window used to bound open-ended recurrence rules
    SCHEDULING_DEFAULT_WINDOW_DAYS: int = 365
    # Dwell added at each interpolated stop
    SCHEDULING_DWELL_MINUTES: int = 2
    SCHEDULING_PREVIEW_DAYS: int = 30
    SCHEDULING_MAX_PROJECTION_DAYS: int = 366
    # Upper bound on stop-to-stop search results
    SCHEDULING_SEARCH_LIMIT: int = 50
    # Wall-clock times are local to the operating region
    SCHEDULING_TIMEZONE: str = "Europe/Warsaw"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Settings(BaseSettings):
    # Database - No default password for security
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""  # Required via .env
    POSTGRES_DB: str = "intercity_dev"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    # Full URL, takes precedence over the POSTGRES_* parts when set
    DATABASE_URL_OVERRIDE: str = ""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False  # Default to False for security
    LOG_LEVEL: str = "INFO"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # Scheduling settings (nested)
    scheduling: SchedulingSettings = SchedulingSettings()

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def validate_production_settings(self) -> None:
        """Validate critical settings for production environment.

        Call this during application startup.
        Raises ValueError if production settings are invalid.
        """
        errors = []

        if self.is_production:
            if not self.DATABASE_URL_OVERRIDE and (
                not self.POSTGRES_PASSWORD or self.POSTGRES_PASSWORD == "postgres"
            ):
                errors.append(
                    "POSTGRES_PASSWORD must be set to a secure value in production"
                )

            if self.DEBUG:
                errors.append("DEBUG must be False in production")

            if self.scheduling.SCHEDULING_DEFAULT_WINDOW_DAYS <= 0:
                errors.append("SCHEDULING_DEFAULT_WINDOW_DAYS must be positive")

        if errors:
            raise ValueError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def validate_development_settings(self) -> None:
        """Set sensible defaults for development if not configured."""
        # Use default password for development if not set
        if not self.POSTGRES_PASSWORD and not self.DATABASE_URL_OVERRIDE:
            self.POSTGRES_PASSWORD = "postgres"
            print("WARNING: Using default POSTGRES_PASSWORD for development")

        if not self.FRONTEND_URL:
            self.FRONTEND_URL = "http://localhost:3000"
            print("WARNING: Using default FRONTEND_URL for development")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create settings instance
settings = Settings()

# Validate based on environment
if settings.is_production:
    settings.validate_production_settings()
else:
    settings.validate_development_settings()
