import secrets

from pydantic_settings import BaseSettings, SettingsConfigDict


class CelerySettings(BaseSettings):
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    CELERY_TASK_TIME_LIMIT: int = 600  # 10 minutes
    CELERY_TASK_SOFT_TIME_LIMIT: int = 570  # 9.5 minutes

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class RouteGraphSettings(BaseSettings):
    # Max perpendicular distance (meters) between a node and a route to link them
    ROUTE_GRAPH_PROXIMITY_THRESHOLD_METERS: float = 50.0
    # Full rebuild of route_graph_nodes (Celery beat)
    ROUTE_GRAPH_REBUILD_INTERVAL_SECONDS: int = 86400  # 24 hours

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class Settings(BaseSettings):
    # Database - No default password for security
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""  # Required via .env
    POSTGRES_DB: str = "routegraph_dev"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False  # Default to False for security

    # Admin token for /admin endpoints
    ADMIN_TOKEN: str = ""

    # Celery settings (nested)
    celery: CelerySettings = CelerySettings()

    # Route graph settings (nested)
    route_graph: RouteGraphSettings = RouteGraphSettings()

    @property
    def DATABASE_URL(self) -> str:
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
            if not self.POSTGRES_PASSWORD or self.POSTGRES_PASSWORD == "postgres":
                errors.append(
                    "POSTGRES_PASSWORD must be set to a secure value in production"
                )

            if not self.ADMIN_TOKEN or len(self.ADMIN_TOKEN) < 32:
                errors.append(
                    "ADMIN_TOKEN must be set to a secure value (min 32 chars) in production"
                )

            if self.DEBUG:
                errors.append("DEBUG must be False in production")

        if self.route_graph.ROUTE_GRAPH_PROXIMITY_THRESHOLD_METERS <= 0:
            errors.append("ROUTE_GRAPH_PROXIMITY_THRESHOLD_METERS must be positive")

        if errors:
            raise ValueError(
                "Production configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def validate_development_settings(self) -> None:
        """Set sensible defaults for development if not configured."""
        if not self.POSTGRES_PASSWORD:
            self.POSTGRES_PASSWORD = "postgres"
            print("WARNING: Using default POSTGRES_PASSWORD for development")

        if not self.ADMIN_TOKEN:
            self.ADMIN_TOKEN = secrets.token_urlsafe(32)
            print(f"WARNING: Using auto-generated ADMIN_TOKEN for development: {self.ADMIN_TOKEN}")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Create settings instance
settings = Settings()

# Validate based on environment
if settings.is_production:
    settings.validate_production_settings()
else:
    settings.validate_development_settings()
