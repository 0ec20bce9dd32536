"""
Centralized application configuration backed by environment variables.
Selects between the local development profile and the production profile.
"""
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class DatabaseConfig(BaseModel):
    """Connection and pool parameters for the MySQL store."""

    host: str = "localhost"
    user: str = "root"
    password: str = ""
    database: str = "casa_programada"
    port: int = 3306
    wait_for_connections: bool = True
    connection_limit: int = Field(default=10, ge=1)
    queue_limit: int = Field(default=0, ge=0)

    @property
    def url(self) -> URL:
        """SQLAlchemy URL for the PyMySQL driver. Password is escaped by URL.create."""
        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.database,
        )


class Settings(BaseSettings):
    """Immutable configuration schema backed by environment variables."""

    APP_NAME: str = "Casa Programada"
    VERSION: str = "1.0.0"

    # "production" switches to the MYSQL* variables injected by the hosting platform
    ENVIRONMENT: str = "development"

    MYSQLHOST: str = "localhost"
    MYSQLUSER: Optional[str] = None
    MYSQLPASSWORD: Optional[str] = None
    MYSQLDATABASE: Optional[str] = None
    MYSQLPORT: int = 3306

    DB_CONNECTION_LIMIT: int = 10
    DB_QUEUE_LIMIT: int = 0
    DB_WAIT_FOR_CONNECTIONS: bool = True

    # Full SQLAlchemy URL; takes precedence over both profiles when set
    DATABASE_URL: Optional[str] = None

    # Stored PDF paths are relative to this directory
    PDF_BASE_DIR: str = "."

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def database_config(self) -> DatabaseConfig:
        """Returns the connection profile for the current environment."""
        if not self.is_production:
            return DatabaseConfig(
                host="localhost",
                user="root",
                password="",
                database="casa_programada",
                port=3306,
                wait_for_connections=True,
                connection_limit=10,
                queue_limit=0,
            )

        return DatabaseConfig(
            host=self.MYSQLHOST or "localhost",
            user=self.MYSQLUSER or "",
            password=self.MYSQLPASSWORD or "",
            database=self.MYSQLDATABASE or "",
            port=self.MYSQLPORT,
            wait_for_connections=self.DB_WAIT_FOR_CONNECTIONS,
            connection_limit=self.DB_CONNECTION_LIMIT,
            queue_limit=self.DB_QUEUE_LIMIT,
        )


settings = Settings()
