"""Service settings and logging setup"""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings read from ``APPCONFIG__*`` environment variables or ``.env``.

    ``db_url`` may use the plain ``sqlite:///`` scheme; the engine factory
    switches it to the aiosqlite driver.
    """

    model_config = SettingsConfigDict(
        env_prefix="APPCONFIG__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: str = "development"
    port: int = 8004

    db_url: str = "sqlite:///./appconfig.db"
    db_echo: bool = False

    # Page size used by get_applications when the caller gives no limit
    default_page_limit: int = 1024

    log_level: str = "INFO"
    version: str = "0.1.0"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("appconfig")
