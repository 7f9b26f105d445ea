from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "form-intake"

    CONFIG_PATH: str = "config.yml"
    TEMPLATES_DIR: str = str(PACKAGE_DIR / "templates")
    STATIC_DIR: str = str(PACKAGE_DIR / "static")

    HOST: str = "0.0.0.0"
    WORKERS: int = 4

    DB_POOL_SIZE: int = 4
    DB_POOL_TIMEOUT_SECONDS: float = 30.0

    RESULTS_PAGE_SIZE: int = 10
    # Off keeps the soft-fail page for bad credentials; on answers 401 + Basic challenge.
    RESULTS_AUTH_CHALLENGE: bool = False


settings = Settings()
