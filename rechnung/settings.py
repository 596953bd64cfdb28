from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="RECHNUNG_", extra="ignore")

    store_backend: str = "local"
    store_local_path: str = "./data"

    db_url: str = "sqlite:///rechnung.db"

    output_dir: str = "./invoices"

    timezone: str = "Europe/Berlin"

    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
