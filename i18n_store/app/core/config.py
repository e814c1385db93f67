from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./i18n_store.db"

    # CORS origins for the translations API
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Redis (external translation cache)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Translation backend
    I18N_CACHE_TRANSLATIONS: bool = False
    I18N_CACHE_SOURCE: str = "memory"  # "memory" or a redis:// URL
    I18N_CLEANUP_WITH_DESTROY: bool = False
    I18N_SEPARATOR: str = "."
    I18N_RECORD_MISSING: bool = True

    # Static fallback catalog: <dir>/<locale>/messages.json
    I18N_LOCALES_DIR: str = ""

    LOG_LEVEL: str = "INFO"


settings = Settings()
