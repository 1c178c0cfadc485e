from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    translation_api_url: str = Field(
        default="https://redmont-digital-api.netlify.app/.netlify/functions/generate-llms",
        validation_alias="TRANSLATION_API_URL",
    )
    translation_timeout_seconds: float = Field(default=60.0, validation_alias="TRANSLATION_TIMEOUT_SECONDS")
    source_language: str = Field(default="en", validation_alias="SOURCE_LANGUAGE")

    board_height: int = Field(default=940, ge=1, validation_alias="BOARD_HEIGHT")
    panel_count: int = Field(default=3, ge=1, validation_alias="PANEL_COUNT")
    device_height: int = Field(default=620, ge=1, validation_alias="DEVICE_HEIGHT")
    default_size_id: str = Field(default="iphone-6.7", validation_alias="DEFAULT_SIZE_ID")

    media_root: str = Field(default="./storage/media", validation_alias="MEDIA_ROOT")
    media_url_prefix: str = Field(default="/media", validation_alias="MEDIA_URL_PREFIX")
    font_dir: str | None = Field(default=None, validation_alias="FONT_DIR")


settings = Settings()
