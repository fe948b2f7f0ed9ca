from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "dev"
    LOG_LEVEL: str = ""

    # Dashboard defaults
    DEFAULT_ENGAGEMENT_MAX: int = 100_000  # Used when no records are loaded
    DEFAULT_WINDOW_DAYS: int = 30
    SAMPLE_SIZE: int = 1200

    # Spreadsheet uploads
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    # Published Google Sheet
    GOOGLE_SHEET_ID: str = ""
    GOOGLE_SHEET_GID: int = 0

    # Chat
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_MAX_TOKENS: int = 1000
    CHAT_SYSTEM_PROMPT: str = (
        "You are an assistant specialised in social media and digital marketing "
        "analytics. Give useful recommendations and answer clearly."
    )
    CHAT_HISTORY_LIMIT: int = 10

    HTTP_TIMEOUT: float = 30.0

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
