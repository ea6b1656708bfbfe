from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./quotes.db"
    AUTO_CREATE_TABLES: bool = True

    API_TITLE: str = "Travel Insurance Quote Service"
    API_DESCRIPTION: str = "Validates travel insurance quote requests and prices them per cover tier"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
