from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    ADMIN_SESSION_TTL: int = 86400  # 24 hours
    ADMIN_SESSION_COOKIE: str = "admin_session"
    MIN_ADMIN_PASSWORD_LENGTH: int = 6

    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 600  # 10 minutes

    MESSAGE_PAGE_SIZE: int = 100

    DEFAULT_COUNTRY_CODE: str = "91"
    WHATSAPP_BASE_URL: str = "https://wa.me"

    API_TITLE: str = "Agent Messaging Service"
    API_DESCRIPTION: str = "Role-based messaging for users and agents with private notes and WhatsApp links"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
