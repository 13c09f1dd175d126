from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    API_BASE_URL: str = "http://localhost:8000/api"
    PAGE_SIZE: int = 6

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
